"""Tests for building organize-by-extension plans."""

from __future__ import annotations

from pathlib import Path

import pytest

from dirwise.errors import NotFoundError
from dirwise.organization import (
    APPROVAL_PHRASE,
    BY_EXTENSION,
    OrganizationPlanner,
    PlanExecutor,
    bucket_for_extension,
)


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_text(name, encoding="utf-8")


@pytest.mark.parametrize(
    ("extension", "bucket"),
    [
        (".jpg", "Images"),
        (".JPG", "Images"),
        ("png", "Images"),
        (".mp4", "Videos"),
        (".flac", "Audio"),
        (".pdf", "Documents"),
        (".csv", "Spreadsheets"),
        (".pptx", "Presentations"),
        (".tar", "Archives"),
        (".msi", "Installers"),
        (".py", "Code"),
        (".xyz", "Other"),
        ("", "NoExtension"),
        (None, "NoExtension"),
    ],
)
def test_bucket_for_extension(extension: str | None, bucket: str) -> None:
    assert bucket_for_extension(extension) == bucket


def test_plan_groups_files_by_extension(tmp_path: Path) -> None:
    _touch(tmp_path, "photo.jpg", "doc.pdf", "song.mp3", "data.csv")

    preview = OrganizationPlanner().build_plan(tmp_path)

    root = tmp_path.resolve()
    assert preview.plan.directory_path == root
    assert preview.plan.strategy == BY_EXTENSION
    assert preview.required_approval_phrase == APPROVAL_PHRASE
    destinations = {move.source.name: move.destination for move in preview.plan.moves}
    assert destinations == {
        "data.csv": root / "Spreadsheets" / "data.csv",
        "doc.pdf": root / "Documents" / "doc.pdf",
        "photo.jpg": root / "Images" / "photo.jpg",
        "song.mp3": root / "Audio" / "song.mp3",
    }
    assert [(entry.destination_folder.name, entry.count) for entry in preview.summary] == [
        ("Audio", 1),
        ("Documents", 1),
        ("Images", 1),
        ("Spreadsheets", 1),
    ]


def test_summary_orders_by_count_then_name(tmp_path: Path) -> None:
    _touch(tmp_path, "a.png", "b.jpg", "c.gif", "notes.txt", "README", "blob.xyz")

    preview = OrganizationPlanner().build_plan(tmp_path)

    assert [(entry.destination_folder.name, entry.count) for entry in preview.summary] == [
        ("Images", 3),
        ("Documents", 1),
        ("NoExtension", 1),
        ("Other", 1),
    ]


def test_moves_are_ordered_by_name(tmp_path: Path) -> None:
    _touch(tmp_path, "b.txt", "A.txt", "c.txt")

    preview = OrganizationPlanner().build_plan(tmp_path)

    assert [move.source.name for move in preview.plan.moves] == ["A.txt", "b.txt", "c.txt"]


def test_plan_does_not_touch_filesystem(tmp_path: Path) -> None:
    _touch(tmp_path, "photo.jpg", "doc.pdf")
    before = sorted(path.name for path in tmp_path.iterdir())

    OrganizationPlanner().build_plan(tmp_path)

    assert sorted(path.name for path in tmp_path.iterdir()) == before


def test_subdirectories_and_their_files_are_ignored(tmp_path: Path) -> None:
    nested = tmp_path / "nested"
    nested.mkdir()
    _touch(nested, "inner.jpg")

    preview = OrganizationPlanner().build_plan(tmp_path)

    assert preview.plan.moves == []
    assert preview.summary == []


def test_hidden_files_are_skipped_by_default(tmp_path: Path) -> None:
    _touch(tmp_path, ".env", "visible.txt")

    default = OrganizationPlanner().build_plan(tmp_path)
    inclusive = OrganizationPlanner().build_plan(tmp_path, include_hidden=True)

    assert [move.source.name for move in default.plan.moves] == ["visible.txt"]
    assert [move.source.name for move in inclusive.plan.moves] == [".env", "visible.txt"]


def test_replanning_after_apply_is_empty(tmp_path: Path) -> None:
    _touch(tmp_path, "photo.jpg", "doc.pdf", "README")
    planner = OrganizationPlanner()

    PlanExecutor().apply(planner.build_plan(tmp_path).plan, APPROVAL_PHRASE)
    second = planner.build_plan(tmp_path)

    assert second.plan.moves == []


def test_missing_directory_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        OrganizationPlanner().build_plan(tmp_path / "missing")


def test_preview_document_uses_camel_case_keys(tmp_path: Path) -> None:
    _touch(tmp_path, "photo.jpg")

    document = OrganizationPlanner().build_plan(tmp_path).to_document()

    assert document["requiredApprovalPhrase"] == APPROVAL_PHRASE
    assert document["plan"]["directoryPath"] == str(tmp_path.resolve())
    assert document["plan"]["moves"][0]["source"] == str(tmp_path.resolve() / "photo.jpg")
    assert document["summary"] == [
        {"destinationFolder": str(tmp_path.resolve() / "Images"), "count": 1}
    ]
