"""Tests for special-folder lookup and known-folder shortcuts."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from dirwise.resolution import KnownFolders, SpecialFolder, resolve_known_folder


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("desktop", "Desktop"),
        ("documents", "Documents"),
        ("my documents folder", "Documents"),
        ("downloads", "Downloads"),
        ("my download folder", "Downloads"),
        ("pictures", "Pictures"),
        ("My Music", "Music"),
        ("videos", "Videos"),
    ],
)
def test_known_folder_vocabulary_resolves_to_existing_directories(
    folders: KnownFolders, home: Path, description: str, expected: str
) -> None:
    resolved = resolve_known_folder(description, folders)

    assert resolved == home / expected
    assert resolved.is_dir()


def test_home_and_user_resolve_to_home(folders: KnownFolders, home: Path) -> None:
    assert resolve_known_folder("home", folders) == home
    assert resolve_known_folder("user profile", folders) == home


def test_temp_resolves_to_platform_temp(folders: KnownFolders) -> None:
    assert resolve_known_folder("temp", folders) == Path(tempfile.gettempdir())


def test_missing_special_folder_is_skipped(tmp_path: Path) -> None:
    bare_home = tmp_path / "bare"
    bare_home.mkdir()
    folders = KnownFolders(bare_home, environ={}, platform="linux")

    assert resolve_known_folder("desktop", folders) is None


def test_unknown_description_returns_none(folders: KnownFolders) -> None:
    assert resolve_known_folder("quarterly reports", folders) is None
    assert resolve_known_folder("", folders) is None


def test_xdg_user_dirs_override_defaults(tmp_path: Path, home: Path) -> None:
    (home / "Docs").mkdir()
    config = home / ".config"
    config.mkdir()
    (config / "user-dirs.dirs").write_text(
        '# written by xdg-user-dirs-update\nXDG_DOCUMENTS_DIR="$HOME/Docs"\n',
        encoding="utf-8",
    )
    folders = KnownFolders(home, environ={}, platform="linux")

    assert folders.path_for(SpecialFolder.DOCUMENTS) == home / "Docs"
    assert folders.path_for(SpecialFolder.DESKTOP) == home / "Desktop"


def test_windows_appdata_comes_from_environment(tmp_path: Path, home: Path) -> None:
    roaming = tmp_path / "Roaming"
    local = tmp_path / "Local"
    folders = KnownFolders(
        home,
        environ={"APPDATA": str(roaming), "LOCALAPPDATA": str(local)},
        platform="win32",
    )

    assert folders.path_for(SpecialFolder.APPDATA) == roaming
    assert folders.path_for(SpecialFolder.LOCAL_APPDATA) == local
    assert folders.path_for(SpecialFolder.PROGRAM_FILES) is None


def test_indexed_locations_cover_home_tree(folders: KnownFolders, home: Path, tmp_path: Path) -> None:
    assert folders.is_indexed(home)
    assert folders.is_indexed(home / "Documents" / "nested")
    assert not folders.is_indexed(tmp_path / "elsewhere")


def test_posix_drive_roots_are_filesystem_root(folders: KnownFolders) -> None:
    assert folders.fixed_drive_roots() == [Path("/")]
