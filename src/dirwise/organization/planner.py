"""Planner that groups a directory's files into extension buckets."""

from __future__ import annotations

import logging
import os
import stat
from collections import Counter
from pathlib import Path

from dirwise.errors import NotFoundError

from .buckets import bucket_for_extension
from .executor import APPROVAL_PHRASE
from .models import BY_EXTENSION, FileMove, OrganizationPlan, PlanPreview, SummaryEntry

LOGGER = logging.getLogger(__name__)


def is_hidden(path: Path) -> bool:
    """Return True for dot-files and files carrying the Windows hidden attribute."""
    if path.name.startswith("."):
        return True
    try:
        attributes = getattr(path.stat(), "st_file_attributes", 0)
    except OSError:
        return False
    return bool(attributes & getattr(stat, "FILE_ATTRIBUTE_HIDDEN", 0))


class OrganizationPlanner:
    """Derive move plans from a live directory snapshot without touching the filesystem."""

    def build_plan(self, directory: Path | str, *, include_hidden: bool = False) -> PlanPreview:
        """Plan moves of ``directory``'s immediate files into bucket subfolders.

        Args:
            directory: Directory to organize.
            include_hidden: Whether hidden files are planned too.

        Returns:
            PlanPreview: Plan, per-folder summary, and the required approval phrase.

        Raises:
            NotFoundError: If ``directory`` does not exist.
        """
        root = Path(directory).expanduser()
        if not root.is_dir():
            raise NotFoundError(f"Directory not found: {directory}")
        root = root.resolve()

        moves: list[FileMove] = []
        for path in sorted(root.iterdir(), key=lambda entry: entry.name.lower()):
            if not path.is_file():
                continue
            if not include_hidden and is_hidden(path):
                continue

            target_dir = root / bucket_for_extension(path.suffix)
            if _same_path(path.parent, target_dir):
                continue
            moves.append(FileMove(source=path, destination=target_dir / path.name))

        plan = OrganizationPlan(directory_path=root, strategy=BY_EXTENSION, moves=moves)
        LOGGER.debug("Planned %d move(s) for %s", len(moves), root)
        return PlanPreview(
            plan=plan,
            summary=summarize(moves),
            required_approval_phrase=APPROVAL_PHRASE,
        )


def summarize(moves: list[FileMove]) -> list[SummaryEntry]:
    """Count moves per destination folder, largest first, then by folder name."""
    folders: dict[str, Path] = {}
    counts: Counter[str] = Counter()
    for move in moves:
        folder = move.destination.parent
        key = os.path.normcase(str(folder))
        folders.setdefault(key, folder)
        counts[key] += 1
    ordered = sorted(counts.items(), key=lambda item: (-item[1], str(folders[item[0]]).lower()))
    return [SummaryEntry(destination_folder=folders[key], count=count) for key, count in ordered]


def _same_path(left: Path, right: Path) -> bool:
    return os.path.normcase(str(left)) == os.path.normcase(str(right))


__all__ = ["OrganizationPlanner", "is_hidden", "summarize"]
