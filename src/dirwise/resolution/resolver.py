"""Resolve loose descriptions into concrete directory and file paths."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Callable, Optional

from .known_folders import KnownFolders, resolve_known_folder
from .models import DirectoryMatch, MatchSource, ResolutionContext, SearchOutcome
from .search import EXACT_SCORE, DirectorySearcher

LOGGER = logging.getLogger(__name__)

_FILE_IN_DIRECTORY = re.compile(r"^(.+?)\s+in\s+(.+)$", re.IGNORECASE)


class PathResolver:
    """Apply the layered resolution strategy for directories and files.

    Each ``resolve_*`` method returns ``None`` when nothing matches; callers
    decide how to surface the not-found case.

    Args:
        searcher: Multi-candidate directory search used as the last resort.
        context: Session context carrying the working directory.
    """

    def __init__(
        self,
        searcher: DirectorySearcher | None = None,
        context: ResolutionContext | None = None,
    ) -> None:
        self.searcher = searcher or DirectorySearcher()
        self.context = context or ResolutionContext()

    @property
    def folders(self) -> KnownFolders:
        return self.searcher.folders

    def with_context(self, context: ResolutionContext) -> "PathResolver":
        """Return a resolver sharing this searcher but bound to ``context``."""
        return PathResolver(self.searcher, context)

    def resolve_directory(
        self, description: str, root: Path | str | None = None
    ) -> Optional[Path]:
        """Return the best-matching existing directory for ``description``.

        Precedence: existing path (relative input is taken against the session
        working directory when one is set), known-folder shortcut, environment expansion, then a
        single-result directory search scoped to ``root`` or the working
        directory.
        """
        if not description or not description.strip():
            return None

        direct = self._existing(description, Path.is_dir)
        if direct is not None:
            return direct

        known = resolve_known_folder(description, self.folders)
        if known is not None:
            return known

        expanded = _expand(description)
        if expanded != description and os.path.isdir(expanded):
            return Path(expanded).resolve()

        scope = root if root else self.context.working_directory
        outcome = self.searcher.find(description, root=scope, max_results=1)
        if outcome.best is not None:
            return outcome.best.path
        return None

    def resolve_directory_or_original(
        self, description: str, root: Path | str | None = None
    ) -> str:
        """Best-effort variant returning the input unchanged when nothing resolves."""
        resolved = self.resolve_directory(description, root)
        return str(resolved) if resolved is not None else description

    def resolve_path(self, description: str) -> Optional[Path]:
        """Return the best-matching existing file or directory for ``description``.

        Accepts ``"<file> in <directory description>"`` phrasing in addition to
        plain paths and bare file names relative to the working directory.
        """
        if not description or not description.strip():
            return None

        direct = self._existing(description, Path.exists)
        if direct is not None:
            return direct

        match = _FILE_IN_DIRECTORY.match(description.strip())
        if match:
            file_name = match.group(1).strip()
            directory = self.resolve_directory(match.group(2).strip())
            if directory is not None:
                found = find_file_in_directory(directory, file_name)
                if found is not None:
                    return found

        expanded = _expand(description)
        if expanded != description and os.path.exists(expanded):
            return Path(expanded).resolve()

        working = self.context.working_directory
        if working is not None and not _has_separator(description):
            found = find_file_in_directory(working, description.strip())
            if found is not None:
                return found

        return None

    def find_directory(
        self,
        description: str,
        root: Path | str | None = None,
        max_results: int | None = None,
    ) -> SearchOutcome:
        """Return scored directory candidates for ``description``.

        A known folder named by the description is ranked alongside the search
        results as an exact match.
        """
        outcome = self.searcher.find(description, root=root, max_results=max_results)
        known = resolve_known_folder(description, self.folders)
        if known is None or (root and not _is_within(known, Path(root))):
            return outcome

        limit = self.searcher.settings.default_max_results if max_results is None else max_results
        matches = [match for match in outcome.matches if not _same(match.path, known)]
        matches.insert(0, DirectoryMatch(path=known, score=EXACT_SCORE, source=MatchSource.KNOWN_FOLDER))
        matches.sort(key=lambda match: -match.score)
        outcome.matches = matches[:limit]
        return outcome

    def _existing(self, description: str, predicate: Callable[[Path], bool]) -> Optional[Path]:
        # Relative input is anchored to the session directory; the process cwd
        # only applies when no session directory is set.
        candidate = Path(description)
        working = self.context.working_directory
        if working is not None and not candidate.is_absolute():
            candidate = working / candidate
        if predicate(candidate):
            return candidate.resolve()
        return None


def find_file_in_directory(directory: Path, file_name: str) -> Optional[Path]:
    """Find ``file_name`` in ``directory`` by exact, case-insensitive, then substring match.

    Only the immediate files of ``directory`` are considered. Enumeration errors
    are logged and treated as no match.
    """
    exact = directory / file_name
    if exact.is_file():
        return exact

    try:
        files = sorted(entry for entry in directory.iterdir() if entry.is_file())
    except OSError as exc:
        LOGGER.debug("Cannot enumerate %s: %s", directory, exc)
        return None

    needle = file_name.lower()
    for entry in files:
        if entry.name.lower() == needle:
            return entry
    for entry in files:
        if needle in entry.name.lower():
            return entry
    return None


def _expand(description: str) -> str:
    return os.path.expanduser(os.path.expandvars(description.strip()))


def _has_separator(value: str) -> bool:
    return os.sep in value or (os.altsep is not None and os.altsep in value) or "/" in value


def _same(left: Path, right: Path) -> bool:
    return os.path.normcase(str(left)) == os.path.normcase(str(right))


def _is_within(path: Path, root: Path) -> bool:
    base = Path(os.path.normcase(str(root.expanduser().resolve())))
    candidate = Path(os.path.normcase(str(path.resolve())))
    return candidate == base or base in candidate.parents


__all__ = ["PathResolver", "find_file_in_directory"]
