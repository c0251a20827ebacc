"""Multi-candidate directory search with name-match scoring."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Sequence

from dirwise.config import SearchSettings
from dirwise.errors import IndexUnavailableError, InvalidArgumentError

from .index import IndexBackend, NullIndex
from .known_folders import KnownFolders, SpecialFolder
from .models import DirectoryMatch, MatchSource, SearchOutcome, SkippedDirectory
from .terms import SearchTermSet, extract_terms

LOGGER = logging.getLogger(__name__)

EXACT_SCORE = 100
PREFIX_SCORE = 75
CONTAINS_SCORE = 50


def score_name(name: str, terms: Sequence[str]) -> int:
    """Score a directory leaf name against search tokens.

    Each token contributes +100 for case-insensitive equality, +75 when the name
    starts with it, or +50 when the name contains it; contributions are summed.
    """
    lowered = name.lower()
    total = 0
    for term in terms:
        if lowered == term:
            total += EXACT_SCORE
        elif lowered.startswith(term):
            total += PREFIX_SCORE
        elif term in lowered:
            total += CONTAINS_SCORE
    return total


def _key(path: Path) -> str:
    return os.path.normcase(os.path.abspath(path))


class _Walk:
    """Mutable state for one manual walk."""

    def __init__(self, terms: SearchTermSet, max_results: int, settings: SearchSettings) -> None:
        self.terms = terms
        self.max_results = max_results
        self.settings = settings
        self.matches: dict[str, DirectoryMatch] = {}
        self.skipped: list[SkippedDirectory] = []
        self.visited: set[str] = set()

    def add(self, match: DirectoryMatch) -> None:
        key = _key(match.path)
        current = self.matches.get(key)
        if current is None or match.score > current.score:
            self.matches[key] = match

    def satisfied(self) -> bool:
        return len(self.matches) >= self.max_results and any(
            match.score >= EXACT_SCORE for match in self.matches.values()
        )


class DirectorySearcher:
    """Find directories matching a description using the index, then a bounded walk.

    Args:
        folders: Special-folder lookup capability.
        index: OS content index backend; ``NullIndex`` disables the fast path.
        settings: Search limits and toggles.
    """

    def __init__(
        self,
        folders: KnownFolders | None = None,
        index: IndexBackend | None = None,
        settings: SearchSettings | None = None,
    ) -> None:
        self.folders = folders or KnownFolders()
        self.settings = settings or SearchSettings()
        if index is None or not self.settings.index_enabled:
            index = NullIndex()
        elif not index.is_available():
            LOGGER.debug("Index backend %s is not available; using the directory walk only", index.name)
            index = NullIndex()
        self.index = index

    def find(
        self,
        description: str | SearchTermSet,
        root: Path | str | None = None,
        max_results: int | None = None,
    ) -> SearchOutcome:
        """Return up to ``max_results`` directories ordered by descending score.

        Args:
            description: Free-text description or a prepared token set.
            root: Optional directory that scopes the search.
            max_results: Result cap; defaults to ``settings.default_max_results``.

        Returns:
            SearchOutcome: Matches plus the skip log and index diagnostics.

        Raises:
            InvalidArgumentError: If the description is empty or ``max_results`` < 1.
        """
        terms = description if isinstance(description, SearchTermSet) else extract_terms(description)
        limit = self.settings.default_max_results if max_results is None else max_results
        if limit < 1:
            raise InvalidArgumentError("max_results must be at least 1.")

        scope = Path(root).expanduser().resolve() if root else None
        outcome = SearchOutcome()
        walk = _Walk(terms, limit, self.settings)

        if scope is None or self.folders.is_indexed(scope):
            outcome.index_used = True
            try:
                for match in self._query_index(terms, scope, limit):
                    walk.add(match)
            except IndexUnavailableError as exc:
                outcome.index_error = str(exc)
                LOGGER.info("Indexed search unavailable, falling back to directory walk: %s", exc)

            if walk.satisfied():
                outcome.matches = self._finalize(walk)
                return outcome

        for start in self._search_roots(scope):
            if walk.satisfied():
                break
            LOGGER.debug("Walking %s for %s", start, list(terms))
            self._walk(start, 0, walk)

        outcome.matches = self._finalize(walk)
        outcome.skipped = walk.skipped
        return outcome

    # Internal helpers -------------------------------------------------

    def _query_index(
        self, terms: SearchTermSet, scope: Optional[Path], limit: int
    ) -> list[DirectoryMatch]:
        hits = self.index.query_folders(
            list(terms), scope, limit, self.settings.index_timeout_seconds
        )
        matches = []
        for path in hits:
            score = score_name(path.name, terms)
            if score > 0:
                matches.append(DirectoryMatch(path=path, score=score, source=MatchSource.INDEX))
        return matches

    def _search_roots(self, scope: Optional[Path]) -> list[Path]:
        candidates: list[Optional[Path]] = []
        if scope is not None and scope.is_dir():
            candidates.append(scope)
            candidates.append(scope.parent)
        home = self.folders.home
        candidates.append(home)
        downloads = home / "Downloads"
        if downloads.is_dir():
            candidates.append(downloads)
        candidates.append(self.folders.existing(SpecialFolder.DESKTOP))
        candidates.append(self.folders.existing(SpecialFolder.DOCUMENTS))
        if self.settings.include_drive_roots:
            candidates.extend(self.folders.fixed_drive_roots())

        roots: list[Path] = []
        seen: set[str] = set()
        for candidate in candidates:
            if candidate is None or not candidate.is_dir():
                continue
            resolved = candidate.resolve()
            key = os.path.normcase(str(resolved))
            if key in seen:
                continue
            seen.add(key)
            roots.append(resolved)
        return roots

    def _walk(self, directory: Path, depth: int, walk: _Walk) -> None:
        if depth > walk.settings.max_depth or walk.satisfied():
            return

        key = _key(directory)
        if key in walk.visited:
            return
        walk.visited.add(key)

        try:
            with os.scandir(directory) as entries:
                children = [
                    Path(entry.path)
                    for entry in entries
                    if entry.is_dir(follow_symlinks=False)
                ]
        except OSError as exc:
            walk.skipped.append(SkippedDirectory(path=directory, error=f"{type(exc).__name__}: {exc}"))
            LOGGER.debug("Skipping %s: %s", directory, exc)
            return

        for child in children:
            score = score_name(child.name, walk.terms) - walk.settings.depth_penalty * depth
            if score > 0:
                walk.add(
                    DirectoryMatch(path=child, score=score, source=MatchSource.MANUAL, depth=depth)
                )
            if walk.satisfied():
                return
            self._walk(child, depth + 1, walk)

    def _finalize(self, walk: _Walk) -> list[DirectoryMatch]:
        ordered = sorted(walk.matches.values(), key=lambda match: (-match.score, str(match.path)))
        return [match for match in ordered if match.path.is_dir()][: walk.max_results]


__all__ = ["CONTAINS_SCORE", "DirectorySearcher", "EXACT_SCORE", "PREFIX_SCORE", "score_name"]
