"""Data models produced by directory resolution and search."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict


class MatchSource(str, Enum):
    """Strategy that produced a directory match."""

    KNOWN_FOLDER = "known_folder"
    INDEX = "index"
    MANUAL = "manual"


class DirectoryMatch(BaseModel):
    """A scored candidate directory.

    Attributes:
        path: Absolute path of the matched directory.
        score: Name-match score after any depth penalty.
        source: Strategy that produced the match.
        depth: Recursion depth for manual matches; ``None`` for other sources.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    score: int
    source: MatchSource
    depth: Optional[int] = None

    @property
    def reason(self) -> str:
        """Return a human-readable explanation of how the match was found."""
        if self.source is MatchSource.INDEX:
            return f"Indexed search match on folder name '{self.path.name}'"
        if self.source is MatchSource.KNOWN_FOLDER:
            return f"Known folder '{self.path.name}'"
        return f"Directory walk match on '{self.path.name}' at depth {self.depth}"


@dataclass(frozen=True, slots=True)
class SkippedDirectory:
    """A directory the manual walk could not enumerate."""

    path: Path
    error: str


@dataclass(slots=True)
class SearchOutcome:
    """Matches plus diagnostics from a multi-candidate directory search.

    Attributes:
        matches: Matches ordered by descending score.
        skipped: Directories skipped because enumeration failed.
        index_used: Whether the index fast path was attempted.
        index_error: Message describing why the index was unavailable, if it was.
    """

    matches: list[DirectoryMatch] = field(default_factory=list)
    skipped: list[SkippedDirectory] = field(default_factory=list)
    index_used: bool = False
    index_error: Optional[str] = None

    @property
    def best(self) -> Optional[DirectoryMatch]:
        """Return the top-scored match, if any."""
        return self.matches[0] if self.matches else None


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    """Per-session state threaded into every resolution call.

    Attributes:
        working_directory: Directory used to interpret relative descriptions.
    """

    working_directory: Optional[Path] = None

    def with_working_directory(self, directory: Path | str | None) -> "ResolutionContext":
        """Return a copy pointing at ``directory``."""
        if directory is None:
            return ResolutionContext()
        return ResolutionContext(working_directory=Path(directory).expanduser().resolve())


__all__ = [
    "MatchSource",
    "DirectoryMatch",
    "SkippedDirectory",
    "SearchOutcome",
    "ResolutionContext",
]
