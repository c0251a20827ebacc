"""Shared fixtures for dirwise tests."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import pytest

from dirwise.config import SearchSettings
from dirwise.errors import IndexUnavailableError
from dirwise.resolution import DirectorySearcher, KnownFolders, PathResolver, ResolutionContext
from dirwise.tools import FileTools


class FakeIndex:
    """In-memory index backend that records queries."""

    name = "fake"

    def __init__(
        self, hits: Sequence[Path] = (), *, error: str | None = None, available: bool = True
    ) -> None:
        self.hits = list(hits)
        self.error = error
        self.available = available
        self.calls: list[tuple[tuple[str, ...], Optional[Path], int]] = []

    def is_available(self) -> bool:
        return self.available

    def query_folders(
        self,
        terms: Sequence[str],
        scope: Optional[Path],
        limit: int,
        timeout: float,
    ) -> list[Path]:
        self.calls.append((tuple(terms), scope, limit))
        if self.error is not None:
            raise IndexUnavailableError(self.error)
        return self.hits[:limit]


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Return a fake home directory with the usual user folders."""
    home = tmp_path / "home"
    for name in ("Desktop", "Documents", "Downloads", "Pictures", "Music", "Videos"):
        (home / name).mkdir(parents=True)
    return home


@pytest.fixture
def folders(home: Path) -> KnownFolders:
    return KnownFolders(home, environ={}, platform="linux")


@pytest.fixture
def settings() -> SearchSettings:
    return SearchSettings(include_drive_roots=False)


@pytest.fixture
def failing_index() -> FakeIndex:
    return FakeIndex(error="index offline")


@pytest.fixture
def searcher(folders: KnownFolders, failing_index: FakeIndex, settings: SearchSettings) -> DirectorySearcher:
    return DirectorySearcher(folders=folders, index=failing_index, settings=settings)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    directory = tmp_path / "work"
    directory.mkdir()
    return directory


@pytest.fixture
def resolver(searcher: DirectorySearcher, workdir: Path) -> PathResolver:
    return PathResolver(searcher, ResolutionContext(working_directory=workdir))


@pytest.fixture
def tools(resolver: PathResolver) -> FileTools:
    return FileTools(resolver)


@pytest.fixture
def cli_env(tmp_path: Path, home: Path) -> dict[str, str]:
    """Environment for CliRunner invocations: fake HOME, no index, no drive walk."""
    return {
        "HOME": str(home),
        "USERPROFILE": str(home),
        "XDG_CONFIG_HOME": str(tmp_path / "xdg"),
        "DIRWISE__SEARCH__INDEX_ENABLED": "false",
        "DIRWISE__SEARCH__INCLUDE_DRIVE_ROOTS": "false",
    }
