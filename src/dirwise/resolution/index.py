"""Adapters for OS-maintained content indexes (Spotlight, locate, Windows Search)."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

from dirwise.errors import IndexUnavailableError

LOGGER = logging.getLogger(__name__)


class IndexBackend(Protocol):
    """Capability for querying an OS content index for folders by name."""

    name: str

    def is_available(self) -> bool:
        """Return True when the backend's tooling is present."""
        ...

    def query_folders(
        self,
        terms: Sequence[str],
        scope: Optional[Path],
        limit: int,
        timeout: float,
    ) -> list[Path]:
        """Return folders whose name contains any term, most recent first.

        Raises:
            IndexUnavailableError: If the index cannot be queried.
        """
        ...


def _run(command: Sequence[str], timeout: float, accept: Sequence[int] = (0,)) -> str:
    """Run an index tool and return its stdout, mapping failures to IndexUnavailableError.

    Args:
        command: Executable and arguments.
        timeout: Seconds before the tool is killed.
        accept: Exit statuses that count as success.
    """
    try:
        completed = subprocess.run(
            list(command),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise IndexUnavailableError(f"{command[0]} is not installed") from exc
    except subprocess.TimeoutExpired as exc:
        raise IndexUnavailableError(f"{command[0]} timed out after {timeout:g}s") from exc
    except OSError as exc:
        raise IndexUnavailableError(f"{command[0]} failed to start: {exc}") from exc

    if completed.returncode not in accept:
        detail = (completed.stderr or "").strip().splitlines()
        message = detail[0] if detail else f"exit status {completed.returncode}"
        raise IndexUnavailableError(f"{command[0]} failed: {message}")
    return completed.stdout


def _under(path: Path, scope: Path) -> bool:
    candidate = os.path.normcase(str(path))
    base = os.path.normcase(str(scope)).rstrip("\\/")
    return candidate == base or candidate.startswith(base + os.sep)


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0


def filter_folder_hits(
    lines: Iterable[str],
    terms: Sequence[str],
    scope: Optional[Path],
    limit: int,
    *,
    sort_by_recency: bool = True,
) -> list[Path]:
    """Keep existing directories whose leaf name contains a term and lie under ``scope``."""
    seen: set[str] = set()
    hits: list[Path] = []
    for line in lines:
        raw = line.strip()
        if not raw or raw in seen:
            continue
        seen.add(raw)
        path = Path(raw)
        name = path.name.lower()
        if not any(term in name for term in terms):
            continue
        if scope is not None and not _under(path, scope):
            continue
        if not path.is_dir():
            continue
        hits.append(path)
    if sort_by_recency:
        hits.sort(key=_mtime, reverse=True)
    return hits[:limit]


class NullIndex:
    """Index backend used when no OS index exists or indexing is disabled."""

    name = "none"

    def is_available(self) -> bool:
        return False

    def query_folders(
        self,
        terms: Sequence[str],
        scope: Optional[Path],
        limit: int,
        timeout: float,
    ) -> list[Path]:
        raise IndexUnavailableError("No content index is available on this platform.")


class SpotlightIndex:
    """Query macOS Spotlight through ``mdfind``."""

    name = "spotlight"

    def __init__(self, executable: str = "mdfind") -> None:
        self._executable = executable

    def is_available(self) -> bool:
        return shutil.which(self._executable) is not None

    def query_folders(
        self,
        terms: Sequence[str],
        scope: Optional[Path],
        limit: int,
        timeout: float,
    ) -> list[Path]:
        clauses = " || ".join(f'kMDItemFSName == "*{_escape_mdfind(term)}*"c' for term in terms)
        query = f'kMDItemContentType == "public.folder" && ({clauses})'
        command = [self._executable]
        if scope is not None:
            command.extend(["-onlyin", str(scope)])
        command.append(query)
        output = _run(command, timeout)
        return filter_folder_hits(output.splitlines(), terms, scope, limit)


class LocateIndex:
    """Query the ``plocate``/``locate`` database by base name."""

    name = "locate"

    def __init__(self, executables: Sequence[str] = ("plocate", "locate")) -> None:
        self._executables = tuple(executables)

    def _executable(self) -> Optional[str]:
        for candidate in self._executables:
            if shutil.which(candidate):
                return candidate
        return None

    def is_available(self) -> bool:
        return self._executable() is not None

    def query_folders(
        self,
        terms: Sequence[str],
        scope: Optional[Path],
        limit: int,
        timeout: float,
    ) -> list[Path]:
        executable = self._executable()
        if executable is None:
            raise IndexUnavailableError("Neither plocate nor locate is installed.")
        # locate returns files too; over-fetch so directory filtering can still fill the limit.
        command = [executable, "-i", "-b", "-l", str(max(limit * 50, 200)), *terms]
        # Exit status 1 means nothing matched.
        output = _run(command, timeout, accept=(0, 1))
        return filter_folder_hits(output.splitlines(), terms, scope, limit)


class WindowsSearchIndex:
    """Query the Windows Search ``SystemIndex`` through PowerShell and ADODB."""

    name = "windows-search"

    def __init__(self, executable: str = "powershell") -> None:
        self._executable = executable

    def is_available(self) -> bool:
        return shutil.which(self._executable) is not None

    def build_query(self, terms: Sequence[str], scope: Optional[Path], limit: int) -> str:
        """Return the SystemIndex SQL for a folder-name query."""
        likes = " OR ".join(
            f"System.FileName LIKE '%{term.replace(chr(39), chr(39) * 2)}%'" for term in terms
        )
        sql = (
            f"SELECT TOP {limit} System.ItemPathDisplay FROM SystemIndex "
            f"WHERE System.ItemType = 'Directory' AND ({likes})"
        )
        if scope is not None:
            scope_url = "file:" + str(scope).replace("\\", "/").replace("'", "''")
            sql += f" AND SCOPE='{scope_url}'"
        return sql + " ORDER BY System.DateModified DESC"

    def query_folders(
        self,
        terms: Sequence[str],
        scope: Optional[Path],
        limit: int,
        timeout: float,
    ) -> list[Path]:
        sql = self.build_query(terms, scope, limit).replace("'", "''")
        script = (
            "$c = New-Object -ComObject ADODB.Connection; "
            "$c.Open(\"Provider=Search.CollatorDSO;Extended Properties='Application=Windows';\"); "
            f"$r = $c.Execute('{sql}'); "
            "while (-not $r.EOF) { $r.Fields.Item('System.ItemPathDisplay').Value; $r.MoveNext() }; "
            "$r.Close(); $c.Close()"
        )
        output = _run([self._executable, "-NoProfile", "-NonInteractive", "-Command", script], timeout)
        return filter_folder_hits(output.splitlines(), terms, scope, limit, sort_by_recency=False)


def _escape_mdfind(term: str) -> str:
    return term.replace("\\", "\\\\").replace('"', '\\"')


def default_index(platform: str | None = None) -> IndexBackend:
    """Return the index backend for ``platform`` (defaults to the running platform)."""
    platform = platform or sys.platform
    if platform == "darwin":
        return SpotlightIndex()
    if platform.startswith("win"):
        return WindowsSearchIndex()
    return LocateIndex()


__all__ = [
    "IndexBackend",
    "LocateIndex",
    "NullIndex",
    "SpotlightIndex",
    "WindowsSearchIndex",
    "default_index",
    "filter_folder_hits",
]
