"""Lookup of OS special folders and fixed drive roots."""

from __future__ import annotations

import logging
import os
import re
import shlex
import string
import sys
import tempfile
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

LOGGER = logging.getLogger(__name__)

_DRIVE_FIXED = 3
_XDG_LINE = re.compile(r'^\s*XDG_([A-Z]+)_DIR\s*=\s*(.+?)\s*$')


class SpecialFolder(str, Enum):
    """Symbolic names for OS-defined special directories."""

    DESKTOP = "desktop"
    DOCUMENTS = "documents"
    DOWNLOADS = "downloads"
    PICTURES = "pictures"
    MUSIC = "music"
    VIDEOS = "videos"
    HOME = "home"
    APPDATA = "appdata"
    LOCAL_APPDATA = "local_appdata"
    PROGRAM_FILES = "program_files"
    TEMP = "temp"


# Matched in order against the lower-cased description.
KNOWN_FOLDER_NAMES: tuple[tuple[str, SpecialFolder], ...] = (
    ("desktop", SpecialFolder.DESKTOP),
    ("documents", SpecialFolder.DOCUMENTS),
    ("my documents", SpecialFolder.DOCUMENTS),
    ("downloads", SpecialFolder.DOWNLOADS),
    ("pictures", SpecialFolder.PICTURES),
    ("my pictures", SpecialFolder.PICTURES),
    ("music", SpecialFolder.MUSIC),
    ("my music", SpecialFolder.MUSIC),
    ("videos", SpecialFolder.VIDEOS),
    ("my videos", SpecialFolder.VIDEOS),
    ("local appdata", SpecialFolder.LOCAL_APPDATA),
    ("appdata", SpecialFolder.APPDATA),
    ("program files", SpecialFolder.PROGRAM_FILES),
    ("temp", SpecialFolder.TEMP),
    ("user", SpecialFolder.HOME),
    ("home", SpecialFolder.HOME),
)

_HOME_RELATIVE = {
    SpecialFolder.DESKTOP: "Desktop",
    SpecialFolder.DOCUMENTS: "Documents",
    SpecialFolder.DOWNLOADS: "Downloads",
    SpecialFolder.PICTURES: "Pictures",
    SpecialFolder.MUSIC: "Music",
    SpecialFolder.VIDEOS: "Videos",
}

_XDG_KEYS = {
    "DESKTOP": SpecialFolder.DESKTOP,
    "DOCUMENTS": SpecialFolder.DOCUMENTS,
    "DOWNLOAD": SpecialFolder.DOWNLOADS,
    "PICTURES": SpecialFolder.PICTURES,
    "MUSIC": SpecialFolder.MUSIC,
    "VIDEOS": SpecialFolder.VIDEOS,
}


class KnownFolders:
    """Resolve special folders for the current user and platform.

    Args:
        home: Override for the user's home directory.
        environ: Environment mapping consulted for Windows and XDG variables.
        platform: Override for ``sys.platform``.
    """

    def __init__(
        self,
        home: Path | str | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
    ) -> None:
        self._home = Path(home) if home is not None else Path.home()
        self._environ = environ if environ is not None else os.environ
        self._platform = platform or sys.platform
        self._xdg_cache: dict[SpecialFolder, Path] | None = None

    @property
    def home(self) -> Path:
        """Return the user's home directory."""
        return self._home

    @property
    def is_windows(self) -> bool:
        return self._platform.startswith("win")

    def path_for(self, folder: SpecialFolder) -> Optional[Path]:
        """Return the configured location of ``folder`` or ``None`` when undefined.

        The returned path is not guaranteed to exist.
        """
        if folder is SpecialFolder.HOME:
            return self._home
        if folder is SpecialFolder.TEMP:
            return Path(tempfile.gettempdir())
        if folder in _HOME_RELATIVE:
            if not self.is_windows and self._platform != "darwin":
                xdg = self._xdg_user_dirs().get(folder)
                if xdg is not None:
                    return xdg
            return self._home / _HOME_RELATIVE[folder]
        if folder is SpecialFolder.APPDATA:
            return self._appdata(local=False)
        if folder is SpecialFolder.LOCAL_APPDATA:
            return self._appdata(local=True)
        if folder is SpecialFolder.PROGRAM_FILES:
            if self.is_windows:
                return self._env_path("ProgramFiles")
            if self._platform == "darwin":
                return Path("/Applications")
        return None

    def existing(self, folder: SpecialFolder) -> Optional[Path]:
        """Return the folder location only if it exists as a directory."""
        path = self.path_for(folder)
        if path is not None and path.is_dir():
            return path
        return None

    def indexed_locations(self) -> list[Path]:
        """Return the folders the OS content index is expected to cover."""
        folders = (
            SpecialFolder.HOME,
            SpecialFolder.DESKTOP,
            SpecialFolder.DOCUMENTS,
            SpecialFolder.PICTURES,
            SpecialFolder.MUSIC,
            SpecialFolder.VIDEOS,
            SpecialFolder.DOWNLOADS,
        )
        return [path for path in (self.path_for(folder) for folder in folders) if path is not None]

    def is_indexed(self, path: Path) -> bool:
        """Return True when ``path`` lies at or under an indexed location."""
        candidate = _normalize(path)
        for location in self.indexed_locations():
            base = _normalize(location)
            if candidate == base or base in candidate.parents:
                return True
        return False

    def fixed_drive_roots(self) -> list[Path]:
        """Return ready, fixed (non-removable) volume roots."""
        if not self.is_windows:
            return [Path("/")]
        try:
            import ctypes

            kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
            bitmask = kernel32.GetLogicalDrives()
        except (AttributeError, OSError) as exc:
            LOGGER.debug("Drive enumeration unavailable: %s", exc)
            return []
        roots: list[Path] = []
        for index, letter in enumerate(string.ascii_uppercase):
            if not bitmask & (1 << index):
                continue
            root = f"{letter}:\\"
            if kernel32.GetDriveTypeW(root) == _DRIVE_FIXED and os.path.isdir(root):
                roots.append(Path(root))
        return roots

    # Internal helpers -------------------------------------------------

    def _env_path(self, name: str) -> Optional[Path]:
        value = self._environ.get(name)
        return Path(value) if value else None

    def _appdata(self, *, local: bool) -> Optional[Path]:
        if self.is_windows:
            return self._env_path("LOCALAPPDATA" if local else "APPDATA")
        if self._platform == "darwin":
            return self._home / "Library" / "Application Support"
        if local:
            return self._env_path("XDG_DATA_HOME") or self._home / ".local" / "share"
        return self._env_path("XDG_CONFIG_HOME") or self._home / ".config"

    def _xdg_user_dirs(self) -> dict[SpecialFolder, Path]:
        if self._xdg_cache is not None:
            return self._xdg_cache

        config_home = self._env_path("XDG_CONFIG_HOME") or self._home / ".config"
        dirs_file = config_home / "user-dirs.dirs"
        parsed: dict[SpecialFolder, Path] = {}
        try:
            lines = dirs_file.read_text(encoding="utf-8").splitlines()
        except OSError:
            lines = []
        for line in lines:
            match = _XDG_LINE.match(line)
            if not match or match.group(1) not in _XDG_KEYS:
                continue
            try:
                values = shlex.split(match.group(2))
            except ValueError:
                continue
            if not values:
                continue
            raw = values[0].replace("$HOME", str(self._home))
            parsed[_XDG_KEYS[match.group(1)]] = Path(raw)
        self._xdg_cache = parsed
        return parsed


def resolve_known_folder(description: str, folders: KnownFolders) -> Optional[Path]:
    """Map a description onto an existing special folder.

    ``download`` and ``temp`` are checked first against the platform's actual
    Downloads and Temp locations, then the name table is matched by
    case-insensitive substring.

    Args:
        description: Free-text description such as "my downloads folder".
        folders: Special-folder lookup capability.

    Returns:
        Optional[Path]: Existing folder, or ``None`` when nothing matches.
    """
    text = description.strip().lower()
    if not text:
        return None

    if "download" in text:
        downloads = folders.home / "Downloads"
        if downloads.is_dir():
            return downloads
    if "temp" in text:
        temp = folders.existing(SpecialFolder.TEMP)
        if temp is not None:
            return temp

    for name, folder in KNOWN_FOLDER_NAMES:
        if name in text:
            path = folders.existing(folder)
            if path is not None:
                return path
    return None


def _normalize(path: Path) -> Path:
    try:
        resolved = path.expanduser().resolve()
    except OSError:
        resolved = path.expanduser().absolute()
    return Path(os.path.normcase(str(resolved)))


__all__ = ["KNOWN_FOLDER_NAMES", "KnownFolders", "SpecialFolder", "resolve_known_folder"]
