"""JSON-ready filesystem operations for tool-calling layers and the CLI."""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

from dirwise.config import DirwiseConfig
from dirwise.errors import InvalidArgumentError, NotFoundError
from dirwise.organization import (
    APPROVAL_PHRASE,
    OrganizationPlanner,
    PlanExecutor,
    non_colliding_path,
    require_approval,
)
from dirwise.resolution import (
    DirectoryMatch,
    DirectorySearcher,
    IndexBackend,
    KnownFolders,
    PathResolver,
    ResolutionContext,
    default_index,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_READ_LIMIT = 100_000


def _timestamp(path: Path) -> str:
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return modified.isoformat().replace("+00:00", "Z")


def _file_entry(path: Path) -> dict[str, Any]:
    return {
        "name": path.name,
        "fullPath": str(path),
        "extension": path.suffix,
        "sizeBytes": path.stat().st_size,
        "lastWriteTimeUtc": _timestamp(path),
    }


def _match_entry(match: DirectoryMatch) -> dict[str, Any]:
    return {
        "path": str(match.path),
        "matchScore": match.score,
        "matchReason": match.reason,
        "source": match.source.value,
    }


def filter_by_extension_and_size(
    files: Iterable[Path],
    extension: str | None = None,
    min_size_bytes: int | None = None,
    max_size_bytes: int | None = None,
) -> Iterator[Path]:
    """Yield files matching an extension (case-insensitive) and an inclusive size range."""
    wanted = None
    if extension:
        wanted = extension.lower() if extension.startswith(".") else f".{extension.lower()}"
    for path in files:
        if wanted is not None and path.suffix.lower() != wanted:
            continue
        size = path.stat().st_size
        if min_size_bytes is not None and size < min_size_bytes:
            continue
        if max_size_bytes is not None and size > max_size_bytes:
            continue
        yield path


class FileTools:
    """Filesystem operations whose path parameters go through the resolver.

    Args:
        resolver: Resolution engine bound to the session context.
        planner: Organization planner.
        executor: Organization plan executor.
    """

    def __init__(
        self,
        resolver: PathResolver | None = None,
        *,
        planner: OrganizationPlanner | None = None,
        executor: PlanExecutor | None = None,
    ) -> None:
        self.resolver = resolver or PathResolver()
        self.planner = planner or OrganizationPlanner()
        self.executor = executor or PlanExecutor()

    @classmethod
    def from_config(
        cls,
        config: DirwiseConfig,
        *,
        working_directory: Path | str | None = None,
        folders: KnownFolders | None = None,
        index: IndexBackend | None = None,
    ) -> "FileTools":
        """Build tools wired to the platform index and the configured search limits."""
        searcher = DirectorySearcher(
            folders=folders or KnownFolders(),
            index=index if index is not None else default_index(),
            settings=config.search,
        )
        context = ResolutionContext().with_working_directory(working_directory)
        return cls(PathResolver(searcher, context))

    @property
    def context(self) -> ResolutionContext:
        return self.resolver.context

    def change_directory(self, path: str) -> Path:
        """Point the session's working directory at ``path``.

        Raises:
            NotFoundError: If ``path`` does not resolve to a directory.
        """
        directory = self._directory(path)
        self.resolver = self.resolver.with_context(
            self.context.with_working_directory(directory)
        )
        return directory

    # Resolution -------------------------------------------------------

    def resolve_path(self, path: str) -> dict[str, Any]:
        """Resolve a path or description and report whether it exists."""
        if not path or not path.strip():
            raise InvalidArgumentError("path is required.")
        resolved = self.resolver.resolve_path(path)
        if resolved is None:
            return {"input": path, "resolvedPath": path, "exists": False, "type": "not_found"}
        kind = "directory" if resolved.is_dir() else "file"
        return {"input": path, "resolvedPath": str(resolved), "exists": True, "type": kind}

    def find_directory(
        self,
        description: str,
        search_root: str | None = None,
        max_results: int | None = None,
    ) -> dict[str, Any]:
        """Search for directories matching a description, best matches first."""
        if not description or not description.strip():
            raise InvalidArgumentError("description is required.")
        root = self.resolver.resolve_directory(search_root) if search_root else None
        if search_root and root is None:
            raise NotFoundError(f"Search root not found: {search_root}")
        outcome = self.resolver.find_directory(description, root=root, max_results=max_results)
        return {
            "query": description,
            "searchRoot": str(root) if root is not None else None,
            "matchCount": len(outcome.matches),
            "matches": [_match_entry(match) for match in outcome.matches],
            "skipped": [{"path": str(entry.path), "error": entry.error} for entry in outcome.skipped],
            "indexError": outcome.index_error,
        }

    # Read-only operations ---------------------------------------------

    def list_directory(self, path: str, include_subdirectories: bool = False) -> dict[str, Any]:
        """List a directory's immediate files, optionally with its subdirectories."""
        directory = self._directory(path)
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name.lower())
        files = [_file_entry(entry) for entry in entries if entry.is_file()]
        payload: dict[str, Any] = {
            "input": path,
            "resolvedPath": str(directory),
            "fileCount": len(files),
            "files": files,
        }
        if include_subdirectories:
            subdirectories = [
                {"name": entry.name, "fullPath": str(entry), "lastWriteTimeUtc": _timestamp(entry)}
                for entry in entries
                if entry.is_dir()
            ]
            payload["subdirectoryCount"] = len(subdirectories)
            payload["subdirectories"] = subdirectories
        return payload

    def search_files(
        self,
        path: str,
        file_name_pattern: str = "*",
        extension: str | None = None,
        min_size_bytes: int | None = None,
        max_size_bytes: int | None = None,
        recursive: bool = False,
        max_results: int = 500,
    ) -> dict[str, Any]:
        """Find files by glob pattern, extension, and size range."""
        if (
            min_size_bytes is not None
            and max_size_bytes is not None
            and min_size_bytes > max_size_bytes
        ):
            raise InvalidArgumentError("min_size_bytes cannot exceed max_size_bytes.")
        if max_results < 1:
            raise InvalidArgumentError("max_results must be at least 1.")

        directory = self._directory(path)
        pattern = (file_name_pattern or "*").lower()
        candidates = directory.rglob("*") if recursive else directory.iterdir()
        named = (
            entry
            for entry in candidates
            if entry.is_file() and fnmatch.fnmatchcase(entry.name.lower(), pattern)
        )
        matches: list[dict[str, Any]] = []
        for entry in filter_by_extension_and_size(named, extension, min_size_bytes, max_size_bytes):
            matches.append(_file_entry(entry))
            if len(matches) >= max_results:
                break
        matches.sort(key=lambda entry: entry["fullPath"].lower())
        return {
            "resolvedPath": str(directory),
            "pattern": file_name_pattern,
            "extension": extension,
            "recursive": recursive,
            "matchCount": len(matches),
            "matches": matches,
        }

    def read_file(self, path: str, max_chars: int = DEFAULT_READ_LIMIT) -> dict[str, Any]:
        """Read a text file, truncating to ``max_chars`` characters."""
        target = self._file(path)
        text = target.read_text(encoding="utf-8", errors="replace")
        truncated = len(text) > max_chars
        return {
            "resolvedPath": str(target),
            "content": text[:max_chars],
            "truncated": truncated,
            "lengthChars": len(text),
        }

    # Mutating operations ----------------------------------------------

    def move_item(self, source: str, destination: str, approval_phrase: str) -> dict[str, Any]:
        """Move a file or directory into a destination directory or onto a new path."""
        require_approval(approval_phrase)
        source_path = self._existing(source)
        target = self._destination(destination, source_path.name)
        target.parent.mkdir(parents=True, exist_ok=True)
        final = non_colliding_path(target)
        shutil.move(str(source_path), str(final))
        LOGGER.info("Moved %s -> %s", source_path, final)
        return {"moved": True, "source": str(source_path), "destination": str(final)}

    def copy_file(self, source: str, destination: str, approval_phrase: str) -> dict[str, Any]:
        """Copy a file into a destination directory or onto a new path."""
        require_approval(approval_phrase)
        source_path = self._file(source)
        target = self._destination(destination, source_path.name)
        target.parent.mkdir(parents=True, exist_ok=True)
        final = non_colliding_path(target)
        shutil.copy2(source_path, final)
        LOGGER.info("Copied %s -> %s", source_path, final)
        return {"copied": True, "source": str(source_path), "destination": str(final)}

    def create_directory(self, parent: str, name: str, approval_phrase: str) -> dict[str, Any]:
        """Create ``name`` under ``parent``."""
        require_approval(approval_phrase)
        if not name or not name.strip() or Path(name).is_absolute() or ".." in Path(name).parts:
            raise InvalidArgumentError(f"Invalid directory name: {name!r}")
        target = self._directory(parent) / name.strip()
        existed = target.is_dir()
        target.mkdir(parents=True, exist_ok=True)
        return {"created": not existed, "path": str(target)}

    def delete_item(self, path: str, approval_phrase: str, recursive: bool = False) -> dict[str, Any]:
        """Delete a file, or a directory (non-empty only when ``recursive``)."""
        require_approval(approval_phrase)
        target = self._existing(path)
        if target.is_dir():
            if recursive:
                shutil.rmtree(target)
            else:
                target.rmdir()
            kind = "directory"
        else:
            target.unlink()
            kind = "file"
        LOGGER.info("Deleted %s %s", kind, target)
        return {"deleted": True, "path": str(target), "type": kind}

    def write_file(
        self,
        path: str,
        content: str,
        approval_phrase: str,
        overwrite: bool = False,
    ) -> dict[str, Any]:
        """Write text to a file; refuses to overwrite unless asked."""
        require_approval(approval_phrase)
        target = self._writable_target(path)
        if target.exists() and not overwrite:
            target = non_colliding_path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return {"written": True, "path": str(target), "lengthChars": len(content)}

    # Organization -----------------------------------------------------

    def preview_organize_by_extension(
        self, path: str, include_hidden: bool = False
    ) -> dict[str, Any]:
        """Build a preview plan for organizing a directory by extension."""
        directory = self._directory(path)
        preview = self.planner.build_plan(directory, include_hidden=include_hidden)
        return {
            "plan": preview.plan.to_document(),
            "summary": [entry.to_document() for entry in preview.summary],
            "safety": {
                "note": (
                    "This is a preview. To apply, call apply_organization_plan with the plan "
                    "and the required approval phrase."
                ),
                "requiredApprovalPhrase": APPROVAL_PHRASE,
            },
        }

    def apply_organization_plan(
        self, plan: str | Mapping[str, Any], approval_phrase: str
    ) -> dict[str, Any]:
        """Apply a plan produced by ``preview_organize_by_extension``."""
        return self.executor.apply(plan, approval_phrase).to_document()

    # Internal helpers -------------------------------------------------

    def _directory(self, description: str) -> Path:
        if not description or not description.strip():
            raise InvalidArgumentError("A directory path is required.")
        resolved = self.resolver.resolve_directory(description)
        if resolved is None or not resolved.is_dir():
            raise NotFoundError(f"Directory not found: {description}")
        return resolved

    def _existing(self, description: str) -> Path:
        if not description or not description.strip():
            raise InvalidArgumentError("A path is required.")
        resolved = self.resolver.resolve_path(description)
        if resolved is None:
            raise NotFoundError(f"Path not found: {description}")
        return resolved

    def _file(self, description: str) -> Path:
        resolved = self._existing(description)
        if not resolved.is_file():
            raise NotFoundError(f"File not found: {description}")
        return resolved

    def _destination(self, description: str, name: str) -> Path:
        existing = self.resolver.resolve_path(description)
        if existing is not None and existing.is_dir():
            return existing / name
        return self._writable_target(description)

    def _writable_target(self, description: str) -> Path:
        if not description or not description.strip():
            raise InvalidArgumentError("A destination path is required.")
        candidate = Path(os.path.expanduser(os.path.expandvars(description.strip())))
        working: Optional[Path] = self.context.working_directory
        if not candidate.is_absolute() and working is not None:
            candidate = working / candidate
        return candidate.absolute()


__all__ = ["DEFAULT_READ_LIMIT", "FileTools", "filter_by_extension_and_size"]
