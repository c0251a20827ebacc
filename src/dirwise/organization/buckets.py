"""Extension to destination-folder mapping."""

from __future__ import annotations

NO_EXTENSION = "NoExtension"
OTHER = "Other"

BUCKETS: dict[str, tuple[str, ...]] = {
    "Images": (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tiff"),
    "Videos": (".mp4", ".mov", ".mkv", ".avi", ".wmv"),
    "Audio": (".mp3", ".wav", ".flac", ".m4a"),
    "Documents": (".pdf", ".doc", ".docx", ".txt", ".rtf", ".md"),
    "Spreadsheets": (".xls", ".xlsx", ".csv"),
    "Presentations": (".ppt", ".pptx"),
    "Archives": (".zip", ".7z", ".rar", ".tar", ".gz"),
    "Installers": (".exe", ".msi"),
    "Code": (".cs", ".fs", ".vb", ".js", ".ts", ".py", ".go", ".java", ".cpp", ".h"),
}

_BY_EXTENSION = {extension: bucket for bucket, extensions in BUCKETS.items() for extension in extensions}


def bucket_for_extension(extension: str | None) -> str:
    """Return the bucket folder name for a file extension such as ``.JPG``."""
    normalized = (extension or "").strip().lower()
    if not normalized:
        return NO_EXTENSION
    if not normalized.startswith("."):
        normalized = f".{normalized}"
    return _BY_EXTENSION.get(normalized, OTHER)


__all__ = ["BUCKETS", "NO_EXTENSION", "OTHER", "bucket_for_extension"]
