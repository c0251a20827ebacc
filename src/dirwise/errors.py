"""Error taxonomy shared by resolution, organization, and tool layers."""


class DirwiseError(Exception):
    """Base exception for dirwise operations."""

    code = "internal_error"


class NotFoundError(DirwiseError):
    """Raised when a resolved path does not exist or is not usable."""

    code = "not_found"


class UnauthorizedError(DirwiseError):
    """Raised when a mutating call is made without the approval phrase."""

    code = "unauthorized"


class InvalidArgumentError(DirwiseError, ValueError):
    """Raised for malformed plans, empty descriptions, or bad filter combinations."""

    code = "invalid_argument"


class ResourceExhaustedError(DirwiseError):
    """Raised when collision-safe renaming runs out of candidate names."""

    code = "resource_exhausted"


class IndexUnavailableError(DirwiseError):
    """Raised by index backends; never propagated past the directory searcher."""

    code = "index_unavailable"


__all__ = [
    "DirwiseError",
    "NotFoundError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "ResourceExhaustedError",
    "IndexUnavailableError",
]
