"""Configuration models describing dirwise settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DirwiseBaseModel(BaseModel):
    """Shared configuration for dirwise settings models."""

    model_config = ConfigDict(extra="forbid")


class SearchSettings(DirwiseBaseModel):
    """Options governing directory search and resolution.

    Attributes:
        max_depth: Deepest recursion level visited by the manual walk.
        depth_penalty: Score subtracted per recursion level for manual matches.
        default_max_results: Result cap used when callers do not pass one.
        index_enabled: Whether the OS content index is consulted first.
        index_timeout_seconds: Hard timeout applied to each index query.
        include_drive_roots: Whether fixed drive roots are walked as a last resort.
    """

    max_depth: int = Field(default=5, ge=0)
    depth_penalty: int = Field(default=5, ge=0)
    default_max_results: int = Field(default=10, ge=1)
    index_enabled: bool = True
    index_timeout_seconds: float = Field(default=3.0, gt=0)
    include_drive_roots: bool = True


class OrganizationSettings(DirwiseBaseModel):
    """Defaults for organization previews.

    Attributes:
        include_hidden: Whether hidden files are planned by default.
    """

    include_hidden: bool = False


class LoggingSettings(DirwiseBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level for the ``dirwise`` logger.
    """

    level: str = "WARNING"


class CLIOptions(DirwiseBaseModel):
    """CLI behavior defaults.

    Attributes:
        json_default: Whether data commands emit JSON unless told otherwise.
        quiet_default: Whether commands suppress non-error output by default.
    """

    json_default: bool = False
    quiet_default: bool = False


class DirwiseConfig(DirwiseBaseModel):
    """Top-level configuration struct for dirwise."""

    search: SearchSettings = Field(default_factory=SearchSettings)
    organization: OrganizationSettings = Field(default_factory=OrganizationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DirwiseBaseModel",
    "SearchSettings",
    "OrganizationSettings",
    "LoggingSettings",
    "CLIOptions",
    "DirwiseConfig",
]
