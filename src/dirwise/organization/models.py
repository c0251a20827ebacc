"""Organization plan data models."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from dirwise.errors import InvalidArgumentError

BY_EXTENSION = "by_extension"


def _aliases(name: str, camel: str) -> AliasChoices:
    return AliasChoices(name, camel, camel[0].upper() + camel[1:])


class PlanBaseModel(BaseModel):
    """Immutable model that accepts snake, camel, or Pascal case keys."""

    model_config = ConfigDict(frozen=True)

    def to_document(self) -> dict[str, Any]:
        """Return the camelCase JSON-ready form used on the wire."""
        return self.model_dump(mode="json", by_alias=True)


class FileMove(PlanBaseModel):
    """A proposed relocation of one file.

    Attributes:
        source: Absolute path of the file when the plan was built.
        destination: Absolute path inside the bucket folder.
    """

    source: Path = Field(validation_alias=_aliases("source", "source"))
    destination: Path = Field(validation_alias=_aliases("destination", "destination"))


class AppliedMove(PlanBaseModel):
    """A move that was actually performed; the destination may be disambiguated."""

    source: Path = Field(validation_alias=_aliases("source", "source"))
    destination: Path = Field(validation_alias=_aliases("destination", "destination"))


class OrganizationPlan(PlanBaseModel):
    """Moves proposed for one directory.

    Attributes:
        directory_path: Directory the plan was built from; must exist at apply time.
        strategy: Organization strategy tag.
        moves: Ordered file moves.
    """

    directory_path: Path = Field(
        validation_alias=_aliases("directory_path", "directoryPath"),
        serialization_alias="directoryPath",
    )
    strategy: str = Field(default=BY_EXTENSION, validation_alias=_aliases("strategy", "strategy"))
    moves: List[FileMove] = Field(
        default_factory=list, validation_alias=_aliases("moves", "moves")
    )


class SummaryEntry(PlanBaseModel):
    """Number of planned moves into one destination folder."""

    destination_folder: Path = Field(
        validation_alias=_aliases("destination_folder", "destinationFolder"),
        serialization_alias="destinationFolder",
    )
    count: int


class PlanPreview(PlanBaseModel):
    """A plan together with its per-folder summary and the approval requirement."""

    plan: OrganizationPlan
    summary: List[SummaryEntry] = Field(default_factory=list)
    required_approval_phrase: str = Field(serialization_alias="requiredApprovalPhrase")


class ApplyResult(PlanBaseModel):
    """Authoritative record of the moves performed while applying a plan."""

    plan_directory_path: Path = Field(serialization_alias="planDirectoryPath")
    applied_moves: List[AppliedMove] = Field(
        default_factory=list, serialization_alias="appliedMoves"
    )

    @property
    def applied_count(self) -> int:
        return len(self.applied_moves)

    def to_document(self) -> dict[str, Any]:
        document = super().to_document()
        document["appliedCount"] = self.applied_count
        return document


def load_plan_document(document: str | bytes | Mapping[str, Any] | OrganizationPlan) -> OrganizationPlan:
    """Parse a plan from JSON text or a mapping, unwrapping a ``plan`` envelope.

    Args:
        document: Bare plan, envelope with a ``plan`` key, or an existing plan.

    Returns:
        OrganizationPlan: Validated plan.

    Raises:
        InvalidArgumentError: If the document is empty, not JSON, or not a plan.
    """
    if isinstance(document, OrganizationPlan):
        return document

    data: Any = document
    if isinstance(document, (str, bytes)):
        if not document.strip():
            raise InvalidArgumentError("A plan document is required.")
        try:
            data = json.loads(document)
        except json.JSONDecodeError as exc:
            raise InvalidArgumentError(f"Plan document is not valid JSON: {exc}") from exc

    if not isinstance(data, Mapping):
        raise InvalidArgumentError("Plan document must be a JSON object.")

    for key in ("plan", "Plan"):
        if isinstance(data.get(key), Mapping):
            data = data[key]
            break

    try:
        return OrganizationPlan.model_validate(data)
    except ValidationError as exc:
        raise InvalidArgumentError(f"Could not parse the plan document: {exc}") from exc


__all__ = [
    "BY_EXTENSION",
    "AppliedMove",
    "ApplyResult",
    "FileMove",
    "OrganizationPlan",
    "PlanPreview",
    "SummaryEntry",
    "load_plan_document",
]
