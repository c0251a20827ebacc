"""Executor that applies approved organization plans."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Mapping

from dirwise.errors import NotFoundError, ResourceExhaustedError, UnauthorizedError

from .models import AppliedMove, ApplyResult, OrganizationPlan, load_plan_document

LOGGER = logging.getLogger(__name__)

APPROVAL_PHRASE = "I_APPROVE_FILE_CHANGES"
MAX_COLLISION_SUFFIX = 9_999


def require_approval(approval: str | None) -> None:
    """Raise unless ``approval`` is exactly the approval phrase.

    Raises:
        UnauthorizedError: On any mismatch, including case or whitespace differences.
    """
    if approval != APPROVAL_PHRASE:
        raise UnauthorizedError(
            f"Refusing to modify files. The approval phrase must be exactly '{APPROVAL_PHRASE}'."
        )


def non_colliding_path(destination: Path) -> Path:
    """Return ``destination`` or the first free ``name (n).ext`` variant beside it.

    Raises:
        ResourceExhaustedError: If every candidate up to ``name (9999).ext`` is taken.
    """
    if not destination.exists():
        return destination

    stem, suffix = destination.stem, destination.suffix
    for counter in range(1, MAX_COLLISION_SUFFIX + 1):
        candidate = destination.with_name(f"{stem} ({counter}){suffix}")
        if not candidate.exists():
            return candidate

    raise ResourceExhaustedError(
        f"Could not find a non-colliding destination filename for {destination}"
    )


class PlanExecutor:
    """Apply plans produced by the organization planner."""

    def apply(
        self,
        plan: OrganizationPlan | Mapping[str, Any] | str,
        approval: str | None,
    ) -> ApplyResult:
        """Move each planned file into its bucket folder.

        The approval phrase and the plan directory are checked once up front.
        Moves whose source has disappeared since planning are skipped. A failure
        partway through leaves earlier moves in place.

        Args:
            plan: Plan model, or a JSON document / mapping, optionally wrapped in
                an envelope with a ``plan`` key.
            approval: Must equal ``APPROVAL_PHRASE`` exactly.

        Returns:
            ApplyResult: Moves actually performed, with final destinations.

        Raises:
            UnauthorizedError: If the approval phrase does not match.
            InvalidArgumentError: If the plan document cannot be parsed.
            NotFoundError: If the plan directory no longer exists.
            ResourceExhaustedError: If no collision-free destination is available.
        """
        require_approval(approval)
        parsed = load_plan_document(plan)

        if not parsed.directory_path.is_dir():
            raise NotFoundError(f"Directory not found: {parsed.directory_path}")

        applied: list[AppliedMove] = []
        for move in parsed.moves:
            if not self._source_present(move.source):
                LOGGER.debug("Skipping %s; source no longer exists", move.source)
                continue

            move.destination.parent.mkdir(parents=True, exist_ok=True)
            final_destination = non_colliding_path(move.destination)
            shutil.move(str(move.source), str(final_destination))
            LOGGER.info("Moved %s -> %s", move.source, final_destination)
            applied.append(AppliedMove(source=move.source, destination=final_destination))

        return ApplyResult(plan_directory_path=parsed.directory_path, applied_moves=applied)

    def _source_present(self, source: Path) -> bool:
        try:
            return source.is_file()
        except OSError as exc:
            LOGGER.debug("Cannot check %s: %s", source, exc)
            return False


__all__ = ["APPROVAL_PHRASE", "MAX_COLLISION_SUFFIX", "PlanExecutor", "non_colliding_path", "require_approval"]
