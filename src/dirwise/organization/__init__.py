"""Organization planning and application."""

from .buckets import BUCKETS, NO_EXTENSION, OTHER, bucket_for_extension
from .executor import (
    APPROVAL_PHRASE,
    MAX_COLLISION_SUFFIX,
    PlanExecutor,
    non_colliding_path,
    require_approval,
)
from .models import (
    BY_EXTENSION,
    AppliedMove,
    ApplyResult,
    FileMove,
    OrganizationPlan,
    PlanPreview,
    SummaryEntry,
    load_plan_document,
)
from .planner import OrganizationPlanner, is_hidden, summarize

__all__ = [
    "APPROVAL_PHRASE",
    "BUCKETS",
    "BY_EXTENSION",
    "MAX_COLLISION_SUFFIX",
    "NO_EXTENSION",
    "OTHER",
    "AppliedMove",
    "ApplyResult",
    "FileMove",
    "OrganizationPlan",
    "OrganizationPlanner",
    "PlanExecutor",
    "PlanPreview",
    "SummaryEntry",
    "bucket_for_extension",
    "is_hidden",
    "load_plan_document",
    "non_colliding_path",
    "require_approval",
    "summarize",
]
