from .engine import reconcile, scope_has_selections
from .models import (
    CategoryCounts,
    ReconciliationResult,
    ReconciliationSummary,
    RemovedAnnotations,
)

__all__ = [
    "CategoryCounts",
    "ReconciliationResult",
    "ReconciliationSummary",
    "RemovedAnnotations",
    "reconcile",
    "scope_has_selections",
]
