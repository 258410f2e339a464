from .base import (
    AnnotationExtractor,
    ClassificationBackend,
    DocumentHost,
    ParsedStructure,
    PreparedAnnotations,
)
from .cache import AnnotationCache, RefreshWithReconciliationResult
from .config import CacheConfig, ExtractionOptions
from .orchestrator import (
    OrchestrationResult,
    OrchestrationSummary,
    extract_and_filter_annotations,
)

__all__ = [
    "AnnotationCache",
    "AnnotationExtractor",
    "CacheConfig",
    "ClassificationBackend",
    "DocumentHost",
    "ExtractionOptions",
    "OrchestrationResult",
    "OrchestrationSummary",
    "ParsedStructure",
    "PreparedAnnotations",
    "RefreshWithReconciliationResult",
    "extract_and_filter_annotations",
]
