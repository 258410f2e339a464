from .filter import (
    FilteredAnnotations,
    FilterSummary,
    NoAnnotationsFound,
    filter_annotations,
    validate_annotations_exist,
)
from .matcher import (
    Selection,
    build_section_display_info,
    create_selection_range,
    find_annotations_in_selection,
)
from .models import (
    AnnotationCounts,
    AnnotationPreview,
    AnnotationScope,
    ScopeMode,
    ScopeTypes,
    SectionDisplayInfo,
    SelectionRange,
)

__all__ = [
    "AnnotationCounts",
    "AnnotationPreview",
    "AnnotationScope",
    "FilterSummary",
    "FilteredAnnotations",
    "NoAnnotationsFound",
    "ScopeMode",
    "ScopeTypes",
    "SectionDisplayInfo",
    "Selection",
    "SelectionRange",
    "build_section_display_info",
    "create_selection_range",
    "filter_annotations",
    "find_annotations_in_selection",
    "validate_annotations_exist",
]
