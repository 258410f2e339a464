from .coordinates import (
    annotation_span,
    edit_span,
    ranges_overlap,
    section_to_combined,
    sentence_span,
    sentence_to_combined,
    sentence_to_section,
    span_to_combined,
)
from .models import (
    Annotation,
    AnnotationKind,
    AnnotationSet,
    Comment,
    Edit,
    FullSentenceDeletion,
    FullSentenceInsertion,
    Highlight,
    SentenceFragment,
    StructuralChange,
    TrackChangeSet,
    WordLevelTrackChange,
)

__all__ = [
    "Annotation",
    "AnnotationKind",
    "AnnotationSet",
    "Comment",
    "Edit",
    "FullSentenceDeletion",
    "FullSentenceInsertion",
    "Highlight",
    "SentenceFragment",
    "StructuralChange",
    "TrackChangeSet",
    "WordLevelTrackChange",
    "annotation_span",
    "edit_span",
    "ranges_overlap",
    "section_to_combined",
    "sentence_span",
    "sentence_to_combined",
    "sentence_to_section",
    "span_to_combined",
]
