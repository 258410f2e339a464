# src/redline_kit/scope/models.py

"""Scope data contracts.

These cross the boundary to callers, who persist them however they like,
so they are pydantic models: ``scope.model_dump(mode="json")`` and
``AnnotationScope.model_validate(data)`` round-trip without loss.
"""

from enum import Enum

from pydantic import BaseModel, Field

from redline_kit.annotations.models import (
    Annotation,
    Comment,
    FullSentenceDeletion,
    FullSentenceInsertion,
    Highlight,
    StructuralChange,
    WordLevelTrackChange,
)


class ScopeMode(str, Enum):
    ALL = "all"
    INCLUDE_ONLY = "include-only"
    EXCLUDE = "exclude"


class ScopeTypes(BaseModel):
    comments: bool = True
    track_changes: bool = True
    highlights: bool = True

    class Config:
        extra = "forbid"


class AnnotationCounts(BaseModel):
    comments: int = 0
    highlights: int = 0
    track_changes: int = 0

    class Config:
        extra = "forbid"

    @property
    def total(self) -> int:
        return self.comments + self.highlights + self.track_changes


class SectionDisplayInfo(BaseModel):
    """One covered section of a selection, as shown to the reviewer."""

    section_number: str
    top_level_section: int | None = None
    text: str
    start_in_section: int
    end_in_section: int
    section_length: int
    has_ellipsis_before: bool = False
    has_ellipsis_after: bool = False
    comments: list[Comment] = Field(default_factory=list)
    highlights: list[Highlight] = Field(default_factory=list)
    word_level_track_changes: list[WordLevelTrackChange] = Field(default_factory=list)
    full_sentence_deletions: list[FullSentenceDeletion] = Field(default_factory=list)
    full_sentence_insertions: list[FullSentenceInsertion] = Field(default_factory=list)
    structural_changes: list[StructuralChange] = Field(default_factory=list)

    class Config:
        extra = "forbid"


class AnnotationPreview(BaseModel):
    """Annotations matched by a selection, plus section metadata."""

    comments: list[Comment] = Field(default_factory=list)
    highlights: list[Highlight] = Field(default_factory=list)
    word_level_track_changes: list[WordLevelTrackChange] = Field(default_factory=list)
    full_sentence_deletions: list[FullSentenceDeletion] = Field(default_factory=list)
    full_sentence_insertions: list[FullSentenceInsertion] = Field(default_factory=list)
    structural_changes: list[StructuralChange] = Field(default_factory=list)
    top_level_sections: list[int] = Field(default_factory=list)
    section_display_info: list[SectionDisplayInfo] = Field(default_factory=list)

    class Config:
        extra = "forbid"

    def is_empty(self) -> bool:
        return not any(
            (
                self.comments,
                self.highlights,
                self.word_level_track_changes,
                self.full_sentence_deletions,
                self.full_sentence_insertions,
                self.structural_changes,
            )
        )

    def counts(self) -> AnnotationCounts:
        return AnnotationCounts(
            comments=len(self.comments),
            highlights=len(self.highlights),
            track_changes=len(self.word_level_track_changes)
            + len(self.full_sentence_deletions)
            + len(self.full_sentence_insertions)
            + len(self.structural_changes),
        )

    def annotations(self) -> list[Annotation]:
        return [
            *self.comments,
            *self.highlights,
            *self.word_level_track_changes,
            *self.full_sentence_deletions,
            *self.full_sentence_insertions,
            *self.structural_changes,
        ]


class SelectionRange(BaseModel):
    """A named entry in a scope: one user selection and what it matched."""

    id: str
    label: str
    selected_text: str
    top_level_sections: list[int] = Field(default_factory=list)
    section_numbers: list[str] | None = None
    annotation_counts: AnnotationCounts = Field(default_factory=AnnotationCounts)
    matched_annotations: AnnotationPreview = Field(default_factory=AnnotationPreview)

    class Config:
        extra = "forbid"


class AnnotationScope(BaseModel):
    mode: ScopeMode = ScopeMode.ALL
    ranges: list[SelectionRange] = Field(default_factory=list)
    types: ScopeTypes = Field(default_factory=ScopeTypes)

    class Config:
        extra = "forbid"

    @classmethod
    def default(cls) -> "AnnotationScope":
        """All annotations of every type."""
        return cls()

    @property
    def is_configured(self) -> bool:
        """Range-based modes need at least one range to mean anything."""
        if self.mode is ScopeMode.ALL:
            return True
        return bool(self.ranges)
