# src/redline_kit/reconciliation/models.py

from pydantic import BaseModel, Field

from redline_kit.annotations.models import (
    Comment,
    FullSentenceDeletion,
    FullSentenceInsertion,
    Highlight,
    StructuralChange,
    WordLevelTrackChange,
)
from redline_kit.scope.models import AnnotationScope


class CategoryCounts(BaseModel):
    comments: int = 0
    highlights: int = 0
    word_level_track_changes: int = 0
    full_sentence_deletions: int = 0
    full_sentence_insertions: int = 0
    structural_changes: int = 0

    class Config:
        extra = "forbid"

    @property
    def total(self) -> int:
        return (
            self.comments
            + self.highlights
            + self.word_level_track_changes
            + self.full_sentence_deletions
            + self.full_sentence_insertions
            + self.structural_changes
        )


class RemovedAnnotations(BaseModel):
    """Items that did not survive, kept whole for user-facing messaging."""

    comments: list[Comment] = Field(default_factory=list)
    highlights: list[Highlight] = Field(default_factory=list)
    word_level_track_changes: list[WordLevelTrackChange] = Field(default_factory=list)
    full_sentence_deletions: list[FullSentenceDeletion] = Field(default_factory=list)
    full_sentence_insertions: list[FullSentenceInsertion] = Field(default_factory=list)
    structural_changes: list[StructuralChange] = Field(default_factory=list)

    class Config:
        extra = "forbid"

    def counts(self) -> CategoryCounts:
        return CategoryCounts(
            comments=len(self.comments),
            highlights=len(self.highlights),
            word_level_track_changes=len(self.word_level_track_changes),
            full_sentence_deletions=len(self.full_sentence_deletions),
            full_sentence_insertions=len(self.full_sentence_insertions),
            structural_changes=len(self.structural_changes),
        )


class ReconciliationSummary(BaseModel):
    preserved: CategoryCounts = Field(default_factory=CategoryCounts)
    removed: RemovedAnnotations = Field(default_factory=RemovedAnnotations)
    added: CategoryCounts = Field(default_factory=CategoryCounts)
    removed_range_ids: list[str] = Field(default_factory=list)

    class Config:
        extra = "forbid"

    @property
    def has_removals(self) -> bool:
        return self.removed.counts().total > 0 or bool(self.removed_range_ids)


class ReconciliationResult(BaseModel):
    reconciled_scope: AnnotationScope
    summary: ReconciliationSummary

    class Config:
        extra = "forbid"
