# src/redline_kit/scope/filter.py

import logging
from dataclasses import dataclass, field, replace
from time import monotonic

from redline_kit.annotations.models import (
    AnnotationSet,
    Comment,
    Edit,
    Highlight,
    TrackChangeSet,
    WordLevelTrackChange,
)
from redline_kit.observability import names
from redline_kit.observability.base import MetricsHook, NoOpMetricsHook
from redline_kit.result import Err, Ok, Result

from .models import AnnotationScope, ScopeMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterSummary:
    comments: int = 0
    highlights: int = 0
    word_level_track_changes: int = 0
    deletions: int = 0
    insertions: int = 0
    full_sentence_deletions: int = 0
    full_sentence_insertions: int = 0
    structural_changes: int = 0

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


@dataclass(frozen=True)
class FilteredAnnotations:
    """The bundle handed to generation features."""

    comments: tuple[Comment, ...] = ()
    highlights: tuple[Highlight, ...] = ()
    track_changes: TrackChangeSet = field(default_factory=TrackChangeSet)

    @property
    def summary(self) -> FilterSummary:
        word_level = self.track_changes.word_level
        return FilterSummary(
            comments=len(self.comments),
            highlights=len(self.highlights),
            word_level_track_changes=len(word_level),
            deletions=sum(len(w.deleted) for w in word_level),
            insertions=sum(len(w.added) for w in word_level),
            full_sentence_deletions=len(self.track_changes.full_sentence_deletions),
            full_sentence_insertions=len(self.track_changes.full_sentence_insertions),
            structural_changes=len(self.track_changes.structural_changes),
        )

    def is_empty(self) -> bool:
        return self.summary.total == 0


@dataclass(frozen=True)
class NoAnnotationsFound:
    """Nothing left to send after filtering. A validation outcome, not a fault."""

    message: str = "No annotations match the selected scope"


class _WordLevelSelection:
    """Union of matched sub-items for one sentence across all ranges."""

    def __init__(self) -> None:
        self.deleted: set[tuple[str, int | None]] = set()
        self.added: set[tuple[str, int | None]] = set()

    def add(self, record: WordLevelTrackChange) -> None:
        self.deleted.update(e.key for e in record.deleted)
        self.added.update(e.key for e in record.added)


def _apply_type_toggles(
    annotations: AnnotationSet, scope: AnnotationScope
) -> AnnotationSet:
    types = scope.types
    return AnnotationSet(
        comments=annotations.comments if types.comments else (),
        highlights=annotations.highlights if types.highlights else (),
        track_changes=annotations.track_changes
        if types.track_changes
        else TrackChangeSet(),
    )


def _narrow(
    record: WordLevelTrackChange,
    selected: _WordLevelSelection | None,
    include: bool,
) -> WordLevelTrackChange | None:
    """Apply a range union to one sentence at sub-item granularity.

    Only the listed edits count as selected; a matched record without
    edits selects none of them.
    """
    if selected is None:
        return None if include else record

    def keep(edits: tuple[Edit, ...], keys: set) -> tuple[Edit, ...]:
        return tuple(e for e in edits if (e.key in keys) == include)

    narrowed = replace(
        record,
        deleted=keep(record.deleted, selected.deleted),
        added=keep(record.added, selected.added),
    )
    if narrowed.deleted or narrowed.added:
        return narrowed
    if not include and not record.edit_count:
        return record
    return None


def _keep(items: tuple, union: set, include: bool) -> tuple:
    return tuple(item for item in items if (item in union) == include)


def _filter_by_ranges(
    enabled: AnnotationSet, scope: AnnotationScope
) -> FilteredAnnotations:
    include = scope.mode is ScopeMode.INCLUDE_ONLY
    comments: set = set()
    highlights: set = set()
    deletions: set = set()
    insertions: set = set()
    structural: set = set()
    word_level: dict[tuple[str, str], _WordLevelSelection] = {}
    for selection_range in scope.ranges:
        matched = selection_range.matched_annotations
        comments.update(matched.comments)
        highlights.update(matched.highlights)
        deletions.update(matched.full_sentence_deletions)
        insertions.update(matched.full_sentence_insertions)
        structural.update(matched.structural_changes)
        for record in matched.word_level_track_changes:
            word_level.setdefault(record.key, _WordLevelSelection()).add(record)

    track_changes = enabled.track_changes
    narrowed = (
        _narrow(w, word_level.get(w.key), include) for w in track_changes.word_level
    )
    return FilteredAnnotations(
        comments=_keep(enabled.comments, comments, include),
        highlights=_keep(enabled.highlights, highlights, include),
        track_changes=TrackChangeSet(
            word_level=tuple(w for w in narrowed if w is not None),
            full_sentence_deletions=_keep(
                track_changes.full_sentence_deletions, deletions, include
            ),
            full_sentence_insertions=_keep(
                track_changes.full_sentence_insertions, insertions, include
            ),
            structural_changes=_keep(
                track_changes.structural_changes, structural, include
            ),
        ),
    )


def filter_annotations(
    annotations: AnnotationSet,
    scope: AnnotationScope,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> FilteredAnnotations:
    """Apply a scope's type toggles and range mode to an extraction.

    With no ranges, ``include-only`` keeps nothing while ``exclude`` keeps
    every enabled type.
    """
    start = monotonic()
    enabled = _apply_type_toggles(annotations, scope)
    if scope.mode is ScopeMode.ALL:
        filtered = FilteredAnnotations(
            comments=enabled.comments,
            highlights=enabled.highlights,
            track_changes=enabled.track_changes,
        )
    else:
        filtered = _filter_by_ranges(enabled, scope)

    elapsed_ms = 1000 * (monotonic() - start)
    metrics_hook.record_latency(
        names.SCOPE_FILTER_DURATION, elapsed_ms, labels={"mode": scope.mode.value}
    )
    logger.debug(
        "Filtered %d annotations to %d (mode=%s, ranges=%d)",
        annotations.total,
        filtered.summary.total,
        scope.mode.value,
        len(scope.ranges),
    )
    return filtered


def validate_annotations_exist(
    filtered: FilteredAnnotations,
) -> Result[FilteredAnnotations, NoAnnotationsFound]:
    if filtered.is_empty():
        return Err(NoAnnotationsFound())
    return Ok(filtered)
