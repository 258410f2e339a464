# src/redline_kit/reconciliation/engine.py

"""Re-derive a scope after the document's annotations were re-extracted.

Annotations have no durable identity across extractions, so survivors are
found by content:

* comments, highlights, full-sentence changes and structural changes must
  match a new record exactly, offsets included;
* a sentence-level track change survives when the new record with the same
  sentence id and section still contains every deleted/added item that was
  selected (by text and start offset). New edits in the sentence do not
  invalidate the selection, and the range picks up the new record.

Losing items is an expected outcome of editing: it is reported in the
summary and never raised.
"""

import logging
from collections.abc import Hashable, Iterable
from time import monotonic
from typing import TypeVar

from redline_kit.annotations.models import AnnotationSet, WordLevelTrackChange
from redline_kit.observability import names
from redline_kit.observability.base import MetricsHook, NoOpMetricsHook
from redline_kit.scope.models import (
    AnnotationPreview,
    AnnotationScope,
    ScopeMode,
    SectionDisplayInfo,
    SelectionRange,
)

from .models import (
    CategoryCounts,
    ReconciliationResult,
    ReconciliationSummary,
    RemovedAnnotations,
)

logger = logging.getLogger(__name__)

H = TypeVar("H", bound=Hashable)


class _NewSnapshot:
    """Lookup tables over the freshly extracted annotations."""

    def __init__(self, annotations: AnnotationSet) -> None:
        track_changes = annotations.track_changes
        self.comments = set(annotations.comments)
        self.highlights = set(annotations.highlights)
        self.deletions = set(track_changes.full_sentence_deletions)
        self.insertions = set(track_changes.full_sentence_insertions)
        self.structural = set(track_changes.structural_changes)
        self.word_level: dict[tuple[str, str], WordLevelTrackChange] = {
            record.key: record for record in track_changes.word_level
        }

    def match_sentence(
        self, old: WordLevelTrackChange
    ) -> WordLevelTrackChange | None:
        """The new sentence record if it still holds every old sub-item."""
        new = self.word_level.get(old.key)
        if new is None:
            return None
        deleted = {edit.key for edit in new.deleted}
        added = {edit.key for edit in new.added}
        if all(edit.key in deleted for edit in old.deleted) and all(
            edit.key in added for edit in old.added
        ):
            return new
        return None


def _split(items: Iterable[H], survivors: set[H]) -> tuple[list[H], list[H]]:
    kept, lost = [], []
    for item in items:
        (kept if item in survivors else lost).append(item)
    return kept, lost


def _reconcile_display_info(
    info: SectionDisplayInfo,
    snapshot: _NewSnapshot,
    sentences: dict[tuple[str, str], WordLevelTrackChange],
) -> SectionDisplayInfo:
    return info.model_copy(
        update={
            "comments": [c for c in info.comments if c in snapshot.comments],
            "highlights": [h for h in info.highlights if h in snapshot.highlights],
            "word_level_track_changes": [
                sentences[w.key] for w in info.word_level_track_changes if w.key in sentences
            ],
            "full_sentence_deletions": [
                d for d in info.full_sentence_deletions if d in snapshot.deletions
            ],
            "full_sentence_insertions": [
                i for i in info.full_sentence_insertions if i in snapshot.insertions
            ],
            "structural_changes": [
                s for s in info.structural_changes if s in snapshot.structural
            ],
        }
    )


def _reconcile_range(
    selection_range: SelectionRange,
    snapshot: _NewSnapshot,
    removed: RemovedAnnotations,
) -> SelectionRange | None:
    matched = selection_range.matched_annotations

    comments, lost = _split(matched.comments, snapshot.comments)
    removed.comments.extend(lost)
    highlights, lost = _split(matched.highlights, snapshot.highlights)
    removed.highlights.extend(lost)
    deletions, lost = _split(matched.full_sentence_deletions, snapshot.deletions)
    removed.full_sentence_deletions.extend(lost)
    insertions, lost = _split(matched.full_sentence_insertions, snapshot.insertions)
    removed.full_sentence_insertions.extend(lost)
    structural, lost = _split(matched.structural_changes, snapshot.structural)
    removed.structural_changes.extend(lost)

    sentences: dict[tuple[str, str], WordLevelTrackChange] = {}
    for old in matched.word_level_track_changes:
        new = snapshot.match_sentence(old)
        if new is None:
            logger.debug(
                "Sentence %s in section %s no longer holds its selected edits",
                old.sentence_id,
                old.section_number,
            )
            removed.word_level_track_changes.append(old)
        else:
            sentences[old.key] = new

    preview = AnnotationPreview(
        comments=comments,
        highlights=highlights,
        word_level_track_changes=list(sentences.values()),
        full_sentence_deletions=deletions,
        full_sentence_insertions=insertions,
        structural_changes=structural,
        top_level_sections=list(matched.top_level_sections),
        section_display_info=[
            _reconcile_display_info(info, snapshot, sentences)
            for info in matched.section_display_info
        ],
    )
    if preview.is_empty():
        return None
    return selection_range.model_copy(
        update={"matched_annotations": preview, "annotation_counts": preview.counts()}
    )


def _preserved_counts(ranges: list[SelectionRange]) -> CategoryCounts:
    counts = CategoryCounts()
    for selection_range in ranges:
        matched = selection_range.matched_annotations
        counts.comments += len(matched.comments)
        counts.highlights += len(matched.highlights)
        counts.word_level_track_changes += len(matched.word_level_track_changes)
        counts.full_sentence_deletions += len(matched.full_sentence_deletions)
        counts.full_sentence_insertions += len(matched.full_sentence_insertions)
        counts.structural_changes += len(matched.structural_changes)
    return counts


def _added_counts(
    old_annotations: AnnotationSet | None,
    new_annotations: AnnotationSet,
    preserved: CategoryCounts,
) -> CategoryCounts:
    new_tc = new_annotations.track_changes
    if old_annotations is None:
        return CategoryCounts(
            comments=max(0, len(new_annotations.comments) - preserved.comments),
            highlights=max(0, len(new_annotations.highlights) - preserved.highlights),
            word_level_track_changes=max(
                0, len(new_tc.word_level) - preserved.word_level_track_changes
            ),
            full_sentence_deletions=max(
                0, len(new_tc.full_sentence_deletions) - preserved.full_sentence_deletions
            ),
            full_sentence_insertions=max(
                0,
                len(new_tc.full_sentence_insertions) - preserved.full_sentence_insertions,
            ),
            structural_changes=max(
                0, len(new_tc.structural_changes) - preserved.structural_changes
            ),
        )

    old_tc = old_annotations.track_changes
    old_sentences = {record.key for record in old_tc.word_level}

    def count_new(new_items, old_items) -> int:
        old_set = set(old_items)
        return sum(1 for item in new_items if item not in old_set)

    return CategoryCounts(
        comments=count_new(new_annotations.comments, old_annotations.comments),
        highlights=count_new(new_annotations.highlights, old_annotations.highlights),
        word_level_track_changes=sum(
            1 for record in new_tc.word_level if record.key not in old_sentences
        ),
        full_sentence_deletions=count_new(
            new_tc.full_sentence_deletions, old_tc.full_sentence_deletions
        ),
        full_sentence_insertions=count_new(
            new_tc.full_sentence_insertions, old_tc.full_sentence_insertions
        ),
        structural_changes=count_new(
            new_tc.structural_changes, old_tc.structural_changes
        ),
    )


def reconcile(
    old_scope: AnnotationScope,
    old_annotations: AnnotationSet | None,
    new_annotations: AnnotationSet,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> ReconciliationResult:
    """Carry ``old_scope`` over to ``new_annotations``.

    ``old_annotations`` is the snapshot the scope was built from; it only
    feeds the ``added`` counts and may be ``None`` when unknown. Ranges that
    lose every match are dropped. Mode and type toggles are kept as they are.
    """
    start = monotonic()
    snapshot = _NewSnapshot(new_annotations)
    removed = RemovedAnnotations()

    ranges: list[SelectionRange] = []
    removed_range_ids: list[str] = []
    for selection_range in old_scope.ranges:
        reconciled = _reconcile_range(selection_range, snapshot, removed)
        if reconciled is None:
            logger.info(
                "Dropping selection range '%s': none of its annotations survived",
                selection_range.label,
            )
            removed_range_ids.append(selection_range.id)
        else:
            ranges.append(reconciled)

    preserved = _preserved_counts(ranges)
    summary = ReconciliationSummary(
        preserved=preserved,
        removed=removed,
        added=_added_counts(old_annotations, new_annotations, preserved),
        removed_range_ids=removed_range_ids,
    )
    result = ReconciliationResult(
        reconciled_scope=old_scope.model_copy(update={"ranges": ranges}),
        summary=summary,
    )

    removed_total = removed.counts().total
    elapsed_ms = 1000 * (monotonic() - start)
    metrics_hook.record_latency(names.RECONCILIATION_DURATION, elapsed_ms)
    metrics_hook.increment(names.RECONCILIATION_PRESERVED_TOTAL, value=preserved.total)
    metrics_hook.increment(names.RECONCILIATION_REMOVED_TOTAL, value=removed_total)
    metrics_hook.increment(
        names.RECONCILIATION_RANGES_DROPPED, value=len(removed_range_ids)
    )
    logger.info(
        "Reconciled %d ranges: %d kept, %d dropped, %d annotations preserved, %d removed",
        len(old_scope.ranges),
        len(ranges),
        len(removed_range_ids),
        preserved.total,
        removed_total,
    )
    return result


def scope_has_selections(scope: AnnotationScope) -> bool:
    """True when the scope depends on ranges that reconciliation could affect."""
    if scope.mode is ScopeMode.ALL:
        return False
    return any(not r.matched_annotations.is_empty() for r in scope.ranges)
