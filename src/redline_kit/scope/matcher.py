# src/redline_kit/scope/matcher.py

import logging
import uuid
from dataclasses import dataclass, replace
from time import monotonic

from redline_kit.annotations.coordinates import (
    annotation_span,
    edit_span,
    ranges_overlap,
)
from redline_kit.annotations.models import AnnotationSet, Edit, WordLevelTrackChange
from redline_kit.observability import names
from redline_kit.observability.base import MetricsHook, NoOpMetricsHook
from redline_kit.structure.mapper import SectionCoverage, map_selection_to_sections
from redline_kit.structure.models import DocumentStructure, top_level_section

from .models import AnnotationPreview, SectionDisplayInfo, SelectionRange

logger = logging.getLogger(__name__)

_LABEL_TEXT_LIMIT = 40


@dataclass(frozen=True)
class Selection:
    """A half-open interval of the combined document."""

    start: int
    end: int
    text: str = ""

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid selection [{self.start}, {self.end})")

    @property
    def is_empty(self) -> bool:
        return self.end == self.start


def _clip(selection: Selection, structure: DocumentStructure) -> tuple[int, int] | None:
    end = min(selection.end, len(structure.combined_document))
    if selection.start >= end:
        return None
    return selection.start, end


def _edits_in(
    edits: tuple[Edit, ...],
    record: WordLevelTrackChange,
    start: int,
    end: int,
    structure: DocumentStructure,
) -> tuple[Edit, ...]:
    selected = []
    for edit in edits:
        span = edit_span(edit, record, structure)
        if span is not None and ranges_overlap(span[0], span[1], start, end):
            selected.append(edit)
    return tuple(selected)


def _sorted_top_levels(section_numbers: list[str]) -> list[int]:
    levels = {top_level_section(number) for number in section_numbers}
    return sorted(level for level in levels if level is not None)


def find_annotations_in_selection(
    selection: Selection | None,
    annotations: AnnotationSet,
    structure: DocumentStructure,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> AnnotationPreview:
    """Annotations overlapping ``selection``; ``None`` selects everything.

    Overlap, not containment, decides a match. Sentence records are narrowed
    to the deleted/added items that fall inside the selection; a sentence
    with no edit inside the selection is not matched. A selection outside the document yields an
    empty preview.
    """
    if selection is None:
        preview = AnnotationPreview(
            comments=list(annotations.comments),
            highlights=list(annotations.highlights),
            word_level_track_changes=list(annotations.track_changes.word_level),
            full_sentence_deletions=list(
                annotations.track_changes.full_sentence_deletions
            ),
            full_sentence_insertions=list(
                annotations.track_changes.full_sentence_insertions
            ),
            structural_changes=list(annotations.track_changes.structural_changes),
        )
        preview.top_level_sections = _sorted_top_levels(
            [a.section_number for a in preview.annotations()]
        )
        return preview

    clipped = _clip(selection, structure)
    if clipped is None:
        logger.debug(
            "Selection [%d, %d) lies outside the document", selection.start, selection.end
        )
        return AnnotationPreview()
    start, end = clipped
    timer = monotonic()

    def overlaps(annotation) -> bool:
        span = annotation_span(annotation, structure)
        return span is not None and ranges_overlap(span[0], span[1], start, end)

    track_changes = annotations.track_changes
    word_level: list[WordLevelTrackChange] = []
    for record in track_changes.word_level:
        if not overlaps(record):
            continue
        deleted = _edits_in(record.deleted, record, start, end, structure)
        added = _edits_in(record.added, record, start, end, structure)
        if not deleted and not added:
            continue
        word_level.append(replace(record, deleted=deleted, added=added))

    preview = AnnotationPreview(
        comments=[c for c in annotations.comments if overlaps(c)],
        highlights=[h for h in annotations.highlights if overlaps(h)],
        word_level_track_changes=word_level,
        full_sentence_deletions=[
            d for d in track_changes.full_sentence_deletions if overlaps(d)
        ],
        full_sentence_insertions=[
            i for i in track_changes.full_sentence_insertions if overlaps(i)
        ],
        structural_changes=[
            s for s in track_changes.structural_changes if overlaps(s)
        ],
    )
    preview.top_level_sections = _sorted_top_levels(
        [a.section_number for a in preview.annotations()]
    )

    elapsed_ms = 1000 * (monotonic() - timer)
    metrics_hook.record_latency(names.SELECTION_MATCH_DURATION, elapsed_ms)
    metrics_hook.increment(
        names.SELECTION_MATCHES_TOTAL, value=len(preview.annotations())
    )
    return preview


def build_section_display_info(
    coverage: list[SectionCoverage],
    preview: AnnotationPreview,
) -> list[SectionDisplayInfo]:
    """Per covered section, the selected slice and the matches owned by it."""
    info = []
    for section in coverage:
        number = section.section_number
        info.append(
            SectionDisplayInfo(
                section_number=number,
                top_level_section=section.top_level_section,
                text=section.text,
                start_in_section=section.start_in_section,
                end_in_section=section.end_in_section,
                section_length=section.section_length,
                has_ellipsis_before=section.has_ellipsis_before,
                has_ellipsis_after=section.has_ellipsis_after,
                comments=[c for c in preview.comments if c.section_number == number],
                highlights=[h for h in preview.highlights if h.section_number == number],
                word_level_track_changes=[
                    w
                    for w in preview.word_level_track_changes
                    if w.section_number == number
                ],
                full_sentence_deletions=[
                    d
                    for d in preview.full_sentence_deletions
                    if d.section_number == number
                ],
                full_sentence_insertions=[
                    i
                    for i in preview.full_sentence_insertions
                    if i.section_number == number
                ],
                structural_changes=[
                    s for s in preview.structural_changes if s.section_number == number
                ],
            )
        )
    return info


def _label(top_levels: list[int], selected_text: str) -> str:
    if len(top_levels) == 1:
        return f"Section {top_levels[0]}"
    if top_levels:
        return "Sections " + ", ".join(str(level) for level in top_levels)
    text = " ".join(selected_text.split())
    if not text:
        return "Selection"
    if len(text) > _LABEL_TEXT_LIMIT:
        return text[:_LABEL_TEXT_LIMIT].rstrip() + "..."
    return text


def create_selection_range(
    selection: Selection,
    annotations: AnnotationSet,
    structure: DocumentStructure,
    *,
    label: str | None = None,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> SelectionRange:
    """Turn a user selection into a named scope entry."""
    preview = find_annotations_in_selection(
        selection, annotations, structure, metrics_hook=metrics_hook
    )
    coverage = map_selection_to_sections(selection.start, selection.end, structure)
    preview.section_display_info = build_section_display_info(coverage, preview)

    section_numbers = [c.section_number for c in coverage]
    top_levels = sorted(
        set(preview.top_level_sections)
        | {c.top_level_section for c in coverage if c.top_level_section is not None}
    )
    selected_text = selection.text or structure.combined_document[
        selection.start : selection.end
    ]
    return SelectionRange(
        id=uuid.uuid4().hex,
        label=label or _label(top_levels, selected_text),
        selected_text=selected_text,
        top_level_sections=top_levels,
        section_numbers=section_numbers,
        annotation_counts=preview.counts(),
        matched_annotations=preview,
    )
