# src/redline_kit/annotations/coordinates.py

"""Translation between coordinate spaces.

There are three: sentence-relative (``Edit`` offsets), section-relative
(every other annotation offset) and combined-document offsets. Every
boundary crossing goes through exactly one function here; callers never
add base offsets themselves. Functions return ``None`` when a position
cannot be placed in the current structure.
"""

import logging
from typing import assert_never

from redline_kit.structure.models import DocumentStructure

from .models import (
    Annotation,
    Comment,
    Edit,
    FullSentenceDeletion,
    FullSentenceInsertion,
    Highlight,
    StructuralChange,
    WordLevelTrackChange,
)

logger = logging.getLogger(__name__)

Span = tuple[int, int]


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Non-zero overlap of two half-open intervals."""
    return a_start < b_end and a_end > b_start


def section_to_combined(
    section_number: str, offset: int, structure: DocumentStructure
) -> int | None:
    start = structure.section_start(section_number)
    if start is None:
        return None
    return start + offset


def span_to_combined(
    section_number: str, start: int, end: int, structure: DocumentStructure
) -> Span | None:
    base = structure.section_start(section_number)
    if base is None:
        return None
    return base + start, base + end


def _locate_sentence(
    record: WordLevelTrackChange, structure: DocumentStructure
) -> tuple[int, int] | None:
    """(offset in section, length) of the sentence found by text search."""
    node = structure.find(record.section_number)
    if node is None:
        return None
    for candidate in (record.original_sentence, record.amended_sentence):
        if not candidate:
            continue
        index = node.own_text.find(candidate)
        if index >= 0:
            return index, len(candidate)
    return None


def sentence_to_section(
    offset: int, record: WordLevelTrackChange, structure: DocumentStructure
) -> tuple[str, int] | None:
    """Map a sentence-relative offset to ``(section_number, section offset)``.

    Uses the record's sentence fragments when present, which lets a sentence
    span several sections. Without fragments the sentence is located by
    searching its text in its own section.
    """
    fragments = record.sentence_fragments
    if fragments:
        for i, fragment in enumerate(fragments):
            fragment_end = fragment.sentence_start + fragment.length
            is_last = i == len(fragments) - 1
            if fragment.sentence_start <= offset < fragment_end or (
                is_last and offset == fragment_end
            ):
                return (
                    fragment.section_number,
                    fragment.section_start + offset - fragment.sentence_start,
                )
        return None

    located = _locate_sentence(record, structure)
    if located is None:
        return None
    return record.section_number, located[0] + offset


def sentence_to_combined(
    offset: int, record: WordLevelTrackChange, structure: DocumentStructure
) -> int | None:
    section = sentence_to_section(offset, record, structure)
    if section is None:
        return None
    return section_to_combined(section[0], section[1], structure)


def sentence_span(
    record: WordLevelTrackChange, structure: DocumentStructure
) -> Span | None:
    """Combined-document span of the whole sentence."""
    fragments = record.sentence_fragments
    if fragments:
        first, last = fragments[0], fragments[-1]
        start = section_to_combined(first.section_number, first.section_start, structure)
        end = section_to_combined(last.section_number, last.section_end, structure)
        if start is None or end is None or end < start:
            return None
        return start, end

    located = _locate_sentence(record, structure)
    if located is None:
        return None
    offset, length = located
    start = section_to_combined(record.section_number, offset, structure)
    if start is None:
        return None
    return start, start + length


def edit_span(
    edit: Edit, record: WordLevelTrackChange, structure: DocumentStructure
) -> Span | None:
    """Combined-document span of one deleted/added item.

    An edit without offsets is taken to cover its whole sentence.
    """
    if edit.start_offset is None or edit.end_offset is None:
        return sentence_span(record, structure)
    start = sentence_to_combined(edit.start_offset, record, structure)
    if start is None:
        return None
    end = sentence_to_combined(edit.end_offset, record, structure)
    if end is None or end < start:
        end = start + (edit.end_offset - edit.start_offset)
    return start, end


def _text_span(
    section_number: str,
    text: str,
    start: int | None,
    end: int | None,
    structure: DocumentStructure,
) -> Span | None:
    if start is not None and end is not None:
        return span_to_combined(section_number, start, end, structure)
    node = structure.find(section_number)
    if node is None or not text:
        return None
    index = node.own_text.find(text)
    if index < 0:
        return None
    return node.start_offset + index, node.start_offset + index + len(text)


def annotation_span(
    annotation: Annotation, structure: DocumentStructure
) -> Span | None:
    """Combined-document span of any annotation record, or ``None`` if unplaced."""
    match annotation:
        case Comment() | Highlight():
            return span_to_combined(
                annotation.section_number,
                annotation.start_offset,
                annotation.end_offset,
                structure,
            )
        case WordLevelTrackChange():
            return sentence_span(annotation, structure)
        case FullSentenceDeletion() | FullSentenceInsertion():
            return _text_span(
                annotation.section_number,
                annotation.text,
                annotation.start_offset,
                annotation.end_offset,
                structure,
            )
        case StructuralChange():
            node = structure.find(annotation.section_number)
            if node is None:
                return None
            return node.start_offset, node.end_offset
        case _:
            assert_never(annotation)
