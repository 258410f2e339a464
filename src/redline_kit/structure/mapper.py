# src/redline_kit/structure/mapper.py

import logging
import re
from dataclasses import dataclass

from .models import DocumentStructure

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class SectionCoverage:
    """How much of one section's own text a selection covers.

    Offsets are relative to the start of the section's own text.
    """

    section_number: str
    top_level_section: int | None
    start_in_section: int
    end_in_section: int
    section_length: int
    text: str

    @property
    def is_fully_covered(self) -> bool:
        return self.start_in_section == 0 and self.end_in_section == self.section_length

    @property
    def has_ellipsis_before(self) -> bool:
        return self.start_in_section > 0

    @property
    def has_ellipsis_after(self) -> bool:
        return self.end_in_section < self.section_length


def map_selection_to_sections(
    start: int,
    end: int,
    structure: DocumentStructure,
) -> list[SectionCoverage]:
    """Sections whose own text intersects ``[start, end)``, in document order.

    Intervals are half-open, so a selection starting exactly on a boundary
    belongs to the trailing section only. Separators between sections are
    never reported.
    """
    if end <= start:
        return []

    coverage: list[SectionCoverage] = []
    for node in structure.iter_nodes():
        if node.length == 0:
            continue
        if not (start < node.own_end_offset and end > node.start_offset):
            continue
        start_in_section = max(0, start - node.start_offset)
        end_in_section = min(node.length, end - node.start_offset)
        coverage.append(
            SectionCoverage(
                section_number=node.section_number,
                top_level_section=node.top_level_section,
                start_in_section=start_in_section,
                end_in_section=end_in_section,
                section_length=node.length,
                text=node.own_text[start_in_section:end_in_section],
            )
        )
    return coverage


def locate_text(
    selected_text: str,
    structure: DocumentStructure,
) -> tuple[int, int] | None:
    """Find free-form selected text in the combined document.

    Tries an exact match, then a case-insensitive one, then a match with
    all whitespace runs collapsed (paragraph separators included). Returns
    combined-document offsets of the first hit, or ``None``.
    """
    needle = selected_text.strip()
    if not needle:
        return None
    haystack = structure.combined_document

    index = haystack.find(needle)
    if index >= 0:
        return index, index + len(needle)

    index = haystack.lower().find(needle.lower())
    if index >= 0:
        return index, index + len(needle)

    normalized, positions = _normalize_with_positions(haystack)
    normalized_needle = _WHITESPACE.sub(" ", needle).lower()
    index = normalized.find(normalized_needle)
    if index >= 0:
        last = index + len(normalized_needle) - 1
        return positions[index], positions[last] + 1

    logger.debug("Selected text not found in combined document (%d chars)", len(needle))
    return None


def _normalize_with_positions(text: str) -> tuple[str, list[int]]:
    """Collapse whitespace runs to one space, keeping the original index of each char."""
    chars: list[str] = []
    positions: list[int] = []
    in_space = False
    for i, ch in enumerate(text):
        if ch.isspace():
            if in_space:
                continue
            in_space = True
            chars.append(" ")
        else:
            in_space = False
            chars.append(ch.lower())
        positions.append(i)
    return "".join(chars), positions
