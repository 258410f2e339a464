# src/redline_kit/structure/builder.py

import logging
from dataclasses import dataclass

from redline_kit.errors import StructuralConsistencyError

from .models import DocumentNode, DocumentStructure

logger = logging.getLogger(__name__)

RECITALS_SECTION = "recitals"


@dataclass(frozen=True)
class RawSection:
    """A section as produced by the document parser, before offsets exist."""

    section_number: str
    text: str
    additional_paragraphs: tuple[str, ...] = ()
    children: tuple["RawSection", ...] = ()


def build_document_structure(
    sections: list[RawSection] | tuple[RawSection, ...],
    *,
    recitals: str = "",
    separator: str = "\r",
) -> DocumentStructure:
    """Flatten parsed sections into a combined document and a node tree.

    A node's own text precedes its children. Consecutive non-empty own-text
    segments are joined by ``separator``, which belongs to no section.
    Recitals, when present, become a leading ``"recitals"`` node.
    """
    parts: list[str] = []
    position = 0

    def append(segment: str) -> int:
        nonlocal position
        if parts and separator:
            parts.append(separator)
            position += len(separator)
        start = position
        parts.append(segment)
        position += len(segment)
        return start

    def place(raw: RawSection) -> DocumentNode:
        if not raw.section_number:
            raise StructuralConsistencyError("Section with an empty section number")
        paragraphs = [raw.text, *raw.additional_paragraphs]
        own_text = separator.join(p for p in paragraphs if p.strip())

        start = append(own_text) if own_text else None
        children = tuple(place(child) for child in raw.children)
        if start is None:
            start = children[0].start_offset if children else position

        return DocumentNode(
            section_number=raw.section_number,
            text=raw.text,
            additional_paragraphs=tuple(raw.additional_paragraphs),
            own_text=own_text,
            children=children,
            start_offset=start,
            end_offset=position,
        )

    nodes: list[DocumentNode] = []
    if recitals.strip():
        nodes.append(place(RawSection(section_number=RECITALS_SECTION, text=recitals)))
    nodes.extend(place(section) for section in sections)

    structure = DocumentStructure(
        nodes=tuple(nodes), combined_document="".join(parts), separator=separator
    )
    logger.debug(
        "Built document structure: %d sections, %d characters",
        len(structure),
        len(structure.combined_document),
    )
    return structure
