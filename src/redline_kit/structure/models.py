# src/redline_kit/structure/models.py

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from redline_kit.errors import StructuralConsistencyError

_LEADING_INT = re.compile(r"^\s*(\d+)")


def top_level_section(section_number: str | None) -> int | None:
    """Leading integer component of a section number.

    ``"8.2.2.1"`` -> ``8``. Recitals, ``"unknown"`` and empty numbers have no
    top-level section.
    """
    if not section_number:
        return None
    match = _LEADING_INT.match(section_number)
    if match is None:
        return None
    return int(match.group(1))


@dataclass(frozen=True)
class DocumentNode:
    """A section and its span in the combined document.

    ``[start_offset, end_offset)`` covers the node's own text followed by its
    children. ``own_text`` is ``text`` plus the non-blank additional
    paragraphs joined by the structure's separator.
    """

    section_number: str
    text: str
    start_offset: int
    end_offset: int
    own_text: str = ""
    additional_paragraphs: tuple[str, ...] = ()
    children: tuple["DocumentNode", ...] = ()

    @property
    def length(self) -> int:
        """Length of the node's own text (children excluded)."""
        return len(self.own_text)

    @property
    def own_end_offset(self) -> int:
        return self.start_offset + len(self.own_text)

    @property
    def top_level_section(self) -> int | None:
        return top_level_section(self.section_number)

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass(frozen=True)
class DocumentStructure:
    """The section tree plus the combined document it offsets into.

    Validated on construction; any inconsistency raises
    ``StructuralConsistencyError``.
    """

    nodes: tuple[DocumentNode, ...]
    combined_document: str
    separator: str = "\r"
    _index: dict[str, DocumentNode] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index: dict[str, DocumentNode] = {}
        self._validate_siblings(self.nodes, 0, len(self.combined_document), index)
        object.__setattr__(self, "_index", index)

    def _validate_siblings(
        self,
        siblings: tuple[DocumentNode, ...],
        lower: int,
        upper: int,
        index: dict[str, DocumentNode],
    ) -> None:
        cursor = lower
        for node in siblings:
            if node.section_number in index:
                raise StructuralConsistencyError(
                    f"Duplicate section number '{node.section_number}'"
                )
            index[node.section_number] = node

            if node.start_offset < cursor:
                raise StructuralConsistencyError(
                    f"Section '{node.section_number}' starts at {node.start_offset}, "
                    f"overlapping or preceding offset {cursor}"
                )
            if node.end_offset < node.own_end_offset or node.end_offset > upper:
                raise StructuralConsistencyError(
                    f"Section '{node.section_number}' range "
                    f"[{node.start_offset}, {node.end_offset}) is outside its parent "
                    f"[{lower}, {upper}) or shorter than its own text"
                )

            actual = self.combined_document[node.start_offset : node.own_end_offset]
            if actual != node.own_text:
                raise StructuralConsistencyError(
                    f"Section '{node.section_number}' text does not match the "
                    f"combined document at offset {node.start_offset}"
                )

            self._validate_siblings(
                node.children, node.own_end_offset, node.end_offset, index
            )
            if node.children and node.children[-1].end_offset != node.end_offset:
                raise StructuralConsistencyError(
                    f"Section '{node.section_number}' does not end with its last child"
                )
            if not node.children and node.end_offset != node.own_end_offset:
                raise StructuralConsistencyError(
                    f"Leaf section '{node.section_number}' range does not match its text"
                )
            cursor = node.end_offset

    def iter_nodes(self) -> Iterator[DocumentNode]:
        """All nodes in document order (pre-order)."""
        stack = list(reversed(self.nodes))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, section_number: str) -> DocumentNode | None:
        return self._index.get(section_number)

    def section_start(self, section_number: str) -> int | None:
        """Combined-document offset where the section's own text begins."""
        node = self._index.get(section_number)
        return None if node is None else node.start_offset

    def combined_text(self, node: DocumentNode) -> str:
        """Text of the node and all of its descendants."""
        return self.combined_document[node.start_offset : node.end_offset]

    def find_top_level(self, number: int) -> DocumentNode | None:
        for node in self.nodes:
            if node.top_level_section == number:
                return node
        return None

    def __len__(self) -> int:
        return len(self._index)
