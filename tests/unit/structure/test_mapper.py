import pytest

from redline_kit.structure.builder import RawSection, build_document_structure
from redline_kit.structure.mapper import locate_text, map_selection_to_sections
from redline_kit.structure.models import DocumentStructure


@pytest.fixture
def flat() -> DocumentStructure:
    return build_document_structure(
        [RawSection("1", "a" * 50), RawSection("2", "b" * 70)], separator=""
    )


class TestMapSelectionToSections:
    def test_cross_section_selection(self, flat: DocumentStructure) -> None:
        """A selection over a boundary reports both sections with ellipses."""
        first, second = map_selection_to_sections(40, 70, flat)

        assert first.section_number == "1"
        assert (first.start_in_section, first.end_in_section) == (40, 50)
        assert first.has_ellipsis_before is True
        assert first.has_ellipsis_after is False
        assert first.is_fully_covered is False

        assert second.section_number == "2"
        assert (second.start_in_section, second.end_in_section) == (0, 20)
        assert second.has_ellipsis_before is False
        assert second.has_ellipsis_after is True

    def test_section_maps_to_itself(self, structure: DocumentStructure) -> None:
        """Selecting a section's own text yields only that section, fully covered."""
        for node in structure.iter_nodes():
            coverage = map_selection_to_sections(
                node.start_offset, node.own_end_offset, structure
            )
            assert [c.section_number for c in coverage] == [node.section_number]
            only = coverage[0]
            assert only.is_fully_covered
            assert not only.has_ellipsis_before
            assert not only.has_ellipsis_after

    def test_leaf_full_span_maps_to_itself(self, structure: DocumentStructure) -> None:
        """A leaf's full span is its own text, so it maps to that leaf alone."""
        leaves = [node for node in structure.iter_nodes() if not node.children]
        assert [node.section_number for node in leaves] == ["1.1", "1.2", "2", "3"]
        for node in leaves:
            coverage = map_selection_to_sections(
                node.start_offset, node.end_offset, structure
            )
            assert [c.section_number for c in coverage] == [node.section_number]
            assert coverage[0].is_fully_covered

    def test_parent_full_span_lists_children_separately(
        self, structure: DocumentStructure
    ) -> None:
        """A parent's full span reports the parent and each child as own entries."""
        parent = structure.find("1")
        assert parent is not None
        coverage = map_selection_to_sections(
            parent.start_offset, parent.end_offset, structure
        )
        assert [c.section_number for c in coverage] == ["1", "1.1", "1.2"]
        assert all(c.is_fully_covered for c in coverage)
        assert coverage[0].text == "Definitions."

    def test_boundary_belongs_to_trailing_section(self, flat: DocumentStructure) -> None:
        """A selection starting on a boundary does not count the previous section."""
        coverage = map_selection_to_sections(50, 60, flat)
        assert [c.section_number for c in coverage] == ["2"]

    def test_selection_ending_on_boundary(self, flat: DocumentStructure) -> None:
        """A selection ending on a boundary does not touch the next section."""
        coverage = map_selection_to_sections(10, 50, flat)
        assert [c.section_number for c in coverage] == ["1"]

    def test_reports_every_intersected_section(self, structure: DocumentStructure) -> None:
        """Whole-document selections list every section in document order."""
        coverage = map_selection_to_sections(
            0, len(structure.combined_document), structure
        )
        assert [c.section_number for c in coverage] == ["1", "1.1", "1.2", "2", "3"]
        assert all(c.is_fully_covered for c in coverage)

    def test_selected_text_slice(self, flat: DocumentStructure) -> None:
        """Coverage carries the selected slice of the section."""
        (coverage,) = map_selection_to_sections(45, 50, flat)
        assert coverage.text == "aaaaa"

    @pytest.mark.parametrize("start,end", [(10, 10), (20, 10)])
    def test_empty_selection(self, flat: DocumentStructure, start: int, end: int) -> None:
        """Empty or inverted selections cover nothing."""
        assert map_selection_to_sections(start, end, flat) == []

    def test_separator_only_selection(self, structure: DocumentStructure) -> None:
        """A selection of just a separator belongs to no section."""
        separator_at = structure.find("1").own_end_offset
        assert map_selection_to_sections(separator_at, separator_at + 1, structure) == []

    def test_selection_past_end(self, flat: DocumentStructure) -> None:
        """Selections beyond the document match nothing."""
        assert map_selection_to_sections(500, 600, flat) == []


class TestLocateText:
    def test_exact_match(self, structure: DocumentStructure) -> None:
        """Exact text is found at its combined offset."""
        start, end = locate_text("governed by English law", structure)
        assert structure.combined_document[start:end] == "governed by English law"

    def test_case_insensitive_match(self, structure: DocumentStructure) -> None:
        """Case differences do not prevent a match."""
        start, end = locate_text("THE BUYER SHALL PAY", structure)
        assert structure.combined_document[start:end] == "The Buyer shall pay"

    def test_whitespace_normalized_match(self, structure: DocumentStructure) -> None:
        """Newlines and space runs match paragraph separators."""
        located = locate_text("30 days.\n  Late payments", structure)
        assert located is not None
        start, end = located
        assert structure.combined_document[start:end] == "30 days.\rLate payments"

    def test_not_found(self, structure: DocumentStructure) -> None:
        """Unknown text returns None."""
        assert locate_text("force majeure", structure) is None
        assert locate_text("   ", structure) is None
