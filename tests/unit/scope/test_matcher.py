import pytest

from conftest import combined_span
from redline_kit.annotations.models import (
    AnnotationSet,
    Edit,
    StructuralChange,
    TrackChangeSet,
    WordLevelTrackChange,
)
from redline_kit.scope.matcher import (
    Selection,
    create_selection_range,
    find_annotations_in_selection,
)
from redline_kit.structure.models import DocumentStructure


def select(structure: DocumentStructure, section: str, text: str) -> Selection:
    start, end = combined_span(structure, section, text)
    return Selection(start, end, text)


class TestSelection:
    def test_invalid_selection_raises(self) -> None:
        """Negative or inverted selections are rejected."""
        with pytest.raises(ValueError):
            Selection(5, 2)
        with pytest.raises(ValueError):
            Selection(-1, 2)


class TestFindAnnotationsInSelection:
    def test_none_selects_everything(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """A missing selection means every annotation."""
        preview = find_annotations_in_selection(None, annotations, structure)
        assert len(preview.annotations()) == annotations.total
        assert preview.top_level_sections == [1, 2, 3]

    def test_partial_overlap_matches(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """A selection clipping the end of a comment still matches it."""
        start, end = combined_span(structure, "2", "30 days")
        preview = find_annotations_in_selection(
            Selection(start - 5, start + 2), annotations, structure
        )
        assert [c.id for c in preview.comments] == ["c2"]
        assert preview.top_level_sections == [2]

    def test_touching_selection_does_not_match(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """A selection ending where a comment starts does not overlap it."""
        start, _ = combined_span(structure, "2", "30 days")
        preview = find_annotations_in_selection(
            Selection(start - 3, start), annotations, structure
        )
        assert preview.comments == []

    def test_cross_section_selection(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """A selection spanning sections collects from each, sorted and de-duplicated."""
        start, _ = combined_span(structure, "1.1", "Agreement")
        _, end = combined_span(structure, "3", "English law")
        preview = find_annotations_in_selection(
            Selection(start, end), annotations, structure
        )
        assert {c.id for c in preview.comments} == {"c1", "c2"}
        assert [h.id for h in preview.highlights] == ["h1"]
        assert [d.id for d in preview.full_sentence_deletions] == ["d1"]
        assert [i.id for i in preview.full_sentence_insertions] == ["i1"]
        assert preview.top_level_sections == [1, 2, 3]

    @pytest.mark.parametrize("start,end", [(10_000, 10_050), (3, 3)])
    def test_outside_or_empty_selection(
        self,
        structure: DocumentStructure,
        annotations: AnnotationSet,
        start: int,
        end: int,
    ) -> None:
        """Selections outside the document give an empty preview."""
        preview = find_annotations_in_selection(
            Selection(start, end), annotations, structure
        )
        assert preview.is_empty()
        assert preview.top_level_sections == []

    def test_sentence_narrowed_to_selected_edits(
        self, structure: DocumentStructure
    ) -> None:
        """Only the edits inside the selection are reported for a sentence."""
        record = WordLevelTrackChange(
            sentence_id="s1",
            section_number="2",
            original_sentence="The Seller shall pay within 60 days.",
            amended_sentence="The Buyer shall pay within 30 days.",
            deleted=(Edit("Seller", 4, 10), Edit("60", 27, 29)),
            added=(Edit("Buyer", 4, 9), Edit("30", 27, 29)),
        )
        annotations = AnnotationSet(
            track_changes=TrackChangeSet(word_level=(record,))
        )
        preview = find_annotations_in_selection(
            select(structure, "2", "30 days"), annotations, structure
        )
        (matched,) = preview.word_level_track_changes
        assert matched.sentence_id == "s1"
        assert matched.deleted == (Edit("60", 27, 29),)
        assert matched.added == (Edit("30", 27, 29),)

    def test_sentence_outside_selection(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """Sentences elsewhere do not match."""
        preview = find_annotations_in_selection(
            select(structure, "3", "English law"), annotations, structure
        )
        assert preview.word_level_track_changes == []

    def test_sentence_without_selected_edits_is_not_matched(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """Overlapping a changed sentence away from its edits matches nothing."""
        preview = find_annotations_in_selection(
            select(structure, "2", "The Buyer"), annotations, structure
        )
        assert preview.word_level_track_changes == []
        assert preview.is_empty()


class TestCreateSelectionRange:
    def test_single_section_range(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """A range in one section is labelled by it and counts its matches."""
        selection_range = create_selection_range(
            select(structure, "2", "The Buyer shall pay within 30 days."),
            annotations,
            structure,
        )
        assert selection_range.label == "Section 2"
        assert selection_range.top_level_sections == [2]
        assert selection_range.section_numbers == ["2"]
        assert selection_range.annotation_counts.comments == 1
        assert selection_range.annotation_counts.track_changes == 1
        assert len(selection_range.id) == 32

        (info,) = selection_range.matched_annotations.section_display_info
        assert info.section_number == "2"
        assert info.has_ellipsis_before is False
        assert info.has_ellipsis_after is True
        assert [c.id for c in info.comments] == ["c2"]

    def test_multi_section_label(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """Ranges over several top-level sections list them all."""
        start, _ = combined_span(structure, "2", "30 days")
        _, end = combined_span(structure, "3", "English")
        selection_range = create_selection_range(
            Selection(start, end), annotations, structure
        )
        assert selection_range.label == "Sections 2, 3"
        assert selection_range.section_numbers == ["2", "3"]
        assert selection_range.selected_text.startswith("30 days.")

    def test_explicit_label(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """A caller-provided label is kept."""
        selection_range = create_selection_range(
            select(structure, "3", "English law"),
            annotations,
            structure,
            label="Governing law",
        )
        assert selection_range.label == "Governing law"

    def test_structural_change_listed_under_its_section(
        self, structure: DocumentStructure, annotations: AnnotationSet
    ) -> None:
        """Section-level changes appear in the display info of their section."""
        inserted = StructuralChange(
            "section-inserted",
            "3",
            "Governing law",
            full_content="This agreement is governed by English law.",
        )
        with_structural = AnnotationSet(
            comments=annotations.comments,
            highlights=annotations.highlights,
            track_changes=TrackChangeSet(
                word_level=annotations.track_changes.word_level,
                full_sentence_deletions=annotations.track_changes.full_sentence_deletions,
                structural_changes=(inserted,),
            ),
        )
        start, _ = combined_span(structure, "2", "30 days")
        _, end = combined_span(structure, "3", "English")
        selection_range = create_selection_range(
            Selection(start, end), with_structural, structure
        )
        assert selection_range.matched_annotations.structural_changes == [inserted]

        by_section = {
            info.section_number: info
            for info in selection_range.matched_annotations.section_display_info
        }
        assert by_section["3"].structural_changes == [inserted]
        assert by_section["2"].structural_changes == []
