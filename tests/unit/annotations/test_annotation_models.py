import pytest

from redline_kit.annotations.models import (
    AnnotationKind,
    AnnotationSet,
    Comment,
    Edit,
    FullSentenceInsertion,
    TrackChangeSet,
    WordLevelTrackChange,
)


class TestRecords:
    def test_records_are_hashable_and_compare_by_value(self) -> None:
        """Equal fields mean equal records."""
        a = Comment("c1", "2", "text", "note", 0, 4)
        b = Comment("c1", "2", "text", "note", 0, 4)
        assert a == b
        assert len({a, b}) == 1

    def test_offsets_are_part_of_identity(self) -> None:
        """A shifted comment is a different comment."""
        assert Comment("c1", "2", "text", "note", 0, 4) != Comment(
            "c1", "2", "text", "note", 1, 5
        )

    @pytest.mark.parametrize("start,end", [(-1, 3), (5, 2)])
    def test_invalid_offsets_raise(self, start: int, end: int) -> None:
        """Negative or inverted offsets are rejected."""
        with pytest.raises(ValueError, match="invalid offsets"):
            Comment("c1", "2", "text", "note", start, end)

    def test_half_given_offsets_raise(self) -> None:
        """Optional offsets come in pairs."""
        with pytest.raises(ValueError, match="together"):
            FullSentenceInsertion("i1", "2", "New text.", start_offset=3)

    def test_kind_tags(self) -> None:
        """Each record carries its kind."""
        assert Comment.kind is AnnotationKind.COMMENT
        assert WordLevelTrackChange.kind is AnnotationKind.WORD_LEVEL_TRACK_CHANGE

    def test_edit_key(self) -> None:
        """Edits are identified by text and start offset."""
        assert Edit("foo", 0, 3).key == ("foo", 0)
        assert Edit("foo").key == ("foo", None)


class TestAnnotationSet:
    def test_total_and_iteration(
        self, annotations: AnnotationSet
    ) -> None:
        """Totals count every category; iteration yields every record."""
        assert annotations.total == 6
        assert len(list(annotations)) == 6

    def test_empty(self) -> None:
        """An empty set has no annotations."""
        empty = AnnotationSet()
        assert empty.total == 0
        assert empty.track_changes == TrackChangeSet()
