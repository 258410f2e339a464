# src/redline_kit/annotations/models.py

"""Annotation records produced by the extractors.

Each kind is its own frozen dataclass tagged with a ``kind`` class attribute.
Records are hashable and compare by every field, which is the identity rule
used when reconciling scopes against a fresh extraction. All offsets are
relative to the owning section's own text, except ``Edit`` offsets which are
relative to their sentence.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Literal, Union


class AnnotationKind(str, Enum):
    COMMENT = "comment"
    HIGHLIGHT = "highlight"
    WORD_LEVEL_TRACK_CHANGE = "word_level_track_change"
    FULL_SENTENCE_DELETION = "full_sentence_deletion"
    FULL_SENTENCE_INSERTION = "full_sentence_insertion"
    STRUCTURAL_CHANGE = "structural_change"


def _check_offsets(start: int | None, end: int | None, owner: str) -> None:
    if start is None and end is None:
        return
    if start is None or end is None:
        raise ValueError(f"{owner}: start_offset and end_offset must be given together")
    if start < 0 or end < start:
        raise ValueError(f"{owner}: invalid offsets [{start}, {end})")


@dataclass(frozen=True)
class Comment:
    kind: ClassVar[AnnotationKind] = AnnotationKind.COMMENT

    id: str
    section_number: str
    selected_text: str
    comment_content: str
    start_offset: int
    end_offset: int
    affected_sentence: str = ""
    author: str = ""
    date: str = ""
    replies: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _check_offsets(self.start_offset, self.end_offset, f"Comment {self.id}")


@dataclass(frozen=True)
class Highlight:
    kind: ClassVar[AnnotationKind] = AnnotationKind.HIGHLIGHT

    id: str
    section_number: str
    selected_text: str
    color: str
    start_offset: int
    end_offset: int
    affected_sentence: str = ""

    def __post_init__(self) -> None:
        _check_offsets(self.start_offset, self.end_offset, f"Highlight {self.id}")


@dataclass(frozen=True)
class Edit:
    """A deleted or added run of text inside a sentence."""

    text: str
    start_offset: int | None = None
    end_offset: int | None = None

    def __post_init__(self) -> None:
        _check_offsets(self.start_offset, self.end_offset, f"Edit {self.text!r}")

    @property
    def key(self) -> tuple[str, int | None]:
        return self.text, self.start_offset


@dataclass(frozen=True)
class SentenceFragment:
    """The part of a sentence that lives in one section.

    ``sentence_start`` is where the fragment begins within the sentence;
    ``section_start``/``section_end`` bound it within the section's own text.
    """

    section_number: str
    sentence_start: int
    section_start: int
    section_end: int

    @property
    def length(self) -> int:
        return self.section_end - self.section_start


@dataclass(frozen=True)
class WordLevelTrackChange:
    kind: ClassVar[AnnotationKind] = AnnotationKind.WORD_LEVEL_TRACK_CHANGE

    sentence_id: str
    section_number: str
    original_sentence: str
    amended_sentence: str
    deleted: tuple[Edit, ...] = ()
    added: tuple[Edit, ...] = ()
    sentence_fragments: tuple[SentenceFragment, ...] = ()

    @property
    def key(self) -> tuple[str, str]:
        return self.section_number, self.sentence_id

    @property
    def edit_count(self) -> int:
        return len(self.deleted) + len(self.added)


@dataclass(frozen=True)
class FullSentenceDeletion:
    kind: ClassVar[AnnotationKind] = AnnotationKind.FULL_SENTENCE_DELETION

    id: str
    section_number: str
    deleted_text: str
    start_offset: int | None = None
    end_offset: int | None = None

    def __post_init__(self) -> None:
        _check_offsets(self.start_offset, self.end_offset, f"Deletion {self.id}")

    @property
    def text(self) -> str:
        return self.deleted_text


@dataclass(frozen=True)
class FullSentenceInsertion:
    kind: ClassVar[AnnotationKind] = AnnotationKind.FULL_SENTENCE_INSERTION

    id: str
    section_number: str
    inserted_text: str
    start_offset: int | None = None
    end_offset: int | None = None

    def __post_init__(self) -> None:
        _check_offsets(self.start_offset, self.end_offset, f"Insertion {self.id}")

    @property
    def text(self) -> str:
        return self.inserted_text


@dataclass(frozen=True)
class StructuralChange:
    """A whole section inserted or deleted (heading/renumbering level)."""

    kind: ClassVar[AnnotationKind] = AnnotationKind.STRUCTURAL_CHANGE

    change_type: Literal["section-deleted", "section-inserted"]
    section_number: str
    section_title: str
    full_content: str = ""
    subsections: tuple[str, ...] = ()


Annotation = Union[
    Comment,
    Highlight,
    WordLevelTrackChange,
    FullSentenceDeletion,
    FullSentenceInsertion,
    StructuralChange,
]


@dataclass(frozen=True)
class TrackChangeSet:
    word_level: tuple[WordLevelTrackChange, ...] = ()
    full_sentence_deletions: tuple[FullSentenceDeletion, ...] = ()
    full_sentence_insertions: tuple[FullSentenceInsertion, ...] = ()
    structural_changes: tuple[StructuralChange, ...] = ()

    @property
    def total(self) -> int:
        return (
            len(self.word_level)
            + len(self.full_sentence_deletions)
            + len(self.full_sentence_insertions)
            + len(self.structural_changes)
        )


@dataclass(frozen=True)
class AnnotationSet:
    """Everything one extraction pass produced for a document."""

    comments: tuple[Comment, ...] = ()
    highlights: tuple[Highlight, ...] = ()
    track_changes: TrackChangeSet = field(default_factory=TrackChangeSet)

    @property
    def total(self) -> int:
        return len(self.comments) + len(self.highlights) + self.track_changes.total

    def __iter__(self):
        yield from self.comments
        yield from self.highlights
        yield from self.track_changes.word_level
        yield from self.track_changes.full_sentence_deletions
        yield from self.track_changes.full_sentence_insertions
        yield from self.track_changes.structural_changes
