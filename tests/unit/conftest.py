import pytest

from redline_kit.annotations.models import (
    AnnotationSet,
    Comment,
    Edit,
    FullSentenceDeletion,
    FullSentenceInsertion,
    Highlight,
    TrackChangeSet,
    WordLevelTrackChange,
)
from redline_kit.structure.builder import RawSection, build_document_structure
from redline_kit.structure.models import DocumentStructure

PAYMENT_SENTENCE = "The Buyer shall pay within 30 days."

SECTIONS = (
    RawSection(
        "1",
        "Definitions.",
        children=(
            RawSection("1.1", "Agreement means this contract."),
            RawSection("1.2", "Party means a signatory."),
        ),
    ),
    RawSection(
        "2",
        PAYMENT_SENTENCE,
        additional_paragraphs=("Late payments accrue interest.",),
    ),
    RawSection("3", "This agreement is governed by English law."),
)


def offsets_in(structure: DocumentStructure, section: str, text: str) -> tuple[int, int]:
    """Section-relative offsets of ``text`` inside a section's own text."""
    node = structure.find(section)
    assert node is not None
    start = node.own_text.index(text)
    return start, start + len(text)


def combined_span(structure: DocumentStructure, section: str, text: str) -> tuple[int, int]:
    start, end = offsets_in(structure, section, text)
    base = structure.section_start(section)
    return base + start, base + end


@pytest.fixture
def structure() -> DocumentStructure:
    return build_document_structure(SECTIONS)


@pytest.fixture
def definition_comment(structure: DocumentStructure) -> Comment:
    start, end = offsets_in(structure, "1.1", "Agreement")
    return Comment(
        id="c1",
        section_number="1.1",
        selected_text="Agreement",
        comment_content="Use the defined term consistently.",
        start_offset=start,
        end_offset=end,
        author="Reviewer",
    )


@pytest.fixture
def payment_comment(structure: DocumentStructure) -> Comment:
    start, end = offsets_in(structure, "2", "30 days")
    return Comment(
        id="c2",
        section_number="2",
        selected_text="30 days",
        comment_content="Too short, ask for 45.",
        start_offset=start,
        end_offset=end,
        replies=("Agreed.",),
    )


@pytest.fixture
def law_highlight(structure: DocumentStructure) -> Highlight:
    start, end = offsets_in(structure, "3", "English law")
    return Highlight(
        id="h1",
        section_number="3",
        selected_text="English law",
        color="yellow",
        start_offset=start,
        end_offset=end,
    )


@pytest.fixture
def payment_change() -> WordLevelTrackChange:
    # "The Buyer shall pay within " is 27 characters long.
    return WordLevelTrackChange(
        sentence_id="s1",
        section_number="2",
        original_sentence="The Buyer shall pay within 60 days.",
        amended_sentence=PAYMENT_SENTENCE,
        deleted=(Edit("60", 27, 29),),
        added=(Edit("30", 27, 29),),
    )


@pytest.fixture
def law_deletion() -> FullSentenceDeletion:
    return FullSentenceDeletion(
        id="d1",
        section_number="3",
        deleted_text="This agreement is governed by English law.",
    )


@pytest.fixture
def party_insertion() -> FullSentenceInsertion:
    return FullSentenceInsertion(
        id="i1",
        section_number="1.2",
        inserted_text="Party means a signatory.",
    )


@pytest.fixture
def annotations(
    definition_comment: Comment,
    payment_comment: Comment,
    law_highlight: Highlight,
    payment_change: WordLevelTrackChange,
    law_deletion: FullSentenceDeletion,
    party_insertion: FullSentenceInsertion,
) -> AnnotationSet:
    return AnnotationSet(
        comments=(definition_comment, payment_comment),
        highlights=(law_highlight,),
        track_changes=TrackChangeSet(
            word_level=(payment_change,),
            full_sentence_deletions=(law_deletion,),
            full_sentence_insertions=(party_insertion,),
        ),
    )
