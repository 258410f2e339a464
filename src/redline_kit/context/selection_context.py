# src/redline_kit/context/selection_context.py

"""Describe a user selection to a generation prompt.

The context says what kind of annotated text was selected, where it sits,
and carries the full top-level section so the model sees the surrounding
clause.
"""

import logging
from dataclasses import dataclass
from typing import Literal

from redline_kit.annotations.models import AnnotationSet, WordLevelTrackChange
from redline_kit.scope.matcher import Selection, find_annotations_in_selection
from redline_kit.structure.mapper import map_selection_to_sections
from redline_kit.structure.models import DocumentNode, DocumentStructure

logger = logging.getLogger(__name__)

ContextType = Literal["none", "plain-text", "track-changes", "comments", "mixed"]


@dataclass(frozen=True)
class TrackChangeForPrompt:
    section_number: str
    original_text: str
    amended_text: str
    deleted: tuple[str, ...] = ()
    added: tuple[str, ...] = ()

    @classmethod
    def from_record(cls, record: WordLevelTrackChange) -> "TrackChangeForPrompt":
        return cls(
            section_number=record.section_number,
            original_text=record.original_sentence,
            amended_text=record.amended_sentence,
            deleted=tuple(edit.text for edit in record.deleted),
            added=tuple(edit.text for edit in record.added),
        )


@dataclass(frozen=True)
class CommentForPrompt:
    section_number: str
    selected_text: str
    comment_content: str
    author: str = ""
    replies: tuple[str, ...] = ()


@dataclass(frozen=True)
class SelectionContext:
    context_type: ContextType
    selected_text: str = ""
    top_level_section: int | None = None
    section_context: str = ""
    track_changes: tuple[TrackChangeForPrompt, ...] = ()
    comments: tuple[CommentForPrompt, ...] = ()
    full_sentence_deletions: tuple[str, ...] = ()
    full_sentence_insertions: tuple[str, ...] = ()


def _render(node: DocumentNode, lines: list[str]) -> None:
    lines.append(f"{node.section_number} {node.text}".strip())
    lines.extend(p for p in node.additional_paragraphs if p.strip())
    for child in node.children:
        _render(child, lines)


def build_section_context(top_level: int, structure: DocumentStructure) -> str:
    """Full text of a top-level section and its subsections, one per line."""
    node = structure.find_top_level(top_level)
    if node is None:
        return ""
    lines: list[str] = []
    _render(node, lines)
    return "\n".join(lines)


def build_selection_context(
    selection: Selection | None,
    annotations: AnnotationSet,
    structure: DocumentStructure,
) -> SelectionContext:
    if selection is None or selection.is_empty:
        return SelectionContext(context_type="none")

    selected_text = selection.text or structure.combined_document[
        selection.start : selection.end
    ]
    coverage = map_selection_to_sections(selection.start, selection.end, structure)
    top_level = next(
        (c.top_level_section for c in coverage if c.top_level_section is not None),
        None,
    )
    section_context = (
        build_section_context(top_level, structure) if top_level is not None else ""
    )

    preview = find_annotations_in_selection(selection, annotations, structure)
    track_changes = tuple(
        TrackChangeForPrompt.from_record(r) for r in preview.word_level_track_changes
    )
    deletions = tuple(d.deleted_text for d in preview.full_sentence_deletions)
    insertions = tuple(i.inserted_text for i in preview.full_sentence_insertions)
    comments = tuple(
        CommentForPrompt(
            section_number=c.section_number,
            selected_text=c.selected_text,
            comment_content=c.comment_content,
            author=c.author,
            replies=c.replies,
        )
        for c in preview.comments
    )

    has_track_changes = bool(track_changes or deletions or insertions)
    if has_track_changes and comments:
        context_type: ContextType = "mixed"
    elif has_track_changes:
        context_type = "track-changes"
    elif comments:
        context_type = "comments"
    else:
        context_type = "plain-text"

    logger.debug(
        "Selection context: %s (%d track changes, %d comments)",
        context_type,
        len(track_changes) + len(deletions) + len(insertions),
        len(comments),
    )
    return SelectionContext(
        context_type=context_type,
        selected_text=selected_text,
        top_level_section=top_level,
        section_context=section_context,
        track_changes=track_changes,
        comments=comments,
        full_sentence_deletions=deletions,
        full_sentence_insertions=insertions,
    )


def format_selection_context_for_prompt(context: SelectionContext) -> str:
    if context.context_type == "none":
        return ""

    blocks = [f"=== SELECTED TEXT ===\n{context.selected_text}"]
    if context.top_level_section is not None:
        blocks.append(f"=== LOCATION ===\nSection: {context.top_level_section}")

    if context.track_changes:
        lines = ["=== TRACK CHANGES ==="]
        for change in context.track_changes:
            lines.append(f"Original: {change.original_text}")
            lines.append(f"Amended: {change.amended_text}")
            if change.deleted:
                lines.append("Deleted: " + ", ".join(f'"{t}"' for t in change.deleted))
            if change.added:
                lines.append("Added: " + ", ".join(f'"{t}"' for t in change.added))
            lines.append("")
        blocks.append("\n".join(lines).rstrip())

    if context.full_sentence_deletions:
        blocks.append(
            "=== FULL SENTENCE DELETIONS ===\n"
            + "\n".join(f"- {text}" for text in context.full_sentence_deletions)
        )
    if context.full_sentence_insertions:
        blocks.append(
            "=== FULL SENTENCE INSERTIONS ===\n"
            + "\n".join(f"- {text}" for text in context.full_sentence_insertions)
        )

    if context.comments:
        lines = ["=== COMMENTS ==="]
        for comment in context.comments:
            lines.append(f'Selected Text: "{comment.selected_text}"')
            lines.append(f"Comment: {comment.comment_content}")
            if comment.replies:
                lines.append("Replies: " + " | ".join(comment.replies))
            lines.append("")
        blocks.append("\n".join(lines).rstrip())

    if context.section_context:
        blocks.append(f"=== SECTION CONTEXT ===\n{context.section_context}")

    return "\n\n".join(blocks)
