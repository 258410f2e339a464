from .selection_context import (
    CommentForPrompt,
    SelectionContext,
    TrackChangeForPrompt,
    build_section_context,
    build_selection_context,
    format_selection_context_for_prompt,
)

__all__ = [
    "CommentForPrompt",
    "SelectionContext",
    "TrackChangeForPrompt",
    "build_section_context",
    "build_selection_context",
    "format_selection_context_for_prompt",
]
