# src/redline_kit/pipeline/config.py

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExtractionOptions:
    """Which annotation types to extract. Disabled types are never requested."""

    include_comments: bool = True
    include_highlights: bool = True
    include_track_changes: bool = True


@dataclass(frozen=True)
class CacheConfig:
    """Configuration for an annotation cache session.

    Immutable. Explicit. No magic defaults from environment.
    """

    paragraph_separator: str = "\r"
    extraction: ExtractionOptions = field(default_factory=ExtractionOptions)
