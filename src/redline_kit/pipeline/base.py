# src/redline_kit/pipeline/base.py

from dataclasses import dataclass
from typing import Any, Protocol

from redline_kit.annotations.models import Comment, Highlight, TrackChangeSet
from redline_kit.scope.matcher import Selection
from redline_kit.structure.builder import RawSection


@dataclass(frozen=True)
class ParsedStructure:
    sections: tuple[RawSection, ...]
    recitals: str = ""


@dataclass(frozen=True)
class PreparedAnnotations:
    """What the classification backend returns for a snapshot."""

    classification: Any
    positions: Any = None


class DocumentHost(Protocol):
    """The editing host holding the open document."""

    async def fingerprint(self) -> str:
        """Cheap value that changes whenever the document content changes."""
        ...

    async def read_markup(self) -> str: ...

    async def get_selection_offsets(self) -> Selection: ...


class AnnotationExtractor(Protocol):
    """Turns host markup into section text and annotation records.

    Methods may be plain functions or coroutines; both are accepted.
    Failures should be raised as ``ExtractionFailure``.
    """

    def parse_structure(self, markup: str) -> ParsedStructure: ...

    def extract_comments(self, markup: str) -> list[Comment]: ...

    def extract_highlights(self, markup: str) -> list[Highlight]: ...

    def extract_track_changes(self, markup: str) -> TrackChangeSet: ...


class ClassificationBackend(Protocol):
    async def prepare_annotations(self, result: Any) -> PreparedAnnotations:
        """Classify the annotations of an ``OrchestrationResult``."""
        ...
