# src/redline_kit/pipeline/orchestrator.py

import inspect
import logging
from dataclasses import dataclass
from time import monotonic
from typing import Any

from redline_kit.annotations.models import AnnotationSet, TrackChangeSet
from redline_kit.observability import names
from redline_kit.observability.base import MetricsHook, NoOpMetricsHook, timed
from redline_kit.scope.filter import FilteredAnnotations, filter_annotations
from redline_kit.scope.models import AnnotationScope
from redline_kit.structure.builder import build_document_structure
from redline_kit.structure.models import DocumentStructure

from .base import AnnotationExtractor, DocumentHost, ParsedStructure
from .config import ExtractionOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestrationSummary:
    comments: int = 0
    highlights: int = 0
    word_level_track_changes: int = 0
    full_sentence_deletions: int = 0
    full_sentence_insertions: int = 0
    structural_changes: int = 0

    @property
    def total_annotations(self) -> int:
        return (
            self.comments
            + self.highlights
            + self.word_level_track_changes
            + self.full_sentence_deletions
            + self.full_sentence_insertions
            + self.structural_changes
        )

    @classmethod
    def of(cls, annotations: AnnotationSet) -> "OrchestrationSummary":
        track_changes = annotations.track_changes
        return cls(
            comments=len(annotations.comments),
            highlights=len(annotations.highlights),
            word_level_track_changes=len(track_changes.word_level),
            full_sentence_deletions=len(track_changes.full_sentence_deletions),
            full_sentence_insertions=len(track_changes.full_sentence_insertions),
            structural_changes=len(track_changes.structural_changes),
        )


@dataclass(frozen=True)
class OrchestrationResult:
    """One parse+extract pass over the document. Immutable."""

    fingerprint: str
    structure: DocumentStructure
    annotations: AnnotationSet
    summary: OrchestrationSummary

    def filter(self, scope: AnnotationScope | None = None) -> FilteredAnnotations:
        return filter_annotations(self.annotations, scope or AnnotationScope.default())


async def _call(method, *args) -> Any:
    if inspect.iscoroutinefunction(method):
        return await method(*args)
    return method(*args)


async def extract_and_filter_annotations(
    host: DocumentHost,
    extractor: AnnotationExtractor,
    *,
    options: ExtractionOptions = ExtractionOptions(),
    separator: str = "\r",
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> OrchestrationResult:
    """Parse the open document and extract its annotations.

    Collaborator failures propagate unchanged; a malformed structure raises
    ``StructuralConsistencyError``.
    """
    start = monotonic()
    try:
        fingerprint = await host.fingerprint()
        markup = await host.read_markup()

        parsed: ParsedStructure = await _call(extractor.parse_structure, markup)
        with timed(metrics_hook, names.STRUCTURE_BUILD_DURATION):
            structure = build_document_structure(
                parsed.sections, recitals=parsed.recitals, separator=separator
            )

        comments = (
            await _call(extractor.extract_comments, markup)
            if options.include_comments
            else []
        )
        highlights = (
            await _call(extractor.extract_highlights, markup)
            if options.include_highlights
            else []
        )
        track_changes = (
            await _call(extractor.extract_track_changes, markup)
            if options.include_track_changes
            else TrackChangeSet()
        )
    except Exception:
        metrics_hook.increment(names.EXTRACTION_ERRORS_TOTAL)
        logger.error("Annotation extraction failed", exc_info=True)
        raise

    annotations = AnnotationSet(
        comments=tuple(comments),
        highlights=tuple(highlights),
        track_changes=track_changes,
    )
    summary = OrchestrationSummary.of(annotations)

    elapsed_ms = 1000 * (monotonic() - start)
    metrics_hook.record_latency(names.EXTRACTION_DURATION, elapsed_ms)
    metrics_hook.record_gauge(names.STRUCTURE_SECTIONS, len(structure))
    logger.info(
        "Extracted %d annotations from %d sections in %.1fms",
        summary.total_annotations,
        len(structure),
        elapsed_ms,
    )
    return OrchestrationResult(
        fingerprint=fingerprint,
        structure=structure,
        annotations=annotations,
        summary=summary,
    )
