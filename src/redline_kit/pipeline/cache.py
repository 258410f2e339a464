# src/redline_kit/pipeline/cache.py

import asyncio
import logging
from dataclasses import dataclass
from time import monotonic, time
from typing import Any

from redline_kit.errors import RefreshInProgressError
from redline_kit.observability import names
from redline_kit.observability.base import MetricsHook, NoOpMetricsHook
from redline_kit.reconciliation.engine import reconcile, scope_has_selections
from redline_kit.reconciliation.models import ReconciliationResult
from redline_kit.scope.models import AnnotationScope

from .base import AnnotationExtractor, ClassificationBackend, DocumentHost
from .config import CacheConfig
from .orchestrator import OrchestrationResult, extract_and_filter_annotations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshWithReconciliationResult:
    orchestration_result: OrchestrationResult
    reconciliation: ReconciliationResult | None
    document_changed: bool


def _consume_exception(task: asyncio.Task) -> None:
    # Failures are re-raised to every awaiting caller; mark them retrieved
    # so an abandoned task does not log "exception was never retrieved".
    if not task.cancelled():
        task.exception()


class AnnotationCache:
    """Session-scoped cache around parse, extract and classify.

    At most one extraction and one classification run at a time; concurrent
    callers await the same in-flight task. A classification is only ever
    stored against the snapshot it was computed from, so readers never see a
    classification older than the stored annotations. ``invalidate()`` drops
    stored state but lets in-flight work finish; its result goes only to
    callers already waiting on it and is not stored. Later callers start a
    fresh extraction.
    """

    def __init__(
        self,
        host: DocumentHost,
        extractor: AnnotationExtractor,
        backend: ClassificationBackend,
        config: CacheConfig = CacheConfig(),
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        self.host = host
        self.extractor = extractor
        self.backend = backend
        self.config = config
        self.metrics_hook = metrics_hook

        self._snapshot: OrchestrationResult | None = None
        self._timestamp: float | None = None
        self._classification: Any = None
        self._positions: Any = None
        self._generation = 0
        self._pending_extraction: asyncio.Task | None = None
        self._pending_generation = 0
        self._pending_classification: tuple[OrchestrationResult, asyncio.Task] | None = None
        self._refreshing = False
        self._closed = False

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def get_orchestration_result(
        self, *, force_refresh: bool = False
    ) -> OrchestrationResult:
        self._ensure_open()
        while True:
            pending = await self._current_extraction()
            if pending is not None:
                logger.debug("Joining in-flight extraction")
                return await asyncio.shield(pending)
            if force_refresh or self._snapshot is None:
                break

            snapshot = self._snapshot
            fingerprint = await self.host.fingerprint()
            if self._pending_extraction is not None:
                continue
            if fingerprint == snapshot.fingerprint and self._snapshot is snapshot:
                self.metrics_hook.increment(
                    names.CACHE_HITS_TOTAL, labels={"kind": "orchestration"}
                )
                return snapshot
            break

        self.metrics_hook.increment(
            names.CACHE_MISSES_TOTAL, labels={"kind": "orchestration"}
        )
        task = asyncio.create_task(self._run_extraction(self._generation))
        task.add_done_callback(self._extraction_done)
        task.add_done_callback(_consume_exception)
        self._pending_extraction = task
        self._pending_generation = self._generation
        return await asyncio.shield(task)

    async def _current_extraction(self) -> asyncio.Task | None:
        """The in-flight extraction for the current generation, if any.

        An extraction started before the last ``invalidate()`` is waited out
        rather than joined; its result is discarded.
        """
        while self._pending_extraction is not None:
            task = self._pending_extraction
            if self._pending_generation == self._generation:
                return task
            logger.debug("Waiting for a discarded extraction to settle")
            await asyncio.wait({task})
            if self._pending_extraction is task:
                self._pending_extraction = None
        return None

    def _extraction_done(self, task: asyncio.Task) -> None:
        if self._pending_extraction is task:
            self._pending_extraction = None

    async def _run_extraction(self, generation: int) -> OrchestrationResult:
        result = await extract_and_filter_annotations(
            self.host,
            self.extractor,
            options=self.config.extraction,
            separator=self.config.paragraph_separator,
            metrics_hook=self.metrics_hook,
        )
        if generation != self._generation:
            logger.warning("Discarding extraction result that finished after invalidate()")
            self.metrics_hook.increment(
                names.STALE_RESULTS_DISCARDED, labels={"kind": "orchestration"}
            )
            return result

        self._snapshot = result
        self._timestamp = time()
        self._classification = None
        self._positions = None
        return result

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    async def get_classification_result(self, *, force_refresh: bool = False) -> Any:
        """Classification for the current snapshot, or ``None`` with no annotations.

        Never forces a re-extraction; ``force_refresh`` only re-runs the
        classification itself.
        """
        snapshot = await self.get_orchestration_result()
        if snapshot.summary.total_annotations == 0:
            logger.debug("No annotations to classify")
            return None

        if (
            not force_refresh
            and self._classification is not None
            and self._snapshot is snapshot
        ):
            self.metrics_hook.increment(
                names.CACHE_HITS_TOTAL, labels={"kind": "classification"}
            )
            return self._classification

        pending = self._pending_classification
        if pending is not None and pending[0] is snapshot:
            logger.debug("Joining in-flight classification")
            return await asyncio.shield(pending[1])

        self.metrics_hook.increment(
            names.CACHE_MISSES_TOTAL, labels={"kind": "classification"}
        )
        task = asyncio.create_task(self._run_classification(snapshot))
        task.add_done_callback(self._classification_done)
        task.add_done_callback(_consume_exception)
        self._pending_classification = (snapshot, task)
        return await asyncio.shield(task)

    def _classification_done(self, task: asyncio.Task) -> None:
        if self._pending_classification is not None and self._pending_classification[1] is task:
            self._pending_classification = None

    async def _run_classification(self, snapshot: OrchestrationResult) -> Any:
        start = monotonic()
        try:
            prepared = await self.backend.prepare_annotations(snapshot)
        except Exception:
            self.metrics_hook.increment(names.CLASSIFICATION_ERRORS_TOTAL)
            logger.error("Annotation classification failed", exc_info=True)
            raise
        elapsed_ms = 1000 * (monotonic() - start)
        self.metrics_hook.record_latency(names.CLASSIFICATION_DURATION, elapsed_ms)

        if self._snapshot is not snapshot:
            logger.warning("Discarding classification for a superseded snapshot")
            self.metrics_hook.increment(
                names.STALE_RESULTS_DISCARDED, labels={"kind": "classification"}
            )
            return prepared.classification

        self._classification = prepared.classification
        self._positions = prepared.positions
        logger.info("Stored classification (%.1fms)", elapsed_ms)
        return prepared.classification

    def set_classification_result(self, classification: Any, positions: Any = None) -> None:
        """Store a classification computed elsewhere against the current snapshot."""
        if self._snapshot is None:
            raise RuntimeError("No annotation snapshot to attach a classification to")
        self._classification = classification
        if positions is not None:
            self._positions = positions

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh_with_reconciliation(
        self, old_scope: AnnotationScope
    ) -> RefreshWithReconciliationResult:
        """Re-extract and carry ``old_scope`` over to the new annotations.

        Rejects a second refresh while one is running.
        """
        self._ensure_open()
        if self._refreshing:
            raise RefreshInProgressError("A refresh is already in progress")
        self._refreshing = True
        try:
            previous = self._snapshot
            result = await self.get_orchestration_result(force_refresh=True)
            document_changed = previous is None or result.fingerprint != previous.fingerprint

            reconciliation = None
            if scope_has_selections(old_scope):
                reconciliation = reconcile(
                    old_scope,
                    previous.annotations if previous is not None else None,
                    result.annotations,
                    metrics_hook=self.metrics_hook,
                )
            return RefreshWithReconciliationResult(
                orchestration_result=result,
                reconciliation=reconciliation,
                document_changed=document_changed,
            )
        finally:
            self._refreshing = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def invalidate(self) -> None:
        self._generation += 1
        self._snapshot = None
        self._timestamp = None
        self._classification = None
        self._positions = None
        logger.debug("Annotation cache invalidated")

    def close(self) -> None:
        self.invalidate()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("AnnotationCache is closed")

    @property
    def cached_result(self) -> OrchestrationResult | None:
        return self._snapshot

    @property
    def cached_classification(self) -> Any:
        return self._classification

    @property
    def positions(self) -> Any:
        return self._positions

    @property
    def timestamp(self) -> float | None:
        return self._timestamp

    @property
    def is_cache_valid(self) -> bool:
        return self._snapshot is not None

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing
