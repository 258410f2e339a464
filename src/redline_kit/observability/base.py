import logging
from collections.abc import Iterator
from contextlib import contextmanager
from time import monotonic
from typing import Protocol

logger = logging.getLogger(__name__)


class MetricsHook(Protocol):
    def record_latency(
        self,
        name: str,
        value_ms: float,
        labels: dict[str, str] | None = None,
    ) -> None: ...

    def increment(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None: ...

    def record_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None: ...


class NoOpMetricsHook:
    def record_latency(
        self, name: str, value_ms: float, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def increment(
        self, name: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def record_gauge(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        pass


class LoggingMetricsHook:
    """Writes every metric to a logger at DEBUG. Useful during development."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def record_latency(
        self, name: str, value_ms: float, labels: dict[str, str] | None = None
    ) -> None:
        self.log.debug("metric %s=%.2fms labels=%s", name, value_ms, labels or {})

    def increment(
        self, name: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        self.log.debug("metric %s+=%d labels=%s", name, value, labels or {})

    def record_gauge(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        self.log.debug("metric %s=%s labels=%s", name, value, labels or {})


@contextmanager
def timed(
    metrics_hook: MetricsHook,
    name: str,
    labels: dict[str, str] | None = None,
) -> Iterator[None]:
    """Record the wall time of the enclosed block as a latency in milliseconds."""
    start = monotonic()
    try:
        yield
    finally:
        elapsed_ms = 1000 * (monotonic() - start)
        metrics_hook.record_latency(name, elapsed_ms, labels)
