"""Metrics hook protocol and no-op default implementation.

imgpublish emits counters and timings at key points of a publish run.
By default a :class:`NoopMetricsHook` is used.  Supply any object that
satisfies :class:`MetricsHook` through ``PublishConfig(metrics=...)`` to
route them to StatsD, Prometheus or similar.

Emitted metric names:

* ``imgpublish.references_found_total``  -- counter
* ``imgpublish.asset_missing_total``     -- counter
* ``imgpublish.upload_success_total``    -- counter
* ``imgpublish.upload_failure_total``    -- counter
* ``imgpublish.upload_duration_ms``      -- timing
* ``imgpublish.requests_total``          -- counter (R2 backend)
* ``imgpublish.retries_total``           -- counter (R2 backend)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
