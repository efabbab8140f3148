"""
Dataset Provider
================

Holds the active series: either the generated default or a user import.

GUARANTEES:
===========
1. load() is single-flight: concurrent callers share one pending
   operation and receive the same Series object
2. The default generator runs at most once per provider
3. replace() and reset() swap the whole Series reference; no reader ever
   sees a partially replaced dataset
4. Last request wins: every source switch bumps the request sequence,
   and a load or import holding an older ticket never overwrites it
"""

from __future__ import annotations
from typing import Awaitable, Callable, Optional
import asyncio
import logging
import time

from ..contracts.base import ErrorCode, RecordNotFound
from ..contracts.events import AuditEventType
from ..contracts.records import DatasetChange, DatasetSource, Series, YearRecord
from ..notify import ChangeNotifier, Unsubscribe
from ..observability import AuditLog, MetricsCollector

logger = logging.getLogger(__name__)


class DatasetProvider:
    """
    Owner of the active Series.

    SOURCE SWITCHES:
    ================
    - replace(series): CUSTOM becomes active, request sequence bumps
    - reset(): DEFAULT becomes active again, request sequence bumps
    Loads do not bump the sequence; they hold the value current when
    they started and only activate their result if it is still current.
    """

    def __init__(
        self,
        generate_default: Callable[[], Series],
        load_delay_ms: float = 0.0,
        audit: Optional[AuditLog] = None,
        metrics: Optional[MetricsCollector] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self._generate_default = generate_default
        self._load_delay_ms = load_delay_ms
        self._audit = audit
        self._metrics = metrics
        self._sleep = sleep

        self._default: Optional[Series] = None
        self._active: Optional[Series] = None
        self._source = DatasetSource.DEFAULT
        self._request_id = 0
        self._generation_runs = 0

        self._inflight: Optional[asyncio.Task] = None
        self._inflight_ticket: Optional[int] = None

        self._notifier: ChangeNotifier[DatasetChange] = ChangeNotifier(
            "dataset", on_listener_error=self._on_listener_error
        )

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def active(self) -> Optional[Series]:
        return self._active

    @property
    def source(self) -> DatasetSource:
        return self._source

    @property
    def request_id(self) -> int:
        """Current value of the request sequence."""
        return self._request_id

    @property
    def is_loaded(self) -> bool:
        return self._active is not None

    @property
    def is_loading(self) -> bool:
        return self._inflight is not None

    @property
    def generation_runs(self) -> int:
        return self._generation_runs

    @property
    def default_series(self) -> Optional[Series]:
        return self._default

    def lookup(self, year: int) -> YearRecord:
        """
        Record for year in the active series.

        Raises RecordNotFound when nothing is loaded or the year is not
        covered (imports may have gaps).
        """
        series = self._active
        if series is None:
            raise RecordNotFound(
                year, f"No dataset loaded (requested year {year})", ErrorCode.DATASET_NOT_LOADED
            )
        return series.lookup(year)

    def get(self, year: int, default: Optional[YearRecord] = None) -> Optional[YearRecord]:
        series = self._active
        if series is None:
            return default
        return series.get(year, default)

    def subscribe(self, listener: Callable[[DatasetChange], None]) -> Unsubscribe:
        return self._notifier.subscribe(listener)

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(self) -> Series:
        """Return the active series, generating the default on first use."""
        if self._active is not None:
            return self._active

        if self._inflight is None:
            self._inflight_ticket = self._request_id
            self._inflight = asyncio.get_running_loop().create_task(self._run_load())
            logger.debug("Started default dataset load (ticket %d)", self._inflight_ticket)

        # Shielded so one cancelled caller does not cancel the shared load
        return await asyncio.shield(self._inflight)

    async def _run_load(self) -> Series:
        try:
            if self._default is None:
                if self._load_delay_ms > 0:
                    await self._sleep(self._load_delay_ms / 1000.0)
                self._default = self._run_generator()

            series = self._default
            ticket = self._inflight_ticket
            if ticket == self._request_id and self._source is DatasetSource.DEFAULT:
                self._activate(series, DatasetSource.DEFAULT, "load")
            else:
                logger.info(
                    "Discarded stale dataset load (ticket %s, current %d)",
                    ticket, self._request_id
                )
                if self._metrics:
                    self._metrics.increment("loads_discarded_total")
                if self._audit:
                    self._audit.record(
                        AuditEventType.DATASET, "load_discarded",
                        layer="dataset", ticket=ticket, current=self._request_id
                    )

            return self._active if self._active is not None else series
        finally:
            self._inflight = None
            self._inflight_ticket = None

    def _run_generator(self) -> Series:
        started = time.perf_counter()
        series = self._generate_default()
        duration_ms = (time.perf_counter() - started) * 1000.0
        self._generation_runs += 1

        if self._metrics:
            self._metrics.increment("generation_runs_total")
            self._metrics.record("generation_duration_ms", duration_ms)
        logger.info("Generated default dataset: %d records in %.1fms", len(series), duration_ms)
        return series

    # =========================================================================
    # SOURCE SWITCHES
    # =========================================================================

    def replace(self, series: Series, expected_request_id: Optional[int] = None) -> bool:
        """
        Make series the active (CUSTOM) dataset.

        When expected_request_id is given and another switch happened since
        it was read, the replacement is discarded and False is returned.
        """
        if not isinstance(series, Series):
            raise TypeError(f"replace() expects a Series, got {type(series).__name__}")

        if expected_request_id is not None and expected_request_id != self._request_id:
            logger.info(
                "Discarded stale replacement (ticket %d, current %d)",
                expected_request_id, self._request_id
            )
            if self._audit:
                self._audit.record(
                    AuditEventType.DATASET, "replace_discarded",
                    layer="dataset", ticket=expected_request_id, current=self._request_id
                )
            return False

        self._request_id += 1
        self._activate(series, DatasetSource.CUSTOM, "replace")
        return True

    def reset(self) -> None:
        """Restore the generated series and clear any imported override."""
        self._request_id += 1

        if self._default is not None:
            self._activate(self._default, DatasetSource.DEFAULT, "reset")
            return

        # Default not generated yet: a pending load becomes the current request
        self._source = DatasetSource.DEFAULT
        self._active = None
        if self._inflight is not None:
            self._inflight_ticket = self._request_id
        if self._audit:
            self._audit.record(
                AuditEventType.DATASET, "reset_pending",
                layer="dataset", request_id=self._request_id
            )
        self._notifier.publish(DatasetChange(
            source=DatasetSource.DEFAULT, series=None, request_id=self._request_id
        ))

    def _activate(self, series: Series, source: DatasetSource, action: str) -> None:
        # Single reference assignment: readers see the old or the new series
        self._active = series
        self._source = source

        if self._metrics:
            self._metrics.record("active_series_length", float(len(series)))
        if self._audit:
            self._audit.record(
                AuditEventType.DATASET, action,
                layer="dataset", source=source.value,
                records=len(series), request_id=self._request_id
            )
        self._notifier.publish(DatasetChange(
            source=source, series=series, request_id=self._request_id
        ))

    def _on_listener_error(self, channel: str, exc: BaseException) -> None:
        if self._metrics:
            self._metrics.increment("listener_failures_total")
        if self._audit:
            self._audit.record(
                AuditEventType.ERROR, "listener_failed",
                layer="dataset", channel=channel, error_type=type(exc).__name__
            )
