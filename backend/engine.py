"""
Dashboard Engine
================

Explicitly constructed composition of every layer for ONE dashboard
instance. Views receive this object (or its parts) by injection;
there is no process-wide store.

LAYER FLOW:
===========
1. Core: era rules -> default Series
2. Dataset: active Series (default or imported), lookups
3. Ingestion: file -> validated Series -> dataset.replace
4. Temporal: clock ticks -> TimelineState -> notifications
5. Observability: records all layer activity

VIEW INTERFACE:
===============
get_current_year(), get_record(year), current_record(), subscribe(),
play(), pause(), toggle_playback(), set_speed(), set_year()
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Optional, Union
import asyncio
import logging

from .config import DashboardConfig
from .contracts.events import AuditEventType
from .contracts.records import DatasetChange, DatasetSource, Series, TimelineSnapshot, YearRecord
from .core.generator import SeriesGenerator
from .dataset.provider import DatasetProvider
from .ingestion.adapters import ImportFormat
from .ingestion.importer import DatasetImporter, ImportResult
from .notify import ChangeNotifier, Unsubscribe
from .observability import AuditLog, MetricsCollector, configure_logging
from .temporal.clock import FrameClock, ManualClock, PlaybackClock
from .temporal.timeline import TimelineState

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    TIMELINE = "timeline"
    DATASET = "dataset"


@dataclass(frozen=True)
class DashboardChange:
    """One notification to views: either the timeline or the dataset moved."""
    kind: ChangeKind
    timeline: TimelineSnapshot
    dataset: Optional[DatasetChange] = None


class DashboardEngine:
    """
    Unified engine for one dashboard.

    All state is owned by a single logical thread of control (the event
    loop running the views). Nothing here spawns threads.
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        generator: Optional[SeriesGenerator] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self._config = config or DashboardConfig()
        self._audit = AuditLog("dashboard")
        self._metrics = MetricsCollector()

        timeline_config = self._config.timeline
        self._generator = generator or SeriesGenerator(seed=self._config.dataset.seed)

        self._timeline = TimelineState(timeline_config, self._audit, self._metrics)
        self._dataset = DatasetProvider(
            generate_default=lambda: self._generator.generate(
                timeline_config.min_year, timeline_config.max_year
            ),
            load_delay_ms=self._config.dataset.load_delay_ms,
            audit=self._audit,
            metrics=self._metrics,
            sleep=sleep,
        )
        self._importer = DatasetImporter(self._audit, self._metrics)
        self._clock: Optional[PlaybackClock] = None

        self._notifier: ChangeNotifier[DashboardChange] = ChangeNotifier(
            "dashboard", on_listener_error=self._on_listener_error
        )
        self._timeline.subscribe(self._on_timeline_change)
        self._dataset.subscribe(self._on_dataset_change)

    @classmethod
    def from_env(cls) -> DashboardEngine:
        """Build from DASHBOARD_* environment variables and set up logging."""
        config = DashboardConfig.from_env()
        configure_logging(config.log_level)
        return cls(config)

    # =========================================================================
    # COMPONENTS
    # =========================================================================

    @property
    def config(self) -> DashboardConfig:
        return self._config

    @property
    def timeline(self) -> TimelineState:
        return self._timeline

    @property
    def dataset(self) -> DatasetProvider:
        return self._dataset

    @property
    def importer(self) -> DatasetImporter:
        return self._importer

    @property
    def audit(self) -> AuditLog:
        return self._audit

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def clock(self) -> Optional[PlaybackClock]:
        return self._clock

    # =========================================================================
    # VIEW INTERFACE
    # =========================================================================

    def get_current_year(self) -> int:
        return self._timeline.current_year

    def get_record(self, year: int) -> YearRecord:
        """Raises RecordNotFound when the active series has no such year."""
        return self._dataset.lookup(year)

    def current_record(self) -> Optional[YearRecord]:
        """Record for the current year, or None for "no data"."""
        return self._dataset.get(self._timeline.current_year)

    def subscribe(self, listener: Callable[[DashboardChange], None]) -> Unsubscribe:
        return self._notifier.subscribe(listener)

    def play(self) -> None:
        self._timeline.play()

    def pause(self) -> None:
        self._timeline.pause()

    def toggle_playback(self) -> bool:
        return self._timeline.toggle_playback()

    def set_speed(self, speed: float) -> None:
        """Programmatic path: out-of-range speeds raise RangeError."""
        self._timeline.set_speed(speed)

    def set_year(self, year: int) -> None:
        self._timeline.set_year(year)

    # =========================================================================
    # DATASET
    # =========================================================================

    @property
    def active_source(self) -> DatasetSource:
        return self._dataset.source

    async def load(self) -> Series:
        return await self._dataset.load()

    async def import_dataset(
        self,
        raw: Union[bytes, str],
        declared_format: Union[ImportFormat, str]
    ) -> ImportResult:
        """Validate and activate an import unless a newer source switch wins."""
        ticket = self._dataset.request_id
        # Deferred completion: callers never block the loop on parsing
        await asyncio.sleep(0)
        result = self._importer.import_bytes(raw, declared_format)
        return self._apply_import(result, ticket)

    async def import_named(self, raw: Union[bytes, str], filename: str) -> ImportResult:
        """Same as import_dataset, with the format taken from the file extension."""
        ticket = self._dataset.request_id
        await asyncio.sleep(0)
        result = self._importer.import_named(raw, filename)
        return self._apply_import(result, ticket)

    def reset_dataset(self) -> None:
        self._dataset.reset()

    def _apply_import(self, result: ImportResult, ticket: int) -> ImportResult:
        if not result.is_valid:
            return result
        if self._dataset.replace(result.series, expected_request_id=ticket):
            return result
        logger.info("Import superseded by a newer dataset request")
        return replace(result, superseded=True)

    # =========================================================================
    # PLAYBACK CLOCK
    # =========================================================================

    def attach_clock(self, clock: PlaybackClock) -> PlaybackClock:
        if clock.timeline is not self._timeline:
            raise ValueError("Clock drives a different timeline")
        if isinstance(self._clock, FrameClock):
            self._clock.stop()
        self._clock = clock
        return clock

    def manual_clock(self) -> ManualClock:
        """Attach and return a deterministic virtual clock."""
        return self.attach_clock(ManualClock(self._timeline))

    def frame_clock(self) -> FrameClock:
        """Attach and return a live frame clock using the configured interval."""
        return self.attach_clock(
            FrameClock(self._timeline, frame_interval_ms=self._config.playback.frame_interval_ms)
        )

    def stop(self) -> None:
        """Tear down: stop the live clock and pause playback."""
        if isinstance(self._clock, FrameClock):
            self._clock.stop()
        self._timeline.pause()

    # =========================================================================
    # FAN-OUT
    # =========================================================================

    def _on_timeline_change(self, snapshot: TimelineSnapshot) -> None:
        self._notifier.publish(DashboardChange(kind=ChangeKind.TIMELINE, timeline=snapshot))

    def _on_dataset_change(self, change: DatasetChange) -> None:
        self._notifier.publish(DashboardChange(
            kind=ChangeKind.DATASET,
            timeline=self._timeline.snapshot(),
            dataset=change,
        ))

    def _on_listener_error(self, channel: str, exc: BaseException) -> None:
        self._metrics.increment("listener_failures_total")
        self._audit.record(
            AuditEventType.ERROR, "listener_failed",
            layer="dashboard", channel=channel, error_type=type(exc).__name__
        )
