"""
Timeline State Machine
======================

Current year, playback flag and speed for one dashboard instance.

TRANSITIONS:
============
- set_year(y)        seek; allowed while playing, does not pause
- play() / pause()   idempotent
- toggle_playback()  play when paused, pause when playing
- set_speed(s)       programmatic path; out-of-range values are REJECTED
- adjust_speed(s)    user-control path; out-of-range values are CLAMPED
- step_speed(d)      rewind/fast-forward buttons; clamped
- tick(elapsed_ms)   playback clock input

PLAYBACK CLOCK:
===============
While playing, elapsed time accumulates. Once it reaches 1000 / speed ms
the year advances by exactly one and the accumulator resets. A long
frame never skips years. Past max_year playback wraps to min_year and
keeps looping until paused.

Failed calls raise RangeError and leave every field unchanged.
"""

from __future__ import annotations
from typing import Callable, Optional
import logging
import math

from ..config import TimelineConfig
from ..contracts.base import ErrorCode, RangeError
from ..contracts.events import AuditEventType
from ..contracts.records import TimelineSnapshot
from ..notify import ChangeNotifier, Unsubscribe
from ..observability import AuditLog, MetricsCollector

logger = logging.getLogger(__name__)

MS_PER_SECOND = 1000.0


def _is_number(value: object) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


class TimelineState:
    """
    Single-instance-per-dashboard playback state.

    Owned by one logical thread of control. Views read it synchronously
    or subscribe for snapshots after every change.
    """

    def __init__(
        self,
        config: Optional[TimelineConfig] = None,
        audit: Optional[AuditLog] = None,
        metrics: Optional[MetricsCollector] = None
    ):
        self._config = config or TimelineConfig()
        self._audit = audit
        self._metrics = metrics

        self._current_year: int = self._config.min_year
        self._is_playing: bool = False
        self._speed: float = float(self._config.initial_speed)
        self._accumulated_ms: float = 0.0

        self._notifier: ChangeNotifier[TimelineSnapshot] = ChangeNotifier(
            "timeline", on_listener_error=self._on_listener_error
        )

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def current_year(self) -> int:
        return self._current_year

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def min_year(self) -> int:
        return self._config.min_year

    @property
    def max_year(self) -> int:
        return self._config.max_year

    @property
    def min_speed(self) -> float:
        return self._config.min_speed

    @property
    def max_speed(self) -> float:
        return self._config.max_speed

    @property
    def interval_ms(self) -> float:
        """Playback time per year at the current speed."""
        return MS_PER_SECOND / self._speed

    @property
    def accumulated_ms(self) -> float:
        return self._accumulated_ms

    def snapshot(self) -> TimelineSnapshot:
        return TimelineSnapshot(
            current_year=self._current_year,
            is_playing=self._is_playing,
            speed=self._speed,
            min_year=self._config.min_year,
            max_year=self._config.max_year,
        )

    def subscribe(self, listener: Callable[[TimelineSnapshot], None]) -> Unsubscribe:
        return self._notifier.subscribe(listener)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def set_year(self, year: int) -> None:
        """Seek to year. Does not change the playback flag."""
        if isinstance(year, bool) or not isinstance(year, int):
            self._reject(f"Year must be an integer, got {year!r}", ErrorCode.YEAR_OUT_OF_RANGE)
        if not self.min_year <= year <= self.max_year:
            self._reject(
                f"Year {year} outside [{self.min_year}, {self.max_year}]",
                ErrorCode.YEAR_OUT_OF_RANGE
            )

        self._accumulated_ms = 0.0
        if year == self._current_year:
            return
        self._current_year = year
        self._record("set_year", year=year)
        self._publish()

    def play(self) -> None:
        if self._is_playing:
            return
        self._is_playing = True
        self._record("play")
        self._publish()

    def pause(self) -> None:
        if not self._is_playing:
            return
        self._is_playing = False
        self._accumulated_ms = 0.0
        self._record("pause")
        self._publish()

    def toggle_playback(self) -> bool:
        """Returns the new playback flag."""
        if self._is_playing:
            self.pause()
        else:
            self.play()
        return self._is_playing

    def set_speed(self, speed: float) -> None:
        """Programmatic speed change. Rejects values outside the bounds."""
        if not _is_number(speed):
            self._reject(f"Speed must be a finite number, got {speed!r}", ErrorCode.SPEED_OUT_OF_RANGE)
        if not self.min_speed <= speed <= self.max_speed:
            self._reject(
                f"Speed {speed} outside [{self.min_speed}, {self.max_speed}]",
                ErrorCode.SPEED_OUT_OF_RANGE
            )
        self._apply_speed(float(speed))

    def adjust_speed(self, speed: float) -> float:
        """User-control speed change. Clamps into the bounds; returns the applied speed."""
        if not _is_number(speed):
            self._reject(f"Speed must be a finite number, got {speed!r}", ErrorCode.SPEED_OUT_OF_RANGE)
        clamped = min(self.max_speed, max(self.min_speed, float(speed)))
        self._apply_speed(clamped)
        return clamped

    def step_speed(self, direction: int) -> float:
        """Move one configured step faster (direction > 0) or slower (< 0)."""
        if direction == 0:
            return self._speed
        step = self._config.speed_step if direction > 0 else -self._config.speed_step
        return self.adjust_speed(self._speed + step)

    def tick(self, elapsed_ms: float) -> bool:
        """
        Feed elapsed wall time into the playback clock.

        Returns True when the year advanced. At most one year per call.
        """
        if not _is_number(elapsed_ms) or elapsed_ms < 0:
            self._reject(
                f"Elapsed time must be a finite non-negative number, got {elapsed_ms!r}",
                ErrorCode.INVALID_ELAPSED_TIME
            )
        if not self._is_playing:
            return False

        if self._metrics:
            self._metrics.increment("ticks_total")

        self._accumulated_ms += elapsed_ms
        if self._accumulated_ms < self.interval_ms:
            return False

        self._accumulated_ms = 0.0
        if self._current_year >= self.max_year:
            self._current_year = self.min_year
        else:
            self._current_year += 1

        if self._metrics:
            self._metrics.increment("years_advanced_total")
        self._publish()
        return True

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _apply_speed(self, speed: float) -> None:
        if speed == self._speed:
            return
        self._speed = speed
        self._record("set_speed", speed=speed)
        self._publish()

    def _reject(self, message: str, code: ErrorCode) -> None:
        error = RangeError(message, code)
        logger.debug("Rejected timeline call: %s", message)
        if self._audit:
            self._audit.record(
                AuditEventType.ERROR, "timeline_rejected",
                layer="temporal", error=error.to_error(), reason=message
            )
        raise error

    def _record(self, action: str, **metadata: object) -> None:
        if self._audit:
            self._audit.record(AuditEventType.TIMELINE, action, layer="temporal", **metadata)

    def _publish(self) -> None:
        self._notifier.publish(self.snapshot())

    def _on_listener_error(self, channel: str, exc: BaseException) -> None:
        if self._metrics:
            self._metrics.increment("listener_failures_total")
        if self._audit:
            self._audit.record(
                AuditEventType.ERROR, "listener_failed",
                layer="temporal", channel=channel, error_type=type(exc).__name__
            )

    def __repr__(self) -> str:
        state = "playing" if self._is_playing else "paused"
        return f"TimelineState(year={self._current_year}, {state}, speed={self._speed})"
