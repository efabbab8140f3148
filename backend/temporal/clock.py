"""
Playback Clocks
===============

Drivers that feed elapsed time into TimelineState.tick.

MODES:
======
1. FrameClock: cooperative asyncio frame loop measuring real elapsed time
2. ManualClock: virtual time advanced explicitly (tests, replays)

GUARANTEES:
===========
- Never a background thread; every tick runs on the caller's event loop
- Same tick sequence = same timeline trajectory
- ManualClock keeps a tick log that can be replayed onto another timeline
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple
import asyncio
import logging
import time

from .timeline import TimelineState

logger = logging.getLogger(__name__)


class PlaybackClock(ABC):
    """Forwards elapsed milliseconds to a timeline."""

    def __init__(self, timeline: TimelineState):
        self._timeline = timeline
        self._tick_count = 0

    @property
    def timeline(self) -> TimelineState:
        return self._timeline

    def tick_count(self) -> int:
        """Number of ticks forwarded."""
        return self._tick_count

    def _forward(self, elapsed_ms: float) -> bool:
        advanced = self._timeline.tick(elapsed_ms)
        self._tick_count += 1
        return advanced

    @abstractmethod
    def is_live(self) -> bool:
        """Whether the clock reads real time."""


class ManualClock(PlaybackClock):
    """
    Deterministic virtual clock.

    Time only moves when advance() is called; nothing waits on a real
    frame scheduler, so playback tests never depend on timing.
    """

    def __init__(self, timeline: TimelineState):
        super().__init__(timeline)
        self._now_ms: float = 0.0
        self._ticks: List[float] = []

    def is_live(self) -> bool:
        return False

    @property
    def now_ms(self) -> float:
        """Virtual time since the clock was created."""
        return self._now_ms

    @property
    def tick_log(self) -> Tuple[float, ...]:
        return tuple(self._ticks)

    def advance(self, elapsed_ms: float) -> bool:
        """Advance virtual time by one tick. Returns True if the year advanced."""
        advanced = self._forward(elapsed_ms)
        self._now_ms += elapsed_ms
        self._ticks.append(elapsed_ms)
        return advanced

    def advance_frames(self, frame_ms: float, count: int) -> int:
        """Advance count equal ticks; returns how many advanced the year."""
        return sum(1 for _ in range(count) if self.advance(frame_ms))

    def replay(self, tick_log: Iterable[float]) -> int:
        """Re-apply a recorded tick sequence; returns years advanced."""
        return sum(1 for elapsed in tick_log if self.advance(elapsed))

    def __repr__(self) -> str:
        return f"ManualClock(now={self._now_ms}ms, ticks={len(self._ticks)})"


class FrameClock(PlaybackClock):
    """
    Live frame loop.

    Each frame measures the time since the previous frame with the
    injected monotonic time source and forwards it to the timeline.
    """

    def __init__(
        self,
        timeline: TimelineState,
        frame_interval_ms: float = 16.0,
        time_source: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        super().__init__(timeline)
        self._frame_interval_ms = frame_interval_ms
        self._time_source = time_source
        self._sleep = sleep
        self._running = False
        self._last_frame: Optional[float] = None

    def is_live(self) -> bool:
        return True

    @property
    def running(self) -> bool:
        return self._running

    def frame(self) -> bool:
        """Evaluate one frame now. Returns True if the year advanced."""
        now = self._time_source()
        if self._last_frame is None:
            self._last_frame = now
            return False
        elapsed_ms = max(0.0, (now - self._last_frame) * 1000.0)
        self._last_frame = now
        return self._forward(elapsed_ms)

    async def run(self, max_frames: Optional[int] = None) -> int:
        """
        Run the frame loop until stop() is called (or max_frames elapse).

        Returns the number of frames evaluated.
        """
        if self._running:
            raise RuntimeError("FrameClock is already running")
        self._running = True
        self._last_frame = None
        frames = 0
        logger.debug("Frame loop started at %.1fms per frame", self._frame_interval_ms)
        try:
            while self._running and (max_frames is None or frames < max_frames):
                self.frame()
                frames += 1
                await self._sleep(self._frame_interval_ms / 1000.0)
        finally:
            self._running = False
            logger.debug("Frame loop stopped after %d frames", frames)
        return frames

    def stop(self) -> None:
        self._running = False
