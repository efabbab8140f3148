"""
Playback Clock Tests
====================

Tests verifying that clocks only forward time and that playback is
reproducible from a tick log.
"""

import asyncio

import pytest

from backend.contracts.base import RangeError
from backend.observability import MetricsCollector
from backend.temporal import FrameClock, ManualClock, TimelineState


class FakeTime:
    """Monotonic time source advanced by the fake sleep."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.now += seconds
        await asyncio.sleep(0)


class TestManualClock:

    def test_advance_forwards_to_timeline(self):
        timeline = TimelineState()
        clock = ManualClock(timeline)
        timeline.play()
        assert clock.advance(1000) is True
        assert timeline.current_year == 1949
        assert clock.now_ms == 1000
        assert clock.tick_count() == 1

    def test_advance_frames_counts_years(self):
        timeline = TimelineState()
        clock = ManualClock(timeline)
        timeline.play()
        # 10 seconds of 100ms frames at speed 1 = 10 years
        assert clock.advance_frames(100, 100) == 10
        assert timeline.current_year == 1958

    def test_paused_timeline_does_not_move(self):
        timeline = TimelineState()
        clock = ManualClock(timeline)
        assert clock.advance_frames(16, 500) == 0
        assert timeline.current_year == 1948
        assert clock.tick_count() == 500

    def test_rejected_tick_not_counted(self):
        timeline = TimelineState()
        clock = ManualClock(timeline)
        timeline.play()

        with pytest.raises(RangeError):
            clock.advance(-5)

        assert clock.tick_count() == 0
        assert clock.now_ms == 0
        assert clock.tick_log == ()

    def test_long_playback_keeps_metrics_bounded(self):
        metrics = MetricsCollector(history_limit=64)
        timeline = TimelineState(metrics=metrics)
        clock = ManualClock(timeline)
        timeline.play()

        clock.advance_frames(16, 100_000)

        assert len(metrics.get_metric("ticks_total")) == 1
        assert metrics.value("ticks_total") == 100_000
        # 63 frames of 16ms per year, accumulator restarts on each advance
        assert metrics.value("years_advanced_total") == 100_000 // 63

    def test_replay_reproduces_trajectory(self):
        original = TimelineState()
        original.play()
        recorder = ManualClock(original)
        for elapsed in (16, 300, 700, 16, 1200, 5, 999, 1):
            recorder.advance(elapsed)

        copy = TimelineState()
        copy.play()
        ManualClock(copy).replay(recorder.tick_log)

        assert copy.snapshot() == original.snapshot()
        assert copy.accumulated_ms == original.accumulated_ms

    def test_is_not_live(self):
        assert ManualClock(TimelineState()).is_live() is False


class TestFrameClock:

    def test_first_frame_only_sets_baseline(self):
        fake = FakeTime()
        timeline = TimelineState()
        timeline.play()
        clock = FrameClock(timeline, time_source=fake, sleep=fake.sleep)
        assert clock.frame() is False
        assert clock.tick_count() == 0

    def test_measures_elapsed_time(self):
        fake = FakeTime()
        timeline = TimelineState()
        timeline.play()
        clock = FrameClock(timeline, time_source=fake, sleep=fake.sleep)
        clock.frame()
        fake.now += 1.0
        assert clock.frame() is True
        assert timeline.current_year == 1949

    def test_run_bounded_frames(self):
        fake = FakeTime()
        timeline = TimelineState()
        timeline.play()
        clock = FrameClock(timeline, frame_interval_ms=250, time_source=fake, sleep=fake.sleep)

        frames = asyncio.run(clock.run(max_frames=29))

        assert frames == 29
        # 28 measured intervals of 250ms
        assert timeline.current_year == 1955
        assert clock.running is False

    def test_stop_ends_loop(self):
        fake = FakeTime()
        timeline = TimelineState()
        clock = FrameClock(timeline, frame_interval_ms=250, time_source=fake, sleep=fake.sleep)

        def stop_at_1950(snapshot):
            if snapshot.current_year == 1950:
                clock.stop()

        timeline.subscribe(stop_at_1950)
        timeline.set_speed(2.0)
        timeline.play()
        asyncio.run(clock.run())

        assert timeline.current_year == 1950

    def test_run_twice_concurrently_rejected(self):
        fake = FakeTime()
        clock = FrameClock(TimelineState(), time_source=fake, sleep=fake.sleep)

        async def scenario():
            first = asyncio.ensure_future(clock.run(max_frames=5))
            await asyncio.sleep(0)
            with pytest.raises(RuntimeError):
                await clock.run(max_frames=1)
            return await first

        assert asyncio.run(scenario()) == 5

    def test_is_live(self):
        assert FrameClock(TimelineState()).is_live() is True
