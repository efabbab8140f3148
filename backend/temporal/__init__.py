"""
Temporal Layer
==============

Playback and scrubbing state for the dashboard timeline.

INVARIANTS:
- min_year <= current_year <= max_year at all times
- min_speed <= speed <= max_speed at all times
- Playback advances at most one year per tick and loops at max_year
- Rejected calls leave state unchanged

Modules:
- timeline: TimelineState transitions
- clock: frame-loop and virtual clocks that drive tick()
"""

from .timeline import TimelineState
from .clock import PlaybackClock, ManualClock, FrameClock

__all__ = [
    'TimelineState',
    'PlaybackClock',
    'ManualClock',
    'FrameClock',
]
