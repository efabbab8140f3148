"""
Record and Timeline DTOs

Read-only shapes the views render. Nothing here refers to backend
classes; the mapper is the only place that knows both sides.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from .core import AvailabilityState, DTOVersion, PlaybackState


@dataclass(frozen=True)
class PartyValuesDTO:
    """One statistic split between the two parties."""
    party_a: Optional[float]
    party_b: Optional[float]
    availability: AvailabilityState

    @classmethod
    def missing(cls) -> PartyValuesDTO:
        return cls(party_a=None, party_b=None, availability=AvailabilityState.MISSING)

    @property
    def is_present(self) -> bool:
        return self.availability is AvailabilityState.PRESENT

    def or_zero(self) -> Tuple[float, float]:
        """Values for bar charts: absent values render as 0."""
        return (self.party_a or 0, self.party_b or 0)


@dataclass(frozen=True)
class YearRecordDTO:
    """
    Statistics for one year as the views see them.

    availability is PRESENT when the active series holds the year,
    MISSING when it does not, LOADING before the first load finishes.
    Sections absent from an imported record are MISSING individually.
    """
    dto_version: DTOVersion
    year: int
    availability: AvailabilityState
    population: PartyValuesDTO
    casualties: PartyValuesDTO
    territory: PartyValuesDTO
    prisoners: PartyValuesDTO
    source: Optional[str]   # "default" / "custom"; None while loading

    @property
    def is_present(self) -> bool:
        return self.availability is AvailabilityState.PRESENT


@dataclass(frozen=True)
class TimelineControlDTO:
    """Everything the timeline control renders."""
    dto_version: DTOVersion
    current_year: int
    min_year: int
    max_year: int
    progress: float          # marker position on the track, 0.0 to 1.0
    playback: PlaybackState
    speed: float
    speed_label: str         # e.g. "1.5x"
    can_speed_up: bool
    can_slow_down: bool
