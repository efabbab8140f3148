"""
Backend to DTO Mapper

Converts backend records and snapshots to read-only view DTOs.

MAPPING BOUNDARY:
=================
This is the ONLY place where backend values become DTOs.
All conversion happens here, nowhere else.

MAPPING RULES:
==============
1. Never expose backend classes to views
2. Always include explicit availability
3. A missing year or section becomes MISSING, never a guessed value
4. Mapping never raises for a lookup miss
"""

from __future__ import annotations
from typing import Optional, Tuple

from backend.config import TimelineConfig
from backend.contracts.records import PartyValues, TimelineSnapshot, YearRecord
from backend.engine import DashboardEngine

from frontend.dtos import (
    DTOVersion, AvailabilityState, PlaybackState,
    PartyValuesDTO, YearRecordDTO, TimelineControlDTO,
)


def format_speed(speed: float) -> str:
    """1.0 -> "1x", 1.5 -> "1.5x"."""
    return f"{speed:g}x"


class DTOMapper:
    """
    Maps backend values to view DTOs.

    SINGLE POINT OF CONVERSION:
    ===========================
    All backend -> view conversion goes through this class.
    """

    # =========================================================================
    # RECORD MAPPING
    # =========================================================================

    def map_record(self, engine: DashboardEngine, year: int) -> YearRecordDTO:
        """Record for year in the engine's active series, or a MISSING/LOADING DTO."""
        dataset = engine.dataset
        if not dataset.is_loaded:
            return self._empty_record(year, AvailabilityState.LOADING, source=None)

        record = dataset.get(year)
        source = dataset.source.value
        if record is None:
            return self._empty_record(year, AvailabilityState.MISSING, source=source)
        return self.map_year_record(record, source)

    def map_current(self, engine: DashboardEngine) -> YearRecordDTO:
        return self.map_record(engine, engine.get_current_year())

    def map_series(self, engine: DashboardEngine) -> Tuple[YearRecordDTO, ...]:
        """Every record of the active series in year order; empty before loading."""
        series = engine.dataset.active
        if series is None:
            return ()
        source = engine.dataset.source.value
        return tuple(self.map_year_record(record, source) for record in series)

    def map_year_record(self, record: YearRecord, source: Optional[str] = None) -> YearRecordDTO:
        return YearRecordDTO(
            dto_version=DTOVersion.current(),
            year=record.year,
            availability=AvailabilityState.PRESENT,
            population=self._map_values(record.population),
            casualties=self._map_values(record.casualties),
            territory=self._map_values(record.territory),
            prisoners=self._map_values(record.prisoners),
            source=source,
        )

    # =========================================================================
    # TIMELINE MAPPING
    # =========================================================================

    def map_timeline(
        self,
        snapshot: TimelineSnapshot,
        bounds: Optional[TimelineConfig] = None
    ) -> TimelineControlDTO:
        """Map a timeline snapshot; bounds decide which speed buttons are enabled."""
        bounds = bounds or TimelineConfig()
        return TimelineControlDTO(
            dto_version=DTOVersion.current(),
            current_year=snapshot.current_year,
            min_year=snapshot.min_year,
            max_year=snapshot.max_year,
            progress=snapshot.progress,
            playback=PlaybackState.PLAYING if snapshot.is_playing else PlaybackState.PAUSED,
            speed=snapshot.speed,
            speed_label=format_speed(snapshot.speed),
            can_speed_up=snapshot.speed < bounds.max_speed,
            can_slow_down=snapshot.speed > bounds.min_speed,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _map_values(values: Optional[PartyValues]) -> PartyValuesDTO:
        if values is None:
            return PartyValuesDTO.missing()
        return PartyValuesDTO(
            party_a=values.party_a,
            party_b=values.party_b,
            availability=AvailabilityState.PRESENT,
        )

    @staticmethod
    def _empty_record(year: int, availability: AvailabilityState, source: Optional[str]) -> YearRecordDTO:
        return YearRecordDTO(
            dto_version=DTOVersion.current(),
            year=year,
            availability=availability,
            population=PartyValuesDTO.missing(),
            casualties=PartyValuesDTO.missing(),
            territory=PartyValuesDTO.missing(),
            prisoners=PartyValuesDTO.missing(),
            source=source,
        )
