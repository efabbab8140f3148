"""
Record Contracts

Immutable data shapes for the yearly statistics series.

INVARIANTS:
===========
- A Series is ordered by year ascending, one record per year
- A Series is never mutated; replacing data means a new Series object
- Generated records satisfy territory.party_a + territory.party_b == 100
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

from .base import RecordNotFound


Number = Union[int, float]


class Party(Enum):
    """The two parties every statistic is split between."""
    A = "party_a"
    B = "party_b"


class DatasetSource(Enum):
    """Which dataset is currently active."""
    DEFAULT = "default"
    CUSTOM = "custom"


# =============================================================================
# YEARLY RECORD
# =============================================================================

@dataclass(frozen=True)
class PartyValues:
    """One number per party."""
    party_a: Number
    party_b: Number

    @property
    def total(self) -> Number:
        return self.party_a + self.party_b

    def to_dict(self) -> Dict[str, Number]:
        return {Party.A.value: self.party_a, Party.B.value: self.party_b}


@dataclass(frozen=True)
class YearRecord:
    """
    Statistics for a single year.

    Imported records may omit casualties, territory and prisoners.
    Absent sections are None and render as "no data".
    """
    year: int
    population: PartyValues
    casualties: Optional[PartyValues] = None
    territory: Optional[PartyValues] = None
    prisoners: Optional[PartyValues] = None

    def to_dict(self) -> dict:
        """Nested form, identical to the structured import format."""
        data: dict = {
            'year': self.year,
            'population': self.population.to_dict(),
        }
        for name in ('casualties', 'territory', 'prisoners'):
            values = getattr(self, name)
            if values is not None:
                data[name] = values.to_dict()
        return data


# =============================================================================
# SERIES
# =============================================================================

@dataclass(frozen=True)
class Series:
    """
    Immutable ordered sequence of YearRecord.

    Records are sorted by year on construction. Duplicate years are a
    programming error here; the importer rejects them before this point.
    """
    records: Tuple[YearRecord, ...]
    _index: Dict[int, YearRecord] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        ordered = tuple(sorted(self.records, key=lambda r: r.year))
        index: Dict[int, YearRecord] = {}
        for record in ordered:
            if record.year in index:
                raise ValueError(f"Duplicate year in series: {record.year}")
            index[record.year] = record
        object.__setattr__(self, 'records', ordered)
        object.__setattr__(self, '_index', index)

    @classmethod
    def of(cls, records: Iterable[YearRecord]) -> Series:
        return cls(records=tuple(records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[YearRecord]:
        return iter(self.records)

    def __contains__(self, year: object) -> bool:
        return year in self._index

    @property
    def years(self) -> Tuple[int, ...]:
        return tuple(r.year for r in self.records)

    @property
    def min_year(self) -> Optional[int]:
        return self.records[0].year if self.records else None

    @property
    def max_year(self) -> Optional[int]:
        return self.records[-1].year if self.records else None

    @property
    def is_contiguous(self) -> bool:
        """True when no year between min_year and max_year is missing."""
        if not self.records:
            return True
        return len(self.records) == self.max_year - self.min_year + 1

    def lookup(self, year: int) -> YearRecord:
        """Return the record for year, or raise RecordNotFound."""
        try:
            return self._index[year]
        except (KeyError, TypeError):
            raise RecordNotFound(year) from None

    def get(self, year: int, default: Optional[YearRecord] = None) -> Optional[YearRecord]:
        try:
            return self._index.get(year, default)
        except TypeError:
            return default


# =============================================================================
# CHANGE NOTIFICATIONS
# =============================================================================

@dataclass(frozen=True)
class TimelineSnapshot:
    """Immutable view of the timeline state at one moment."""
    current_year: int
    is_playing: bool
    speed: float
    min_year: int
    max_year: int

    @property
    def progress(self) -> float:
        """Position of the current year on the track, 0.0 to 1.0."""
        span = self.max_year - self.min_year
        if span == 0:
            return 0.0
        return (self.current_year - self.min_year) / span


@dataclass(frozen=True)
class DatasetChange:
    """Emitted when the active series is swapped."""
    source: DatasetSource
    series: Optional[Series]
    request_id: int
