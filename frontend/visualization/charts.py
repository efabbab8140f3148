"""
Chart Visualization Contracts

Responsibility:
Deterministic transformation of record DTOs into renderable chart views.
Input: YearRecordDTO + TimelineControlDTO -> Output: chart view models

DETERMINISTIC:
Same records + same timeline = identical views. Rendering components
draw these as given; no data logic lives in them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from backend.config import DashboardConfig
from backend.engine import DashboardEngine

from frontend.dtos import AvailabilityState, PartyValuesDTO, TimelineControlDTO, YearRecordDTO
from frontend.mapper import DTOMapper

PARTY_COLOR_TOKENS: Tuple[str, str] = ("green-500", "blue-500")


@dataclass(frozen=True)
class ChartDataset:
    """One plotted series."""
    label: str
    values: Tuple[Optional[float], ...]
    color_token: str


@dataclass(frozen=True)
class LineChartView:
    """
    Population trends over the whole active series.

    marker_position places the current-year indicator across the plot,
    0.0 at min_year and 1.0 at max_year.
    """
    title: str
    y_axis_label: str
    x_labels: Tuple[str, ...]
    datasets: Tuple[ChartDataset, ...]
    marker_position: float
    marker_year: int
    begin_at_zero: bool = True


@dataclass(frozen=True)
class BarChartView:
    """Per-party bars for the current year. Missing values are drawn as 0."""
    title: str
    labels: Tuple[str, str]
    dataset: ChartDataset
    availability: AvailabilityState


@dataclass(frozen=True)
class PieChartView:
    title: str
    labels: Tuple[str, str]
    values: Tuple[float, float]
    color_tokens: Tuple[str, str]
    availability: AvailabilityState


@dataclass(frozen=True)
class DashboardCharts:
    population: LineChartView
    casualties: BarChartView
    territory: PieChartView
    prisoners: BarChartView


class ChartBuilder:
    """Builds the four dashboard charts from DTOs."""

    def __init__(self, party_labels: Tuple[str, str] = ("Party A", "Party B")):
        self._labels = party_labels

    @classmethod
    def from_config(cls, config: DashboardConfig) -> ChartBuilder:
        return cls(party_labels=config.party_labels)

    def population_line(
        self,
        records: Sequence[YearRecordDTO],
        timeline: TimelineControlDTO
    ) -> LineChartView:
        label_a, label_b = self._labels
        return LineChartView(
            title="Population Trends",
            y_axis_label="Population",
            x_labels=tuple(str(r.year) for r in records),
            datasets=(
                ChartDataset(
                    f"{label_a} Population",
                    tuple(r.population.party_a for r in records),
                    PARTY_COLOR_TOKENS[0],
                ),
                ChartDataset(
                    f"{label_b} Population",
                    tuple(r.population.party_b for r in records),
                    PARTY_COLOR_TOKENS[1],
                ),
            ),
            marker_position=timeline.progress,
            marker_year=timeline.current_year,
        )

    def casualties_bar(self, record: YearRecordDTO) -> BarChartView:
        return self._bar("Casualties", record.year, record.casualties)

    def prisoners_bar(self, record: YearRecordDTO) -> BarChartView:
        return self._bar("Prisoners", record.year, record.prisoners)

    def territory_pie(self, record: YearRecordDTO) -> PieChartView:
        label_a, label_b = self._labels
        return PieChartView(
            title=f"Territory Distribution ({record.year})",
            labels=(f"{label_a} Territory", f"{label_b} Territory"),
            values=record.territory.or_zero(),
            color_tokens=PARTY_COLOR_TOKENS,
            availability=record.territory.availability,
        )

    def build(self, engine: DashboardEngine, mapper: Optional[DTOMapper] = None) -> DashboardCharts:
        """All four charts for the engine's current year."""
        mapper = mapper or DTOMapper()
        timeline = mapper.map_timeline(engine.timeline.snapshot(), engine.config.timeline)
        current = mapper.map_current(engine)
        return DashboardCharts(
            population=self.population_line(mapper.map_series(engine), timeline),
            casualties=self.casualties_bar(current),
            territory=self.territory_pie(current),
            prisoners=self.prisoners_bar(current),
        )

    def _bar(self, name: str, year: int, values: PartyValuesDTO) -> BarChartView:
        return BarChartView(
            title=f"{name} ({year})",
            labels=self._labels,
            dataset=ChartDataset(name, values.or_zero(), PARTY_COLOR_TOKENS[0]),
            availability=values.availability,
        )
