"""
DTO Contract Tests

Tests that enforce the view boundary contract.

TEST CATEGORIES:
================
1. Immutability - DTOs cannot be mutated
2. Versioning - every DTO carries the current version
3. Explicit absence - missing data is flagged, never guessed
4. Charts - deterministic views with 0 fallback in bars
"""

import asyncio
import json
from dataclasses import FrozenInstanceError

import pytest

from backend.config import DashboardConfig, DatasetConfig
from backend.engine import DashboardEngine
from frontend.dtos import AvailabilityState, DTOVersion, PlaybackState
from frontend.mapper import DTOMapper, format_speed
from frontend.visualization import ChartBuilder


async def no_delay(_seconds):
    await asyncio.sleep(0)


def make_engine() -> DashboardEngine:
    config = DashboardConfig(dataset=DatasetConfig(load_delay_ms=0, seed=99))
    return DashboardEngine(config, sleep=no_delay)


@pytest.fixture
def mapper():
    return DTOMapper()


@pytest.fixture
def engine():
    engine = make_engine()
    asyncio.run(engine.load())
    return engine


GAPPY_IMPORT = json.dumps([
    {"year": 1948, "population": {"party_a": 5, "party_b": 6},
     "casualties": {"party_a": 7, "party_b": 8}},
    {"year": 1950, "population": {"party_a": 9, "party_b": 10}},
]).encode("utf-8")


# =============================================================================
# IMMUTABILITY TESTS
# =============================================================================

class TestDTOImmutability:

    def test_record_dto_is_frozen(self, mapper, engine):
        dto = mapper.map_record(engine, 1948)
        with pytest.raises(FrozenInstanceError):
            dto.year = 1949

    def test_timeline_dto_is_frozen(self, mapper, engine):
        dto = mapper.map_timeline(engine.timeline.snapshot())
        with pytest.raises(FrozenInstanceError):
            dto.current_year = 2000


# =============================================================================
# RECORD MAPPING TESTS
# =============================================================================

class TestRecordMapping:

    def test_present_record(self, mapper, engine):
        dto = mapper.map_record(engine, 1967)
        record = engine.get_record(1967)

        assert dto.dto_version is DTOVersion.current()
        assert dto.availability is AvailabilityState.PRESENT
        assert dto.population.party_a == record.population.party_a
        assert dto.territory.party_a + dto.territory.party_b == 100
        assert dto.source == "default"

    def test_missing_year_never_raises(self, mapper, engine):
        dto = mapper.map_record(engine, 1800)
        assert dto.availability is AvailabilityState.MISSING
        assert dto.population.party_a is None

    def test_loading_before_first_load(self, mapper):
        dto = mapper.map_record(make_engine(), 1948)
        assert dto.availability is AvailabilityState.LOADING
        assert dto.source is None

    def test_missing_sections_flagged(self, mapper, engine):
        asyncio.run(engine.import_dataset(GAPPY_IMPORT, "json"))
        dto = mapper.map_record(engine, 1950)

        assert dto.is_present
        assert dto.population.is_present
        assert dto.casualties.availability is AvailabilityState.MISSING
        assert dto.source == "custom"

    def test_gap_year_missing(self, mapper, engine):
        asyncio.run(engine.import_dataset(GAPPY_IMPORT, "json"))
        assert mapper.map_record(engine, 1949).availability is AvailabilityState.MISSING

    def test_map_series_order(self, mapper, engine):
        years = [dto.year for dto in mapper.map_series(engine)]
        assert years == list(range(1948, 2025))

    def test_map_series_empty_before_load(self, mapper):
        assert mapper.map_series(make_engine()) == ()


# =============================================================================
# TIMELINE MAPPING TESTS
# =============================================================================

class TestTimelineMapping:

    def test_initial_controls(self, mapper, engine):
        dto = mapper.map_timeline(engine.timeline.snapshot())
        assert dto.playback is PlaybackState.PAUSED
        assert dto.speed_label == "1x"
        assert dto.progress == 0.0
        assert dto.can_speed_up and dto.can_slow_down

    def test_bounds_disable_buttons(self, mapper, engine):
        engine.timeline.adjust_speed(2.0)
        engine.play()
        dto = mapper.map_timeline(engine.timeline.snapshot(), engine.config.timeline)
        assert dto.playback is PlaybackState.PLAYING
        assert dto.can_speed_up is False
        assert dto.can_slow_down is True

    def test_progress_at_end(self, mapper, engine):
        engine.set_year(2024)
        assert mapper.map_timeline(engine.timeline.snapshot()).progress == 1.0

    @pytest.mark.parametrize("speed,label", [(0.5, "0.5x"), (1.0, "1x"), (1.5, "1.5x"), (2.0, "2x")])
    def test_speed_label(self, speed, label):
        assert format_speed(speed) == label


# =============================================================================
# CHART TESTS
# =============================================================================

class TestCharts:

    def test_population_line_covers_series(self, engine):
        engine.set_year(1986)
        charts = ChartBuilder().build(engine)
        line = charts.population

        assert line.title == "Population Trends"
        assert len(line.x_labels) == 77
        assert line.x_labels[0] == "1948"
        assert line.datasets[0].label == "Party A Population"
        assert line.marker_year == 1986
        assert line.marker_position == pytest.approx(38 / 76)

    def test_bars_for_current_year(self, engine):
        engine.set_year(1973)
        charts = ChartBuilder().build(engine)
        record = engine.get_record(1973)

        assert charts.casualties.title == "Casualties (1973)"
        assert charts.casualties.dataset.values == (
            record.casualties.party_a, record.casualties.party_b
        )
        assert charts.prisoners.title == "Prisoners (1973)"
        assert charts.territory.title == "Territory Distribution (1973)"
        assert sum(charts.territory.values) == 100

    def test_missing_values_draw_zero(self, engine):
        asyncio.run(engine.import_dataset(GAPPY_IMPORT, "json"))
        engine.set_year(1950)
        charts = ChartBuilder().build(engine)

        assert charts.casualties.dataset.values == (0, 0)
        assert charts.casualties.availability is AvailabilityState.MISSING
        assert charts.territory.values == (0, 0)

    def test_custom_labels(self, engine):
        charts = ChartBuilder(party_labels=("North", "South")).build(engine)
        assert charts.territory.labels == ("North Territory", "South Territory")
        assert charts.casualties.labels == ("North", "South")

    def test_deterministic(self, engine):
        builder = ChartBuilder()
        assert builder.build(engine) == builder.build(engine)

    def test_labels_from_config(self):
        config = DashboardConfig(party_labels=("East", "West"))
        builder = ChartBuilder.from_config(config)
        assert builder.territory_pie(DTOMapper().map_record(make_engine(), 1948)).labels == (
            "East Territory", "West Territory"
        )
