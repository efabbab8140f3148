"""
Dataset Provider Tests
======================

INVARIANTS TESTED:
1. Concurrent loads share one generation pass and one Series object
2. Lookups never see a partially replaced dataset
3. Last request wins: stale loads and imports are discarded
4. reset() restores the generated series
"""

import asyncio

import pytest

from backend.contracts.base import ErrorCode, RecordNotFound
from backend.contracts.events import AuditEventType
from backend.contracts.records import DatasetSource, PartyValues, Series, YearRecord
from backend.core import SeriesGenerator
from backend.dataset import DatasetProvider
from backend.observability import AuditLog, MetricsCollector


def make_series(*years: int, base: int = 1000) -> Series:
    return Series.of(
        YearRecord(year=y, population=PartyValues(party_a=base + y, party_b=base - y))
        for y in years
    )


class CountingGenerator:
    """Default-series factory that counts its calls."""

    def __init__(self):
        self.calls = 0

    def __call__(self) -> Series:
        self.calls += 1
        return SeriesGenerator(seed=11).generate(1948, 2024)


async def yielding_sleep(_seconds: float) -> None:
    # Suspends once so other tasks can interleave, without wall-clock delay
    await asyncio.sleep(0)


@pytest.fixture
def generator():
    return CountingGenerator()


@pytest.fixture
def provider(generator):
    return DatasetProvider(generator, load_delay_ms=800, sleep=yielding_sleep)


class TestLoading:

    def test_load_generates_default(self, provider, generator):
        series = asyncio.run(provider.load())
        assert len(series) == 77
        assert provider.source is DatasetSource.DEFAULT
        assert provider.active is series
        assert generator.calls == 1

    def test_concurrent_loads_single_flight(self, provider, generator):
        async def scenario():
            return await asyncio.gather(*(provider.load() for _ in range(5)))

        results = asyncio.run(scenario())

        assert all(r is results[0] for r in results)
        assert generator.calls == 1
        assert provider.generation_runs == 1

    def test_later_load_returns_cached(self, provider, generator):
        first = asyncio.run(provider.load())
        second = asyncio.run(provider.load())
        assert first is second
        assert generator.calls == 1

    def test_is_loading_during_flight(self, provider):
        async def scenario():
            task = asyncio.ensure_future(provider.load())
            await asyncio.sleep(0)
            during = provider.is_loading
            await task
            return during

        assert asyncio.run(scenario()) is True
        assert provider.is_loading is False

    def test_zero_delay_does_not_sleep(self, generator):
        slept = []

        async def recording_sleep(seconds):
            slept.append(seconds)

        provider = DatasetProvider(generator, load_delay_ms=0, sleep=recording_sleep)
        asyncio.run(provider.load())
        assert slept == []

    def test_delay_passed_in_seconds(self, generator):
        slept = []

        async def recording_sleep(seconds):
            slept.append(seconds)

        provider = DatasetProvider(generator, load_delay_ms=800, sleep=recording_sleep)
        asyncio.run(provider.load())
        assert slept == [0.8]


class TestLookup:

    def test_lookup_before_load(self, provider):
        with pytest.raises(RecordNotFound) as exc_info:
            provider.lookup(1948)
        assert exc_info.value.code is ErrorCode.DATASET_NOT_LOADED

    def test_lookup_after_load(self, provider):
        asyncio.run(provider.load())
        assert provider.lookup(1990).year == 1990

    def test_lookup_gap(self, provider):
        provider.replace(make_series(1950, 1952))
        with pytest.raises(RecordNotFound) as exc_info:
            provider.lookup(1951)
        assert exc_info.value.year == 1951
        assert isinstance(exc_info.value, LookupError)

    def test_get_fallback(self, provider):
        assert provider.get(1951) is None
        provider.replace(make_series(1950))
        assert provider.get(1951, default="none") == "none"


class TestSourceSwitches:

    def test_replace_activates_custom(self, provider):
        asyncio.run(provider.load())
        custom = make_series(2000, 2001)
        assert provider.replace(custom) is True
        assert provider.source is DatasetSource.CUSTOM
        assert provider.lookup(2000).population.party_a == 3000

    def test_replace_rejects_non_series(self, provider):
        with pytest.raises(TypeError):
            provider.replace([1, 2, 3])

    def test_stale_replace_discarded(self, provider):
        ticket = provider.request_id
        provider.replace(make_series(2000))
        assert provider.replace(make_series(2010), expected_request_id=ticket) is False
        assert provider.lookup(2000)
        assert 2010 not in provider.active

    def test_reset_restores_default(self, provider, generator):
        default = asyncio.run(provider.load())
        provider.replace(make_series(2000))
        provider.reset()

        assert provider.source is DatasetSource.DEFAULT
        assert provider.active is default
        for record in default:
            assert provider.lookup(record.year) == record
        assert generator.calls == 1

    def test_request_id_bumps_on_switch_only(self, provider):
        start = provider.request_id
        asyncio.run(provider.load())
        assert provider.request_id == start
        provider.replace(make_series(2000))
        provider.reset()
        assert provider.request_id == start + 2


class TestLastRequestWins:

    def test_import_during_load_wins(self, provider, generator):
        custom = make_series(1999, 2000)

        async def scenario():
            pending = asyncio.ensure_future(provider.load())
            await asyncio.sleep(0)
            provider.replace(custom)
            return await pending

        result = asyncio.run(scenario())

        assert provider.source is DatasetSource.CUSTOM
        assert provider.active is custom
        assert result is custom
        # Default was still generated and cached for a later reset
        assert provider.default_series is not None
        assert generator.calls == 1

    def test_discarded_load_is_recorded(self, generator):
        audit = AuditLog()
        metrics = MetricsCollector()
        provider = DatasetProvider(
            generator, load_delay_ms=10, audit=audit, metrics=metrics, sleep=yielding_sleep
        )

        async def scenario():
            pending = asyncio.ensure_future(provider.load())
            await asyncio.sleep(0)
            provider.replace(make_series(2000))
            await pending

        asyncio.run(scenario())

        assert metrics.value("loads_discarded_total") == 1
        assert audit.get_entries(AuditEventType.DATASET, "load_discarded")

    def test_reset_during_load_retargets(self, provider):
        async def scenario():
            pending = asyncio.ensure_future(provider.load())
            await asyncio.sleep(0)
            provider.replace(make_series(2000))
            provider.reset()
            return await pending

        result = asyncio.run(scenario())

        assert provider.source is DatasetSource.DEFAULT
        assert provider.active is result
        assert len(result) == 77

    def test_reset_then_load_after_custom(self, provider, generator):
        provider.replace(make_series(2000))
        provider.reset()
        assert provider.active is None

        series = asyncio.run(provider.load())
        assert provider.active is series
        assert provider.source is DatasetSource.DEFAULT
        assert generator.calls == 1


class TestNotifications:

    def test_changes_published(self, provider):
        changes = []
        provider.subscribe(changes.append)

        asyncio.run(provider.load())
        provider.replace(make_series(2000))
        provider.reset()

        assert [c.source for c in changes] == [
            DatasetSource.DEFAULT, DatasetSource.CUSTOM, DatasetSource.DEFAULT
        ]
        assert changes[1].request_id == 1
        assert changes[2].request_id == 2
