"""
End-to-End Dashboard Demo

Runs the complete flow headless:
Core (generator) -> Dataset (load) -> Temporal (playback) ->
Ingestion (import) -> Frontend (DTOs, charts)
"""

import asyncio
import json

from backend.config import DashboardConfig, DatasetConfig
from backend.contracts.base import RangeError
from backend.engine import DashboardEngine
from backend.observability import configure_logging
from frontend.interaction import ActionType, InteractionController, InteractionRequest
from frontend.mapper import DTOMapper
from frontend.visualization import ChartBuilder


SAMPLE_IMPORT = json.dumps([
    {"year": 1948, "population": {"party_a": 1_000_000, "party_b": 700_000},
     "territory": {"party_a": 50, "party_b": 50}},
    {"year": 1949, "population": {"party_a": 1_050_000, "party_b": 760_000}},
    {"year": 1951, "population": {"party_a": 1_120_000, "party_b": 880_000}},
]).encode("utf-8")


def banner(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


async def run_load(engine: DashboardEngine):
    """Layer 1+2: default series through a single-flight load."""
    banner("LAYER 1: DEFAULT DATASET")
    first, second = await asyncio.gather(engine.load(), engine.load())
    print(f"Records: {len(first)} ({first.min_year}-{first.max_year})")
    print(f"Shared load result: {first is second}")
    print(f"Generator runs: {engine.dataset.generation_runs}")


def run_playback(engine: DashboardEngine):
    """Layer 3: timeline driven by a virtual clock."""
    banner("LAYER 2: PLAYBACK")
    clock = engine.manual_clock()
    engine.play()
    engine.set_speed(2.0)
    years = clock.advance_frames(frame_ms=16, count=320)
    record = engine.current_record()
    print(f"Advanced {years} years in {clock.now_ms / 1000:.1f}s virtual time")
    print(f"Current year: {engine.get_current_year()}")
    print(f"Territory: {record.territory.party_a}/{record.territory.party_b}")
    engine.pause()

    try:
        engine.set_year(2030)
    except RangeError as error:
        print(f"Rejected seek: {error.message}")


async def run_import(engine: DashboardEngine, controller: InteractionController):
    """Layer 4: user import, all or nothing."""
    banner("LAYER 3: IMPORT")
    bad = await controller.submit_import(b'[{"year": 1950, "population": {"party_a": 1}}]', "bad.json")
    print(f"Bad file: {bad.message} {list(bad.reasons)}")

    good = await controller.submit_import(SAMPLE_IMPORT, "sample.json")
    print(f"Good file: {good.message} ({good.records} records)")
    print(f"Active source: {engine.active_source.value}")


def run_frontend(engine: DashboardEngine, controller: InteractionController):
    """Layer 5: view contracts."""
    banner("LAYER 4: FRONTEND CONTRACTS")
    mapper = DTOMapper()
    for year in (1948, 1950):
        dto = mapper.map_record(engine, year)
        print(f"{year}: {dto.availability.value}")

    outcome = controller.apply(InteractionRequest.create(ActionType.SET_SPEED, speed=9))
    print(f"Speed request 9 -> {outcome.timeline.speed_label}")

    charts = ChartBuilder.from_config(engine.config).build(engine)
    print(f"{charts.population.title}: {len(charts.population.x_labels)} points, "
          f"marker at {charts.population.marker_position:.2f}")
    print(f"{charts.casualties.title}: {charts.casualties.dataset.values}")

    controller.apply(InteractionRequest.create(ActionType.RESET_DATASET))
    print(f"After reset: {engine.active_source.value}, {len(engine.dataset.active)} records")


async def main():
    configure_logging("WARNING")
    engine = DashboardEngine(DashboardConfig(dataset=DatasetConfig(load_delay_ms=200, seed=1948)))
    controller = InteractionController(engine)

    await run_load(engine)
    run_playback(engine)
    await run_import(engine, controller)
    run_frontend(engine, controller)

    banner("AUDIT")
    print(f"Entries: {engine.audit.entry_count}")
    print(f"Years advanced: {engine.metrics.value('years_advanced_total'):.0f}")


if __name__ == "__main__":
    asyncio.run(main())
