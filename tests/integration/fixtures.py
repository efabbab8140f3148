"""
Integration Test Fixtures

Fixed import payloads and engine factories.
All fixtures are explicit; randomness is seeded.
"""

import asyncio
import json

from backend.config import DashboardConfig, DatasetConfig
from backend.engine import DashboardEngine


SEED = 1234


async def no_delay(_seconds: float) -> None:
    await asyncio.sleep(0)


def create_engine(seed: int = SEED) -> DashboardEngine:
    """Engine with a seeded generator and a load delay that never waits."""
    config = DashboardConfig(dataset=DatasetConfig(load_delay_ms=800, seed=seed))
    return DashboardEngine(config, sleep=no_delay)


# =============================================================================
# IMPORT PAYLOADS
# =============================================================================

CUSTOM_RECORDS = [
    {
        "year": 1948,
        "population": {"party_a": 10, "party_b": 20},
        "casualties": {"party_a": 1, "party_b": 2},
        "territory": {"party_a": 60, "party_b": 40},
        "prisoners": {"party_a": 3, "party_b": 4},
    },
    {
        "year": 1950,
        "population": {"party_a": 11, "party_b": 21},
    },
]

CUSTOM_JSON = json.dumps(CUSTOM_RECORDS).encode("utf-8")

CUSTOM_CSV = (
    b"year,population_party_a,population_party_b,casualties_party_a,casualties_party_b,"
    b"prisoners_party_a,prisoners_party_b,territory_party_a,territory_party_b\n"
    b"1948,10,20,1,2,3,4,60,40\n"
    b"1950,11,21,,,,,,\n"
)

MISSING_PARTY_B_JSON = json.dumps([
    {"year": 1948, "population": {"party_a": 10}},
]).encode("utf-8")
