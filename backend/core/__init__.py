"""
Core Data Synthesis

RESPONSIBILITY: Derive the default yearly series from era rules
ALLOWED INPUTS: Era rule table, generator profile, year bounds, random source
OUTPUTS: Series (immutable)

WHAT THIS LAYER MUST NOT DO:
============================
- Hold the active dataset (dataset layer's job)
- Read files or parse imports (ingestion layer's job)
- Know about playback or the current year
"""

from .rules import (
    EraState, EraRule, SampleRange, GeneratorProfile,
    CONFLICT_YEARS, DEFAULT_PROFILE, DEFAULT_ERA_RULES,
    ERA_FIELDS, validate_era_rules, era_state_for,
)
from .generator import SeriesGenerator, generate, make_rng

__all__ = [
    'EraState', 'EraRule', 'SampleRange', 'GeneratorProfile',
    'CONFLICT_YEARS', 'DEFAULT_PROFILE', 'DEFAULT_ERA_RULES',
    'ERA_FIELDS', 'validate_era_rules', 'era_state_for',
    'SeriesGenerator', 'generate', 'make_rng',
]
