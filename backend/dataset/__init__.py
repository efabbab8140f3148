"""
Dataset Layer

RESPONSIBILITY: Own the active series and answer per-year lookups
ALLOWED INPUTS: Generated default series, validated imported series
OUTPUTS: Series, YearRecord, DatasetChange notifications

WHAT THIS LAYER MUST NOT DO:
============================
- Parse or validate files (ingestion layer's job)
- Mutate a Series in place
- Persist anything across sessions
"""

from .provider import DatasetProvider

__all__ = ['DatasetProvider']
