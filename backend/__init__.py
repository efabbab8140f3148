"""
Historical Timeline Dashboard Backend

Layered engine behind a year-by-year statistics dashboard for two
parties. Each layer communicates through explicit contracts; the only
mutable state lives in the timeline and the dataset provider, both owned
by one DashboardEngine instance.

LAYER STRUCTURE:
================

1. CORE (core/)
   - Responsibility: Era rule table and default series generation
   - Allowed inputs: Year bounds, era rules, seeded random generator
   - Outputs: Series (immutable, ordered, contiguous)
   - MUST NOT: Hold state between runs, read the clock

2. DATASET (dataset/)
   - Responsibility: Active series, single-flight loading, source switches
   - Allowed inputs: Generated or imported Series
   - Outputs: YearRecord lookups, DatasetChange notifications
   - MUST NOT: Parse files, mutate a Series in place

3. INGESTION (ingestion/)
   - Responsibility: Decode and validate user imports, all or nothing
   - Allowed inputs: Raw bytes plus a declared format
   - Outputs: ImportResult (valid series or every rejection reason)
   - MUST NOT: Activate data, accept partial imports

4. TEMPORAL (temporal/)
   - Responsibility: Current year, playback flag, speed, playback clocks
   - Allowed inputs: Seek/play/pause/speed commands, elapsed time
   - Outputs: TimelineSnapshot notifications
   - MUST NOT: Spawn threads, skip years on long frames

5. OBSERVABILITY (observability/)
   - Responsibility: Logging setup, audit trail, metrics
   - Allowed inputs: Any layer's events
   - Outputs: AuditLogEntry, MetricPoint
   - MUST NOT: Modify system behavior

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: records, series and snapshots are frozen
- No global singleton: engines are constructed and injected explicitly
- Deterministic: same seed and same tick sequence give the same output
- Explicit errors: RangeError, ValidationError, RecordNotFound,
  ConfigurationError; no silent fallbacks inside the backend
"""

from .config import DashboardConfig, DatasetConfig, PlaybackConfig, TimelineConfig
from .contracts import (
    ConfigurationError,
    DashboardError,
    RangeError,
    RecordNotFound,
    Series,
    ValidationError,
    YearRecord,
)
from .engine import ChangeKind, DashboardChange, DashboardEngine

__all__ = [
    'DashboardEngine',
    'DashboardChange',
    'ChangeKind',
    'DashboardConfig',
    'TimelineConfig',
    'DatasetConfig',
    'PlaybackConfig',
    'DashboardError',
    'ConfigurationError',
    'RangeError',
    'ValidationError',
    'RecordNotFound',
    'Series',
    'YearRecord',
]
