"""
Contracts Module

Explicit interfaces and data transfer objects that form the contracts
between layers. All inter-layer communication uses these contracts.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. All contracts include explicit error states
3. All timestamps use UTC and are never mutated
"""

from .base import (
    ErrorCode, Error, DashboardError, ConfigurationError,
    RangeError, ValidationError, RecordNotFound, utc_now,
)
from .records import (
    Number, Party, DatasetSource, PartyValues, YearRecord, Series,
    TimelineSnapshot, DatasetChange,
)
from .events import AuditEventType, AuditLogEntry, MetricPoint

__all__ = [
    # Errors
    'ErrorCode', 'Error', 'DashboardError', 'ConfigurationError',
    'RangeError', 'ValidationError', 'RecordNotFound', 'utc_now',
    # Records
    'Number', 'Party', 'DatasetSource', 'PartyValues', 'YearRecord', 'Series',
    'TimelineSnapshot', 'DatasetChange',
    # Observability
    'AuditEventType', 'AuditLogEntry', 'MetricPoint',
]
