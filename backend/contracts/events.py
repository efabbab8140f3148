"""
Audit and Metric Contracts

Immutable records produced by the observability layer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class AuditEventType(Enum):
    """Explicit audit event types."""
    TIMELINE = "timeline"
    DATASET = "dataset"
    IMPORT = "import"
    ERROR = "error"
    SYSTEM = "system"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    sequence: int
    event_type: AuditEventType
    timestamp: datetime
    layer: str  # Which layer generated this
    action: str
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    error_code: Optional[str] = None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for k, v in self.metadata:
            if k == key:
                return v
        return default


@dataclass(frozen=True)
class MetricPoint:
    """Immutable metric data point."""
    metric_name: str
    value: float
    timestamp: datetime
    labels: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
