"""
Observability & Audit Layer

RESPONSIBILITY: Logging, metrics, audit trail of state changes
ALLOWED INPUTS: Notifications from the timeline and dataset layers
OUTPUTS: AuditLogEntry, MetricPoint

WHAT THIS LAYER MUST NOT DO:
============================
- Modify system behavior
- Filter or interpret events (only record them)
- Make decisions based on logged data
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Tuple
from collections import deque
from enum import Enum
import hashlib
import logging

from ..contracts.base import Error, utc_now
from ..contracts.events import AuditEventType, AuditLogEntry, MetricPoint


LabelSet = Tuple[Tuple[str, str], ...]


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the dashboard process."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)


# =============================================================================
# AUDIT LOG
# =============================================================================

class AuditLog:
    """
    Append-only collector of audit entries.

    Entries are never modified or removed.
    """

    def __init__(self, layer_name: str = "dashboard"):
        self._layer_name = layer_name
        self._entries: List[AuditLogEntry] = []
        self._sequence: int = 0

    def record(
        self,
        event_type: AuditEventType,
        action: str,
        layer: Optional[str] = None,
        error: Optional[Error] = None,
        **metadata: object
    ) -> AuditLogEntry:
        """Append one entry."""
        self._sequence += 1
        timestamp = utc_now()
        entry_id = hashlib.sha256(
            f"{self._sequence}|{action}|{timestamp.isoformat()}".encode()
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{entry_id}",
            sequence=self._sequence,
            event_type=event_type,
            timestamp=timestamp,
            layer=layer or self._layer_name,
            action=action,
            metadata=tuple(sorted((k, str(v)) for k, v in metadata.items())),
            error_code=error.code.name if error else None,
        )
        self._entries.append(entry)
        return entry

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None,
        action: Optional[str] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered."""
        entries = self._entries
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        if action:
            entries = [e for e in entries if e.action == action]
        return list(entries)

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

class MetricType(Enum):
    """Types of metrics collected."""
    COUNTER = "counter"
    GAUGE = "gauge"
    TIMING = "timing"


@dataclass
class MetricDefinition:
    """Definition of a metric to collect."""
    name: str
    metric_type: MetricType
    description: str
    labels: Tuple[str, ...] = field(default_factory=tuple)


class MetricsCollector:
    """
    Collect and aggregate dashboard metrics.

    STORAGE:
    ========
    - Counters keep one running total per (name, labels) key, no history
    - Gauges and timings keep their most recent points, at most
      history_limit per metric
    """

    DEFAULT_HISTORY_LIMIT = 1024

    def __init__(self, history_limit: int = DEFAULT_HISTORY_LIMIT):
        if history_limit <= 0:
            raise ValueError("history_limit must be positive")
        self._history_limit = history_limit
        self._counters: Dict[Tuple[str, LabelSet], MetricPoint] = {}
        self._history: Dict[str, Deque[MetricPoint]] = {}
        self._definitions: Dict[str, MetricDefinition] = {}
        self._register_default_metrics()

    def _register_default_metrics(self):
        defaults = [
            MetricDefinition(
                name="generation_runs_total",
                metric_type=MetricType.COUNTER,
                description="Number of times the series generator ran"
            ),
            MetricDefinition(
                name="generation_duration_ms",
                metric_type=MetricType.TIMING,
                description="Series generation time in milliseconds"
            ),
            MetricDefinition(
                name="loads_discarded_total",
                metric_type=MetricType.COUNTER,
                description="Loads whose result was superseded by a newer request"
            ),
            MetricDefinition(
                name="imports_accepted_total",
                metric_type=MetricType.COUNTER,
                description="Imports that passed validation",
                labels=("format",)
            ),
            MetricDefinition(
                name="imports_rejected_total",
                metric_type=MetricType.COUNTER,
                description="Imports that failed validation",
                labels=("format",)
            ),
            MetricDefinition(
                name="ticks_total",
                metric_type=MetricType.COUNTER,
                description="Playback clock ticks evaluated while playing"
            ),
            MetricDefinition(
                name="years_advanced_total",
                metric_type=MetricType.COUNTER,
                description="Years advanced by playback"
            ),
            MetricDefinition(
                name="active_series_length",
                metric_type=MetricType.GAUGE,
                description="Number of records in the active series"
            ),
            MetricDefinition(
                name="listener_failures_total",
                metric_type=MetricType.COUNTER,
                description="Subscriber callbacks that raised"
            ),
        ]

        for definition in defaults:
            self.register_metric(definition)

    def register_metric(self, definition: MetricDefinition):
        """Register a new metric definition."""
        self._definitions[definition.name] = definition

    def metric_type(self, metric_name: str) -> Optional[MetricType]:
        definition = self._definitions.get(metric_name)
        return definition.metric_type if definition else None

    def _is_counter(self, metric_name: str) -> bool:
        return self.metric_type(metric_name) is MetricType.COUNTER

    def record(
        self,
        metric_name: str,
        value: float,
        labels: Optional[Dict[str, str]] = None
    ):
        """Record a gauge or timing data point."""
        if self._is_counter(metric_name):
            raise ValueError(f"{metric_name} is a counter; use increment()")

        history = self._history.get(metric_name)
        if history is None:
            history = deque(maxlen=self._history_limit)
            self._history[metric_name] = history

        history.append(MetricPoint(
            metric_name=metric_name,
            value=value,
            timestamp=utc_now(),
            labels=_label_set(labels)
        ))

    def increment(self, metric_name: str, amount: float = 1.0, labels: Optional[Dict[str, str]] = None):
        """Add amount to the running total for (metric_name, labels)."""
        metric_type = self.metric_type(metric_name)
        if metric_type is not None and metric_type is not MetricType.COUNTER:
            raise ValueError(f"{metric_name} is a {metric_type.value}; use record()")

        label_set = _label_set(labels)
        key = (metric_name, label_set)
        previous = self._counters.pop(key, None)
        current = previous.value if previous else 0.0
        # Re-inserted so dict order tracks the most recent update
        self._counters[key] = MetricPoint(
            metric_name=metric_name,
            value=current + amount,
            timestamp=utc_now(),
            labels=label_set
        )

    def get_metric(self, metric_name: str) -> List[MetricPoint]:
        """Counter totals (one per label set) or the retained history."""
        if metric_name in self._history:
            return list(self._history[metric_name])
        return [p for (name, _), p in self._counters.items() if name == metric_name]

    def get_latest(self, metric_name: str) -> Optional[MetricPoint]:
        """Most recently updated point for a metric."""
        points = self.get_metric(metric_name)
        return points[-1] if points else None

    def value(self, metric_name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """
        Current value of a metric.

        Counters: the total for labels, or the sum over every label set
        when labels is None. Gauges and timings: the latest point.
        """
        if metric_name in self._history:
            latest = self.get_latest(metric_name)
            return latest.value if latest else 0.0
        if labels is not None:
            point = self._counters.get((metric_name, _label_set(labels)))
            return point.value if point else 0.0
        return float(sum(p.value for p in self.get_metric(metric_name)))

    def compute_aggregates(self, metric_name: str) -> Dict[str, float]:
        """Compute aggregate statistics for a metric."""
        points = self.get_metric(metric_name)

        if not points:
            return {}

        values = [p.value for p in points]

        return {
            'count': len(values),
            'sum': sum(values),
            'min': min(values),
            'max': max(values),
            'avg': sum(values) / len(values),
        }


def _label_set(labels: Optional[Dict[str, str]]) -> LabelSet:
    return tuple(sorted(labels.items())) if labels else ()


__all__ = [
    'configure_logging', 'AuditLog', 'MetricType', 'MetricDefinition',
    'MetricsCollector',
]
