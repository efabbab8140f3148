"""
Observability and Notification Tests
"""

import logging

import pytest

from backend.contracts.base import ErrorCode, RangeError
from backend.contracts.events import AuditEventType
from backend.notify import ChangeNotifier
from backend.observability import AuditLog, MetricsCollector, configure_logging


class TestChangeNotifier:

    def test_delivery_in_subscription_order(self):
        notifier = ChangeNotifier("test")
        calls = []
        notifier.subscribe(lambda v: calls.append(("first", v)))
        notifier.subscribe(lambda v: calls.append(("second", v)))

        notifier.publish(1)

        assert calls == [("first", 1), ("second", 1)]

    def test_failure_isolated_and_reported(self, caplog):
        errors = []
        notifier = ChangeNotifier("test", on_listener_error=lambda name, exc: errors.append((name, exc)))
        received = []

        def broken(_value):
            raise KeyError("missing")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)

        with caplog.at_level(logging.ERROR, logger="backend.notify"):
            failures = notifier.publish("x")

        assert failures == 1
        assert received == ["x"]
        assert errors[0][0] == "test"
        assert isinstance(errors[0][1], KeyError)
        assert "failed" in caplog.text

    def test_unsubscribe_during_delivery(self):
        notifier = ChangeNotifier("test")
        calls = []

        def once(value):
            calls.append(value)
            unsubscribe()

        unsubscribe = notifier.subscribe(once)
        notifier.publish(1)
        notifier.publish(2)

        assert calls == [1]
        assert notifier.listener_count == 0

    def test_double_unsubscribe_is_harmless(self):
        notifier = ChangeNotifier("test")
        unsubscribe = notifier.subscribe(lambda v: None)
        unsubscribe()
        unsubscribe()
        assert notifier.listener_count == 0


class TestAuditLog:

    def test_sequence_and_metadata(self):
        audit = AuditLog("dataset")
        first = audit.record(AuditEventType.DATASET, "load", records=77)
        second = audit.record(AuditEventType.DATASET, "reset")

        assert (first.sequence, second.sequence) == (1, 2)
        assert first.layer == "dataset"
        assert first.get("records") == "77"
        assert first.entry_id != second.entry_id
        assert audit.entry_count == 2

    def test_error_code_recorded(self):
        audit = AuditLog()
        error = RangeError("bad year", ErrorCode.YEAR_OUT_OF_RANGE).to_error()
        entry = audit.record(AuditEventType.ERROR, "rejected", error=error)
        assert entry.error_code == "YEAR_OUT_OF_RANGE"

    def test_filtering(self):
        audit = AuditLog()
        audit.record(AuditEventType.TIMELINE, "play")
        audit.record(AuditEventType.TIMELINE, "pause")
        audit.record(AuditEventType.IMPORT, "import_rejected")

        assert len(audit.get_entries(AuditEventType.TIMELINE)) == 2
        assert len(audit.get_entries(action="pause")) == 1
        assert audit.get_entries(AuditEventType.DATASET) == []


class TestMetrics:

    def test_increment_running_total(self):
        metrics = MetricsCollector()
        metrics.increment("ticks_total")
        metrics.increment("ticks_total")
        metrics.increment("ticks_total", 3)
        assert metrics.value("ticks_total") == 5

    def test_unknown_metric_defaults_to_zero(self):
        assert MetricsCollector().value("nothing_here") == 0.0

    def test_aggregates(self):
        metrics = MetricsCollector()
        for value in (10.0, 20.0, 30.0):
            metrics.record("generation_duration_ms", value)
        aggregates = metrics.compute_aggregates("generation_duration_ms")
        assert aggregates["count"] == 3
        assert aggregates["avg"] == 20.0
        assert aggregates["max"] == 30.0

    def test_labels_kept(self):
        metrics = MetricsCollector()
        metrics.increment("imports_rejected_total", labels={"format": "tabular"})
        assert metrics.get_latest("imports_rejected_total").labels == (("format", "tabular"),)

    def test_labelled_totals_kept_apart(self):
        metrics = MetricsCollector()
        metrics.increment("imports_accepted_total", labels={"format": "tabular"})
        metrics.increment("imports_accepted_total", labels={"format": "tabular"})
        metrics.increment("imports_accepted_total", labels={"format": "structured"})

        assert metrics.value("imports_accepted_total", {"format": "structured"}) == 1
        assert metrics.value("imports_accepted_total", {"format": "tabular"}) == 2
        assert metrics.value("imports_accepted_total") == 3
        assert metrics.get_latest("imports_accepted_total").value == 1
        assert len(metrics.get_metric("imports_accepted_total")) == 2

    def test_counter_keeps_no_history(self):
        metrics = MetricsCollector()
        for _ in range(10_000):
            metrics.increment("ticks_total")
        assert len(metrics.get_metric("ticks_total")) == 1
        assert metrics.value("ticks_total") == 10_000

    def test_gauge_history_bounded(self):
        metrics = MetricsCollector(history_limit=3)
        for length in (10.0, 20.0, 30.0, 40.0, 50.0):
            metrics.record("active_series_length", length)

        assert [p.value for p in metrics.get_metric("active_series_length")] == [30.0, 40.0, 50.0]
        assert metrics.value("active_series_length") == 50.0

    def test_metric_type_enforced(self):
        metrics = MetricsCollector()
        with pytest.raises(ValueError):
            metrics.record("ticks_total", 1.0)
        with pytest.raises(ValueError):
            metrics.increment("generation_duration_ms")

    def test_invalid_history_limit(self):
        with pytest.raises(ValueError):
            MetricsCollector(history_limit=0)

class TestLoggingSetup:

    def test_configure_logging_accepts_names(self):
        configure_logging("debug")
        configure_logging("not-a-level")
