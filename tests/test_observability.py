"""Tests for logging configuration, metrics and operation tracing."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from sapphire_notes.observability import (
    ROOT_LOGGER_NAME,
    MetricsCollector,
    configure_logging,
    metrics,
    timed_operation,
    traced,
)


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_record_successful_operation(self):
        collector = MetricsCollector()

        collector.record_operation("create", 100.0, True)

        snapshot = collector.get_metrics()["create"]
        assert snapshot["count"] == 1
        assert snapshot["success_count"] == 1
        assert snapshot["error_count"] == 0
        assert snapshot["avg_duration_ms"] == 100.0

    def test_record_failed_operation(self):
        collector = MetricsCollector()

        collector.record_operation("delete", 10.0, True)
        collector.record_operation("delete", 30.0, False, "gone")

        snapshot = collector.get_metrics()["delete"]
        assert snapshot["count"] == 2
        assert snapshot["error_count"] == 1
        assert snapshot["last_error"] == "gone"
        assert snapshot["avg_duration_ms"] == 20.0
        assert snapshot["max_duration_ms"] == 30.0

    def test_reset(self):
        collector = MetricsCollector()
        collector.record_operation("x", 1.0, True)

        collector.reset()

        assert collector.get_metrics() == {}

    def test_save_metrics(self, tmp_path):
        collector = MetricsCollector()
        collector.record_operation("load_all", 5.0, True)
        target = tmp_path / "nested" / "metrics.json"

        assert collector.save_metrics(target) is True

        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["operations"]["load_all"]["count"] == 1
        assert not target.with_suffix(".tmp").exists()


class TestTracing:
    """Tests for timed_operation and traced."""

    def test_timed_operation_records_success(self):
        with timed_operation("unit", note="x") as op:
            op["result_count"] = 3

        assert metrics.get_metrics()["unit"]["success_count"] == 1

    def test_timed_operation_records_and_reraises_errors(self):
        with pytest.raises(RuntimeError):
            with timed_operation("explodes"):
                raise RuntimeError("boom")

        snapshot = metrics.get_metrics()["explodes"]
        assert snapshot["error_count"] == 1
        assert snapshot["last_error"] == "boom"

    def test_traced_decorator_preserves_function(self):
        @traced("double")
        def double(value):
            """Double a value."""
            return value * 2

        assert double(4) == 8
        assert double.__name__ == "double"
        assert double.__doc__ == "Double a value."
        assert metrics.get_metrics()["double"]["count"] == 1

    def test_service_operations_are_traced(self, notes_service):
        note = notes_service.create("traced", "Arial", 15)
        notes_service.load_all()
        notes_service.delete(note)

        recorded = metrics.get_metrics()
        assert recorded["create"]["success_count"] == 1
        assert recorded["load_all"]["count"] == 1
        assert recorded["delete"]["count"] == 1


@pytest.mark.usefixtures("_restore_log_handlers")
class TestConfigureLogging:
    """Tests for persistent file logging."""

    def test_creates_log_file(self, tmp_path):
        log_dir = configure_logging(tmp_path / "logs", level=logging.DEBUG, console=False)

        logging.getLogger("sapphire_notes.services.notes_service").info("hello log")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        content = (log_dir / "sapphire-notes.log").read_text(encoding="utf-8")
        assert "hello log" in content
        assert "[INFO]" in content

    def test_repeated_configuration_does_not_duplicate_handlers(self, tmp_path):
        configure_logging(tmp_path, console=False)
        configure_logging(tmp_path, console=False)

        file_handlers = [
            h
            for h in logging.getLogger(ROOT_LOGGER_NAME).handlers
            if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
