"""Observability utilities for Sapphire Notes.

Provides persistent disk logging with rotation, timing metrics and
operation tracing for the persistence layer.
"""
import functools
import json
import logging
import os
import time
import uuid
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

# Root of the package logger hierarchy
ROOT_LOGGER_NAME = "sapphire_notes"

# Logging format with ISO 8601 timestamps
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

F = TypeVar("F", bound=Callable[..., Any])

_logging_configured = False


def configure_logging(
    log_dir: Union[str, Path],
    level: int = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    console: bool = True,
) -> Path:
    """Configure persistent file logging with rotation.

    Attaches a rotating file handler (and optionally a console handler) to
    the ``sapphire_notes`` logger, so every module logger inherits them.

    Args:
        log_dir: Directory for log files.
        level: Logging level (default: INFO)
        max_bytes: Maximum size per log file before rotation (default: 5 MB)
        backup_count: Number of rotated files to keep (default: 3)
        console: Also log to stderr (default: True)

    Returns:
        Path to the log directory
    """
    global _logging_configured

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    log_file = log_path / "sapphire-notes.log"
    if not any(
        isinstance(h, RotatingFileHandler)
        and h.baseFilename == os.path.abspath(log_file)
        for h in root_logger.handlers
    ):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if console and not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
        for h in root_logger.handlers
    ):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _logging_configured = True
    root_logger.debug(f"Logging configured: {log_file}")
    return log_path


def is_logging_configured() -> bool:
    """Check if file logging has been configured."""
    return _logging_configured


@dataclass
class OperationMetrics:
    """Metrics for a single operation type."""

    count: int = 0
    success_count: int = 0
    error_count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float = 0.0
    last_error: Optional[str] = None


class MetricsCollector:
    """In-process counters for persistence operations.

    Tracks call counts, failures and durations per operation name
    (``create``, ``load_all`` and so on).
    """

    def __init__(self) -> None:
        self._metrics: Dict[str, OperationMetrics] = defaultdict(OperationMetrics)
        self._start_time = datetime.now(timezone.utc)

    def record_operation(
        self,
        operation: str,
        duration_ms: float,
        success: bool,
        error: Optional[str] = None,
    ) -> None:
        m = self._metrics[operation]
        m.count += 1
        m.total_duration_ms += duration_ms
        m.max_duration_ms = max(m.max_duration_ms, duration_ms)
        if success:
            m.success_count += 1
        else:
            m.error_count += 1
            m.last_error = error

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Get a snapshot of all metrics, keyed by operation name."""
        result = {}
        for op, m in self._metrics.items():
            avg_duration = m.total_duration_ms / m.count if m.count else 0.0
            result[op] = {
                "count": m.count,
                "success_count": m.success_count,
                "error_count": m.error_count,
                "avg_duration_ms": round(avg_duration, 2),
                "max_duration_ms": round(m.max_duration_ms, 2),
                "last_error": m.last_error,
            }
        return result

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        self._metrics.clear()
        self._start_time = datetime.now(timezone.utc)

    def save_metrics(self, metrics_file: Union[str, Path]) -> bool:
        """Write a JSON snapshot of the metrics.

        Returns:
            True if saved successfully, False otherwise.
        """
        path = Path(metrics_file)
        data = {
            "start_time": self._start_time.isoformat(),
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "operations": self.get_metrics(),
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_file = path.with_suffix(".tmp")
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(temp_file, path)
            return True
        except OSError as e:
            logger.error(f"Failed to save metrics to {path}: {e}")
            return False


# Global metrics collector instance
metrics = MetricsCollector()


@contextmanager
def timed_operation(operation: str, **context):
    """Context manager for timing and logging an operation.

    Yields:
        A dictionary where the caller can store result info.

    Example:
        with timed_operation("load_all") as op:
            notes = load()
            op["result_count"] = len(notes)
    """
    correlation_id = uuid.uuid4().hex[:8]
    start_time = time.perf_counter()
    result_info: Dict[str, Any] = {}

    context_str = ", ".join(f"{k}={v}" for k, v in context.items())
    logger.debug(f"[{correlation_id}] START {operation} ({context_str})")

    error_msg = None
    success = True
    try:
        yield result_info
    except Exception as e:
        success = False
        error_msg = str(e)
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        metrics.record_operation(operation, duration_ms, success, error_msg)

        result_str = ", ".join(f"{k}={v}" for k, v in result_info.items())
        status = "OK" if success else f"ERROR: {error_msg}"
        logger.debug(
            f"[{correlation_id}] END {operation} "
            f"({duration_ms:.2f}ms) [{status}] {result_str}"
        )


def traced(operation_name: Optional[str] = None) -> Callable[[F], F]:
    """Decorator that times a call and records it in :data:`metrics`.

    Example:
        @traced("create")
        def create(self, name: str, font_family: str, font_size: int) -> Note:
            ...
    """

    def decorator(func: F) -> F:
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with timed_operation(op_name) as op:
                result = func(*args, **kwargs)
                if isinstance(result, (list, tuple)):
                    op["result_count"] = len(result)
                return result

        return wrapper  # type: ignore

    return decorator
