"""
Structured logging for spadmin.

Console and optional file output, JSON context on every line, and
request counters per resource for a quick health summary of a session.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with console and file outputs.
    Tracks request metrics per resource.
    """

    def __init__(
        self,
        name: str = "spadmin",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        # Pool threads in ApiClient.fetch_all share these counters
        self._metrics_lock = threading.Lock()
        self.metrics = {
            "requests_made": 0,
            "requests_failed": 0,
            "errors_by_type": {},
            "resource_stats": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"spadmin_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking

    def _resource(self, resource: str) -> dict:
        stats = self.metrics["resource_stats"]
        if resource not in stats:
            stats[resource] = {"requests": 0, "failures": 0}
        return stats[resource]

    def record_request(self, resource: str):
        """Count one request issued against a resource."""
        with self._metrics_lock:
            self.metrics["requests_made"] += 1
            self._resource(resource)["requests"] += 1

    def record_failure(self, resource: str, error_type: str):
        """Count one failed request and its error class."""
        with self._metrics_lock:
            self.metrics["requests_failed"] += 1
            self._resource(resource)["failures"] += 1
            errors = self.metrics["errors_by_type"]
            errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a copy of the metrics with per-resource success rates."""
        with self._metrics_lock:
            metrics_copy = json.loads(json.dumps(self.metrics))
        for resource, stats in metrics_copy["resource_stats"].items():
            if stats["requests"] > 0:
                ok = stats["requests"] - stats["failures"]
                stats["success_rate"] = round(ok / stats["requests"], 3)
        return metrics_copy

    def log_metrics_summary(self):
        metrics = self.get_metrics()

        total = metrics["requests_made"]
        failed = metrics["requests_failed"]
        self.info("=== API Session Metrics ===")
        self.info(f"Requests: {total - failed}/{total} succeeded")

        if metrics["resource_stats"]:
            self.info("Per resource:")
            for resource, stats in metrics["resource_stats"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {resource}: {stats['requests']} requests ({rate:.1f}% ok)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "spadmin",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
