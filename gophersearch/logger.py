"""
Structured logging for the Gopher search client.

Console output goes to stderr because stdout carries the MCP stdio
protocol when the tool server is running. Also tracks per-session metrics
for submissions, poll attempts and outcomes.
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
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring search job health.
    """

    def __init__(
        self,
        name: str = "gophersearch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to stderr
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        # Searches run in worker threads under the MCP server
        self._metrics_lock = threading.Lock()
        self.metrics = {
            "api_calls": 0,
            "jobs_submitted": 0,
            "poll_attempts": 0,
            "outcomes": {},
            "errors_by_type": {},
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

            log_file = log_dir / f"gophersearch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def _increment(self, key: str):
        with self._metrics_lock:
            self.metrics[key] += 1

    def _count(self, key: str, name: str):
        with self._metrics_lock:
            counts = self.metrics[key]
            counts[name] = counts.get(name, 0) + 1

    def record_api_call(self):
        self._increment("api_calls")

    def record_submission(self):
        self._increment("jobs_submitted")

    def record_poll_attempt(self):
        self._increment("poll_attempts")

    def record_outcome(self, kind: str):
        """Count a terminal poll outcome by kind (success, timeout, ...)."""
        self._count("outcomes", kind)

    def record_error(self, error_type: str):
        self._count("errors_by_type", error_type)

    def get_metrics(self) -> dict:
        """Return a snapshot of the metrics, with the success rate over finished polls."""
        with self._metrics_lock:
            metrics_copy = {
                k: dict(v) if isinstance(v, dict) else v
                for k, v in self.metrics.items()
            }
        finished = sum(metrics_copy["outcomes"].values())
        successes = metrics_copy["outcomes"].get("success", 0)
        metrics_copy["success_rate"] = round(successes / finished, 3) if finished else 0.0
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Search Session Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']}")
        self.info(f"Jobs submitted: {metrics['jobs_submitted']}")
        self.info(f"Poll attempts: {metrics['poll_attempts']}")
        self.info(f"Success rate: {metrics['success_rate'] * 100:.1f}%")

        if metrics["outcomes"]:
            self.info("Outcomes:")
            for kind, count in metrics["outcomes"].items():
                self.info(f"  {kind}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "gophersearch",
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


def configure_logger(level: str = "INFO", log_dir: Optional[str] = None) -> StructuredLogger:
    """Replace the global logger using settings read from the environment."""
    reset_logger()
    return get_logger(
        level=level,
        log_dir=Path(log_dir) if log_dir else None,
        enable_file=bool(log_dir),
    )


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
