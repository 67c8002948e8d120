"""
Structured logging system for Jobly.

Provides centralized logging with console and file outputs, log levels,
and metrics tracking for monitoring the data layer.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks query and model error metrics.
    """

    def __init__(
        self,
        name: str = "jobly",
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
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "queries_executed": 0,
            "queries_failed": 0,
            "rows_returned": 0,
            "errors_by_type": {},
            "model_errors": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
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

            log_file = log_dir / f"jobly_{datetime.now().strftime('%Y%m%d')}.log"
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

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        # Decimal and similar values are logged via str()
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_query(self, rows: int = 0):
        """Record a successful query and the rows it returned."""
        self.metrics["queries_executed"] += 1
        self.metrics["rows_returned"] += rows

    def record_query_failure(self, error_type: str):
        """Record a store-level failure."""
        self.metrics["queries_executed"] += 1
        self.metrics["queries_failed"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def record_model_error(self, error_type: str):
        """Record a model error (not found, duplicate, bad request)."""
        if error_type not in self.metrics["model_errors"]:
            self.metrics["model_errors"][error_type] = 0
        self.metrics["model_errors"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics, including the query failure rate."""
        metrics_copy = self.metrics.copy()
        executed = metrics_copy["queries_executed"]
        metrics_copy["failure_rate"] = (
            round(metrics_copy["queries_failed"] / executed, 3) if executed else 0
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Database Session Metrics ===")
        self.info(
            f"Queries: {metrics['queries_executed']} "
            f"({metrics['queries_failed']} failed, {metrics['failure_rate'] * 100:.1f}%)"
        )
        self.info(f"Rows returned: {metrics['rows_returned']}")

        if metrics["errors_by_type"]:
            self.info("Store Errors:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")

        if metrics["model_errors"]:
            self.info("Model Errors:")
            for error_type, count in metrics["model_errors"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "jobly",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level; defaults to JOBLY_LOG_LEVEL or INFO
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        from .env import get_log_dir, get_log_level, load_env

        load_env()
        kwargs.setdefault("log_dir", get_log_dir())
        _global_logger = StructuredLogger(name=name, level=level or get_log_level(), **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
