"""
Logging infrastructure for funder fit analysis.

Provides:
- Structured logging with millisecond timestamps and key=value suffixes
- Console and optional file output
- Warning/error tracking for end-of-run summaries
- Lookup cache hit/miss accounting
"""

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S,%f"

# Third-party loggers routed through the root handler
EXTERNAL_LOGGERS = ["httpx", "httpcore", "asyncio"]


class MillisecondsFormatter(logging.Formatter):
    """Formatter that includes milliseconds and aligns log levels."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            return ct.strftime(datefmt.replace(",%f", "")) + f",{int(record.msecs):03d}"
        if datefmt:
            return ct.strftime(datefmt)
        return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


def _with_fields(message: str, fields: dict) -> str:
    if not fields:
        return message
    formatted = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{message} [{formatted}]"


class PipelineLogger:
    """
    Logger for collectors and the analysis service, with tracked problems.
    """

    def __init__(
        self,
        name: str = "funder_fit",
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        log_dir: Optional[Path] = None,
    ):
        """
        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: Optional log file name
            log_dir: Directory for log files (defaults to logs/ at the repo root)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper()))

        # Prevent propagation to root logger to avoid duplicate logs
        self.logger.propagate = False
        if self.logger.handlers:
            self.logger.handlers.clear()

        formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, log_level.upper()))
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            if log_dir is None:
                log_dir = Path(__file__).parent.parent.parent / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / log_file

            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

            self.info(f"Logging to file: {log_path}")

        self.errors = []
        self.warnings = []

        self.cache_hits = 0
        self.cache_misses = 0
        self.cache_details = []

    def debug(self, message: str, **kwargs):
        self.logger.debug(_with_fields(message, kwargs), stacklevel=2)

    def info(self, message: str, **kwargs):
        self.logger.info(_with_fields(message, kwargs), stacklevel=2)

    def warning(self, message: str, **kwargs):
        """Log warning message and track for reporting."""
        message = _with_fields(message, kwargs)
        self.logger.warning(message, stacklevel=2)
        self.warnings.append({"message": message, "timestamp": datetime.now().isoformat(), "data": kwargs})

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log error message and track for reporting."""
        if exception:
            message = f"{message} | Exception: {str(exception)}"
        message = _with_fields(message, kwargs)

        self.logger.error(message, exc_info=exception is not None, stacklevel=2)
        self.errors.append(
            {
                "message": message,
                "exception": str(exception) if exception else None,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def log_upstream_fetch(self, source: str, ein: str, success: bool, error: Optional[str] = None):
        """Log one upstream fetch attempt (ProPublica, XML, news)."""
        if success:
            self.logger.debug(f"Fetched {source} data [ein={ein} source={source}]", stacklevel=2)
        else:
            message = f"Failed to fetch {source} data [ein={ein} source={source} error={error}]"
            self.logger.warning(message, stacklevel=2)
            self.warnings.append(
                {
                    "message": message,
                    "timestamp": datetime.now().isoformat(),
                    "data": {"ein": ein, "source": source, "error": error},
                }
            )

    @contextmanager
    def time_operation(self, operation: str, **context):
        """
        Time and log an operation; failures are logged and re-raised.

        Usage:
            with logger.time_operation("analysis", ein="842108762"):
                ...
        """
        start = time.perf_counter()
        self.debug(f"Starting {operation}", **context)
        try:
            yield
        except Exception as e:
            duration = time.perf_counter() - start
            self.error(f"Failed {operation}", exception=e, duration_seconds=round(duration, 2), **context)
            raise
        duration = time.perf_counter() - start
        self.info(f"Completed {operation}", duration_seconds=round(duration, 2), **context)

    def log_cache_hit(self, key_class: str, key: str):
        self.cache_hits += 1
        self.cache_details.append(
            {"key_class": key_class, "key": key, "hit": True, "timestamp": datetime.now().isoformat()}
        )
        self.debug(f"Cache HIT for {key_class}", key=key)

    def log_cache_miss(self, key_class: str, key: str, reason: Optional[str] = None):
        self.cache_misses += 1
        detail = {"key_class": key_class, "key": key, "hit": False, "timestamp": datetime.now().isoformat()}
        if reason:
            detail["reason"] = reason
        self.cache_details.append(detail)

        msg = f"Cache MISS for {key_class}"
        if reason:
            msg += f" (reason: {reason})"
        self.debug(msg, key=key)

    def generate_summary(self) -> dict:
        """
        Aggregate cache and problem statistics for a run.

        Returns:
            dict with cache stats (overall and per key class) and error/warning details
        """
        total_checks = self.cache_hits + self.cache_misses
        hit_rate = (self.cache_hits / total_checks * 100) if total_checks > 0 else 0.0

        by_class = {}
        for detail in self.cache_details:
            stats = by_class.setdefault(detail["key_class"], {"hits": 0, "misses": 0, "total": 0})
            stats["total"] += 1
            if detail["hit"]:
                stats["hits"] += 1
            else:
                stats["misses"] += 1
        for stats in by_class.values():
            stats["hit_rate"] = round(stats["hits"] / stats["total"] * 100, 1) if stats["total"] else 0.0

        return {
            "cache": {
                "total_checks": total_checks,
                "hits": self.cache_hits,
                "misses": self.cache_misses,
                "hit_rate_percent": round(hit_rate, 1),
                "by_class": by_class,
            },
            "errors": {"total": len(self.errors), "details": self.errors},
            "warnings": {"total": len(self.warnings), "details": self.warnings},
            "timestamp": datetime.now().isoformat(),
        }


def configure_global_logging(log_level: str = "INFO"):
    """
    Configure root and third-party loggers with the unified format.

    Call this early in application startup so module loggers
    (logging.getLogger(__name__)) and httpx share one format.
    """
    level = getattr(logging, log_level.upper())
    formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    root_handler = logging.StreamHandler(sys.stderr)
    root_handler.setLevel(level)
    root_handler.setFormatter(formatter)
    root_logger.addHandler(root_handler)

    for lib_name in EXTERNAL_LOGGERS:
        lib_logger = logging.getLogger(lib_name)
        lib_logger.handlers.clear()
        lib_logger.propagate = True
        # httpx logs every request at INFO
        lib_logger.setLevel(max(level, logging.WARNING))
