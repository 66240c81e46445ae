"""Logging configuration for costcast"""

import json
import logging
import logging.handlers
import sys
import threading
import time
import traceback
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional


# Extra attributes copied into structured records when present
CONTEXT_FIELDS = (
    'run_id',
    'operation',
    'duration',
    'points',
    'forecast_days',
    'confidence_level',
    'project_name',
)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with forecast run context"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update({
            field: getattr(record, field)
            for field in CONTEXT_FIELDS if hasattr(record, field)
        })

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        return json.dumps(entry, default=str)


def _formatter(structured: bool, fmt: str) -> logging.Formatter:
    return StructuredFormatter() if structured else logging.Formatter(fmt)


class PerformanceLogger:
    """Times engine runs and logs their duration at debug level"""

    def __init__(self):
        self.logger = logging.getLogger('costcast.performance')
        self._started: Dict[str, float] = {}
        self._lock = threading.Lock()

    @contextmanager
    def timer(self, operation: str, **context):
        """Time the enclosed block; ``context`` is attached to the record"""
        run_id = uuid.uuid4().hex
        with self._lock:
            self._started[run_id] = time.perf_counter()

        try:
            yield run_id
        finally:
            with self._lock:
                duration = time.perf_counter() - self._started.pop(run_id)

            self.logger.debug(
                f"{operation} took {duration:.3f}s",
                extra={'run_id': run_id, 'operation': operation, 'duration': duration, **context},
            )

    @property
    def active_timers(self) -> int:
        with self._lock:
            return len(self._started)


class LoggerManager:
    """Owns root logger configuration and the shared performance logger"""

    def __init__(self):
        self.loggers: Dict[str, logging.Logger] = {}
        self.performance_logger = PerformanceLogger()

    def setup_logging(self,
                      level: str = "INFO",
                      log_file: Optional[Path] = None,
                      structured: bool = False,
                      console: bool = True,
                      fmt: str = DEFAULT_FORMAT,
                      max_bytes: int = 10485760,
                      backup_count: int = 5,
                      handler: Optional[logging.Handler] = None):
        """
        Replace the root handlers.

        ``handler`` takes the place of the default stdout handler, so the CLI
        can route records to its own console.
        """
        root = logging.getLogger()
        root.setLevel(getattr(logging, level.upper()))
        root.handlers = []

        if handler is None and console:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(_formatter(structured, fmt))
        if handler is not None:
            root.addHandler(handler)

        if log_file:
            log_file = Path(log_file)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            rotating = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count
            )
            rotating.setFormatter(_formatter(structured, fmt))
            root.addHandler(rotating)

        logging.getLogger('sklearn').setLevel(logging.WARNING)

    def get_logger(self, name: str) -> logging.Logger:
        return self.loggers.setdefault(name, logging.getLogger(name))


# Global logger manager instance
logger_manager = LoggerManager()


def setup_logging(**kwargs):
    """Setup logging for the application"""
    logger_manager.setup_logging(**kwargs)


def setup_logging_from_config(config, handler: Optional[logging.Handler] = None):
    """Setup logging from a LoggingConfig"""
    logger_manager.setup_logging(
        level=config.level,
        log_file=config.file,
        structured=config.structured,
        console=config.console,
        fmt=config.format,
        max_bytes=config.max_bytes,
        backup_count=config.backup_count,
        handler=handler,
    )


def get_logger(name: str) -> logging.Logger:
    return logger_manager.get_logger(name)


def get_performance_logger() -> PerformanceLogger:
    return logger_manager.performance_logger
