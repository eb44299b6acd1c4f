"""
Structured Logging for StudyForge.

This module provides the logging infrastructure: cached loggers with
key-value fields, a Rich console handler, an optional log file, and a
specialised logger that times artifact generations.

Architecture Context
--------------------
Logging is a Core layer service used by every module in the system. All
modules should import get_logger() from here rather than using Python's
logging directly:

    # Good - uses StudyForge's structured logging
    from studyforge.core.logging import get_logger
    logger = get_logger(__name__)

    # Avoid - bypasses our structure
    import logging
    logger = logging.getLogger(__name__)

Logger Types
------------
**StructuredLogger**
    Base logger with context binding support. Key-value pairs passed to a
    log call, or bound once with bind(), are appended to the message:

        logger = get_logger(__name__)
        logger.bind(document="biology.pdf")
        logger.info("Summary generated", sections=4)
        # -> "Summary generated | document=biology.pdf | sections=4"

**GenerationLogger**
    Times one primary generation request from start to settlement:

        glog = GenerationLogger("summary", level="YEAR_3")
        glog.start()
        ...
        glog.finish(success=True, items=4)

Module-Level Factory
--------------------
get_logger() caches StructuredLogger instances by name, so multiple calls
return the same instance. configure_logging() changes the defaults used by
loggers created afterwards and reconfigures the ones already created.
"""

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_path: Optional[Path] = None
    console: bool = True


class StructuredLogger:
    """
    Structured logger with context support.

    Provides consistent logging across the application with
    support for structured fields and context tracking.
    """

    def __init__(self, name: str, config: Optional[LogConfig] = None) -> None:
        self.logger = logging.getLogger(name)
        self.config = config or _ConfigHolder.get_config()
        self._context: dict[str, Any] = {}
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Configure the logger."""
        level = getattr(logging, self.config.level.upper(), logging.INFO)
        self.logger.setLevel(level)

        # Remove existing handlers
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            self.config.format,
            datefmt=self.config.date_format,
        )

        if self.config.console:
            try:
                from rich.logging import RichHandler

                console_handler = RichHandler(
                    show_time=True,
                    show_path=False,
                    markup=False,
                    rich_tracebacks=True,
                )
                console_handler.setLevel(level)
            except ImportError:
                console_handler = logging.StreamHandler(sys.stderr)
                console_handler.setLevel(level)
                console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if self.config.file_path:
            self.config.file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.config.file_path)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def reconfigure(self, config: LogConfig) -> None:
        """Apply a new configuration, keeping bound context."""
        self.config = config
        self._setup_logger()

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Attach fields to every subsequent message from this logger."""
        self._context.update(kwargs)
        return self

    def unbind(self, *keys: str) -> None:
        """Remove previously bound fields."""
        for key in keys:
            self._context.pop(key, None)

    def _format_message(self, message: str, **kwargs: Any) -> str:
        """Format message with context and extra fields."""
        fields = {**self._context, **kwargs}
        if fields:
            field_str = " | ".join(f"{k}={v}" for k, v in fields.items())
            return f"{message} | {field_str}"
        return message

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self.logger.error(self._format_message(message, **kwargs))

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self.logger.exception(self._format_message(message, **kwargs))


# Module-level logger factory
_loggers: dict[str, StructuredLogger] = {}


def get_logger(name: str, config: Optional[LogConfig] = None) -> StructuredLogger:
    """
    Get or create a structured logger.

    Args:
        name: Logger name (typically __name__).
        config: Optional logging configuration.

    Returns:
        Configured StructuredLogger instance.
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, config)
    return _loggers[name]


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:
    """
    Configure global logging settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional file path for log output.
        console: Whether to log to console.
    """
    config = LogConfig(
        level=level,
        file_path=log_file,
        console=console,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _ConfigHolder.set_config(config)

    for structured in _loggers.values():
        structured.reconfigure(config)


class _ConfigHolder:
    """Holds default logging configuration."""

    _config: LogConfig = LogConfig()

    @classmethod
    def get_config(cls) -> LogConfig:
        """Get the default config."""
        return cls._config

    @classmethod
    def set_config(cls, config: LogConfig) -> None:
        """Set the default config."""
        cls._config = config


class GenerationLogger:
    """
    Specialized logger for one primary generation request.

    Tracks when the request started and logs its duration on settlement.
    """

    def __init__(self, kind: str, **context: Any) -> None:
        self.kind = kind
        self.context = context
        self.logger = get_logger("studyforge.generation")
        self._started: Optional[datetime] = None

    def start(self) -> None:
        """Mark the start of the generation call."""
        self._started = datetime.now()
        self.logger.info("Generation started", kind=self.kind, **self.context)

    @property
    def elapsed_sec(self) -> float:
        """Seconds since start() (0.0 if never started)."""
        if self._started is None:
            return 0.0
        return (datetime.now() - self._started).total_seconds()

    def finish(self, success: bool, error: Optional[str] = None, **kwargs: Any) -> None:
        """Log settlement of the generation call."""
        duration = f"{self.elapsed_sec:.2f}"
        if success:
            self.logger.info(
                "Generation completed",
                kind=self.kind,
                duration_sec=duration,
                **self.context,
                **kwargs,
            )
        else:
            self.logger.error(
                "Generation failed",
                kind=self.kind,
                duration_sec=duration,
                error=error,
                **self.context,
            )
