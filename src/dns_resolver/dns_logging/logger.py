"""
Structured Logging Framework

This module provides the logging infrastructure using structlog, rendering
to the console and optionally to a rotating JSON log file.
"""

import logging
import logging.handlers
import sys
import traceback
from pathlib import Path
from typing import List, Optional

import structlog

from ..config.schema import LoggingConfig

SHARED_PROCESSORS = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


class StructuredLogger:
    """Structured logger using structlog on top of stdlib handlers."""

    def __init__(self, config: LoggingConfig):
        """Initialize structured logger.

        Args:
            config: Logging configuration
        """
        self.config = config
        self._configured = False
        self.handlers: List[logging.Handler] = []

    def _console_renderer(self):
        if self.config.format == "structured":
            return structlog.processors.JSONRenderer()
        return structlog.dev.ConsoleRenderer(
            colors=False, exception_formatter=structlog.dev.plain_traceback
        )

    def _get_processors(self) -> list:
        processors = list(SHARED_PROCESSORS)
        if self.config.format == "detailed":
            processors.append(
                structlog.processors.CallsiteParameterAdder(
                    {
                        structlog.processors.CallsiteParameter.MODULE,
                        structlog.processors.CallsiteParameter.LINENO,
                    }
                )
            )
        processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)
        return processors

    def configure(self) -> None:
        """Configure structlog and the root logger handlers."""
        if self._configured:
            return

        log_level = getattr(logging, self.config.level.upper())

        root_logger = logging.getLogger()
        for handler in self.handlers:
            root_logger.removeHandler(handler)
        self.handlers = []
        root_logger.setLevel(log_level)

        # Console output goes to stderr so stdout carries only results
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=self._console_renderer(),
                foreign_pre_chain=SHARED_PROCESSORS,
            )
        )
        self.handlers.append(console_handler)

        if self.config.file:
            self.handlers.append(self._create_file_handler(log_level))

        for handler in self.handlers:
            root_logger.addHandler(handler)

        structlog.configure(
            processors=self._get_processors(),
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self._configured = True

    def _create_file_handler(self, log_level: int) -> logging.Handler:
        """Create a rotating file handler with JSON formatting."""
        log_path = Path(self.config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=self.config.file,
            maxBytes=self.config.max_size_mb * 1024 * 1024,
            backupCount=self.config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
                foreign_pre_chain=SHARED_PROCESSORS,
            )
        )
        return file_handler

    def close(self) -> None:
        """Detach and close the handlers installed by configure()."""
        root_logger = logging.getLogger()
        for handler in self.handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self.handlers = []
        self._configured = False

    def get_logger(self, name: str = "dns_resolver") -> structlog.stdlib.BoundLogger:
        """Get a structured logger instance.

        Args:
            name: Logger name

        Returns:
            Structured logger instance
        """
        if not self._configured:
            self.configure()

        return structlog.get_logger(name)


# Global logger instance
_logger_instance: Optional[StructuredLogger] = None


def setup_logging(config: LoggingConfig) -> StructuredLogger:
    """Setup global logging configuration.

    Args:
        config: Logging configuration
    """
    global _logger_instance
    if _logger_instance is not None:
        _logger_instance.close()
    _logger_instance = StructuredLogger(config)
    _logger_instance.configure()
    return _logger_instance


def shutdown_logging() -> None:
    """Remove the global logging configuration."""
    global _logger_instance
    if _logger_instance is not None:
        _logger_instance.close()
    _logger_instance = None


def get_logger(name: str = "dns_resolver") -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Raises:
        RuntimeError: If logging hasn't been configured
    """
    if _logger_instance is None:
        raise RuntimeError("Logging not configured. Call setup_logging() first.")

    return _logger_instance.get_logger(name)


def log_exception(
    logger: structlog.stdlib.BoundLogger, message: str, exc: Exception = None
) -> None:
    """Log an exception with its type, message and traceback.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance (optional, will use current exception if None)
    """
    if exc is None:
        exc = sys.exc_info()[1]

    if exc is None:
        logger.error(message)
        return

    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        message,
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        traceback=tb_str,
    )
