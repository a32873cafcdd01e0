"""
Resolver Logging Module

This module provides structured logging for the resolver command-line client.
"""

from .logger import (
    StructuredLogger,
    get_logger,
    log_exception,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "StructuredLogger",
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "log_exception",
]
