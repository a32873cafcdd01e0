"""
Configuration Validators

This module provides validation functions for resolver configuration parameters.
"""

import ipaddress
import re
from pathlib import Path
from typing import Optional

from ..core.executor import split_nameserver


def validate_file_path(path: Optional[str]) -> bool:
    """Validate optional file path format."""
    if path is None:
        return True
    if not path:
        return False

    try:
        Path(path)
        return True
    except (TypeError, ValueError):
        return False


def validate_log_level(level: str) -> bool:
    """Validate log level."""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    return isinstance(level, str) and level.upper() in valid_levels


def validate_positive_float(value: float) -> bool:
    """Validate positive float."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_positive_int(value: int) -> bool:
    """Validate positive integer."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_non_negative_int(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_port(port: int) -> bool:
    """Validate port number."""
    return validate_positive_int(port) and port <= 65535


def validate_nameserver(address: str) -> bool:
    """Validate nameserver address: host, host:port or [IPv6]:port."""
    if not isinstance(address, str) or not address:
        return False

    try:
        host, port = split_nameserver(address)
    except ValueError:
        return False

    if not host or not validate_port(port):
        return False

    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        return bool(re.match(r"^[a-zA-Z0-9.-]+$", host))
