"""
Resolver Configuration Schema

Dataclass schema for the nameserver, transport and logging settings of the
resolver. Every section validates itself on construction.
"""

from dataclasses import dataclass, field
from typing import Optional

from .validators import (
    validate_file_path,
    validate_log_level,
    validate_nameserver,
    validate_non_negative_int,
    validate_port,
    validate_positive_float,
    validate_positive_int,
)


@dataclass
class LoggingConfig:
    """Logging configuration section."""

    level: str = "INFO"
    format: str = "simple"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        if not validate_log_level(self.level):
            raise ValueError(f"Invalid log level: {self.level}")

        if self.format not in ["simple", "detailed", "structured"]:
            raise ValueError(f"Invalid log format: {self.format}")

        if not validate_file_path(self.file):
            raise ValueError(f"Invalid log file path: {self.file}")

        if not validate_positive_int(self.max_size_mb):
            raise ValueError(f"Max size MB must be positive: {self.max_size_mb}")

        if not validate_non_negative_int(self.backup_count):
            raise ValueError(f"Backup count must be non-negative: {self.backup_count}")


@dataclass
class ResolverConfig:
    """Main resolver configuration."""

    nameserver: str = "8.8.8.8"
    port: int = 53
    timeout: float = 5.0
    retries: int = 2
    max_alias_depth: int = 16
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Validate resolver configuration."""
        if not validate_nameserver(self.nameserver):
            raise ValueError(f"Invalid nameserver: {self.nameserver}")

        if not validate_port(self.port):
            raise ValueError(f"Invalid port: {self.port}")

        if not validate_positive_float(self.timeout):
            raise ValueError(f"Timeout must be positive: {self.timeout}")

        if not validate_non_negative_int(self.retries):
            raise ValueError(f"Retries must be non-negative: {self.retries}")

        if not validate_positive_int(self.max_alias_depth):
            raise ValueError(
                f"Max alias depth must be positive: {self.max_alias_depth}"
            )


def create_default_config() -> ResolverConfig:
    """Create a default configuration instance."""
    return ResolverConfig()
