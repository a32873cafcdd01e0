from .loader import ConfigLoader, load_config_from_file
from .schema import LoggingConfig, ResolverConfig, create_default_config

__all__ = [
    "ConfigLoader",
    "load_config_from_file",
    "LoggingConfig",
    "ResolverConfig",
    "create_default_config",
]
