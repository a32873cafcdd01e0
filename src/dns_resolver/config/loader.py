"""Configuration loader for the resolver.

This module loads configuration from YAML or JSON files and applies
environment variable overrides on top of the defaults.
"""

import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .schema import LoggingConfig, ResolverConfig, create_default_config

ENV_PREFIX = "DNS_RESOLVER_"


class ConfigLoader:
    """Configuration loader."""

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_file: Path to configuration file (YAML or JSON)
        """
        self.config_file = config_file
        self._config: Optional[ResolverConfig] = None

    def load_config(self) -> ResolverConfig:
        """Load configuration from file and environment variables.

        Returns:
            Loaded and validated resolver configuration

        Raises:
            FileNotFoundError: If config file is specified but not found
            ValueError: If configuration is invalid
            yaml.YAMLError: If YAML parsing fails
            json.JSONDecodeError: If JSON parsing fails
        """
        config_dict = asdict(create_default_config())

        if self.config_file:
            file_config = self._load_from_file(self.config_file)
            config_dict = self._merge_configs(config_dict, file_config)

        config_dict = self._apply_env_overrides(config_dict)

        self._config = self._dict_to_config(config_dict)
        return self._config

    def get_config(self) -> Optional[ResolverConfig]:
        """Get current configuration."""
        return self._config

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, "r", encoding="utf-8") as f:
            content = f.read()

        suffix = path.suffix.lower()
        if suffix in [".yaml", ".yml"]:
            result = yaml.safe_load(content)
        elif suffix == ".json":
            result = json.loads(content)
        else:
            # Try YAML first, then JSON
            try:
                result = yaml.safe_load(content)
            except yaml.YAMLError:
                try:
                    result = json.loads(content)
                except json.JSONDecodeError:
                    raise ValueError(f"Unsupported file format: {file_path}")

        return result if isinstance(result, dict) else {}

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> ResolverConfig:
        """Convert dictionary to configuration object.

        Raises:
            ValueError: If configuration is invalid or has unknown keys
        """
        values = dict(config_dict)
        logging_section = values.pop("logging", None) or {}

        try:
            logging_config = LoggingConfig(**logging_section)
            return ResolverConfig(logging=logging_config, **values)
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    def _merge_configs(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration.

        Top-level keys use DNS_RESOLVER_<KEY> (e.g. DNS_RESOLVER_NAMESERVER),
        logging keys use DNS_RESOLVER_LOGGING_<KEY>.
        """
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            key = env_key[len(ENV_PREFIX) :].lower()

            if key.startswith("logging_"):
                section = config_dict.setdefault("logging", {})
                section[key[len("logging_") :]] = self._convert_env_value(env_value)
            elif key == "nameserver":
                # Nameserver values like "1.0" must stay strings
                config_dict[key] = env_value
            elif key in config_dict:
                config_dict[key] = self._convert_env_value(env_value)

        return config_dict

    def _convert_env_value(self, value: str) -> Any:
        """Convert environment variable value to appropriate Python type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        elif value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value


def load_config_from_file(config_file: Optional[str] = None) -> ResolverConfig:
    """Convenience function to load configuration."""
    return ConfigLoader(config_file).load_config()
