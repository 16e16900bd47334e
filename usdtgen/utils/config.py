"""
Configuration System for usdtgen.

This module provides a small, unified configuration interface. Settings are
read from a YAML or JSON file and may be overridden through environment
variables.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError
from .logging import get_logger

logger = get_logger(__name__)

# The widest probe macro provided by <sys/sdt.h> is STAP_PROBE12.
DEFAULT_MAX_PROBE_ARGUMENTS = 12

DEFAULT_CONFIG_FILES = ("usdtgen.yaml", "usdtgen.yml", "usdtgen.json")


@dataclass
class GenerationConfig:
    """Parsing, validation and code generation configuration."""

    max_probe_arguments: int = DEFAULT_MAX_PROBE_ARGUMENTS


@dataclass
class RuntimeConfig:
    """Configuration for generated bindings at run time."""

    library_path: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    enable_file_logging: bool = False
    log_file: str = "usdtgen.log"


class UsdtgenConfig:
    """
    Unified configuration manager for usdtgen.

    Loads a single YAML or JSON file (when one exists) and exposes its
    sections as dataclasses. Environment variables take precedence over
    file values.
    """

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, uses
                ``USDTGEN_CONFIG`` or the first default file in the
                current directory.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        self.config_file = self._get_config_file_path(config_file)
        self._config_data = self._load_config()

        self.generation = self._create_generation_config()
        self.runtime = self._create_runtime_config()
        self.logging = self._create_logging_config()

    def _get_config_file_path(self, config_file: Optional[str]) -> Optional[Path]:
        """Get the configuration file path."""
        if config_file:
            return Path(config_file)

        env_file = os.getenv("USDTGEN_CONFIG")
        if env_file:
            return Path(env_file)

        for name in DEFAULT_CONFIG_FILES:
            candidate = Path.cwd() / name
            if candidate.exists():
                return candidate
        return None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if self.config_file is None or not self.config_file.exists():
            if self.config_file is not None:
                logger.warning(f"Configuration file {self.config_file} not found, using defaults")
            return {}

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                if self.config_file.suffix.lower() in (".yaml", ".yml"):
                    config_data = yaml.safe_load(f)
                else:
                    config_data = json.load(f)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load configuration: {e}", {"path": str(self.config_file)})

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(
                "Configuration must contain a mapping at the root", {"path": str(self.config_file)}
            )
        logger.debug(f"Loaded configuration from {self.config_file}")
        return config_data

    def _section(self, name: str) -> Dict[str, Any]:
        data = self._config_data.get(name) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration section '{name}' must be a mapping")
        return data

    def _create_generation_config(self) -> GenerationConfig:
        """Create generation configuration from loaded data."""
        gen_data = self._section("generation")

        max_args = os.getenv("USDTGEN_MAX_PROBE_ARGUMENTS") or gen_data.get(
            "max_probe_arguments", DEFAULT_MAX_PROBE_ARGUMENTS
        )
        try:
            max_args = int(max_args)
        except (TypeError, ValueError):
            raise ConfigError(f"max_probe_arguments must be an integer, got {max_args!r}")
        if max_args < 0:
            raise ConfigError(f"max_probe_arguments must not be negative, got {max_args}")

        return GenerationConfig(max_probe_arguments=max_args)

    def _create_runtime_config(self) -> RuntimeConfig:
        """Create runtime configuration from loaded data."""
        runtime_data = self._section("runtime")

        return RuntimeConfig(
            library_path=os.getenv("USDTGEN_LIBRARY_PATH") or runtime_data.get("library_path"),
        )

    def _create_logging_config(self) -> LoggingConfig:
        """Create logging configuration from loaded data."""
        log_data = self._section("logging")

        return LoggingConfig(
            level=os.getenv("USDTGEN_LOG_LEVEL") or log_data.get("level", "WARNING"),
            enable_file_logging=log_data.get("enable_file_logging", False),
            log_file=log_data.get("log_file", "usdtgen.log"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the effective configuration as plain data."""
        return {
            "generation": {
                "max_probe_arguments": self.generation.max_probe_arguments,
            },
            "runtime": {
                "library_path": self.runtime.library_path,
            },
            "logging": {
                "level": self.logging.level,
                "enable_file_logging": self.logging.enable_file_logging,
                "log_file": self.logging.log_file,
            },
        }

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save the effective configuration.

        Args:
            path: Destination file; defaults to the loaded file

        Returns:
            Path that was written
        """
        target = Path(path) if path else self.config_file
        if target is None:
            target = Path.cwd() / DEFAULT_CONFIG_FILES[0]

        with open(target, "w", encoding="utf-8") as f:
            if target.suffix.lower() in (".yaml", ".yml"):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Configuration saved to {target}")
        return target


# Global configuration instance
_global_config: Optional[UsdtgenConfig] = None


def get_config() -> UsdtgenConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = UsdtgenConfig()
    return _global_config


def set_config(config: Optional[UsdtgenConfig]) -> None:
    """Set (or with None, reset) the global configuration instance."""
    global _global_config
    _global_config = config


def load_config(config_file: str) -> UsdtgenConfig:
    """Load configuration from a specific file."""
    return UsdtgenConfig(config_file)
