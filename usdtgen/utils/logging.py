"""
Logging configuration and utilities.

This module provides centralized logging configuration for the
usdtgen package with appropriate formatting and levels.
"""

import logging
import os
from typing import Optional


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the usdtgen package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    # Determine log level
    if level is None:
        level = os.environ.get("USDTGEN_LOG_LEVEL", "WARNING")

    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger("usdtgen")
    logger.setLevel(log_level)

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console output goes to stderr so generated artifacts on stdout stay clean
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance under the ``usdtgen`` hierarchy
    """
    if name == "usdtgen" or name.startswith("usdtgen."):
        return logging.getLogger(name)
    return logging.getLogger(f"usdtgen.{name}")


class UsdtLogger:
    """
    Centralized logging for the generation pipeline.

    This class provides specialized logging methods for the parse,
    validation and generation stages.
    """

    def __init__(self, name: str):
        """
        Initialize logger for specific component.

        Args:
            name: Component name for logging context
        """
        self.logger = get_logger(name)

    def log_parse_complete(self, source_name: str, provider_count: int, probe_count: int) -> None:
        """
        Log a successful parse.

        Args:
            source_name: Name of the parsed source
            provider_count: Number of providers found
            probe_count: Total number of probes across providers
        """
        self.logger.debug(
            f"Parsed {source_name}: {provider_count} provider(s), {probe_count} probe(s)"
        )

    def log_validation_failure(self, source_name: str, error_count: int) -> None:
        """
        Log a failed validation.

        Args:
            source_name: Name of the validated source
            error_count: Number of violations found
        """
        self.logger.info(f"Validation of {source_name} failed with {error_count} error(s)")

    def log_artifact_generated(self, artifact: str, size: int) -> None:
        """
        Log generation of a single artifact.

        Args:
            artifact: Artifact kind
            size: Size of the rendered text in characters
        """
        self.logger.debug(f"Generated {artifact} artifact ({size} chars)")

    def log_artifacts_written(self, paths: list) -> None:
        """
        Log emission of artifacts to disk.

        Args:
            paths: Paths that were written
        """
        self.logger.info(f"Wrote {len(paths)} artifact(s): {', '.join(str(p) for p in paths)}")
