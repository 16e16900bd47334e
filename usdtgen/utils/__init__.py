"""
Utils package for usdtgen.

This module provides the shared building blocks of the pipeline: the
exception hierarchy, logging, configuration, the closed type table and the
symbol naming contract.
"""

# Core utilities
from .exceptions import (
    UsdtError,
    ProbeSyntaxError,
    UnexpectedToken,
    UnterminatedBlock,
    UnknownType,
    ValidationIssue,
    DuplicateName,
    InvalidIdentifier,
    ArityTooLarge,
    ValidationError,
    InvocationError,
    ArityMismatch,
    TypeMismatch,
    GenerationError,
    ArtifactWriteError,
    ConfigError,
    ProbeLibraryError,
)

# Configuration and system utilities
from .config import (
    UsdtgenConfig,
    GenerationConfig,
    RuntimeConfig,
    LoggingConfig,
    get_config,
    set_config,
    load_config,
)

from .type_mapping import (
    TypeMapper,
    DslType,
    TypeInfo,
    HostType,
    annotate,
    get_type_mapper,
    get_type_info,
    is_supported_type,
)

from .naming import (
    symbol_name,
    enabled_symbol_name,
    dtrace_macro_name,
    dtrace_enabled_macro_name,
    is_valid_identifier,
)

from .logging import get_logger, setup_logging

__all__ = [
    # Exceptions
    "UsdtError",
    "ProbeSyntaxError",
    "UnexpectedToken",
    "UnterminatedBlock",
    "UnknownType",
    "ValidationIssue",
    "DuplicateName",
    "InvalidIdentifier",
    "ArityTooLarge",
    "ValidationError",
    "InvocationError",
    "ArityMismatch",
    "TypeMismatch",
    "GenerationError",
    "ArtifactWriteError",
    "ConfigError",
    "ProbeLibraryError",

    # Configuration
    "UsdtgenConfig",
    "GenerationConfig",
    "RuntimeConfig",
    "LoggingConfig",
    "get_config",
    "set_config",
    "load_config",

    # Type mapping
    "TypeMapper",
    "DslType",
    "TypeInfo",
    "HostType",
    "annotate",
    "get_type_mapper",
    "get_type_info",
    "is_supported_type",

    # Naming
    "symbol_name",
    "enabled_symbol_name",
    "dtrace_macro_name",
    "dtrace_enabled_macro_name",
    "is_valid_identifier",

    # Logging
    "get_logger",
    "setup_logging",
]
