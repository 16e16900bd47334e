"""
usdtgen: USDT probe generation for Python applications

Turns a DTrace-style provider definition into three artifacts that agree on
one set of names and signatures:

- a C header declaring one trampoline per probe
- the C trampolines, forwarding to the macros produced by ``dtrace -h``
- a Python module exposing ``enabled()`` and ``fire(thunk)`` per probe

Usage:
    from usdtgen import compile_source, generate_artifacts

    provider_file = compile_source(text, "probes.d")
    artifacts = generate_artifacts(provider_file)
    print(artifacts.binding.content)
"""

__version__ = "0.1.0"
__author__ = "usdtgen developers"
__email__ = "usdtgen@example.com"

# Public API exports
from .model import Argument, Probe, Provider, ProviderFile, SourcePosition
from .frontend import ensure_valid, parse, parse_file, validate
from .pipeline import (
    ArtifactKind,
    Artifacts,
    compile_file,
    compile_source,
    emit,
    generate_artifact,
    generate_artifacts,
    write_artifacts,
)
from .checker import check_invocation, check_source
from .utils.config import get_config, UsdtgenConfig
from .utils.exceptions import UsdtError

__all__ = [
    "Argument",
    "Probe",
    "Provider",
    "ProviderFile",
    "SourcePosition",
    "parse",
    "parse_file",
    "validate",
    "ensure_valid",
    "ArtifactKind",
    "Artifacts",
    "compile_file",
    "compile_source",
    "emit",
    "generate_artifact",
    "generate_artifacts",
    "write_artifacts",
    "check_invocation",
    "check_source",
    "get_config",
    "UsdtgenConfig",
    "UsdtError",
]
