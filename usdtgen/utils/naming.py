"""
Naming Utilities for usdtgen.

This module is the single source of every name that crosses an artifact
boundary. The trampoline symbols are a binary-compatibility contract with
the external tracing toolchain, so their derivation is fixed:

    symbol_name(provider, probe)          -> "<provider>_<probe>"
    enabled_symbol_name(provider, probe)  -> "<provider>_<probe>_enabled"
    dtrace_macro_name(provider, probe)    -> "<PROVIDER>_<PROBE>"

Names are used verbatim, without case folding or escaping. The mapping is
injective over any validated file: the validator rejects every pair of
declarations that would map to the same name.
"""

from __future__ import annotations

import keyword
import re
from pathlib import PurePath
from typing import Dict, Iterable, List, Set, Tuple

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
MAX_IDENTIFIER_LENGTH = 64

ENABLED_SUFFIX = "_enabled"

C_KEYWORDS = frozenset({
    "auto", "break", "case", "char", "const", "continue", "default", "do",
    "double", "else", "enum", "extern", "float", "for", "goto", "if", "inline",
    "int", "long", "register", "restrict", "return", "short", "signed",
    "sizeof", "static", "struct", "switch", "typedef", "union", "unsigned",
    "void", "volatile", "while", "_Bool", "_Complex", "_Imaginary", "bool",
})


# =============================================================================
# Generated symbol names
# =============================================================================

def symbol_name(provider: str, probe: str) -> str:
    """Name of the C trampoline that fires ``provider:::probe``."""
    return f"{provider}_{probe}"


def enabled_symbol_name(provider: str, probe: str) -> str:
    """Name of the C function reporting whether ``provider:::probe`` is enabled."""
    return f"{symbol_name(provider, probe)}{ENABLED_SUFFIX}"


def dtrace_macro_name(provider: str, probe: str) -> str:
    """Name of the probe macro emitted by ``dtrace -h`` for ``provider:::probe``."""
    return f"{provider.upper()}_{probe.upper()}"


def dtrace_enabled_macro_name(provider: str, probe: str) -> str:
    """Name of the is-enabled macro emitted by ``dtrace -h``."""
    return f"{dtrace_macro_name(provider, probe)}_ENABLED"


def binding_site_class_name(provider: str, probe: str) -> str:
    """Name of the per-probe class in the generated Python binding."""
    return f"_{symbol_name(provider, probe)}_site"


def emitted_names(provider: str, probe: str) -> Tuple[str, ...]:
    """Every global name emitted for one probe across all artifacts."""
    return (
        symbol_name(provider, probe),
        enabled_symbol_name(provider, probe),
        dtrace_macro_name(provider, probe),
        dtrace_enabled_macro_name(provider, probe),
    )


def find_symbol_collisions(pairs: Iterable[Tuple[str, str]]) -> List[str]:
    """
    Find emitted names shared by distinct (provider, probe) pairs.

    Args:
        pairs: Provider/probe name pairs, in source order

    Returns:
        Colliding names in order of first collision
    """
    owners: Dict[str, Tuple[str, str]] = {}
    collisions: List[str] = []
    reported: Set[str] = set()
    for pair in pairs:
        for name in emitted_names(*pair):
            owner = owners.setdefault(name, pair)
            if owner != pair and name not in reported:
                reported.add(name)
                collisions.append(name)
    return collisions


# =============================================================================
# Identifier checks
# =============================================================================

def identifier_problem(name: str) -> str:
    """
    Explain why a name cannot be used in generated code.

    Returns:
        Empty string if the name is usable, otherwise the reason
    """
    if not IDENTIFIER_PATTERN.match(name):
        return "must start with a letter and contain only letters, digits and underscores"
    if len(name) > MAX_IDENTIFIER_LENGTH:
        return f"longer than {MAX_IDENTIFIER_LENGTH} characters"
    if "__" in name:
        return "must not contain '__'"
    if name.endswith("_"):
        return "must not end with '_'"
    if name in C_KEYWORDS:
        return "reserved word in C"
    if keyword.iskeyword(name):
        return "reserved word in Python"
    return ""


def is_valid_identifier(name: str) -> bool:
    """Check if a name can be used as a provider or probe name."""
    return not identifier_problem(name)


def sanitize_identifier(name: str) -> str:
    """Sanitize a string to be a valid C identifier."""
    # Replace invalid characters with underscores
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "_", name)

    # Ensure it doesn't start with a number
    if sanitized and sanitized[0].isdigit():
        sanitized = f"_{sanitized}"

    if not sanitized:
        sanitized = "unnamed"

    return sanitized


# =============================================================================
# Artifact names
# =============================================================================

def source_stem(source_name: str) -> str:
    """Stem of a provider source (``net/probes.d`` -> ``probes``)."""
    stem = PurePath(source_name).stem
    return stem or "probes"


def header_guard(source_name: str) -> str:
    """Include guard for the declaration artifact of a source."""
    return f"USDTGEN_{sanitize_identifier(source_stem(source_name)).upper()}_PROBES_H"


def dtrace_header_name(source_name: str) -> str:
    """Header produced by ``dtrace -h -s <source>``."""
    return f"{source_stem(source_name)}.h"


def declaration_file_name(source_name: str) -> str:
    return f"{source_stem(source_name)}_probes.h"


def trampoline_file_name(source_name: str) -> str:
    return f"{source_stem(source_name)}_probes.c"


def binding_module_name(source_name: str) -> str:
    return f"{sanitize_identifier(source_stem(source_name))}_probes"


def binding_file_name(source_name: str) -> str:
    return f"{binding_module_name(source_name)}.py"


def library_name(source_name: str) -> str:
    """Base name of the shared library the build links the trampolines into."""
    return source_stem(source_name)
