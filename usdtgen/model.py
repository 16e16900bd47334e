"""
Core Data Structures for Provider Definitions.

This module defines the immutable model produced by the parser and consumed
by the validator, the type mapper and the code generators. All structures
are frozen dataclasses holding tuples, so a parsed file can be handed to any
number of generators without defensive copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Iterator, Optional, Tuple

if TYPE_CHECKING:
    from .utils.type_mapping import HostType, TypeInfo


@dataclass(frozen=True, order=True)
class SourcePosition:
    """A location in source text (1-based line and column, 0-based offset)."""

    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


UNKNOWN_POSITION = SourcePosition(0, 0, 0)


@dataclass(frozen=True)
class Argument:
    """A single typed probe argument."""

    index: int
    type_name: str
    position: SourcePosition = field(default=UNKNOWN_POSITION, compare=False)
    type_info: Optional["TypeInfo"] = field(default=None, compare=False)

    @property
    def is_annotated(self) -> bool:
        return self.type_info is not None

    def _require_info(self) -> "TypeInfo":
        if self.type_info is None:
            raise ValueError(f"argument {self.index} ({self.type_name}) has not been annotated")
        return self.type_info

    @property
    def abi_type(self) -> str:
        """C spelling of the argument type at the ABI boundary."""
        return self._require_info().abi_type

    @property
    def host_type(self) -> "HostType":
        """Python-side type of the argument."""
        return self._require_info().host_type

    @property
    def size_bytes(self) -> int:
        return self._require_info().size_bytes

    @property
    def parameter_name(self) -> str:
        return f"arg{self.index}"


@dataclass(frozen=True)
class Probe:
    """A named instrumentation point with an ordered, typed signature."""

    name: str
    arguments: Tuple[Argument, ...] = ()
    position: SourcePosition = field(default=UNKNOWN_POSITION, compare=False)

    @property
    def arity(self) -> int:
        return len(self.arguments)

    @property
    def type_names(self) -> Tuple[str, ...]:
        return tuple(arg.type_name for arg in self.arguments)

    def signature(self) -> str:
        """Render the probe the way it is declared in source."""
        return f"probe {self.name}({', '.join(self.type_names)});"


@dataclass(frozen=True)
class Provider:
    """A named group of probes."""

    name: str
    probes: Tuple[Probe, ...] = ()
    position: SourcePosition = field(default=UNKNOWN_POSITION, compare=False)

    def get_probe(self, name: str) -> Optional[Probe]:
        for probe in self.probes:
            if probe.name == name:
                return probe
        return None


@dataclass(frozen=True)
class ProviderFile:
    """An ordered sequence of providers parsed from one source."""

    providers: Tuple[Provider, ...] = ()
    source_name: str = "<string>"

    @property
    def probe_count(self) -> int:
        return sum(len(provider.probes) for provider in self.providers)

    @property
    def is_annotated(self) -> bool:
        return all(arg.is_annotated for _, probe in self.iter_probes() for arg in probe.arguments)

    def get_provider(self, name: str) -> Optional[Provider]:
        for provider in self.providers:
            if provider.name == name:
                return provider
        return None

    def iter_probes(self) -> Iterator[Tuple[Provider, Probe]]:
        """Yield (provider, probe) pairs in source order."""
        for provider in self.providers:
            for probe in provider.probes:
                yield provider, probe

    def with_arguments(self, transform) -> "ProviderFile":
        """Return a copy whose arguments have been replaced by ``transform(arg)``."""
        providers = tuple(
            replace(
                provider,
                probes=tuple(
                    replace(probe, arguments=tuple(transform(arg) for arg in probe.arguments))
                    for probe in provider.probes
                ),
            )
            for provider in self.providers
        )
        return replace(self, providers=providers)
