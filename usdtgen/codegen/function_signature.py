"""
Function Signature Generation Module.

This module builds signature descriptions from annotated probes and renders
them for the two targets: C prototypes shared by the declaration and
trampoline artifacts, and Python annotations used by the binding artifact.
Both renderings come from the same SignatureInfo, so parameter counts and
order agree by construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

from ..model import Probe, Provider
from ..utils.naming import (
    dtrace_enabled_macro_name,
    dtrace_macro_name,
    enabled_symbol_name,
    symbol_name,
)
from ..utils.type_mapping import TypeInfo


@dataclass(frozen=True)
class ParameterInfo:
    """Information about a function parameter."""

    name: str
    type_info: TypeInfo

    @property
    def c_type(self) -> str:
        return self.type_info.abi_type

    @property
    def host_annotation(self) -> str:
        return self.type_info.host_type.annotation


@dataclass(frozen=True)
class SignatureInfo:
    """Complete signature information for one probe."""

    provider: str
    probe: str
    parameters: Tuple[ParameterInfo, ...] = ()

    @property
    def function_name(self) -> str:
        return symbol_name(self.provider, self.probe)

    @property
    def enabled_function_name(self) -> str:
        return enabled_symbol_name(self.provider, self.probe)

    @property
    def macro_name(self) -> str:
        return dtrace_macro_name(self.provider, self.probe)

    @property
    def enabled_macro_name(self) -> str:
        return dtrace_enabled_macro_name(self.provider, self.probe)

    @property
    def arity(self) -> int:
        return len(self.parameters)


def build_signature(provider: Provider, probe: Probe) -> SignatureInfo:
    """
    Build the signature of an annotated probe.

    Args:
        provider: Provider declaring the probe
        probe: Annotated probe

    Returns:
        SignatureInfo with one parameter per declared argument, in order
    """
    parameters = tuple(
        ParameterInfo(name=arg.parameter_name, type_info=arg.type_info)
        for arg in probe.arguments
    )
    return SignatureInfo(provider=provider.name, probe=probe.name, parameters=parameters)


class SignatureGenerator(ABC):
    """Abstract base class for signature generators."""

    @abstractmethod
    def generate_signature(self, signature_info: SignatureInfo) -> str:
        """Generate function signature string."""

    @abstractmethod
    def generate_parameter(self, param_info: ParameterInfo) -> str:
        """Generate parameter string."""


class CSignatureGenerator(SignatureGenerator):
    """Signature generator for the C trampolines."""

    def generate_signature(self, signature_info: SignatureInfo) -> str:
        """Generate ``void <provider>_<probe>(<params>)``."""
        return f"void {signature_info.function_name}({self.generate_parameter_list(signature_info)})"

    def generate_enabled_signature(self, signature_info: SignatureInfo) -> str:
        """Generate ``int <provider>_<probe>_enabled(void)``."""
        return f"int {signature_info.enabled_function_name}(void)"

    def generate_parameter(self, param_info: ParameterInfo) -> str:
        """Generate C parameter string."""
        c_type = param_info.c_type
        if c_type.endswith("*"):
            return f"{c_type}{param_info.name}"
        return f"{c_type} {param_info.name}"

    def generate_parameter_list(self, signature_info: SignatureInfo) -> str:
        if not signature_info.parameters:
            return "void"
        return ", ".join(self.generate_parameter(p) for p in signature_info.parameters)

    def generate_macro_call(self, signature_info: SignatureInfo) -> str:
        """Generate the dtrace probe macro invocation for a trampoline body."""
        args = [f"{p.type_info.macro_cast}{p.name}" for p in signature_info.parameters]
        return f"{signature_info.macro_name}({', '.join(args)})"


class PythonSignatureGenerator(SignatureGenerator):
    """
    Signature generator for the Python binding.

    Builtins are referenced through the module alias ``_builtins`` because a
    provider class of the same name (``class str:``) would otherwise shadow
    them in the generated module.
    """

    builtins_alias = "_builtins"

    def generate_signature(self, signature_info: SignatureInfo) -> str:
        """Generate the ``fire`` method signature."""
        return f"def fire(self, thunk: {self.generate_thunk_annotation(signature_info)}) -> None"

    def generate_parameter(self, param_info: ParameterInfo) -> str:
        return f"{param_info.name}: {self.qualified_annotation(param_info)}"

    def qualified_annotation(self, param_info: ParameterInfo) -> str:
        return f"{self.builtins_alias}.{param_info.host_annotation}"

    def generate_result_annotation(self, signature_info: SignatureInfo) -> str:
        """Annotation of the value a thunk must produce."""
        annotations = self.host_annotations(signature_info)
        if not annotations:
            return "_typing.Tuple[()]"
        result = f"_typing.Tuple[{', '.join(annotations)}]"
        if len(annotations) == 1:
            # One-argument probes also accept a bare value
            result = f"_typing.Union[{annotations[0]}, {result}]"
        return result

    def generate_thunk_annotation(self, signature_info: SignatureInfo) -> str:
        return f"_typing.Callable[[], {self.generate_result_annotation(signature_info)}]"

    def host_annotations(self, signature_info: SignatureInfo) -> List[str]:
        return [self.qualified_annotation(p) for p in signature_info.parameters]
