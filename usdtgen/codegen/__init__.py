"""
Code generation package.

This package renders the three artifacts from one annotated ProviderFile:
- DeclarationGenerator: C header with the trampoline prototypes
- TrampolineGenerator: C definitions forwarding to the dtrace probe macros
- BindingGenerator: Python module exposing enabled()/fire() per probe
"""

from .base import (
    BaseCodeGenerator,
    CodeFragment,
    GenerationContext,
    TemplateBasedGenerator,
    validate_generator_output,
)
from .binding import BindingGenerator
from .declaration import DeclarationGenerator
from .function_signature import (
    CSignatureGenerator,
    ParameterInfo,
    PythonSignatureGenerator,
    SignatureInfo,
    build_signature,
)
from .renderer import JinjaTemplateRenderer, get_renderer
from .trampoline import TrampolineGenerator

__all__ = [
    "BaseCodeGenerator",
    "CodeFragment",
    "GenerationContext",
    "TemplateBasedGenerator",
    "validate_generator_output",
    "BindingGenerator",
    "DeclarationGenerator",
    "TrampolineGenerator",
    "CSignatureGenerator",
    "PythonSignatureGenerator",
    "ParameterInfo",
    "SignatureInfo",
    "build_signature",
    "JinjaTemplateRenderer",
    "get_renderer",
]
