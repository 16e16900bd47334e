"""
Base Classes for Code Generators.

This module provides the shared context, result type and base classes for
the three artifact generators. Generators are pure functions of the
annotated ProviderFile: they read it through the context and never modify
it, so they may run in any order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..model import Provider, ProviderFile
from ..utils.exceptions import GenerationError
from ..utils.logging import UsdtLogger
from .renderer import JinjaTemplateRenderer, get_renderer

_log = UsdtLogger(__name__)


@dataclass(frozen=True)
class GenerationContext:
    """Read-only input shared by all generators."""

    provider_file: ProviderFile

    def __post_init__(self):
        if not self.provider_file.is_annotated:
            raise GenerationError("provider file must be annotated with type information")

    @property
    def source_name(self) -> str:
        return self.provider_file.source_name

    @property
    def providers(self) -> Tuple[Provider, ...]:
        return self.provider_file.providers


@dataclass(frozen=True)
class CodeFragment:
    """A generated artifact with metadata."""

    content: str
    artifact: str
    symbols: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if not isinstance(self.content, str):
            raise TypeError("Content must be a string")


class BaseCodeGenerator(ABC):
    """Base class for all artifact generators."""

    #: Short artifact kind, as used on the command line
    artifact = ""

    def __init__(self, template_renderer: Optional[JinjaTemplateRenderer] = None):
        """Initialize the generator with a template renderer."""
        self._template_renderer = template_renderer or get_renderer()

    @abstractmethod
    def generate(self, context: GenerationContext) -> CodeFragment:
        """Generate the artifact for the given context."""

    def _render_template_file(self, template_path: str, template_context: Dict[str, Any]) -> str:
        """Render a template file with the given context."""
        return self._template_renderer.render_file(template_path, template_context)

    def _create_fragment(self, content: str, symbols: Optional[List[str]] = None,
                         metadata: Optional[Dict[str, Any]] = None) -> CodeFragment:
        """Create a code fragment with the given content and metadata."""
        fragment = CodeFragment(
            content=content,
            artifact=self.artifact,
            symbols=tuple(symbols or []),
            metadata=metadata or {},
        )
        _log.log_artifact_generated(self.artifact, len(content))
        return fragment


class TemplateBasedGenerator(BaseCodeGenerator):
    """Base class for generators rendering one template per artifact."""

    template_name = ""

    def generate(self, context: GenerationContext) -> CodeFragment:
        """Generate code using the configured template."""
        template_context = self._build_template_context(context)
        content = self._render_template_file(self.template_name, template_context)

        return self._create_fragment(
            content=content,
            symbols=self._get_symbols(context),
            metadata=self._get_metadata(context),
        )

    @abstractmethod
    def _build_template_context(self, context: GenerationContext) -> Dict[str, Any]:
        """Build the template context from the generation context."""

    def _get_symbols(self, context: GenerationContext) -> List[str]:
        """Global names defined by this artifact."""
        return []

    def _get_metadata(self, context: GenerationContext) -> Dict[str, Any]:
        """Get metadata for this generator."""
        return {
            "generator": self.__class__.__name__,
            "template": self.template_name,
            "source": context.source_name,
        }


def validate_generator_output(fragment: CodeFragment) -> bool:
    """Check that a generated C or Python artifact has balanced delimiters."""
    if not fragment.content.strip():
        return False

    if fragment.content.count("{") != fragment.content.count("}"):
        return False

    if fragment.content.count("(") != fragment.content.count(")"):
        return False

    return True


__all__ = [
    "GenerationContext",
    "CodeFragment",
    "BaseCodeGenerator",
    "TemplateBasedGenerator",
    "validate_generator_output",
]
