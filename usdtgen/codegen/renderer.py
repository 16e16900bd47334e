"""
Template Rendering Engine.

This module provides template-based code generation using Jinja2 templates
shipped in ``usdtgen/codegen/templates``. Rendering is deterministic: the
templates receive only the annotated model and derived names, never
timestamps or absolute paths.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from ..utils.exceptions import GenerationError

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")


class JinjaTemplateRenderer:
    """Jinja2-based template renderer for artifact generation."""

    def __init__(self, template_dir: Optional[str] = None):
        """Initialize the template renderer."""
        self._template_dir = Path(template_dir or TEMPLATE_DIR)
        self._env = Environment(
            loader=FileSystemLoader(str(self._template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
        )

        self._setup_custom_filters()

    def _setup_custom_filters(self) -> None:
        """Set up custom Jinja2 filters for artifact generation."""

        def c_string(text: str) -> str:
            """Escape text for use inside a C comment or string literal."""
            return text.replace("\\", "\\\\").replace('"', '\\"').replace("*/", "* /")

        def py_string(text: str) -> str:
            """Render text as a Python string literal."""
            return repr(text)

        self._env.filters["c_string"] = c_string
        self._env.filters["py_string"] = py_string

    @property
    def template_dir(self) -> Path:
        return self._template_dir

    def render_file(self, template_path: str, context: Dict[str, Any]) -> str:
        """Render a template file with the given context."""
        try:
            template = self._env.get_template(template_path)
            return template.render(**context)
        except TemplateError as e:
            raise GenerationError(f"Template file rendering failed: {e}", template_path)


_default_renderer: Optional[JinjaTemplateRenderer] = None


def get_renderer() -> JinjaTemplateRenderer:
    """Get the shared renderer over the packaged templates."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = JinjaTemplateRenderer()
    return _default_renderer
