"""
Host Binding Generator.

Emits a Python module exposing one class per provider. Each probe is a
ProbeSite attribute with ``enabled()`` and ``fire(thunk)``; the thunk is
only called when the probe is enabled. The ``fire`` annotations spell out
the declared host types so a static type checker rejects call sites whose
thunk produces the wrong values.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Any, Dict, List

from ..utils.naming import binding_site_class_name, library_name
from .base import GenerationContext, TemplateBasedGenerator
from .function_signature import PythonSignatureGenerator, build_signature


class BindingGenerator(TemplateBasedGenerator):
    """Generator for the Python host binding module."""

    artifact = "python"
    template_name = "binding.py.j2"

    def __init__(self, template_renderer=None):
        super().__init__(template_renderer)
        self._signatures = PythonSignatureGenerator()

    def _build_template_context(self, context: GenerationContext) -> Dict[str, Any]:
        providers = []
        for provider in context.providers:
            probes = []
            for probe in provider.probes:
                signature = build_signature(provider, probe)
                probes.append({
                    "name": probe.name,
                    "declaration": probe.signature(),
                    "site_class": binding_site_class_name(provider.name, probe.name),
                    "fire_signature": self._signatures.generate_signature(signature),
                    "type_names": repr(probe.type_names),
                })
            providers.append({"name": provider.name, "probes": probes})

        return {
            "source_file": PurePath(context.source_name).name,
            "library_name": library_name(context.source_name),
            "providers": providers,
        }

    def _get_symbols(self, context: GenerationContext) -> List[str]:
        return [provider.name for provider in context.providers]
