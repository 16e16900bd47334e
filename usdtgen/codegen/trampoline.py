"""
ABI Trampoline Generator.

Emits the C definitions behind the declaration header. Each fire trampoline
forwards its arguments to the probe macro from the ``dtrace -h`` header;
until ``dtrace -G`` rewrites the object the call sites are inert. Symbol
names are taken from the same signatures as the declaration artifact, so
the two can never disagree.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Any, Dict, List

from ..utils.naming import declaration_file_name, dtrace_header_name
from .base import GenerationContext, TemplateBasedGenerator
from .function_signature import CSignatureGenerator, build_signature


class TrampolineGenerator(TemplateBasedGenerator):
    """Generator for the ABI trampoline definitions."""

    artifact = "defn"
    template_name = "trampoline.c.j2"

    def __init__(self, template_renderer=None):
        super().__init__(template_renderer)
        self._signatures = CSignatureGenerator()

    def _build_template_context(self, context: GenerationContext) -> Dict[str, Any]:
        providers = []
        for provider in context.providers:
            probes = []
            for probe in provider.probes:
                signature = build_signature(provider, probe)
                probes.append({
                    "name": probe.name,
                    "prototype": self._signatures.generate_signature(signature),
                    "enabled_prototype": self._signatures.generate_enabled_signature(signature),
                    "macro_call": self._signatures.generate_macro_call(signature),
                    "enabled_macro": signature.enabled_macro_name,
                })
            providers.append({"name": provider.name, "probes": probes})

        return {
            "source_file": PurePath(context.source_name).name,
            "dtrace_header": dtrace_header_name(context.source_name),
            "declaration_header": declaration_file_name(context.source_name),
            "providers": providers,
        }

    def _get_symbols(self, context: GenerationContext) -> List[str]:
        symbols = []
        for provider, probe in context.provider_file.iter_probes():
            signature = build_signature(provider, probe)
            symbols.extend([signature.function_name, signature.enabled_function_name])
        return symbols
