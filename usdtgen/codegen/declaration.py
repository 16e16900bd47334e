"""
ABI Declaration Generator.

Emits the C header shared by the native compiler and the trampoline
definitions: one fire prototype and one is-enabled prototype per probe,
named by the symbol contract in ``usdtgen.utils.naming``.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Any, Dict, List

from ..utils.naming import header_guard
from .base import GenerationContext, TemplateBasedGenerator
from .function_signature import CSignatureGenerator, build_signature


class DeclarationGenerator(TemplateBasedGenerator):
    """Generator for the ABI declaration header."""

    artifact = "decl"
    template_name = "declaration.h.j2"

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
                })
            providers.append({"name": provider.name, "probes": probes})

        return {
            "source_file": PurePath(context.source_name).name,
            "guard": header_guard(context.source_name),
            "providers": providers,
        }

    def _get_symbols(self, context: GenerationContext) -> List[str]:
        symbols = []
        for provider, probe in context.provider_file.iter_probes():
            signature = build_signature(provider, probe)
            symbols.extend([signature.function_name, signature.enabled_function_name])
        return symbols
