"""
FileCheck-style tests for generated artifacts.

These tests validate the structure of the declaration header, the
trampoline definitions and the Python binding using pattern matching
similar to LLVM FileCheck.
"""

import importlib.util
import re
import typing

import pytest

from usdtgen.codegen import (
    BindingGenerator,
    DeclarationGenerator,
    GenerationContext,
    TrampolineGenerator,
    validate_generator_output,
)


@pytest.fixture
def context(sample_file):
    return GenerationContext(sample_file)


@pytest.mark.filecheck
class TestDeclarationOutput:
    """Test the ABI declaration header."""

    def test_header_structure(self, context):
        header = DeclarationGenerator().generate(context).content

        # CHECK: #ifndef USDTGEN_PROBES_PROBES_H
        # CHECK-NEXT: #define USDTGEN_PROBES_PROBES_H
        assert re.search(r'#ifndef USDTGEN_PROBES_PROBES_H\n#define USDTGEN_PROBES_PROBES_H\n', header)

        # CHECK: #include <stdint.h>
        assert '#include <stdint.h>' in header

        # CHECK: extern "C" {
        assert re.search(r'#ifdef __cplusplus\nextern "C" \{\n#endif', header)

        # CHECK: #endif /* USDTGEN_PROBES_PROBES_H */
        assert header.rstrip().endswith('#endif /* USDTGEN_PROBES_PROBES_H */')

    def test_prototypes(self, context):
        header = DeclarationGenerator().generate(context).content

        # CHECK: void myapp_start(void);
        # CHECK-NEXT: int myapp_start_enabled(void);
        assert 'void myapp_start(void);\nint myapp_start_enabled(void);\n' in header

        # CHECK: void myapp_request(uint8_t arg0, const char *arg1);
        assert 'void myapp_request(uint8_t arg0, const char *arg1);' in header

        # CHECK: void myapp_done(int64_t arg0, uint64_t arg1, uintptr_t arg2);
        assert 'void myapp_done(int64_t arg0, uint64_t arg1, uintptr_t arg2);' in header

        # CHECK: void net_recv(uint32_t arg0);
        assert 'void net_recv(uint32_t arg0);' in header

    def test_provider_order(self, context):
        header = DeclarationGenerator().generate(context).content
        assert header.index('/* provider myapp */') < header.index('/* provider net */')
        assert header.index('myapp_start') < header.index('myapp_request') < header.index('myapp_done')

    def test_one_prototype_pair_per_probe(self, context):
        header = DeclarationGenerator().generate(context).content
        assert len(re.findall(r'^void \w+\(.*\);$', header, re.MULTILINE)) == 4
        assert len(re.findall(r'^int \w+_enabled\(void\);$', header, re.MULTILINE)) == 4

    def test_fragment_metadata(self, context):
        fragment = DeclarationGenerator().generate(context)
        assert fragment.artifact == 'decl'
        assert fragment.metadata['template'] == 'declaration.h.j2'
        assert 'net_recv_enabled' in fragment.symbols
        assert validate_generator_output(fragment)


@pytest.mark.filecheck
class TestTrampolineOutput:
    """Test the ABI trampoline definitions."""

    def test_includes(self, context):
        source = TrampolineGenerator().generate(context).content

        # CHECK: #include <stdint.h>
        # CHECK-NEXT: #include "probes.h"
        # CHECK-NEXT: #include "probes_probes.h"
        assert re.search(r'#include <stdint.h>\n#include "probes.h"\n#include "probes_probes.h"\n', source)

    def test_fire_bodies_forward_to_macros(self, context):
        source = TrampolineGenerator().generate(context).content

        # CHECK: void myapp_start(void)
        # CHECK-NEXT: {
        # CHECK-NEXT:     MYAPP_START();
        # CHECK-NEXT: }
        assert 'void myapp_start(void)\n{\n    MYAPP_START();\n}\n' in source

        # CHECK: MYAPP_REQUEST(arg0, (char *)arg1);
        assert re.search(
            r'void myapp_request\(uint8_t arg0, const char \*arg1\)\n\{\n'
            r'    MYAPP_REQUEST\(arg0, \(char \*\)arg1\);\n\}',
            source,
        )

        # CHECK: NET_RECV(arg0);
        assert '    NET_RECV(arg0);\n' in source

    def test_enabled_bodies(self, context):
        source = TrampolineGenerator().generate(context).content

        # CHECK: int net_recv_enabled(void)
        # CHECK-NEXT: {
        # CHECK-NEXT:     return NET_RECV_ENABLED();
        # CHECK-NEXT: }
        assert 'int net_recv_enabled(void)\n{\n    return NET_RECV_ENABLED();\n}\n' in source

    def test_every_declared_symbol_is_defined(self, context):
        declared = DeclarationGenerator().generate(context)
        defined = TrampolineGenerator().generate(context)
        assert declared.symbols == defined.symbols

        prototypes = re.findall(r'^((?:void|int) \w+\(.*\));$', declared.content, re.MULTILINE)
        for prototype in prototypes:
            assert re.search('^' + re.escape(prototype) + r'\n\{', defined.content, re.MULTILINE)

    def test_balanced(self, context):
        assert validate_generator_output(TrampolineGenerator().generate(context))


@pytest.mark.filecheck
class TestBindingOutput:
    """Test the Python host binding."""

    def test_module_preamble(self, context):
        module = BindingGenerator().generate(context).content

        # CHECK: from usdtgen.runtime import ProbeLibrary as _ProbeLibrary
        assert 'from usdtgen.runtime import ProbeLibrary as _ProbeLibrary' in module

        # CHECK: _library = _ProbeLibrary('probes', __file__)
        assert "_library = _ProbeLibrary('probes', __file__)" in module

    def test_fire_annotations(self, context):
        module = BindingGenerator().generate(context).content

        # CHECK: def fire(self, thunk: _typing.Callable[[], _typing.Tuple[()]]) -> None:
        assert 'def fire(self, thunk: _typing.Callable[[], _typing.Tuple[()]]) -> None:' in module

        # CHECK: def fire(self, thunk: _typing.Callable[[], _typing.Tuple[_builtins.int, _builtins.str]]) -> None:
        assert 'def fire(self, thunk: _typing.Callable[[], _typing.Tuple[_builtins.int, _builtins.str]]) -> None:' in module

        # CHECK: _typing.Union[_builtins.int, _typing.Tuple[_builtins.int]]
        assert '_typing.Callable[[], _typing.Union[_builtins.int, _typing.Tuple[_builtins.int]]]' in module

    def test_provider_classes(self, context):
        module = BindingGenerator().generate(context).content

        # CHECK: class myapp:
        # CHECK: request = _myapp_request_site(
        # CHECK-NEXT: _library, 'myapp', 'request', ('uint8_t', 'char *')
        assert re.search(r'^class myapp:$', module, re.MULTILINE)
        assert re.search(
            r"    request = _myapp_request_site\(\n"
            r"        _library, 'myapp', 'request', \('uint8_t', 'char \*'\)\n    \)",
            module,
        )
        assert "_library, 'net', 'recv', ('uint32_t',)" in module
        assert "_library, 'myapp', 'start', ()" in module

    def test_exports(self, context):
        module = BindingGenerator().generate(context).content
        assert re.search(r"__all__ = \[\n    'myapp',\n    'net',\n\]", module)

    def test_module_is_valid_python(self, context):
        compile(BindingGenerator().generate(context).content, 'probes_probes.py', 'exec')

    def test_generated_module_imports_and_is_inactive(self, context, tmp_path):
        """Test that the binding runs unchanged when the probe library is absent."""
        path = tmp_path / 'probes_probes.py'
        path.write_text(BindingGenerator().generate(context).content, encoding='utf-8')

        spec = importlib.util.spec_from_file_location('probes_probes', str(path))
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        assert module.__all__ == ['myapp', 'net']
        assert not module.myapp.request.enabled()
        module.myapp.request.fire(lambda: 1 / 0)

        hints = typing.get_type_hints(type(module.myapp.request).fire)
        assert hints['thunk'] == typing.Callable[[], typing.Tuple[int, str]]

    def test_provider_named_like_a_builtin(self, tmp_path):
        """Test that provider classes named str or int do not shadow annotations."""
        from usdtgen.pipeline import compile_source

        provider_file = compile_source(
            "provider str { probe s(char *); };\nprovider int { probe n(int32_t); };", "shadow.d"
        )
        module_text = BindingGenerator().generate(GenerationContext(provider_file)).content

        # CHECK: import builtins as _builtins
        # CHECK: class str:
        assert 'import builtins as _builtins' in module_text
        assert re.search(r'^class str:$', module_text, re.MULTILINE)
        assert '_typing.Union[_builtins.str, _typing.Tuple[_builtins.str]]' in module_text

        path = tmp_path / 'shadow_probes.py'
        path.write_text(module_text, encoding='utf-8')
        spec = importlib.util.spec_from_file_location('shadow_probes', str(path))
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        hints = typing.get_type_hints(type(module.int.n).fire)
        assert hints['thunk'] == typing.Callable[[], typing.Union[int, typing.Tuple[int]]]
