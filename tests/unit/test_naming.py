"""
Unit tests for the symbol naming contract.
"""

import pytest

from usdtgen.utils.naming import (
    binding_file_name,
    binding_site_class_name,
    declaration_file_name,
    dtrace_enabled_macro_name,
    dtrace_header_name,
    dtrace_macro_name,
    emitted_names,
    enabled_symbol_name,
    find_symbol_collisions,
    header_guard,
    identifier_problem,
    is_valid_identifier,
    library_name,
    sanitize_identifier,
    source_stem,
    symbol_name,
    trampoline_file_name,
)


class TestSymbolNames:
    """Test the names shared by all artifacts."""

    def test_symbol_name(self):
        assert symbol_name("myapp", "request") == "myapp_request"

    def test_names_are_verbatim(self):
        """Test that no case folding or escaping is applied."""
        assert symbol_name("MyApp", "Start2") == "MyApp_Start2"

    def test_enabled_symbol_name(self):
        assert enabled_symbol_name("myapp", "request") == "myapp_request_enabled"

    def test_macro_names(self):
        assert dtrace_macro_name("myapp", "request") == "MYAPP_REQUEST"
        assert dtrace_enabled_macro_name("myapp", "request") == "MYAPP_REQUEST_ENABLED"

    def test_site_class_name(self):
        assert binding_site_class_name("net", "recv") == "_net_recv_site"

    def test_emitted_names(self):
        assert emitted_names("p", "a") == ("p_a", "p_a_enabled", "P_A", "P_A_ENABLED")

    def test_injective_over_distinct_valid_pairs(self):
        pairs = [("net", "recv"), ("net", "send"), ("disk", "recv"), ("myapp", "net")]
        assert len({symbol_name(*pair) for pair in pairs}) == len(pairs)
        assert find_symbol_collisions(pairs) == []


class TestCollisions:
    """Test collision detection over provider/probe pairs."""

    def test_concatenation_collision(self):
        assert find_symbol_collisions([("a_b", "c"), ("a", "b_c")])[0] == "a_b_c"

    def test_collision_reported_once(self):
        collisions = find_symbol_collisions([("a_b", "c"), ("a", "b_c"), ("a_b_c", "")])
        assert collisions.count("a_b_c") == 1

    def test_repeated_pair_is_not_a_collision(self):
        assert find_symbol_collisions([("p", "a"), ("p", "a")]) == []


class TestIdentifiers:
    """Test identifier rules."""

    @pytest.mark.parametrize("name", ["a", "myapp", "Probe2", "a_b_c", "x" * 64])
    def test_valid(self, name):
        assert is_valid_identifier(name)
        assert identifier_problem(name) == ""

    @pytest.mark.parametrize("name,fragment", [
        ("", "letter"),
        ("_a", "letter"),
        ("2a", "letter"),
        ("a-b", "letter"),
        ("x" * 65, "64"),
        ("a__b", "'__'"),
        ("a_", "'_'"),
        ("static", "C"),
        ("lambda", "Python"),
    ])
    def test_invalid(self, name, fragment):
        assert not is_valid_identifier(name)
        assert fragment in identifier_problem(name)

    def test_sanitize_identifier(self):
        assert sanitize_identifier("my-probes") == "my_probes"
        assert sanitize_identifier("1st") == "_1st"
        assert sanitize_identifier("") == "unnamed"


class TestArtifactNames:
    """Test file names derived from the source name."""

    def test_stem(self):
        assert source_stem("net/probes.d") == "probes"
        assert source_stem("<string>") == "<string>"

    def test_artifact_file_names(self):
        assert dtrace_header_name("src/probes.d") == "probes.h"
        assert declaration_file_name("src/probes.d") == "probes_probes.h"
        assert trampoline_file_name("src/probes.d") == "probes_probes.c"
        assert binding_file_name("src/probes.d") == "probes_probes.py"
        assert library_name("src/probes.d") == "probes"

    def test_binding_module_name_is_importable(self):
        assert binding_file_name("my-app.d") == "my_app_probes.py"

    def test_header_guard(self):
        assert header_guard("net/probes.d") == "USDTGEN_PROBES_PROBES_H"
