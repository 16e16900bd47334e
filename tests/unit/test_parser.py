"""
Unit tests for the provider definition parser.
"""

import pytest

from usdtgen.frontend import parse, parse_file
from usdtgen.model import ProviderFile
from usdtgen.utils.exceptions import (
    ProbeSyntaxError,
    UnexpectedToken,
    UnknownType,
    UnterminatedBlock,
)


class TestParseStructure:
    """Test that valid sources produce the expected model."""

    def test_sample_source(self, sample_source):
        provider_file = parse(sample_source, "probes.d")

        assert isinstance(provider_file, ProviderFile)
        assert provider_file.source_name == "probes.d"
        assert [p.name for p in provider_file.providers] == ["myapp", "net"]
        assert [p.name for p in provider_file.providers[0].probes] == ["start", "request", "done"]
        assert provider_file.probe_count == 4

    def test_argument_order_and_types(self, sample_source):
        probe = parse(sample_source).get_provider("myapp").get_probe("done")

        assert probe.type_names == ("int64_t", "uint64_t", "uintptr_t")
        assert [arg.index for arg in probe.arguments] == [0, 1, 2]

    def test_zero_argument_probe(self):
        probe = parse("provider p { probe a(); }").providers[0].probes[0]
        assert probe.arity == 0
        assert probe.arguments == ()

    def test_empty_provider(self):
        provider_file = parse("provider p {};")
        assert provider_file.providers[0].probes == ()

    def test_semicolon_after_provider_is_optional(self):
        with_semicolon = parse("provider p { probe a(); };")
        without = parse("provider p { probe a(); }")
        assert with_semicolon.providers == without.providers

    @pytest.mark.parametrize("spelling", ["char *", "char*", "char  *"])
    def test_string_spellings_are_canonical(self, spelling):
        probe = parse(f"provider p {{ probe a({spelling}); }}").providers[0].probes[0]
        assert probe.type_names == ("char *",)

    def test_trailing_comma(self):
        probe = parse("provider p { probe a(uint8_t, int16_t,); }").providers[0].probes[0]
        assert probe.type_names == ("uint8_t", "int16_t")

    def test_positions_are_recorded(self):
        provider_file = parse("provider p {\n    probe a(uint8_t);\n}")
        provider = provider_file.providers[0]
        probe = provider.probes[0]

        assert str(provider.position) == "1:10"
        assert str(probe.position) == "2:11"
        assert str(probe.arguments[0].position) == "2:13"

    def test_parsed_file_is_not_annotated(self):
        provider_file = parse("provider p { probe a(uint8_t); }")
        assert not provider_file.is_annotated

    def test_parse_file_reads_utf8(self, sample_path):
        provider_file = parse_file(sample_path)
        assert provider_file.source_name == str(sample_path)
        assert provider_file.probe_count == 4


class TestParseErrors:
    """Test that malformed sources fail with one typed error."""

    def test_empty_file(self):
        with pytest.raises(UnexpectedToken) as exc_info:
            parse("")
        assert exc_info.value.expected == "'provider'"

    def test_comment_only_file(self):
        with pytest.raises(UnexpectedToken):
            parse("/* nothing here */\n// still nothing\n")

    def test_unknown_type(self):
        with pytest.raises(UnknownType) as exc_info:
            parse("provider p {\n    probe a(foo);\n}")
        assert exc_info.value.name == "foo"
        assert str(exc_info.value.position) == "2:13"

    def test_pointer_to_integer_is_unknown(self):
        with pytest.raises(UnknownType) as exc_info:
            parse("provider p { probe a(uint8_t *); }")
        assert exc_info.value.name == "uint8_t *"

    def test_lone_comma_is_rejected(self):
        with pytest.raises(UnexpectedToken) as exc_info:
            parse("provider p { probe a(,); }")
        assert exc_info.value.found == "','"

    def test_missing_probe_semicolon(self):
        with pytest.raises(UnexpectedToken) as exc_info:
            parse("provider p { probe a() }")
        assert exc_info.value.expected == "';'"

    def test_unterminated_provider_block(self):
        """Test that input ending inside a block points at the opening brace."""
        with pytest.raises(UnterminatedBlock) as exc_info:
            parse("provider p {\n    probe a(uint8_t);\n")
        assert exc_info.value.what == "provider block"
        assert str(exc_info.value.position) == "1:12"

    def test_stray_token_in_block(self):
        with pytest.raises(UnexpectedToken) as exc_info:
            parse("provider p { a(); }")
        assert exc_info.value.expected == "'probe' or '}'"

    def test_missing_separator_between_arguments(self):
        with pytest.raises(UnexpectedToken) as exc_info:
            parse("provider p { probe a(uint8_t uint8_t); }")
        assert exc_info.value.expected == "',' or ')'"

    def test_errors_are_syntax_errors(self):
        """Test that all parse failures share one base class."""
        for text in ["", "provider p {", "provider p { probe a(bad); }"]:
            with pytest.raises(ProbeSyntaxError):
                parse(text)

    def test_error_message_includes_position(self):
        with pytest.raises(UnexpectedToken) as exc_info:
            parse("provider p { probe a() }")
        assert str(exc_info.value).startswith("1:24: unexpected '}'")

    def test_first_error_in_source_order(self):
        """Test that a later stray character does not mask an earlier error."""
        with pytest.raises(UnknownType) as exc_info:
            parse("provider p { probe a(foo); }\n$")
        assert str(exc_info.value.position) == "1:22"

    def test_lexical_error_after_valid_provider(self):
        with pytest.raises(UnexpectedToken) as exc_info:
            parse("provider p { probe a(); }\n$")
        assert str(exc_info.value.position) == "2:1"

    def test_parse_file_rejects_invalid_utf8(self, tmp_path):
        path = tmp_path / "bad.d"
        path.write_bytes(b"provider p {\n  /* \xff */\n}\n")
        with pytest.raises(UnexpectedToken) as exc_info:
            parse_file(path)
        assert str(exc_info.value.position) == "2:6"
        assert exc_info.value.found == "byte 0xff"
