"""
Unit tests for the closed type table and ABI conversions.
"""

import ctypes

import pytest

from usdtgen.frontend import parse
from usdtgen.utils.type_mapping import (
    POINTER_SIZE,
    STR,
    DslType,
    TypeMapper,
    annotate,
    canonical_type_name,
    get_type_info,
    get_type_mapper,
    is_supported_type,
    sized_int,
)

INTEGER_TYPES = [
    ("int8_t", 8, True),
    ("int16_t", 16, True),
    ("int32_t", 32, True),
    ("int64_t", 64, True),
    ("uint8_t", 8, False),
    ("uint16_t", 16, False),
    ("uint32_t", 32, False),
    ("uint64_t", 64, False),
]


@pytest.fixture
def mapper():
    return TypeMapper()


class TestTypeTable:
    """Test the contents of the type table."""

    def test_table_is_closed(self, mapper):
        assert len(mapper.get_supported_types()) == 10
        assert [t.value for t in mapper.get_supported_types()] == [t.value for t in DslType]

    @pytest.mark.parametrize("name,bits,signed", INTEGER_TYPES)
    def test_integer_types(self, mapper, name, bits, signed):
        info = mapper.get_type_info(name)
        assert info.abi_type == name
        assert info.size_bytes * 8 == bits
        assert info.is_signed is signed
        assert info.host_type == sized_int(bits, signed)
        assert ctypes.sizeof(info.ctypes_type) == info.size_bytes

    def test_uintptr(self, mapper):
        info = mapper.get_type_info("uintptr_t")
        assert info.abi_type == "uintptr_t"
        assert info.size_bytes == POINTER_SIZE
        assert info.host_type == sized_int(POINTER_SIZE * 8, False)

    def test_string(self, mapper):
        info = mapper.get_type_info("char *")
        assert info.is_string
        assert info.abi_type == "const char *"
        assert info.host_type == STR
        assert info.macro_cast == "(char *)"
        assert info.ctypes_type is ctypes.c_char_p

    def test_unknown_names(self, mapper):
        for name in ["int", "float", "double", "uint8_t *", "bool", "size_t"]:
            assert not mapper.is_known(name)
            with pytest.raises(KeyError):
                mapper.resolve(name)

    def test_alternate_string_spelling(self):
        assert is_supported_type("char*")
        assert canonical_type_name("char*") == "char *"
        assert get_type_info("char*") is get_type_info("char *")

    def test_global_mapper_is_shared(self):
        assert get_type_mapper() is get_type_mapper()


class TestValueConversion:
    """Test host to ABI conversions."""

    @pytest.mark.parametrize("name,bits,signed", INTEGER_TYPES)
    def test_extreme_values_survive(self, mapper, name, bits, signed):
        """Test that the full range of each integer type passes unchanged."""
        info = mapper.get_type_info(name)
        low, high = mapper.value_range(info)
        assert high - low == (1 << bits) - 1
        for value in (low, high):
            assert mapper.from_abi(info, mapper.to_abi(info, value)) == value

    @pytest.mark.parametrize("name,bits,signed", INTEGER_TYPES)
    def test_out_of_range_is_rejected(self, mapper, name, bits, signed):
        info = mapper.get_type_info(name)
        low, high = mapper.value_range(info)
        with pytest.raises(OverflowError):
            mapper.to_abi(info, high + 1)
        with pytest.raises(OverflowError):
            mapper.to_abi(info, low - 1)

    def test_uintptr_zero(self, mapper):
        info = mapper.get_type_info("uintptr_t")
        assert mapper.from_abi(info, mapper.to_abi(info, 0)) == 0

    def test_bool_is_an_integer(self, mapper):
        info = mapper.get_type_info("uint8_t")
        assert mapper.from_abi(info, mapper.to_abi(info, True)) == 1

    def test_integer_rejects_string(self, mapper):
        with pytest.raises(TypeError):
            mapper.to_abi(mapper.get_type_info("int32_t"), "1")

    def test_string_round_trip(self, mapper):
        info = mapper.get_type_info("char *")
        assert mapper.from_abi(info, mapper.to_abi(info, "héllo")) == "héllo"

    def test_bytes_are_accepted_as_string(self, mapper):
        info = mapper.get_type_info("char *")
        assert mapper.to_abi(info, b"raw").value == b"raw"

    def test_string_with_nul_is_rejected(self, mapper):
        with pytest.raises(ValueError):
            mapper.to_abi(mapper.get_type_info("char *"), "a\0b")

    def test_string_rejects_integer(self, mapper):
        with pytest.raises(TypeError):
            mapper.to_abi(mapper.get_type_info("char *"), 5)

    def test_string_has_no_range(self, mapper):
        with pytest.raises(TypeError):
            mapper.value_range(mapper.get_type_info("char *"))


class TestAnnotate:
    """Test annotation of parsed files."""

    def test_annotate_attaches_type_info(self, sample_source):
        parsed = parse(sample_source)
        annotated = annotate(parsed)

        assert not parsed.is_annotated
        assert annotated.is_annotated
        probe = annotated.get_provider("myapp").get_probe("request")
        assert [arg.abi_type for arg in probe.arguments] == ["uint8_t", "const char *"]
        assert probe.arguments[1].host_type == STR

    def test_annotate_preserves_structure(self, sample_source):
        parsed = parse(sample_source)
        assert annotate(parsed) == parsed

    def test_unannotated_argument_has_no_abi_type(self, sample_source):
        argument = parse(sample_source).get_provider("net").get_probe("recv").arguments[0]
        with pytest.raises(ValueError):
            argument.abi_type


class TestHostTypes:
    """Test the host types used by the invocation checker."""

    def test_host_type(self, mapper):
        assert mapper.host_type("int16_t") == sized_int(16, True)
        assert mapper.host_type(DslType.STRING) == STR
        assert str(mapper.host_type("uint8_t")) == "int (uint8_t)"

    def test_uintptr_extremes(self, mapper):
        info = mapper.get_type_info("uintptr_t")
        low, high = mapper.value_range(info)
        assert (low, high) == (0, (1 << (POINTER_SIZE * 8)) - 1)
        for value in (low, high):
            assert mapper.from_abi(info, mapper.to_abi(info, value)) == value
