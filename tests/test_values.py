"""
Literal decoding tests

Tests value_parse() for every literal form and the depth-bounded JSON
decoder.
"""

import pytest

from storyreview.lib.values import JSONDepthError, json_decodeBounded, value_parse


class TestScalars:
    """Test scalar literals"""

    def test_integer_stays_int(self):
        """Integers decode to int"""
        value = value_parse("100")
        assert value == 100
        assert isinstance(value, int)

    def test_negative_decimal(self):
        """Decimals decode to float"""
        assert value_parse("-1.5") == -1.5

    def test_exponent_is_float(self):
        """Exponent notation decodes to float"""
        value = value_parse("2e3")
        assert value == 2000.0
        assert isinstance(value, float)

    @pytest.mark.parametrize("text,expected", [
        ("true", True),
        ("false", False),
        ("null", None),
        ("undefined", None),
        ("", None),
    ])
    def test_keywords(self, text, expected):
        """Keywords and empty text"""
        assert value_parse(text) is expected

    def test_malformed_number_is_string(self):
        """Text that only looks numeric stays a string"""
        assert value_parse("1.2.3") == "1.2.3"

    def test_bare_word(self):
        """Unquoted words are kept as-is"""
        assert value_parse("  abc ") == "abc"


class TestStrings:
    """Test quoted strings"""

    def test_single_quoted(self):
        """Single quotes are removed"""
        assert value_parse("'MC.玩家'") == "MC.玩家"

    def test_double_quoted_with_escape(self):
        """Escaped matching quotes are unescaped"""
        assert value_parse('"say \\"hi\\""') == 'say "hi"'

    def test_quoted_number_stays_string(self):
        """A quoted number is a string"""
        assert value_parse("'42'") == "42"


class TestStructures:
    """Test JSON objects and arrays"""

    def test_json_array(self):
        """Arrays decode to lists"""
        assert value_parse("[1, 2]") == [1, 2]

    def test_single_quoted_object_retried(self):
        """Single-quoted JSON is retried with double quotes"""
        assert value_parse("{'hp': 3}") == {"hp": 3}

    def test_broken_object_is_string(self):
        """Undecodable object text is kept as a string"""
        assert value_parse("{broken") == "{broken"
        assert value_parse("{a: 1}") == "{a: 1}"


class TestBoundedDecoder:
    """Test JSON depth bounding"""

    def test_too_deep_rejected(self):
        """Nesting beyond the bound raises JSONDepthError"""
        with pytest.raises(JSONDepthError):
            json_decodeBounded("[" * 100 + "]" * 100, max_depth=64)

    def test_within_bound(self):
        """Nesting within an explicit bound decodes"""
        assert json_decodeBounded("[[[]]]", max_depth=3) == [[[]]]

    def test_deep_value_falls_back_to_string(self):
        """value_parse never raises on pathological nesting"""
        text = "[" * 5000 + "]" * 5000
        assert value_parse(text) == text

    def test_invalid_json_is_value_error(self):
        """Malformed JSON raises a ValueError subclass"""
        with pytest.raises(ValueError):
            json_decodeBounded('{"a": }')
