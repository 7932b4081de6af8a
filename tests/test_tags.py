"""
Tag validator tests

Tests counting, closure, last-occurrence extraction and duplicate warnings.
"""

import pytest

from storyreview.lib.tags import TagValidator
from storyreview.models.review import TagSpec


@pytest.fixture
def validator():
    return TagValidator()


class TestSingleTag:
    """Test one well-formed tag"""

    def test_closed_pair(self, validator):
        """A matching pair exists and is closed"""
        check = validator.check("<gametxt>Hi</gametxt>", "gametxt")

        assert check.exists
        assert check.is_closed
        assert check.open_count == 1
        assert check.close_count == 1
        assert check.content == "Hi"
        assert check.warning is None

    def test_case_insensitive(self, validator):
        """Tag names match regardless of case"""
        check = validator.check("<GAMETXT> Hi </gametxt>", "gametxt")
        assert check.is_closed
        assert check.content == "Hi"

    def test_absent(self, validator):
        """Missing tag"""
        check = validator.check("no tags here", "gametxt")
        assert not check.exists
        assert not check.is_closed
        assert check.content is None

    def test_cjk_tag_name(self, validator):
        """Non-ASCII tag names work"""
        check = validator.check("<历史记录>第一天</历史记录>", "历史记录")
        assert check.content == "第一天"

    def test_name_matched_literally(self, validator):
        """Regex metacharacters in names are literal"""
        assert not validator.check("<axb></axb>", "a.b").exists
        assert validator.check("<a.b>x</a.b>", "a.b").content == "x"

    def test_empty_content(self, validator):
        """An empty pair yields empty content"""
        check = validator.check("<UpdateVariable></UpdateVariable>", "UpdateVariable")
        assert check.is_closed
        assert check.content == ""


class TestMalformedTags:
    """Test unclosed and duplicate tags"""

    def test_unclosed(self, validator):
        """An opening tag without closing tag is unclosed"""
        check = validator.check("<gametxt>a", "gametxt")
        assert check.exists
        assert not check.is_closed
        assert check.content is None

    def test_duplicate_uses_last(self, validator):
        """The last complete occurrence wins"""
        check = validator.check("<gametxt>a</gametxt><gametxt>b</gametxt>", "gametxt")

        assert check.is_closed
        assert check.content == "b"
        assert check.warning == "Found 2 <gametxt> tags; using the last one"

    def test_trailing_unclosed_falls_back(self, validator):
        """An unclosed last opening tag falls back to the previous pair"""
        check = validator.check("<gametxt>a</gametxt><gametxt>b", "gametxt")

        assert not check.is_closed
        assert check.content == "a"

    def test_closure_invariant(self, validator):
        """is_closed iff counts are equal and positive"""
        for text in ["", "<t>", "</t>", "<t></t>", "<t><t></t>", "<t></t></t>"]:
            check = validator.check(text, "t")
            assert check.is_closed == (check.open_count == check.close_count and check.open_count > 0)


class TestCheckAll:
    """Test checking a configured tag table"""

    def test_config_order(self, validator):
        """Results follow the configured order"""
        specs = [TagSpec("thinking"), TagSpec("gametxt", required=True)]
        checks = validator.check_all("<gametxt>x</gametxt>", specs)

        assert [c.tag_name for c in checks] == ["thinking", "gametxt"]
        assert not checks[0].exists
        assert checks[1].is_closed

    def test_content_extract(self, validator):
        """content_extract returns '' when there is nothing to extract"""
        assert validator.content_extract("<a>x</a>", "a") == "x"
        assert validator.content_extract("<a>x", "a") == ""
        assert validator.content_extract("", "a") == ""
