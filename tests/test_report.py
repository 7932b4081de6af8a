"""
Report rendering tests

Tests summaries, JSON conversion, HTML rendering and the directive lexer.
"""

import json

from pygments.token import Comment, Keyword, Name, Operator

from storyreview import review, segment
from storyreview.lib.lexer import get_lexer
from storyreview.lib.report import (
    blocks_renderHtml,
    directives_highlight,
    report_renderHtml,
    result_toDict,
    summary_get,
)


class TestSummary:
    """Test the plain-text summary"""

    def test_passed(self):
        """A clean review summarises in one line"""
        result = review("<gametxt>a long enough narrative</gametxt>")
        assert summary_get(result) == "✓ Review passed"

    def test_failed(self):
        """Errors are counted"""
        result = review("no tags here")
        assert summary_get(result) == "✗ Review failed\n  - 1 error"

    def test_directive_count(self):
        """Directive count is listed when the directive tag was parsed"""
        result = review(
            "<gametxt>a long enough narrative</gametxt>"
            "<UpdateVariable>_.set('a', 1);\n_.set('b', 2);</UpdateVariable>"
        )
        assert summary_get(result).endswith("  - 2 directives")


class TestResultToDict:
    """Test JSON conversion"""

    def test_enums_flattened(self):
        """The dict serialises to JSON with enum values"""
        result = review(
            "<UpdateVariable>ADD('MC.玩家.金币', 50)</UpdateVariable>", with_blocks=True
        )
        data = result_toDict(result)
        encoded = json.loads(json.dumps(data, ensure_ascii=False))

        assert encoded["passed"] is False
        assert encoded["issues"][0]["level"] == "error"
        assert encoded["issues"][0]["category"] == "tag"
        assert encoded["directive_check"]["commands"][0]["operation"] == "add"
        assert encoded["blocks"] == []
        assert encoded["summary"].startswith("✗")


class TestHtml:
    """Test HTML rendering"""

    def test_blocks_escaped(self):
        """Block content is escaped and newlines become <br>"""
        html = blocks_renderHtml(segment("<b>「hi」\nx"), escape_html=True)

        assert '<span class="content-block content-block--dialogue">hi</span>' in html
        assert "&lt;b&gt;" in html
        assert "<br>" in html

    def test_blocks_unescaped(self):
        """Escaping can be disabled"""
        html = blocks_renderHtml(segment("<b>x</b>"), escape_html=False)
        assert html == '<span class="content-block content-block--text"><b>x</b></span>'

    def test_directives_highlight(self):
        """Directive bodies are highlighted with inline styles"""
        html = directives_highlight("ADD('MC.玩家.金币', 50)")
        assert "<pre" in html
        assert "金币" in html
        assert "style=" in html

    def test_full_report(self):
        """The page shows issues, directives and narrative"""
        result = review(
            "<gametxt>他说「走吧」</gametxt><UpdateVariable>???</UpdateVariable>",
            with_blocks=True,
        )
        page = report_renderHtml(result, title="turn1.txt")

        assert "<title>turn1.txt</title>" in page
        assert "<h2>Issues</h2>" in page
        assert "<h2>Directives</h2>" in page
        assert "content-block--dialogue" in page


class TestDirectiveLexer:
    """Test directive syntax highlighting tokens"""

    def test_modern_call(self):
        """_.set is highlighted as a function call with a comment"""
        tokens = list(get_lexer().get_tokens("_.set('a', 1); // c"))

        assert (Name.Builtin, "_") in tokens
        assert (Name.Function, "set") in tokens
        assert (Comment.Single, "// c") in tokens

    def test_legacy_call(self):
        """Legacy names are keywords"""
        tokens = list(get_lexer().get_tokens("ADD('x', 5)"))
        assert (Keyword, "ADD") in tokens

    def test_line_assignment(self):
        """Line assignments highlight path and operator"""
        tokens = list(get_lexer().get_tokens("hp += 3"))
        assert (Name.Variable, "hp") in tokens
        assert (Operator, "+=") in tokens
