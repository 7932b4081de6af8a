"""
Review report rendering

Turns a ReviewResult into the forms the CLI writes to disk:

- summary_get()      short plain-text summary
- result_toDict()    JSON-ready dict (enums flattened to their values)
- report_renderHtml() standalone HTML page: issues, highlighted directive
                     body and the segmented narrative
"""

import html
from dataclasses import asdict
from enum import Enum
from typing import Any, List, Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter

from ..config import AppSettings, appsettings
from ..models.blocks import ContentBlock
from ..models.review import IssueLevel, ReviewResult
from .lexer import DirectiveLexer


def summary_get(result: ReviewResult) -> str:
    """
    Short multi-line summary of a review

    Example:
        ✓ Review passed
          - 1 warning
          - 3 directives
    """
    lines: List[str] = ["✓ Review passed" if result.passed else "✗ Review failed"]

    errors = len(result.issues_byLevel(IssueLevel.ERROR))
    warnings = len(result.issues_byLevel(IssueLevel.WARNING))

    if errors:
        lines.append(f"  - {errors} error{'s' if errors != 1 else ''}")
    if warnings:
        lines.append(f"  - {warnings} warning{'s' if warnings != 1 else ''}")
    if result.directive_check is not None:
        count = len(result.directive_check.commands)
        lines.append(f"  - {count} directive{'s' if count != 1 else ''}")

    return '\n'.join(lines)


def value_flatten(value: Any) -> Any:
    """Replace Enum members with their values, recursively"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: value_flatten(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [value_flatten(item) for item in value]
    return value


def result_toDict(result: ReviewResult) -> dict[str, Any]:
    """JSON-serialisable view of a review result"""
    data = value_flatten(asdict(result))
    data['summary'] = summary_get(result)
    return data


def blockContent_render(content: str, escape_html: bool) -> str:
    processed = html.escape(content) if escape_html else content
    return processed.replace('\n', '<br>')


def blocks_renderHtml(blocks: List[ContentBlock], escape_html: Optional[bool] = None) -> str:
    """
    Render content blocks as inline spans

    Each block becomes
    <span class="content-block content-block--KIND">display content</span>
    with newlines turned into <br>.

    Args:
        blocks: Segmented blocks
        escape_html: HTML-escape display content (defaults to settings)
    """
    escape = appsettings.escape_html if escape_html is None else escape_html
    return ''.join(
        f'<span class="content-block content-block--{block.kind.value}">'
        f'{blockContent_render(block.display_content, escape)}</span>'
        for block in blocks
    )


def directives_highlight(source: str, style: Optional[str] = None) -> str:
    """Syntax-highlight a directive body as inline-styled HTML"""
    formatter = HtmlFormatter(style=style or appsettings.pygments_style, noclasses=True)
    return highlight(source, DirectiveLexer(), formatter)


BLOCK_STYLES = """
.content-block--dialogue { color: #1f6feb; }
.content-block--thought { color: #8250df; font-style: italic; }
.content-block--scenery { color: #57606a; }
.content-block--system { color: #cf222e; font-weight: bold; }
.issue--error { color: #cf222e; }
.issue--warning { color: #9a6700; }
.issue--info { color: #57606a; }
"""


def report_renderHtml(
    result: ReviewResult, title: str = "Review", settings: Optional[AppSettings] = None
) -> str:
    """
    Standalone HTML report for one review

    Args:
        result: Review to render
        title: Page title (usually the input file name)
        settings: Rendering settings (defaults to appsettings)
    """
    settings = settings or appsettings
    parts: List[str] = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{html.escape(title)}</title>",
        f"<style>{BLOCK_STYLES}</style>",
        "</head>",
        "<body>",
        f"<h1>{html.escape(title)}</h1>",
        f"<pre>{html.escape(summary_get(result))}</pre>",
    ]

    if result.issues:
        parts.append("<h2>Issues</h2>")
        parts.append("<ul>")
        for issue in result.issues:
            field = f" [{html.escape(issue.field)}]" if issue.field else ""
            parts.append(
                f'<li class="issue--{issue.level.value}">'
                f"{issue.level.value}/{issue.category.value}{field}: "
                f"{html.escape(issue.message)}</li>"
            )
        parts.append("</ul>")

    if result.directive_check is not None and result.directive_check.raw_content:
        parts.append("<h2>Directives</h2>")
        parts.append(directives_highlight(result.directive_check.raw_content, settings.pygments_style))

    if result.blocks is not None:
        parts.append("<h2>Narrative</h2>")
        parts.append(f"<p>{blocks_renderHtml(result.blocks, settings.escape_html)}</p>")

    parts.extend(["</body>", "</html>"])
    return '\n'.join(parts)
