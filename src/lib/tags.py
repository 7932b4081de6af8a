"""
Structural tag validation

Scans a model response for XML-like tags (<gametxt>...</gametxt>), counts
opening and closing occurrences case-insensitively and extracts the content
of the last complete occurrence.

Tag names are matched literally (escaped), so the patterns never
backtrack regardless of input.
"""

import re
from bisect import bisect_left
from typing import Iterable, List, Optional, Tuple

from ..models.review import TagCheckResult, TagSpec
from .log import LOG


class TagValidator:
    """
    Checks configured tags against a response text

    The validator is stateless; compiled patterns are cached per tag name.
    """

    def __init__(self) -> None:
        self._patterns: dict[str, Tuple[re.Pattern[str], re.Pattern[str]]] = {}

    def patterns_get(self, tag_name: str) -> Tuple[re.Pattern[str], re.Pattern[str]]:
        """Get (opening, closing) literal patterns for a tag name"""
        if tag_name not in self._patterns:
            escaped = re.escape(tag_name)
            self._patterns[tag_name] = (
                re.compile(f"<{escaped}>", re.IGNORECASE),
                re.compile(f"</{escaped}>", re.IGNORECASE),
            )
        return self._patterns[tag_name]

    def check(self, text: str, tag_name: str) -> TagCheckResult:
        """
        Check a single tag

        Args:
            text: Full model response
            tag_name: Literal tag name

        Returns:
            TagCheckResult with counts, closure, content of the last
            complete occurrence and a warning for duplicate opening tags

        Example:
            >>> TagValidator().check("<gametxt>Hi</gametxt>", "gametxt").is_closed
            True
        """
        opening, closing = self.patterns_get(tag_name)
        opens = [match.end() for match in opening.finditer(text)]
        closes = [match.start() for match in closing.finditer(text)]

        open_count = len(opens)
        close_count = len(closes)
        exists = open_count > 0
        is_closed = exists and open_count == close_count

        content: Optional[str] = None
        warning: Optional[str] = None

        if exists:
            content = self.content_locate(text, opens, closes)
            if open_count > 1:
                warning = f"Found {open_count} <{tag_name}> tags; using the last one"

        LOG(f"Tag <{tag_name}>: open={open_count} close={close_count}", level=3)

        return TagCheckResult(
            tag_name=tag_name,
            exists=exists,
            is_closed=is_closed,
            open_count=open_count,
            close_count=close_count,
            content=content,
            warning=warning,
        )

    def content_locate(self, text: str, opens: List[int], closes: List[int]) -> Optional[str]:
        """
        Content between the last opening tag that is followed by a closing
        tag and that closing tag, stripped

        Args:
            text: Full text
            opens: End offsets of opening tags, ascending
            closes: Start offsets of closing tags, ascending

        Returns:
            Extracted content, or None if no opening tag is ever closed
        """
        for content_start in reversed(opens):
            # First closing tag at or after this opening tag
            index = bisect_left(closes, content_start)
            if index < len(closes):
                return text[content_start:closes[index]].strip()
        return None

    def content_extract(self, text: str, tag_name: str) -> str:
        """Content of the last complete occurrence of a tag, or ''"""
        if not text:
            return ''
        opening, closing = self.patterns_get(tag_name)
        opens = [match.end() for match in opening.finditer(text)]
        closes = [match.start() for match in closing.finditer(text)]
        return self.content_locate(text, opens, closes) or ''

    def check_all(self, text: str, tag_specs: Iterable[TagSpec]) -> List[TagCheckResult]:
        """Check every configured tag, preserving configuration order"""
        return [self.check(text, spec.name) for spec in tag_specs]
