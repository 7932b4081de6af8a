"""
Scanner state model

State carried by the quote- and bracket-aware Tokenizer while it walks a
directive body one character at a time.
"""

from dataclasses import dataclass
from typing import Optional


# Characters that open/close a string literal
QUOTE_CHARS = ('"', "'")


@dataclass
class ScanState:
    """
    Position-independent state of the Tokenizer

    Attributes:
        in_string: Quote character of the string literal being scanned,
                   or None when outside any string
        brace_depth: Current {} nesting depth (never negative)
        bracket_depth: Current [] nesting depth (never negative)

    Example:
        After feeding "_.set('a', {b: [1" the state is
        ScanState(in_string=None, brace_depth=1, bracket_depth=1)
    """
    in_string: Optional[str] = None
    brace_depth: int = 0
    bracket_depth: int = 0

    @property
    def depth(self) -> int:
        return self.brace_depth + self.bracket_depth
