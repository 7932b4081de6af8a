"""
Literal decoding for directive arguments and values

value_parse() turns one argument or right-hand side into a Value:

    null / undefined -> None
    true / false     -> bool
    42, -1.5, 2e3    -> int / float
    'text', "text"   -> str (quotes removed)
    {...}, [...]     -> JSON (retried once with ' replaced by ")
    anything else    -> the raw string

JSON is only decoded after the tokenizer has confirmed that its nesting
stays under the configured depth bound.
"""

import json
import re
from typing import Any

from ..config import appsettings
from ..models.directives import Value
from .tokenizer import depth_max


# Anchored, linear: optional sign, digits, optional fraction, optional exponent
NUMBER_PATTERN = re.compile(r'-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?')


class JSONDepthError(ValueError):
    """Raised when a JSON document nests deeper than allowed"""
    pass


def json_decodeBounded(text: str, max_depth: int | None = None) -> Any:
    """
    Decode JSON after checking its nesting depth

    Args:
        text: JSON document
        max_depth: Deepest {}/[] nesting accepted (defaults to settings)

    Returns:
        Decoded Python value

    Raises:
        JSONDepthError: If nesting exceeds max_depth
        ValueError: If the text is not valid JSON (json.JSONDecodeError)
    """
    limit = appsettings.json_max_depth if max_depth is None else max_depth
    depth = depth_max(text)
    if depth > limit:
        raise JSONDepthError(f"JSON nesting depth {depth} exceeds limit {limit}")
    try:
        return json.loads(text)
    except RecursionError as e:
        raise JSONDepthError(f"JSON nesting too deep: {e}") from e


def number_parse(text: str) -> int | float | None:
    """Return text as int/float if it is a complete numeric literal, else None"""
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    if '.' in text or 'e' in text or 'E' in text:
        return float(text)
    return int(text)


def quoted_unwrap(text: str) -> str | None:
    """
    Strip matching single or double quotes

    Returns:
        Inner text with escaped matching quotes unescaped, or None if the
        text is not a quoted literal
    """
    if len(text) < 2 or text[0] not in ('"', "'") or text[-1] != text[0]:
        return None
    quote = text[0]
    return text[1:-1].replace('\\' + quote, quote)


def value_parse(text: str) -> Value:
    """
    Decode one literal into a Value

    Args:
        text: Argument or right-hand-side text

    Returns:
        Decoded value; never raises

    Example:
        >>> value_parse("100")
        100
        >>> value_parse("'MC.玩家'")
        'MC.玩家'
        >>> value_parse("{'hp': 3}")
        {'hp': 3}
    """
    trimmed = text.strip()

    if not trimmed or trimmed in ('null', 'undefined'):
        return None
    if trimmed == 'true':
        return True
    if trimmed == 'false':
        return False

    number = number_parse(trimmed)
    if number is not None:
        return number

    unquoted = quoted_unwrap(trimmed)
    if unquoted is not None:
        return unquoted

    if (trimmed[0] == '{' and trimmed[-1] == '}') or (trimmed[0] == '[' and trimmed[-1] == ']'):
        try:
            return json_decodeBounded(trimmed)
        except ValueError:
            pass
        try:
            return json_decodeBounded(trimmed.replace("'", '"'))
        except ValueError:
            pass

    return trimmed
