"""
Quote- and bracket-aware tokenizer for directive bodies

A small state machine shared by every directive grammar. It walks text one
character at a time and tracks:

- whether the cursor is inside a single- or double-quoted string
- the current {} depth
- the current [] depth

Commas, comment slashes and closing parentheses are only structural when
the cursor is outside a string. A quote preceded by a backslash never
toggles string state.

Uses:
1. arguments_split()      - split call arguments on top-level commas
2. statement_isComplete() - detect the end of a multi-line call statement
3. semicolon_split()      - separate several calls written on one line
4. parenClose_find()      - find the parenthesis that closes a call
5. commentIndex_find()    - locate a trailing // comment outside strings
6. depth_max()            - bound JSON nesting before decoding

Every operation is a single forward pass with no backtracking.

Example:
    >>> arguments_split("'a.b', {x: 1, y: [2, 3]}, 'c,d'")
    ["'a.b'", '{x: 1, y: [2, 3]}', "'c,d'"]
"""

from typing import List

from ..models.scan import ScanState, QUOTE_CHARS


class Tokenizer:
    """
    Incremental bracket/quote state machine

    State survives across feed() calls, so a statement can be fed line by
    line and inspected after each line. Call reset() between statements.
    """

    def __init__(self) -> None:
        self.state = ScanState()
        self.previous = ''

    def reset(self) -> None:
        """Forget all string and depth state"""
        self.state = ScanState()
        self.previous = ''

    def char_feed(self, char: str) -> bool:
        """
        Advance the machine over one character

        Args:
            char: Next character of the input

        Returns:
            True if the character is structural, i.e. outside any string
            and not itself a string delimiter
        """
        state = self.state
        escaped = self.previous == '\\'
        self.previous = char

        if char in QUOTE_CHARS and not escaped:
            if state.in_string is None:
                state.in_string = char
            elif state.in_string == char:
                state.in_string = None
            return False

        if state.in_string is not None:
            return False

        if char == '{':
            state.brace_depth += 1
        elif char == '}':
            state.brace_depth = max(0, state.brace_depth - 1)
        elif char == '[':
            state.bracket_depth += 1
        elif char == ']':
            state.bracket_depth = max(0, state.bracket_depth - 1)

        return True

    def feed(self, text: str) -> None:
        """Advance the machine over a chunk of text"""
        for char in text:
            self.char_feed(char)

    def statement_isComplete(self, buffer: str) -> bool:
        """
        Check whether an accumulated statement buffer is a whole call

        A statement is complete when all {} and [] opened so far are closed
        and the trimmed buffer ends with ')' or ');'.

        Args:
            buffer: Text fed to this tokenizer since the last reset()

        Returns:
            True if the statement can be handed to the call grammars
        """
        if self.state.depth != 0:
            return False
        trimmed = buffer.rstrip()
        return trimmed.endswith(')') or trimmed.endswith(');')


def arguments_split(text: str) -> List[str]:
    """
    Split a call's argument list on top-level commas

    Commas inside strings, {} or [] do not split. Empty arguments are
    dropped and each argument is stripped.

    Args:
        text: Text between a call's parentheses

    Returns:
        Raw argument strings, in order
    """
    tokenizer = Tokenizer()
    arguments: List[str] = []
    current: List[str] = []

    for char in text:
        structural = tokenizer.char_feed(char)
        if structural and char == ',' and tokenizer.state.depth == 0:
            argument = ''.join(current).strip()
            if argument:
                arguments.append(argument)
            current = []
            continue
        current.append(char)

    argument = ''.join(current).strip()
    if argument:
        arguments.append(argument)

    return arguments


def semicolon_split(text: str) -> List[str]:
    """
    Split text into statements on top-level semicolons

    A ';' inside a string, {}, [] or () does not split. Pieces are stripped
    and empty pieces dropped.

    Example:
        >>> semicolon_split("_.set('a', 1); _.set('b;c', 2);")
        ["_.set('a', 1)", "_.set('b;c', 2)"]
    """
    tokenizer = Tokenizer()
    pieces: List[str] = []
    current: List[str] = []
    parens = 0

    for char in text:
        structural = tokenizer.char_feed(char)
        if structural:
            if char == '(':
                parens += 1
            elif char == ')':
                parens = max(0, parens - 1)
            elif char == ';' and parens == 0 and tokenizer.state.depth == 0:
                piece = ''.join(current).strip()
                if piece:
                    pieces.append(piece)
                current = []
                continue
        current.append(char)

    piece = ''.join(current).strip()
    if piece:
        pieces.append(piece)

    return pieces


def parenClose_find(text: str, open_index: int) -> int:
    """
    Find the ')' closing the '(' at open_index, skipping strings

    Returns:
        Index of the closing parenthesis, or -1 if it is never closed
    """
    tokenizer = Tokenizer()
    level = 0

    for index in range(open_index, len(text)):
        char = text[index]
        if not tokenizer.char_feed(char):
            continue
        if char == '(':
            level += 1
        elif char == ')':
            level -= 1
            if level == 0:
                return index

    return -1


def commentIndex_find(text: str) -> int:
    """
    Find the start of a trailing // comment that is not inside a string

    Args:
        text: One statement or line

    Returns:
        Index of the first '/' of the comment marker, or -1 if none

    Example:
        >>> commentIndex_find("_.set('http://x', 1) // note")
        21
    """
    tokenizer = Tokenizer()
    last = len(text) - 1

    for index, char in enumerate(text):
        structural = tokenizer.char_feed(char)
        if structural and char == '/' and index < last and text[index + 1] == '/':
            return index

    return -1


def comment_split(text: str) -> tuple[str, str | None]:
    """
    Split a statement into code and trailing comment

    Returns:
        (code, comment) - code stripped; comment stripped or None when the
        text has no comment or the comment is empty
    """
    index = commentIndex_find(text)
    if index < 0:
        return text.strip(), None
    comment = text[index + 2:].strip()
    return text[:index].strip(), comment or None


def depth_max(text: str) -> int:
    """
    Deepest combined {} / [] nesting reached outside strings

    Used to refuse pathological input before handing it to a recursive
    JSON decoder.
    """
    tokenizer = Tokenizer()
    deepest = 0

    for char in text:
        tokenizer.char_feed(char)
        if tokenizer.state.depth > deepest:
            deepest = tokenizer.state.depth

    return deepest
