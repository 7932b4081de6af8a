"""
Multi-grammar parser for variable update directives

The directive-carrying tag may contain any of several historically
accumulated dialects. Grammars are registered in priority order and the
first one that yields at least one command wins:

1. call  - modern  _.set('a.b', 1);  _.assign / _.add / _.remove
           legacy  SET('a.b', 1)  ADD / SUB / APPEND / REMOVE / CLEAR / ...
2. json  - one JSON object whose key paths address the variable tree
3. line  - a.b = 1,  a.b += 1,  a.b -= 1,  a.b: 1

Parsing never raises: statements that cannot be understood become warnings
and the remaining statements are still returned.
"""

import json
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import AppSettings, appsettings
from ..models.directives import (
    DESCRIPTOR_KEYS,
    LEGACY_OPERATIONS,
    MODERN_METHODS,
    DirectiveParseResult,
    GrammarOutcome,
    GrammarSpec,
    Operation,
    ParsedCommand,
    Value,
    operation_normalize,
)
from .log import LOG
from .tokenizer import (
    Tokenizer,
    arguments_split,
    comment_split,
    parenClose_find,
    semicolon_split,
)
from .values import json_decodeBounded, number_parse, value_parse


# Line grammar operators, longest first so '+=' is never read as '='
LINE_OPERATORS: Tuple[Tuple[str, Operation], ...] = (
    ('+=', Operation.ADD),
    ('-=', Operation.SUBTRACT),
    ('=', Operation.SET),
    (':', Operation.SET),
)

# Prefixes of lines the json/line grammars treat as comments
JSON_COMMENT_PREFIXES = ('//', '#')
LINE_COMMENT_PREFIXES = ('//', '#', '--')

UNRECOGNISED_FORMAT = (
    "Unable to recognise directive format: expected _.set()-style calls, "
    "legacy SET()-style calls, a JSON object or 'path = value' lines"
)


def call_split(code: str) -> Optional[Tuple[str, str]]:
    """
    Split 'name(args)' into its name and argument text

    The parenthesis opened after the name must close at the very end, so
    "_.set('a', 1)_.set('b', 2)" is not mistaken for one call.

    Returns:
        (name, args) or None if the code is not shaped like a call
    """
    open_index = code.find('(')
    if open_index <= 0 or not code.endswith(')'):
        return None
    if parenClose_find(code, open_index) != len(code) - 1:
        return None
    return code[:open_index].rstrip(), code[open_index + 1:-1]


def path_fromValue(value: Value) -> Optional[str]:
    """Render a decoded first argument as a path (None when empty)"""
    if value is None:
        return None
    if isinstance(value, str):
        path = value.strip()
    else:
        path = json.dumps(value, ensure_ascii=False)
    return path or None


def callStart_is(code: str) -> bool:
    """True if code opens a modern _.method( or legacy NAME( call"""
    open_index = code.find('(')
    if open_index <= 0:
        return False
    name = code[:open_index].rstrip()
    if name.startswith('_.'):
        return name[2:].lower() in MODERN_METHODS
    return name.isalpha() and name.upper() in LEGACY_OPERATIONS


def pathStart_is(char: str) -> bool:
    return char.isalpha() or char == '_'


def pathChar_is(char: str) -> bool:
    return char.isalnum() or char in '_.[]'


class DirectiveParser:
    """
    Ordered registry of directive grammars

    Maps grammar names to GrammarSpec objects and applies them in
    registration order. The registry is fixed once construction finishes,
    so one parser can be shared between reviewers.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        grammars: Sequence[GrammarSpec] = (),
    ) -> None:
        """
        Initialize the parser and register the built-in grammars

        Args:
            settings: Read-only settings (defaults to the shared appsettings)
            grammars: Extra grammars tried after call, json and line, in
                      the order given. A name already registered replaces
                      that grammar in place.
        """
        self.settings = settings or appsettings
        self._grammars: Dict[str, GrammarSpec] = {}
        self.callGrammar_register()
        self.jsonGrammar_register()
        self.lineGrammar_register()
        for spec in grammars:
            self._register(spec)
        self.grammars: Mapping[str, GrammarSpec] = MappingProxyType(self._grammars)

    def _register(self, spec: GrammarSpec) -> None:
        self._grammars[spec.name] = spec

    def get(self, name: str) -> Optional[GrammarSpec]:
        """Get a grammar specification by name"""
        return self.grammars.get(name)

    def parse(self, content: str) -> DirectiveParseResult:
        """
        Parse a directive body

        Args:
            content: Inner content of the directive-carrying tag

        Returns:
            DirectiveParseResult with the commands of the first matching
            grammar and that grammar's warnings. When nothing matches the
            result carries zero commands and ends with the unrecognised
            format warning, preceded by any diagnostics a grammar gave for
            a body it recognised but could not use (e.g. malformed JSON).

        Example:
            >>> DirectiveParser().parse("ADD('MC.玩家.金币', 50)").commands[0].value
            50
        """
        result = DirectiveParseResult(raw_content=content)

        if not content or not content.strip():
            result.warnings.append("Directive body is empty")
            return result

        diagnostics: List[str] = []
        for spec in self.grammars.values():
            try:
                outcome = spec.handler(content)
            except Exception as e:
                LOG(f"Grammar '{spec.name}' failed: {e}", level=1)
                result.warnings.append(f"Grammar '{spec.name}' failed: {e}")
                continue

            if outcome is not None and outcome.commands:
                LOG(f"Grammar '{spec.name}' matched {len(outcome.commands)} directives", level=2)
                result.commands = outcome.commands
                result.warnings.extend(outcome.warnings)
                result.grammar = spec.name
                return result

            if outcome is not None:
                diagnostics.extend(outcome.warnings)
            LOG(f"Grammar '{spec.name}' did not match", level=3)

        result.warnings.extend(diagnostics)
        result.warnings.append(UNRECOGNISED_FORMAT)
        return result

    # ------------------------------------------------------------------
    # call grammar
    # ------------------------------------------------------------------

    def callGrammar_register(self) -> None:
        """Register the modern and legacy call-style grammar"""
        self._register(GrammarSpec(
            name='call',
            description='Call statements: _.set/_.assign/_.add/_.remove and legacy SET/ADD/SUB/...',
            handler=self.calls_parse,
            examples=[
                "_.set('MC.玩家.体力', 80, 100);//took a rest",
                "_.assign('MC.背包', '钥匙', {\"count\": 1});",
                "ADD('MC.玩家.金币', 50)",
            ],
        ))

    def statements_split(self, content: str) -> List[Tuple[str, Optional[str], str]]:
        """
        Accumulate lines into complete call statements

        A statement ends when every {} and [] it opened is closed and its
        code ends with ')' or ');', so arguments may span several lines.
        A line holding only a // comment annotates the next statement.

        Args:
            content: Directive body

        Returns:
            List of (code, comment, raw_source) per statement; a trailing
            incomplete buffer is returned as the last statement
        """
        statements: List[Tuple[str, Optional[str], str]] = []
        tokenizer = Tokenizer()
        code_lines: List[str] = []
        raw_lines: List[str] = []
        comment: Optional[str] = None

        for line in content.split('\n'):
            stripped = line.strip()
            if not stripped:
                continue

            code, line_comment = comment_split(stripped)
            if not code:
                # Pure comment line: annotate the next statement
                if comment is None:
                    comment = line_comment
                continue

            if code_lines and tokenizer.state.depth == 0 and callStart_is(code):
                # The buffered text never completed; keep it apart from this call
                self.statement_append(statements, '\n'.join(code_lines), comment, '\n'.join(raw_lines))
                code_lines = []
                raw_lines = []
                comment = line_comment
                tokenizer.reset()

            code_lines.append(code)
            raw_lines.append(stripped)
            if comment is None:
                comment = line_comment
            tokenizer.feed(code + '\n')

            buffer = '\n'.join(code_lines)
            if tokenizer.statement_isComplete(buffer):
                LOG(f"Statement complete: {buffer}", level=3)
                self.statement_append(statements, buffer, comment, '\n'.join(raw_lines))
                code_lines = []
                raw_lines = []
                comment = None
                tokenizer.reset()

        if code_lines:
            self.statement_append(statements, '\n'.join(code_lines), comment, '\n'.join(raw_lines))

        return statements

    def statement_append(
        self,
        statements: List[Tuple[str, Optional[str], str]],
        code: str,
        comment: Optional[str],
        raw_source: str,
    ) -> None:
        """
        Append one accumulated statement, split on top-level semicolons

        "_.set('a', 1); _.set('b', 2);" holds two calls. Each piece becomes
        its own statement and the comment stays with the last piece.
        """
        pieces = semicolon_split(code)
        if len(pieces) <= 1:
            statements.append((code, comment, raw_source))
            return
        for index, piece in enumerate(pieces):
            last = index == len(pieces) - 1
            statements.append((piece, comment if last else None, piece))

    def calls_parse(self, content: str) -> Optional[GrammarOutcome]:
        """Parse every call statement; None if no statement produced a command"""
        outcome = GrammarOutcome()

        for code, comment, raw_source in self.statements_split(content):
            preview = self.settings.preview_make(raw_source)
            try:
                command = self.statement_parse(code, comment, raw_source)
            except Exception as e:
                outcome.warnings.append(f'Failed to parse statement "{preview}": {e}')
                continue
            if command is None:
                outcome.warnings.append(f'Unable to parse statement: "{preview}"')
                continue
            outcome.commands.append(command)

        return outcome if outcome.commands else None

    def statement_parse(
        self, code: str, comment: Optional[str], raw_source: str
    ) -> Optional[ParsedCommand]:
        """
        Parse one complete call statement

        Tries the modern _.method() form first, then the legacy NAME() form.

        Returns:
            ParsedCommand, or None if the statement matches neither form
        """
        code = code.strip().rstrip(';').rstrip()
        split = call_split(code)
        if split is None:
            return None
        name, args_text = split

        if name.startswith('_.'):
            method = name[2:].lower()
            if method in MODERN_METHODS:
                return self.modernCall_parse(method, args_text, comment, raw_source)
            return None

        legacy = name.upper()
        if name.isalpha() and legacy in LEGACY_OPERATIONS:
            return self.legacyCall_parse(legacy, args_text, comment, raw_source)

        return None

    def arguments_parse(self, args_text: str) -> List[Value]:
        """Split and decode a call's arguments"""
        return [value_parse(argument) for argument in arguments_split(args_text)]

    def modernCall_parse(
        self, method: str, args_text: str, comment: Optional[str], raw_source: str
    ) -> Optional[ParsedCommand]:
        """
        Build a command from _.set / _.assign / _.add / _.remove

        _.set(path, [old,] new)      -> set, value = last argument
        _.assign(parent, key, value) -> set at parent.key
        _.add(path, delta=1)         -> add, numeric delta
        _.remove(path, [key])        -> remove, value = key/index or None
        """
        args = self.arguments_parse(args_text)
        if not args:
            return None
        path = path_fromValue(args[0])
        if path is None:
            return None

        if method == 'set':
            value = args[-1] if len(args) >= 2 else None
            return ParsedCommand(path, Operation.SET, value, comment, raw_source)

        if method == 'assign':
            if len(args) < 3:
                return None
            key = path_fromValue(args[1])
            if key is None:
                return None
            return ParsedCommand(f"{path}.{key}", Operation.SET, args[2], comment, raw_source)

        if method == 'add':
            delta: Any = args[1] if len(args) >= 2 else 1
            if isinstance(delta, bool) or not isinstance(delta, (int, float)):
                coerced = number_parse(delta.strip()) if isinstance(delta, str) else None
                delta = coerced if coerced is not None else 1
            return ParsedCommand(path, Operation.ADD, delta, comment, raw_source)

        # remove
        value = args[1] if len(args) >= 2 else None
        return ParsedCommand(path, Operation.REMOVE, value, comment, raw_source)

    def legacyCall_parse(
        self, name: str, args_text: str, comment: Optional[str], raw_source: str
    ) -> Optional[ParsedCommand]:
        """Build a command from a legacy NAME(path, value?) call"""
        args = self.arguments_parse(args_text)
        if not args:
            return None
        path = path_fromValue(args[0])
        if path is None:
            return None
        value = args[1] if len(args) >= 2 else None
        return ParsedCommand(path, LEGACY_OPERATIONS[name], value, comment, raw_source)

    # ------------------------------------------------------------------
    # json grammar
    # ------------------------------------------------------------------

    def jsonGrammar_register(self) -> None:
        """Register the JSON-object grammar"""
        self._register(GrammarSpec(
            name='json',
            description='A single JSON object addressing variables by key path',
            handler=self.json_parse,
            examples=[
                '{"MC": {"玩家": {"体力": 100}}}',
                '{"MC.玩家.金币": {"operation": "add", "value": 50, "reason": "quest"}}',
            ],
        ))

    def json_parse(self, content: str) -> Optional[GrammarOutcome]:
        """Decode the whole body as one JSON object and walk its key paths"""
        lines = [
            line for line in content.split('\n')
            if not line.strip().startswith(JSON_COMMENT_PREFIXES)
        ]
        text = '\n'.join(lines).strip()
        if not text.startswith('{'):
            return None

        try:
            data = json_decodeBounded(text, self.settings.json_max_depth)
        except ValueError as e:
            LOG(f"Directive body is not JSON: {e}", level=3)
            return GrammarOutcome(
                warnings=[f"Directive body looks like JSON but failed to decode: {e}"]
            )

        if not isinstance(data, dict):
            return None

        outcome = GrammarOutcome()
        self.jsonCommands_extract(data, '', outcome)
        return outcome if outcome.commands else None

    def jsonCommands_extract(self, data: Dict[str, Any], parent: str, outcome: GrammarOutcome) -> None:
        """
        Recursively turn a decoded JSON object into commands

        A nested object holding any descriptor key (operation, value, set,
        add, subtract, sub) is one command; other objects are walked; every
        other leaf is an implicit set.
        """
        for key, value in data.items():
            path = f"{parent}.{key}" if parent else str(key)
            if not str(key).strip():
                outcome.warnings.append(f'Skipped empty key under "{parent or "<root>"}"')
                continue

            if isinstance(value, dict):
                if any(name in value for name in DESCRIPTOR_KEYS):
                    outcome.commands.append(self.jsonCommand_build(path, value))
                else:
                    self.jsonCommands_extract(value, path, outcome)
                continue

            outcome.commands.append(ParsedCommand(
                path=path,
                operation=Operation.SET,
                value=value,
                raw_source=f"{path} = {json.dumps(value, ensure_ascii=False)}",
            ))

    def jsonCommand_build(self, path: str, descriptor: Dict[str, Any]) -> ParsedCommand:
        """Build one command from a JSON descriptor object"""
        comment: Any = None

        if 'operation' in descriptor:
            operation = operation_normalize(str(descriptor['operation']))
            value = descriptor.get('value')
            if value is None:
                value = descriptor.get('newValue')
            comment = descriptor.get('comment') or descriptor.get('reason')
        elif 'set' in descriptor:
            operation, value = Operation.SET, descriptor['set']
        elif 'add' in descriptor:
            operation, value = Operation.ADD, descriptor['add']
        elif 'subtract' in descriptor or 'sub' in descriptor:
            operation = Operation.SUBTRACT
            value = descriptor.get('subtract')
            if value is None:
                value = descriptor.get('sub')
        else:
            operation, value = Operation.SET, descriptor['value']
            comment = descriptor.get('comment') or descriptor.get('reason')

        return ParsedCommand(
            path=path,
            operation=operation,
            value=value,
            comment=str(comment) if comment is not None else None,
            raw_source=json.dumps({path: descriptor}, ensure_ascii=False),
        )

    # ------------------------------------------------------------------
    # line grammar
    # ------------------------------------------------------------------

    def lineGrammar_register(self) -> None:
        """Register the assignment-line grammar"""
        self._register(GrammarSpec(
            name='line',
            description="One assignment per line: path = v, path += v, path -= v, path: v",
            handler=self.lines_parse,
            examples=['MC.玩家.体力 = 100', 'MC.玩家.金币 += 50 // reward'],
        ))

    def lines_parse(self, content: str) -> Optional[GrammarOutcome]:
        """Parse one assignment per non-comment line"""
        outcome = GrammarOutcome()

        for number, line in enumerate(content.split('\n'), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith(LINE_COMMENT_PREFIXES):
                continue
            try:
                command = self.line_parse(stripped)
            except Exception as e:
                outcome.warnings.append(f"Line {number} failed to parse: {e}")
                continue
            if command is None:
                preview = self.settings.preview_make(stripped)
                outcome.warnings.append(f'Line {number} could not be parsed: "{preview}"')
                continue
            outcome.commands.append(command)

        return outcome if outcome.commands else None

    def line_parse(self, line: str) -> Optional[ParsedCommand]:
        """
        Parse 'path OP value' by literal scanning

        The path runs over letters, digits, '_', '.', '[' and ']' and must
        start with a letter or '_'. OP is '+=', '-=', '=' or ':'.

        Returns:
            ParsedCommand or None if the line does not have that shape
        """
        code, comment = comment_split(line)
        if not code or not pathStart_is(code[0]):
            return None

        end = 1
        while end < len(code) and pathChar_is(code[end]):
            end += 1
        path = code[:end]
        rest = code[end:].lstrip()

        for symbol, operation in LINE_OPERATORS:
            if rest.startswith(symbol):
                value_text = rest[len(symbol):].strip()
                if not value_text:
                    return None
                return ParsedCommand(path, operation, value_parse(value_text), comment, line)

        return None
