"""
Directive (variable update command) models

Defines the payload type carried by a directive, the operation set, the
parsed command itself and the grammar specification used by the
DirectiveParser's ordered grammar registry.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union


# Closed payload type of a directive. Integers stay int, decimals are float.
Value = Union[None, bool, int, float, str, List["Value"], Dict[str, "Value"]]


class Operation(Enum):
    """
    Mutation a directive applies to its path

    The variable store applies directives in order; a later directive for
    the same path wins.
    """
    SET = "set"
    ADD = "add"
    SUBTRACT = "subtract"
    APPEND = "append"
    REMOVE = "remove"
    UNKNOWN = "unknown"


@dataclass
class ParsedCommand:
    """
    A single structured mutation extracted from model output

    Attributes:
        path: Dotted/bracketed address into the variable tree (never empty)
        operation: Operation to apply
        value: Decoded payload (None when the statement carried no value)
        comment: Trailing or preceding // comment, if any
        raw_source: Source text the command was extracted from

    Example:
        For "_.set('MC.玩家.体力', 80, 100);":
        ParsedCommand(path="MC.玩家.体力", operation=Operation.SET, value=100,
                      raw_source="_.set('MC.玩家.体力', 80, 100);")
    """
    path: str
    operation: Operation
    value: Value = None
    comment: Optional[str] = None
    raw_source: str = ""

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("ParsedCommand path must not be empty")


@dataclass
class GrammarOutcome:
    """Commands and warnings produced by one grammar over one directive body"""
    commands: List[ParsedCommand] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class DirectiveParseResult:
    """
    Result of parsing the inner content of the directive-carrying tag

    Attributes:
        raw_content: Text that was parsed
        commands: Directives in source order
        warnings: Soft failures (unparsable statements, empty body, ...)
        errors: Hard failures; empty unless a caller adds its own
        grammar: Name of the grammar that produced the commands, if any
    """
    raw_content: str
    commands: List[ParsedCommand] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    grammar: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class GrammarSpec:
    """
    Specification for one directive grammar

    The DirectiveParser tries registered grammars in registration order and
    stops at the first whose handler returns an outcome with commands.

    Attributes:
        name: Grammar name reported in DirectiveParseResult.grammar
        description: Human-readable description
        handler: Callable (content) -> GrammarOutcome | None
        examples: Example directive bodies
    """
    name: str
    description: str
    handler: Callable[[str], Optional[GrammarOutcome]]
    examples: List[str] = field(default_factory=list)


# Modern lodash-style methods: _.set / _.assign / _.add / _.remove
MODERN_METHODS = ('set', 'assign', 'add', 'remove')

# Legacy upper-case call names and the operation each maps to
LEGACY_OPERATIONS: Dict[str, Operation] = {
    'SET': Operation.SET,
    'INIT': Operation.SET,
    'ADD': Operation.ADD,
    'SUB': Operation.SUBTRACT,
    'APPEND': Operation.APPEND,
    'REMOVE': Operation.REMOVE,
    'CLEAR': Operation.REMOVE,
    'TOGGLE': Operation.UNKNOWN,
    'MUL': Operation.UNKNOWN,
    'DIV': Operation.UNKNOWN,
}

# Keys that turn a JSON object into a one-directive descriptor
DESCRIPTOR_KEYS = ('operation', 'value', 'set', 'add', 'subtract', 'sub')

# Spellings accepted in a JSON descriptor's "operation" field
OPERATION_ALIASES: Dict[str, Operation] = {
    'set': Operation.SET,
    '=': Operation.SET,
    'assign': Operation.SET,
    'add': Operation.ADD,
    '+': Operation.ADD,
    '+=': Operation.ADD,
    'increase': Operation.ADD,
    'subtract': Operation.SUBTRACT,
    'sub': Operation.SUBTRACT,
    '-': Operation.SUBTRACT,
    '-=': Operation.SUBTRACT,
    'decrease': Operation.SUBTRACT,
    'append': Operation.APPEND,
    'push': Operation.APPEND,
    'remove': Operation.REMOVE,
    'delete': Operation.REMOVE,
}


def operation_normalize(name: str) -> Operation:
    """Map a free-form operation name to an Operation (UNKNOWN if unrecognised)"""
    return OPERATION_ALIASES.get(name.strip().lower(), Operation.UNKNOWN)
