"""
Custom Pygments lexer for variable update directives

Highlights directive bodies in HTML review reports. Covers every dialect
the DirectiveParser accepts, so a reviewer can see at a glance which
statements were written in which form.

Token types:
- Name.Builtin: The '_' namespace of modern calls
- Name.Function: Modern methods (set, assign, add, remove)
- Keyword: Legacy operations (SET, ADD, SUB, ...)
- String: Quoted paths and values
- Number: Numeric literals
- Keyword.Constant: true, false, null, undefined
- Name.Variable: Paths on the left of line assignments
- Operator: =, +=, -=, :
- Comment.Single: // and # comments
"""

from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Comment,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
    Whitespace,
)


class DirectiveLexer(RegexLexer):
    """
    Lexer for directive bodies

    Example:
        _.set('MC.玩家.体力', 80, 100);//rested

    Tokens:
        _ → Name.Builtin
        set → Name.Function
        'MC.玩家.体力' → String.Single
        80, 100 → Number
        //rested → Comment.Single
    """

    name = 'Directive'
    aliases = ['directive', 'updatevariable']
    filenames = []

    tokens = {
        'root': [
            (r'\s+', Whitespace),

            # Comments
            (r'//.*?$', Comment.Single),
            (r'#.*?$', Comment.Single),

            # Modern calls: _.set( ... )
            (r'(_)(\.)(set|assign|add|remove)\b',
             bygroups(Name.Builtin, Punctuation, Name.Function)),

            # Legacy calls: SET( ... )
            (words(('SET', 'INIT', 'ADD', 'SUB', 'APPEND', 'REMOVE', 'CLEAR',
                    'TOGGLE', 'MUL', 'DIV'), suffix=r'(?=\s*\()'),
             Keyword),

            # Line assignments: path = value
            (r'([^\W\d][\w.\[\]]*)(\s*)(\+=|-=|=|:)',
             bygroups(Name.Variable, Whitespace, Operator)),

            (r'"', String.Double, 'dqs'),
            (r"'", String.Single, 'sqs'),

            (words(('true', 'false', 'null', 'undefined'), suffix=r'\b'),
             Keyword.Constant),
            (r'-?\d+\.\d+(?:[eE][+-]?\d+)?', Number.Float),
            (r'-?\d+(?:[eE][+-]?\d+)?', Number.Integer),

            (r'[{}\[\](),;:]', Punctuation),
            (r'[^\s"\'{}\[\](),;:/#]+', Text),
            (r'.', Text),
        ],

        'dqs': [
            (r'\\.', String.Escape),
            (r'"', String.Double, '#pop'),
            (r'[^"\\]+', String.Double),
        ],

        'sqs': [
            (r'\\.', String.Escape),
            (r"'", String.Single, '#pop'),
            (r"[^'\\]+", String.Single),
        ],
    }


def get_lexer() -> DirectiveLexer:
    """
    Get the DirectiveLexer instance

    Returns:
        DirectiveLexer instance ready for use with Pygments
    """
    return DirectiveLexer()
