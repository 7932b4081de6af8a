"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the current ProgramState's
verbosity level without requiring explicit state passing.

The review core (tokenizer, grammars, segmenter) calls LOG() freely; when no
ProgramState is connected (plain library use) nothing is emitted.

While a response file is being reviewed its relative path is bound to every
record, so messages from deep inside the grammars name the file they concern.

Usage:
    from storyreview.lib.log import LOG, response_connectToLogger, state_connectToLogger

    # At start of pipeline function:
    state_connectToLogger(state)

    # Around the review of one file:
    with response_connectToLogger("day1/turn2.txt"):
        ...

    # Anywhere in that context:
    LOG("Reviewed 3 responses", level=1)
    LOG("Grammar 'call' matched 4 directives", level=2)
    LOG("Statement complete: _.set('a', 1)", level=3)
"""

from loguru import logger
from typing import Any, Iterator, Optional
from contextlib import contextmanager
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Relative path of the response under review, "-" outside a review
_response_name: ContextVar[str] = ContextVar('response_name', default='-')

# Configure loguru with storyreview-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> │ "
    "<magenta>{extra[response]}</magenta> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.configure(extra={"response": "-"})
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this at the start of each pipeline function to make the state's
    verbosity setting available to LOG() calls throughout that context.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


@contextmanager
def response_connectToLogger(name: str) -> Iterator[None]:
    """
    Bind a response file name to LOG() records within the block.

    Args:
        name: Relative path of the response being reviewed
    """
    token = _response_name.set(name)
    try:
        yield
    finally:
        _response_name.reset(token)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v)
        3 = Debug (-vv or higher)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        # depth=1 so the sink reports the caller, not LOG itself
        logger.bind(response=_response_name.get()).opt(depth=1).debug(message, **kwargs)
