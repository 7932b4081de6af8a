"""
Logging tests

Tests verbosity gating and the response name bound to log records.
"""

import pytest
from loguru import logger

from storyreview.__main__ import responses_review
from storyreview.lib.log import LOG, response_connectToLogger, state_connectToLogger
from storyreview.models import ProgramState


@pytest.fixture
def messages():
    records = []
    sink_id = logger.add(lambda message: records.append(message.rstrip("\n")),
                         format="{extra[response]} {message}", level="DEBUG")
    yield records
    logger.remove(sink_id)
    state_connectToLogger(None)


class TestLog:
    """Test LOG() gating and context"""

    def test_silent_without_state(self, messages):
        """Nothing is emitted when no state is connected"""
        state_connectToLogger(None)
        LOG("hidden", level=1)
        assert messages == []

    def test_verbosity_gates(self, messages):
        """Messages above the state's verbosity are dropped"""
        state_connectToLogger(ProgramState(verbosity=1))
        LOG("shown", level=1)
        LOG("hidden", level=2)
        assert messages == ["- shown"]

    def test_response_bound(self, messages):
        """Records inside the block carry the response name"""
        state_connectToLogger(ProgramState(verbosity=1))
        with response_connectToLogger("day1/turn2.txt"):
            LOG("inside", level=1)
        LOG("outside", level=1)
        assert messages == ["day1/turn2.txt inside", "- outside"]

    def test_review_stage_names_files(self, messages):
        """Grammar messages logged during a review name the file"""
        state = ProgramState(
            verbosity=3,
            responses={"turn1.txt": "<gametxt>long enough text</gametxt><UpdateVariable>hp = 1</UpdateVariable>"},
        )
        state_connectToLogger(state)
        responses_review(state)

        grammar_lines = [m for m in messages if "Grammar 'line' matched" in m]
        assert grammar_lines
        assert all(m.startswith("turn1.txt ") for m in grammar_lines)
