"""
Pipeline stage tests

Tests the CLI pipeline stages end to end on temporary directories.
"""

import json
from argparse import Namespace

import pytest

from storyreview.__main__ import (
    env_check,
    reports_write,
    responses_read,
    responses_review,
    results_report,
)
from storyreview.models import ProgramState, pipeline


PASSING = "<gametxt>雨停了，阿青推开门，说「走吧」。</gametxt>\n<UpdateVariable>ADD('MC.玩家.金币', 50)</UpdateVariable>"
FAILING = "no tags here"


@pytest.fixture
def dirs(tmp_path):
    inputdir = tmp_path / "in"
    (inputdir / "day1").mkdir(parents=True)
    (inputdir / "turn1.txt").write_text(PASSING, encoding="utf-8")
    (inputdir / "day1" / "turn2.txt").write_text(FAILING, encoding="utf-8")
    (inputdir / "notes.md").write_text("ignored", encoding="utf-8")
    return inputdir, tmp_path / "out"


def run(state):
    return pipeline(state, env_check, responses_read, responses_review, reports_write, results_report)


class TestStateCreation:
    """Test building the initial state"""

    def test_from_namespace(self, tmp_path):
        """Only ProgramState fields are taken from the options"""
        options = Namespace(pattern="*.txt", verbosity=2, html=True, unrelated=1)
        state = ProgramState.state_createFromNamespace(options, tmp_path, tmp_path / "out")

        assert state.pattern == "*.txt"
        assert state.verbosity == 2
        assert state.html
        assert state.inputdir == tmp_path
        assert not hasattr(state, "unrelated")


class TestPipeline:
    """Test the review pipeline"""

    def test_reports_written(self, dirs):
        """Every matched response gets a JSON report mirroring the layout"""
        inputdir, outputdir = dirs
        final = run(ProgramState(inputdir=inputdir, outputdir=outputdir))

        assert final.envOK
        assert sorted(final.responses) == ["day1/turn2.txt", "turn1.txt"]
        assert final.reviews["turn1.txt"].passed
        assert not final.reviews["day1/turn2.txt"].passed

        report = json.loads((outputdir / "turn1.review.json").read_text(encoding="utf-8"))
        assert report["passed"] is True
        assert report["directive_check"]["commands"][0]["path"] == "MC.玩家.金币"
        assert (outputdir / "day1" / "turn2.review.json").exists()
        assert not (outputdir / "turn1.review.html").exists()

    def test_html_and_blocks(self, dirs):
        """--html and --blocks add HTML reports and blocks"""
        inputdir, outputdir = dirs
        final = run(ProgramState(inputdir=inputdir, outputdir=outputdir, html=True, blocks=True))

        assert (outputdir / "turn1.review.html").exists()
        assert len(final.reportFiles) == 4
        assert final.reviews["turn1.txt"].blocks is not None

    def test_strict_flag(self, tmp_path):
        """--strict makes warnings fail"""
        inputdir = tmp_path / "in"
        inputdir.mkdir()
        (inputdir / "a.txt").write_text(
            "<gametxt>long enough text</gametxt><UpdateVariable>???</UpdateVariable>", encoding="utf-8"
        )

        relaxed = run(ProgramState(inputdir=inputdir, outputdir=tmp_path / "out1"))
        strict = run(ProgramState(inputdir=inputdir, outputdir=tmp_path / "out2", strict=True))

        assert relaxed.reviews["a.txt"].passed
        assert not strict.reviews["a.txt"].passed

    def test_profile(self, dirs, tmp_path):
        """A profile changes the tag table"""
        inputdir, outputdir = dirs
        profile = tmp_path / "profile.yaml"
        profile.write_text("tags:\n  - name: story\n    required: true\nnarrative_tag: story\n", encoding="utf-8")

        final = run(ProgramState(inputdir=inputdir, outputdir=outputdir, profile=str(profile)))
        assert not final.reviews["turn1.txt"].passed

    def test_missing_inputdir_exits(self, tmp_path):
        """A missing input directory exits with status 1"""
        with pytest.raises(SystemExit) as excinfo:
            env_check(ProgramState(inputdir=tmp_path / "missing", outputdir=tmp_path / "out"))
        assert excinfo.value.code == 1

    def test_bad_profile_exits(self, dirs, tmp_path):
        """An unloadable profile exits with status 1"""
        inputdir, outputdir = dirs
        with pytest.raises(SystemExit) as excinfo:
            env_check(ProgramState(inputdir=inputdir, outputdir=outputdir, profile=str(tmp_path / "nope.yaml")))
        assert excinfo.value.code == 1
