#!/usr/bin/env python3
"""
storyreview - Format review for interactive-fiction model responses

Checks complete model responses for their structural tags, extracts and
parses variable update directives written in any of the accepted dialects,
and segments the narrative into dialogue, thought, scenery and system
blocks.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Never raise on model output: every problem becomes an issue
    - Last occurrence wins: retried tags override earlier attempts
    - Many dialects in: directives come out as one command type

Usage:
    storyreview inputdir/ outputdir/ --pattern '**/*.txt'

    Every matched response gets a <stem>.review.json report in outputdir/,
    mirroring the input layout.

Examples:
    # Review every .txt response
    storyreview responses/ reviews/

    # Custom tag table, segmented narrative and HTML reports
    storyreview responses/ reviews/ --profile story.yaml --blocks --html

    # Fail on warnings too, with verbose output
    storyreview responses/ reviews/ --strict -vv
"""

import sys
import json
from dataclasses import replace
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import (
    ResponseReviewer,
    ReviewConfig,
    Profile,
    ProfileError,
    report_renderHtml,
    result_toDict,
    summary_get,
    __version__,
    LOG,
    response_connectToLogger,
    state_connectToLogger,
)
from .config import appsettings
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
      _                                  _
  ___| |_ ___  _ __ _   _ _ __ _____   _(_) _____      __
 / __| __/ _ \| '__| | | | '__/ _ \ \ / / |/ _ \ \ /\ / /
 \__ \ || (_) | |  | |_| | | |  __/\ V /| |  __/\ V  V /
 |___/\__\___/|_|   \__, |_|  \___| \_/ |_|\___| \_/\_/
                    |___/
  Format review for interactive-fiction model responses
"""

# Define CLI arguments
parser = ArgumentParser(
    description="storyreview - Format review for interactive-fiction model responses",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--pattern",
    default="**/*.txt",
    type=str,
    help="Glob (relative to inputdir) selecting model response files",
)

parser.add_argument(
    "--profile",
    default=None,
    type=str,
    help="YAML review profile overriding the tag table and marker families",
)

parser.add_argument(
    "--blocks",
    default=False,
    action="store_true",
    help="Segment the narrative into content blocks",
)

parser.add_argument(
    "--html",
    default=False,
    action="store_true",
    help="Also write an HTML report next to every JSON report",
)

parser.add_argument(
    "--strict",
    default=False,
    action="store_true",
    help="Treat warnings as failures",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def reportStem_get(relative: str) -> Path:
    """'day1/turn3.txt' -> Path('day1/turn3')"""
    path = Path(relative)
    return path.with_name(path.stem)


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and build the review configuration.

    Verifies that the input directory (and profile, if given) exist, then
    creates the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - reviewConfig: Configuration from settings, profile and --strict
            - envOK: True if environment is valid

    Exits:
        1 if the input directory is missing or the profile cannot be loaded
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Input directory: {state.inputdir}", level=2)

    if state.profile:
        try:
            config = Profile(state.profile).config_build(appsettings)
        except ProfileError as e:
            print(f"Error: {e}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        LOG(f"Profile: {state.profile}", level=2)
    else:
        config = ReviewConfig.settings_build(appsettings)

    if state.strict:
        config = replace(config, strict_mode=True)
    state.reviewConfig = config

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def responses_read(inputstate: ProgramState) -> ProgramState:
    """
    Read every response file matched by the pattern.

    Args:
        inputstate: Program state with a validated inputdir

    Returns:
        ProgramState with added field:
            - responses: Relative path -> response text, in path order

    Exits:
        1 if a matched file cannot be read
    """

    state = inputstate.copy()

    LOG(f"Reading responses matching '{state.pattern}'...", level=1)

    responses: dict[str, str] = {}
    for path in sorted(state.inputdir.glob(state.pattern)):
        if not path.is_file():
            continue
        relative = path.relative_to(state.inputdir).as_posix()
        try:
            responses[relative] = path.read_text(encoding="utf-8")
        except Exception as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            sys.exit(1)
        LOG(f"Read {len(responses[relative])} characters from {relative}", level=2)

    if not responses:
        LOG("No response files matched", level=1)

    state.responses = responses
    return state


def responses_review(inputstate: ProgramState) -> ProgramState:
    """
    Review every response read by responses_read.

    Args:
        inputstate: Program state with responses and reviewConfig

    Returns:
        ProgramState with added field:
            - reviews: Relative path -> ReviewResult
    """

    state = inputstate.copy()

    LOG(f"Reviewing {len(state.responses)} responses...", level=1)

    reviewer = ResponseReviewer(config=state.reviewConfig)
    reviews = {}
    for relative, text in state.responses.items():
        with response_connectToLogger(relative):
            result = reviewer.review(text, with_blocks=state.blocks)
            LOG(f"{relative}: {'passed' if result.passed else 'FAILED'} "
                f"({len(result.issues)} issues, {len(result.commands)} directives)", level=2)
        reviews[relative] = result

    state.reviews = reviews
    return state


def reports_write(inputstate: ProgramState) -> ProgramState:
    """
    Write a JSON (and optionally HTML) report per review.

    Reports mirror the input layout under outputdir:
    day1/turn3.txt -> day1/turn3.review.json

    Args:
        inputstate: Program state with reviews

    Returns:
        ProgramState with added field:
            - reportFiles: Paths of every report written

    Exits:
        1 if a report cannot be written
    """

    state = inputstate.copy()

    LOG("Writing reports...", level=1)

    written: list[Path] = []
    for relative, result in state.reviews.items():
        stem = state.outputdir / reportStem_get(relative)
        try:
            stem.parent.mkdir(parents=True, exist_ok=True)

            json_file = stem.with_name(stem.name + ".review.json")
            json_file.write_text(
                json.dumps(result_toDict(result), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            written.append(json_file)

            if state.html:
                html_file = stem.with_name(stem.name + ".review.html")
                html_file.write_text(report_renderHtml(result, title=relative), encoding="utf-8")
                written.append(html_file)
        except Exception as e:
            print(f"Error writing report for {relative}: {e}", file=sys.stderr)
            if state.verbosity >= 3:
                import traceback

                traceback.print_exc()
            sys.exit(1)
        LOG(f"Wrote report for {relative}", level=3)

    state.reportFiles = written
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display review results to the user.

    Args:
        inputstate: Program state with reviews and reportFiles

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()

    passed = sum(1 for result in state.reviews.values() if result.passed)
    total = len(state.reviews)

    for relative, result in state.reviews.items():
        LOG(f"{relative}\n{summary_get(result)}", level=2)

    LOG(f"\n{'✓' if passed == total else '✗'} {passed}/{total} responses passed review", level=1)
    LOG(f"  Reports: {len(state.reportFiles)} files in {state.outputdir}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="storyreview - Format review for interactive-fiction model responses",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - review every model response under inputdir.

    Orchestrates the full review pipeline:
        1. env_check: Validate paths and build the review configuration
        2. responses_read: Read matched response files
        3. responses_review: Review each response
        4. reports_write: Write JSON (and HTML) reports
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
            - pattern: str - Glob selecting response files
            - profile: Optional[str] - YAML review profile
            - blocks: bool - Segment narratives
            - html: bool - Write HTML reports
            - strict: bool - Warnings fail reviews
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing model responses
        outputdir: Directory where review reports will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, responses_read, responses_review, reports_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
