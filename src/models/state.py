"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, List, Dict, Callable, TYPE_CHECKING
from dataclasses import dataclass, field
from functools import reduce
import dataclasses

# Forward reference for type hint - avoid circular import
if TYPE_CHECKING:
    from ..lib.review import ReviewConfig
    from .review import ReviewResult


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the review pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the batch review progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, pattern, profile, blocks, html, strict
        - env_check: reviewConfig, envOK
        - responses_read: responses
        - responses_review: reviews
        - reports_write: reportFiles
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing model response files
        outputdir: Directory where review reports are written
        verbosity: Logging verbosity level (1-3)
        pattern: Glob (relative to inputdir) selecting response files
        profile: Optional path to a YAML review profile
        blocks: Segment the narrative of every response
        html: Also write an HTML report per response
        strict: Warnings fail a review
        envOK: Environment validation passed
        reviewConfig: Review configuration in effect
        responses: Relative input path -> response text
        reviews: Relative input path -> ReviewResult
        reportFiles: Report files written
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    pattern: str = field(default="**/*.txt")
    profile: Optional[str] = field(default=None)
    blocks: bool = field(default=False)
    html: bool = field(default=False)
    strict: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    reviewConfig: Optional["ReviewConfig"] = field(default=None)
    responses: Dict[str, str] = field(default_factory=dict)
    reviews: Dict[str, "ReviewResult"] = field(default_factory=dict)
    reportFiles: List[Path] = field(default_factory=list)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the review pipeline.

        Args:
            options: Parsed CLI arguments (pattern, profile, etc.)
            inputdir: Directory containing response files
            outputdir: Directory for review reports

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        # Only keep options that are ProgramState fields
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            responses_read,
            responses_review,
            reports_write,
            results_report
        )

    This reads left-to-right instead of
    results_report(reports_write(responses_review(responses_read(env_check(s))))).
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
