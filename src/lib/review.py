"""
Response review composer

Runs the tag validator, the directive parser and (on request) the content
block segmenter over one complete model response and folds everything they
report into a single ReviewResult.

A ResponseReviewer holds a frozen ReviewConfig and no other state, so one
instance can be shared between threads. The module-level review(),
quick_check() and segment() functions use a default reviewer built from
appsettings.

Example:
    >>> review("<gametxt>The rain stopped at dawn.</gametxt>").passed
    True
    >>> [issue.level.value for issue in review("no tags here").issues]
    ['error']
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config import AppSettings, appsettings
from ..models.blocks import DEFAULT_MARKER_FAMILIES, ContentBlock, SegmenterConfig
from ..models.directives import DirectiveParseResult
from ..models.review import (
    IssueCategory,
    IssueLevel,
    QuickCheckResult,
    ReviewIssue,
    ReviewResult,
    TagCheckResult,
    TagSpec,
)
from .directives import DirectiveParser
from .log import LOG
from .segmenter import ContentBlockSegmenter
from .tags import TagValidator


@dataclass(frozen=True)
class ReviewConfig:
    """
    Immutable review configuration

    Attributes:
        tag_specs: Tags checked, in report order
        narrative_tag: Tag whose content is the narrative
        directive_tag: Tag whose content is parsed for directives
        min_narrative_length: Shorter narrative content yields an info issue
        strict_mode: Warnings also fail the review
        segmenter: Configuration handed to the content block segmenter
    """
    tag_specs: Tuple[TagSpec, ...]
    narrative_tag: str
    directive_tag: str
    min_narrative_length: int = 10
    strict_mode: bool = False
    segmenter: SegmenterConfig = field(default_factory=SegmenterConfig)

    @classmethod
    def settings_build(cls, settings: AppSettings) -> "ReviewConfig":
        """
        Derive the default review configuration from application settings

        The default tag table is reasoning (optional), narrative (required),
        history (optional) and directives (optional).
        """
        return cls(
            tag_specs=(
                TagSpec(settings.reasoning_tag, required=False, display_name="reasoning"),
                TagSpec(settings.narrative_tag, required=True, display_name="narrative"),
                TagSpec(settings.history_tag, required=False, display_name="history"),
                TagSpec(settings.directive_tag, required=False, display_name="directives"),
            ),
            narrative_tag=settings.narrative_tag,
            directive_tag=settings.directive_tag,
            min_narrative_length=settings.min_narrative_length,
            strict_mode=settings.strict_mode,
            segmenter=SegmenterConfig(
                enabled=True,
                families=DEFAULT_MARKER_FAMILIES,
                preserve_markers=settings.preserve_markers,
            ),
        )

    def spec_get(self, tag_name: str) -> Optional[TagSpec]:
        for spec in self.tag_specs:
            if spec.name == tag_name:
                return spec
        return None


class ResponseReviewer:
    """
    Reviews complete model responses against a fixed configuration
    """

    def __init__(
        self,
        config: Optional[ReviewConfig] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self.settings = settings or appsettings
        self.config = config or ReviewConfig.settings_build(self.settings)
        self.tags = TagValidator()
        self.directives = DirectiveParser(self.settings)
        self.segmenter = ContentBlockSegmenter(self.config.segmenter)

    def review(self, raw_response: str, with_blocks: bool = False) -> ReviewResult:
        """
        Review one model response

        Args:
            raw_response: Complete text of one model turn
            with_blocks: Also segment the narrative into content blocks

        Returns:
            ReviewResult; never raises. An unexpected internal failure is
            reported as an error issue in category 'other'.
        """
        timestamp = int(time.time() * 1000)
        text = raw_response or ''

        try:
            return self.review_run(text, with_blocks, timestamp)
        except Exception as e:
            LOG(f"Review failed unexpectedly: {e}", level=1)
            return ReviewResult(
                passed=False,
                original_text=text,
                tag_checks=[],
                directive_check=None,
                tag_contents={},
                issues=[ReviewIssue(
                    level=IssueLevel.ERROR,
                    category=IssueCategory.OTHER,
                    message=f"Review failed: {e}",
                )],
                timestamp=timestamp,
                narrative_tag=self.config.narrative_tag,
            )

    def review_run(self, text: str, with_blocks: bool, timestamp: int) -> ReviewResult:
        config = self.config
        issues: List[ReviewIssue] = []

        # 1. tags
        tag_checks = self.tags.check_all(text, config.tag_specs)
        issues.extend(self.tagIssues_collect(tag_checks))

        # 2. contents
        tag_contents: Dict[str, str] = {
            check.tag_name: check.content or '' for check in tag_checks
        }

        # 3. directives
        directive_check = self.directives_check(tag_checks)
        if directive_check is not None:
            issues.extend(self.directiveIssues_collect(directive_check))

        # 4. narrative length
        narrative = tag_contents.get(config.narrative_tag, '')
        if narrative and len(narrative) < config.min_narrative_length:
            issues.append(ReviewIssue(
                level=IssueLevel.INFO,
                category=IssueCategory.FORMAT,
                message=(
                    f"Narrative content is only {len(narrative)} characters; "
                    f"it may be incomplete"
                ),
                field=config.narrative_tag,
            ))

        # 5. optional segmentation
        blocks: Optional[List[ContentBlock]] = None
        if with_blocks:
            blocks = self.segmenter.segment(narrative)
            _, format_errors = self.segmenter.format_validate(narrative)
            for message in format_errors:
                issues.append(ReviewIssue(
                    level=IssueLevel.INFO,
                    category=IssueCategory.FORMAT,
                    message=message,
                    field=config.narrative_tag,
                ))

        passed = self.passed_decide(issues)
        LOG(f"Review {'passed' if passed else 'failed'} with {len(issues)} issues", level=2)

        return ReviewResult(
            passed=passed,
            original_text=text,
            tag_checks=tag_checks,
            directive_check=directive_check,
            tag_contents=tag_contents,
            issues=issues,
            timestamp=timestamp,
            narrative_tag=config.narrative_tag,
            blocks=blocks,
        )

    def tagIssues_collect(self, tag_checks: List[TagCheckResult]) -> List[ReviewIssue]:
        """
        Map tag check results to issues

        Required and absent, or required and unclosed, is an error. An
        unclosed optional tag is a warning. A duplicate-tag notice is a
        warning.
        """
        issues: List[ReviewIssue] = []

        for check in tag_checks:
            spec = self.config.spec_get(check.tag_name) or TagSpec(check.tag_name)
            label = spec.label

            if spec.required and not check.exists:
                issues.append(ReviewIssue(
                    level=IssueLevel.ERROR,
                    category=IssueCategory.TAG,
                    message=f"Missing required <{check.tag_name}> tag ({label})",
                    field=check.tag_name,
                ))
            elif check.exists and not check.is_closed:
                issues.append(ReviewIssue(
                    level=IssueLevel.ERROR if spec.required else IssueLevel.WARNING,
                    category=IssueCategory.TAG,
                    message=(
                        f"<{check.tag_name}> tag ({label}) is not properly closed "
                        f"(open: {check.open_count}, close: {check.close_count})"
                    ),
                    field=check.tag_name,
                ))
            elif check.warning:
                issues.append(ReviewIssue(
                    level=IssueLevel.WARNING,
                    category=IssueCategory.TAG,
                    message=check.warning,
                    field=check.tag_name,
                ))

        return issues

    def directives_check(self, tag_checks: List[TagCheckResult]) -> Optional[DirectiveParseResult]:
        """Parse the directive tag body when a complete pair is present"""
        for check in tag_checks:
            if check.tag_name == self.config.directive_tag:
                if not check.exists or check.content is None:
                    return None
                return self.directives.parse(check.content)
        return None

    def directiveIssues_collect(self, result: DirectiveParseResult) -> List[ReviewIssue]:
        issues = [
            ReviewIssue(IssueLevel.ERROR, IssueCategory.VARIABLE, message, self.config.directive_tag)
            for message in result.errors
        ]
        issues.extend(
            ReviewIssue(IssueLevel.WARNING, IssueCategory.VARIABLE, message, self.config.directive_tag)
            for message in result.warnings
        )
        return issues

    def passed_decide(self, issues: List[ReviewIssue]) -> bool:
        failing = {IssueLevel.ERROR}
        if self.config.strict_mode:
            failing.add(IssueLevel.WARNING)
        return not any(issue.level in failing for issue in issues)

    def quick_check(self, text: str) -> QuickCheckResult:
        """
        Check only the required tags

        Returns:
            QuickCheckResult listing the display name of every required tag
            that is absent or unclosed
        """
        missing: List[str] = []
        for spec in self.config.tag_specs:
            if not spec.required:
                continue
            check = self.tags.check(text or '', spec.name)
            if not check.exists or not check.is_closed:
                missing.append(spec.label)
        return QuickCheckResult(passed=not missing, missing_tags=missing)

    def segment(self, text: str) -> List[ContentBlock]:
        """Segment text into content blocks with this reviewer's segmenter"""
        return self.segmenter.segment(text)


_default_reviewer: Optional[ResponseReviewer] = None


def reviewer_get() -> ResponseReviewer:
    """Get the shared default reviewer built from appsettings"""
    global _default_reviewer
    if _default_reviewer is None:
        _default_reviewer = ResponseReviewer()
    return _default_reviewer


def review(raw_response: str, with_blocks: bool = False) -> ReviewResult:
    """Review a model response with the default configuration"""
    return reviewer_get().review(raw_response, with_blocks=with_blocks)


def quick_check(text: str) -> QuickCheckResult:
    """Check required tags with the default configuration"""
    return reviewer_get().quick_check(text)


def segment(text: str) -> List[ContentBlock]:
    """Segment narrative text with the default configuration"""
    return reviewer_get().segment(text)
