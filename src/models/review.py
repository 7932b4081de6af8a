"""
Review models

Tag specifications, tag check results, review issues and the aggregate
ReviewResult returned by the review entry point.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

from .directives import DirectiveParseResult, ParsedCommand

if TYPE_CHECKING:
    from .blocks import ContentBlock


class IssueLevel(Enum):
    """Severity of a review issue; only ERROR blocks 'passed'"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(Enum):
    """Area a review issue belongs to"""
    TAG = "tag"
    VARIABLE = "variable"
    FORMAT = "format"
    OTHER = "other"


@dataclass(frozen=True)
class TagSpec:
    """
    A structural tag the model is expected to emit

    Attributes:
        name: Literal tag name, matched case-insensitively (<name>...</name>)
        required: Whether a missing/unclosed tag is an error
        display_name: Name used in issue messages and quick-check output
    """
    name: str
    required: bool = False
    display_name: str = ""

    @property
    def label(self) -> str:
        return self.display_name or self.name


@dataclass
class TagCheckResult:
    """
    Outcome of scanning a text for one tag

    Invariant: is_closed == (open_count == close_count and open_count > 0)
    """
    tag_name: str
    exists: bool
    is_closed: bool
    open_count: int
    close_count: int
    content: Optional[str] = None
    warning: Optional[str] = None


@dataclass
class ReviewIssue:
    """Single problem found during review"""
    level: IssueLevel
    category: IssueCategory
    message: str
    field: Optional[str] = None


@dataclass
class QuickCheckResult:
    """Result of checking only the required tags"""
    passed: bool
    missing_tags: List[str] = field(default_factory=list)


@dataclass
class ReviewResult:
    """
    Complete review of one model response

    Attributes:
        passed: True iff no issue has level ERROR (or WARNING in strict mode)
        original_text: The reviewed response
        tag_checks: One TagCheckResult per configured tag, in config order
        directive_check: Parse result of the directive tag body, or None
        tag_contents: Tag name -> extracted content ('' when absent)
        issues: All issues, tag issues first
        timestamp: Epoch milliseconds at which the review started
        narrative_tag: Name of the narrative tag in the active config
        blocks: Content blocks of the narrative, when requested
    """
    passed: bool
    original_text: str
    tag_checks: List[TagCheckResult]
    directive_check: Optional[DirectiveParseResult]
    tag_contents: Dict[str, str]
    issues: List[ReviewIssue]
    timestamp: int
    narrative_tag: str = ""
    blocks: Optional[List['ContentBlock']] = None

    @property
    def commands(self) -> List[ParsedCommand]:
        return self.directive_check.commands if self.directive_check else []

    @property
    def narrative_content(self) -> str:
        return self.tag_contents.get(self.narrative_tag, "")

    def issues_byLevel(self, level: IssueLevel) -> List[ReviewIssue]:
        """Issues of one severity, in report order"""
        return [issue for issue in self.issues if issue.level == level]
