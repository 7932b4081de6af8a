"""
Models package for storyreview

Contains data structures and type definitions for the review pipeline.
"""

from .state import ProgramState, pipeline
from .directives import (
    Value,
    Operation,
    ParsedCommand,
    DirectiveParseResult,
    GrammarSpec,
)
from .review import (
    IssueLevel,
    IssueCategory,
    TagSpec,
    TagCheckResult,
    ReviewIssue,
    QuickCheckResult,
    ReviewResult,
)
from .blocks import (
    ContentBlockType,
    ContentBlock,
    MarkerFamily,
    SegmenterConfig,
    SegmentResult,
    ParseStatistics,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "Value",
    "Operation",
    "ParsedCommand",
    "DirectiveParseResult",
    "GrammarSpec",
    "IssueLevel",
    "IssueCategory",
    "TagSpec",
    "TagCheckResult",
    "ReviewIssue",
    "QuickCheckResult",
    "ReviewResult",
    "ContentBlockType",
    "ContentBlock",
    "MarkerFamily",
    "SegmenterConfig",
    "SegmentResult",
    "ParseStatistics",
]
