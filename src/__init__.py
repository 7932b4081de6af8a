"""
storyreview - Format review for interactive-fiction model responses

Tag validation, multi-dialect directive parsing and narrative segmentation
for complete model turns.
"""

__version__ = "1.0.0"

from .lib import (
    review,
    quick_check,
    segment,
    ResponseReviewer,
    ReviewConfig,
    DirectiveParser,
    TagValidator,
    ContentBlockSegmenter,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "review",
    "quick_check",
    "segment",
    "ResponseReviewer",
    "ReviewConfig",
    "DirectiveParser",
    "TagValidator",
    "ContentBlockSegmenter",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
