"""
storyreview - Format review for interactive-fiction model responses

Review core: tokenizer, directive grammars, tag validator, content block
segmenter, review composer and report rendering.
"""

__version__ = "1.0.0"

from .log import LOG, response_connectToLogger, state_connectToLogger
from .tokenizer import Tokenizer
from .directives import DirectiveParser
from .tags import TagValidator
from .segmenter import ContentBlockSegmenter
from .review import ResponseReviewer, ReviewConfig, review, quick_check, segment
from .profile import Profile, ProfileError
from .report import summary_get, result_toDict, report_renderHtml, blocks_renderHtml

__all__ = [
    "LOG",
    "state_connectToLogger",
    "response_connectToLogger",
    "Tokenizer",
    "DirectiveParser",
    "TagValidator",
    "ContentBlockSegmenter",
    "ResponseReviewer",
    "ReviewConfig",
    "review",
    "quick_check",
    "segment",
    "Profile",
    "ProfileError",
    "summary_get",
    "result_toDict",
    "report_renderHtml",
    "blocks_renderHtml",
    "__version__",
]
