"""
Content block models

Types for segmenting narrative text into inline blocks rendered differently:
dialogue 「」, interior thought *...*, scenery 【】 and system emphasis 【【】】.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple


class ContentBlockType(Enum):
    """
    Kinds of inline content block

    TEXT is everything not wrapped in a recognised marker.
    """
    TEXT = "text"
    DIALOGUE = "dialogue"
    THOUGHT = "thought"
    SCENERY = "scenery"
    SYSTEM = "system"


@dataclass
class ContentBlock:
    """
    One typed span of the segmented text

    Spans are half-open [start_index, end_index) in code points. For any
    input the blocks are ordered, non-overlapping, and raw_content of all
    blocks concatenated reproduces the input.

    Attributes:
        kind: Block type
        raw_content: Exact source slice, markers included
        display_content: Content to show (markers stripped unless preserved)
        start_index: Start offset in the segmented text
        end_index: End offset (exclusive)
    """
    kind: ContentBlockType
    raw_content: str
    display_content: str
    start_index: int
    end_index: int


@dataclass(frozen=True)
class MarkerFamily:
    """
    A start/end delimiter pair denoting one narrative register

    Attributes:
        kind: Block type produced by a match
        start: Opening delimiter
        end: Closing delimiter
        forbidden: Characters that may not appear inside the match
        priority: Higher priority wins when matches of two families overlap
        allow_empty: Whether an empty inner text still matches
        edge_guard: Character that must not directly precede or follow the
                    match (keeps **bold** from reading as a thought)
    """
    kind: ContentBlockType
    start: str
    end: str
    forbidden: FrozenSet[str]
    priority: int
    allow_empty: bool = False
    edge_guard: Optional[str] = None


DEFAULT_MARKER_FAMILIES: Tuple[MarkerFamily, ...] = (
    MarkerFamily(
        kind=ContentBlockType.SYSTEM,
        start='【【',
        end='】】',
        forbidden=frozenset('【】'),
        priority=100,
        allow_empty=True,
    ),
    MarkerFamily(
        kind=ContentBlockType.SCENERY,
        start='【',
        end='】',
        forbidden=frozenset('【】'),
        priority=80,
    ),
    MarkerFamily(
        kind=ContentBlockType.DIALOGUE,
        start='「',
        end='」',
        forbidden=frozenset('「」'),
        priority=60,
    ),
    MarkerFamily(
        kind=ContentBlockType.THOUGHT,
        start='*',
        end='*',
        forbidden=frozenset('*'),
        priority=40,
        edge_guard='*',
    ),
)


@dataclass(frozen=True)
class SegmenterConfig:
    """
    Immutable segmenter configuration

    Attributes:
        enabled: When False every input becomes a single text block
        families: Active marker families
        preserve_markers: Keep delimiters in display_content
    """
    enabled: bool = True
    families: Tuple[MarkerFamily, ...] = DEFAULT_MARKER_FAMILIES
    preserve_markers: bool = False


@dataclass(frozen=True)
class MarkerMatch:
    """Candidate span found by a single family scan"""
    kind: ContentBlockType
    start: int
    end: int
    inner_start: int
    inner_end: int
    priority: int


@dataclass
class ParseStatistics:
    """Counts and timing of one segmentation"""
    total_blocks: int
    block_counts: Dict[str, int]
    original_length: int
    parse_time: float


@dataclass
class SegmentResult:
    """
    Segmentation result with statistics

    Attributes:
        blocks: Ordered, gap-free blocks
        original_text: Segmented text
        success: False if segmentation failed and fell back to one text block
        statistics: Block counts and timing
        error: Failure message when success is False
    """
    blocks: List[ContentBlock]
    original_text: str
    success: bool
    statistics: ParseStatistics
    error: Optional[str] = None


# Delimiter pairs checked by the format validator (name, open, close)
FORMAT_PAIRS: Tuple[Tuple[str, str, str], ...] = (
    ('dialogue marker', '「', '」'),
    ('system marker', '【【', '】】'),
    ('scenery marker', '【', '】'),
)
