"""
Segmenter for inline narrative markers

Splits narrative text into typed blocks for differentiated rendering:

    【【...】】  system emphasis   (priority 100)
    【...】     scenery           (priority 80)
    「...」     dialogue          (priority 60)
    *...*      interior thought  (priority 40)

The segmenter operates in three phases:
1. Scanning: one linear pass per marker family collects candidate matches
2. Resolution: candidates are accepted by priority, then position, skipping
   any that intersect an accepted span
3. Building: accepted matches and the text between them become blocks

The output always covers the input exactly: joining raw_content of every
block reproduces the text. Unterminated markers are left in text blocks.

Example:
    >>> blocks = ContentBlockSegmenter().segment("他说「走吧」*好累*")
    >>> [block.kind.value for block in blocks]
    ['text', 'dialogue', 'thought']
"""

import time
from bisect import bisect_right
from typing import Dict, List, Optional, Tuple

from ..models.blocks import (
    FORMAT_PAIRS,
    ContentBlock,
    ContentBlockType,
    MarkerFamily,
    MarkerMatch,
    ParseStatistics,
    SegmentResult,
    SegmenterConfig,
)
from .log import LOG


class ContentBlockSegmenter:
    """
    Marker-based segmenter for narrative text

    Holds an immutable SegmenterConfig; instances can be shared freely.
    """

    def __init__(self, config: Optional[SegmenterConfig] = None) -> None:
        self.config = config or SegmenterConfig()

    def segment(self, text: str) -> List[ContentBlock]:
        """
        Segment text into ordered, gap-free blocks

        Args:
            text: Narrative text

        Returns:
            Blocks covering [0, len(text)); empty list for empty text
        """
        return self.parse(text).blocks

    def parse(self, text: str) -> SegmentResult:
        """
        Segment text and collect statistics

        A failure inside segmentation is reported through success/error and
        the whole text is returned as one text block.
        """
        started = time.perf_counter()

        if not self.config.enabled or not text:
            blocks = [self.textBlock_make(text, 0, len(text))] if text else []
            return SegmentResult(
                blocks=blocks,
                original_text=text,
                success=True,
                statistics=self.statistics_calculate(blocks, text, started),
            )

        try:
            candidates = self.matches_findAll(text)
            accepted = self.overlaps_resolve(candidates)
            blocks = self.blocks_build(text, accepted)
        except Exception as e:
            LOG(f"Segmentation failed: {e}", level=1)
            blocks = [self.textBlock_make(text, 0, len(text))]
            return SegmentResult(
                blocks=blocks,
                original_text=text,
                success=False,
                statistics=self.statistics_calculate(blocks, text, started),
                error=str(e),
            )

        LOG(f"Segmented {len(text)} characters into {len(blocks)} blocks", level=3)
        return SegmentResult(
            blocks=blocks,
            original_text=text,
            success=True,
            statistics=self.statistics_calculate(blocks, text, started),
        )

    def family_scan(self, text: str, family: MarkerFamily) -> List[MarkerMatch]:
        """
        Find all non-overlapping matches of one marker family

        From each start delimiter the inner text runs up to the first
        forbidden character; the match succeeds if the end delimiter sits
        exactly there. Searching then resumes after the match, or one
        character after a failed start. Each character is examined a
        bounded number of times, so the scan is linear.

        Args:
            text: Text to scan
            family: Marker family

        Returns:
            Matches in ascending start order

        Example:
            For "【【A】】" and the scenery family:
            [MarkerMatch(kind=SCENERY, start=1, end=4, ...)]
        """
        matches: List[MarkerMatch] = []
        length = len(text)
        start_width = len(family.start)
        end_width = len(family.end)
        pos = text.find(family.start)

        while pos != -1:
            inner_start = pos + start_width
            inner_end = inner_start
            while inner_end < length and text[inner_end] not in family.forbidden:
                inner_end += 1

            end = inner_end + end_width
            matched = (
                text.startswith(family.end, inner_end)
                and (family.allow_empty or inner_end > inner_start)
                and self.edges_clear(text, pos, end, family.edge_guard)
            )

            if matched:
                matches.append(MarkerMatch(
                    kind=family.kind,
                    start=pos,
                    end=end,
                    inner_start=inner_start,
                    inner_end=inner_end,
                    priority=family.priority,
                ))
                pos = text.find(family.start, end)
            else:
                pos = text.find(family.start, pos + 1)

        return matches

    def edges_clear(self, text: str, start: int, end: int, guard: Optional[str]) -> bool:
        """True if the guard character touches neither side of [start, end)"""
        if guard is None:
            return True
        if start > 0 and text[start - 1] == guard:
            return False
        if end < len(text) and text[end] == guard:
            return False
        return True

    def matches_findAll(self, text: str) -> List[MarkerMatch]:
        """Scan every active family and merge the candidates"""
        candidates: List[MarkerMatch] = []
        for family in self.config.families:
            candidates.extend(self.family_scan(text, family))
        return candidates

    def overlaps_resolve(self, candidates: List[MarkerMatch]) -> List[MarkerMatch]:
        """
        Keep the highest-priority candidates that do not intersect

        Candidates are visited by priority (descending) then start
        (ascending); a candidate intersecting an accepted span is dropped.
        A system match containing dialogue-shaped text therefore swallows it.

        Accepted spans never intersect, so they stay sorted by start and a
        candidate only needs checking against its two neighbours.

        Returns:
            Accepted matches sorted by start
        """
        ordered = sorted(candidates, key=lambda match: (-match.priority, match.start))
        accepted: List[MarkerMatch] = []
        starts: List[int] = []

        for match in ordered:
            index = bisect_right(starts, match.start)
            if index > 0 and accepted[index - 1].end > match.start:
                continue
            if index < len(accepted) and accepted[index].start < match.end:
                continue
            starts.insert(index, match.start)
            accepted.insert(index, match)

        return accepted

    def blocks_build(self, text: str, matches: List[MarkerMatch]) -> List[ContentBlock]:
        """Walk the text once, emitting gap text blocks and matched blocks"""
        blocks: List[ContentBlock] = []
        cursor = 0

        for match in matches:
            if match.start > cursor:
                blocks.append(self.textBlock_make(text[cursor:match.start], cursor, match.start))
            blocks.append(self.markedBlock_make(text, match))
            cursor = match.end

        if cursor < len(text):
            blocks.append(self.textBlock_make(text[cursor:], cursor, len(text)))

        return blocks

    def textBlock_make(self, content: str, start: int, end: int) -> ContentBlock:
        return ContentBlock(
            kind=ContentBlockType.TEXT,
            raw_content=content,
            display_content=content,
            start_index=start,
            end_index=end,
        )

    def markedBlock_make(self, text: str, match: MarkerMatch) -> ContentBlock:
        raw = text[match.start:match.end]
        display = raw if self.config.preserve_markers else text[match.inner_start:match.inner_end]
        return ContentBlock(
            kind=match.kind,
            raw_content=raw,
            display_content=display,
            start_index=match.start,
            end_index=match.end,
        )

    def statistics_calculate(
        self, blocks: List[ContentBlock], text: str, started: float
    ) -> ParseStatistics:
        counts: Dict[str, int] = {kind.value: 0 for kind in ContentBlockType}
        for block in blocks:
            counts[block.kind.value] += 1
        return ParseStatistics(
            total_blocks=len(blocks),
            block_counts=counts,
            original_length=len(text),
            parse_time=(time.perf_counter() - started) * 1000.0,
        )

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def formatting_has(self, text: str) -> bool:
        """Check whether text contains at least one complete marker"""
        if not text:
            return False
        return any(self.family_scan(text, family) for family in self.config.families)

    def contentTypes_get(self, text: str) -> List[ContentBlockType]:
        """Marker kinds that occur in text, in family order"""
        if not text:
            return []
        return [
            family.kind for family in self.config.families
            if self.family_scan(text, family)
        ]

    def blocks_extractByType(self, text: str, kind: ContentBlockType) -> List[str]:
        """Display content of every block of one kind"""
        return [block.display_content for block in self.segment(text) if block.kind == kind]

    def formatting_strip(self, text: str) -> str:
        """Remove marker delimiters, keeping their inner text"""
        if not text:
            return ''
        parts: List[str] = []
        for block in self.segment(text):
            if block.kind == ContentBlockType.TEXT:
                parts.append(block.raw_content)
            else:
                raw = block.raw_content
                family = self.family_get(block.kind)
                parts.append(raw[len(family.start):len(raw) - len(family.end)] if family else raw)
        return ''.join(parts)

    def family_get(self, kind: ContentBlockType) -> Optional[MarkerFamily]:
        for family in self.config.families:
            if family.kind == kind:
                return family
        return None

    def format_validate(self, text: str) -> Tuple[bool, List[str]]:
        """
        Check marker pairing

        Counts opening and closing delimiters of each bracket pair and flags
        an odd number of stray asterisks. The asterisk check is a loose
        heuristic and only reports the obvious case.

        Returns:
            (valid, errors)
        """
        errors: List[str] = []

        for name, opening, closing in FORMAT_PAIRS:
            open_count = text.count(opening)
            close_count = text.count(closing)
            if open_count != close_count:
                errors.append(
                    f"Unbalanced {name}: {open_count} opening, {close_count} closing"
                )

        thought = self.family_get(ContentBlockType.THOUGHT)
        if thought is not None:
            asterisks = text.count('*')
            paired = 2 * len(self.family_scan(text, thought))
            if asterisks > paired and asterisks % 2 != 0:
                errors.append("Possibly unpaired thought marker (*)")

        return not errors, errors
