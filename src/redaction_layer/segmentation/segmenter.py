"""
Document segmentation for context detection.

Splits long documents into overlapping segments cut at natural linguistic
boundaries so a name or a date is rarely split across two external calls.
Each segment records its offset range in the original document, which the
reconciler uses to map segment-local entity offsets back.

Boundary priority when searching backward from a target cut point:
paragraph break > sentence terminator > word boundary > hard cut.
"""

import re
from typing import Optional

import structlog

from redaction_layer.config import Settings
from redaction_layer.models.document_models import Segment


logger = structlog.get_logger(__name__)


# Ordered by priority. A cut is placed right after the matched separator.
PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n\s*")
SENTENCE_END = re.compile(r"[.!?][\"')\]]*\s+")
WORD_BREAK = re.compile(r"\s+")

BOUNDARY_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("paragraph", PARAGRAPH_BREAK),
    ("sentence", SENTENCE_END),
    ("word", WORD_BREAK),
]


def find_natural_boundary(text: str, target: int, lookback: int) -> int:
    """
    Find the best cut position in ``[target - lookback, target]``.

    Within the window the highest-priority boundary type wins; among
    matches of that type the one closest to ``target`` wins.

    Args:
        text: Full document text
        target: Desired cut position (exclusive end of the segment)
        lookback: How far back from target the cut may move

    Returns:
        Cut position. Equal to ``target`` when no boundary exists (hard cut).

    Examples:
        >>> find_natural_boundary("One. Two three", 12, 10)
        5
    """
    if lookback <= 0:
        return target

    window_start = max(0, target - lookback)
    window = text[window_start:target]

    for _name, pattern in BOUNDARY_PATTERNS:
        last_match: Optional[re.Match] = None
        for match in pattern.finditer(window):
            last_match = match
        if last_match is not None:
            return window_start + last_match.end()

    return target


def segment(text: str, max_size: int, overlap_size: int) -> list[Segment]:
    """
    Split ``text`` into ordered, overlapping segments.

    Each step advances the cursor by ``max_size - overlap_size``: the segment
    is cut at the best boundary at or before ``start + max_size`` and the
    next segment starts exactly ``overlap_size`` characters before that cut.
    The backward search is limited to ``overlap_size`` characters (and
    clamped so every step makes progress).

    Args:
        text: Document text
        max_size: Maximum segment length in characters
        overlap_size: Characters shared by consecutive segments

    Returns:
        Segments in ascending order. A text no longer than ``max_size``
        (including the empty text) yields exactly one segment.

    Raises:
        ValueError: On negative or inconsistent sizes (programming error).
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if overlap_size < 0:
        raise ValueError(f"overlap_size must be >= 0, got {overlap_size}")
    if overlap_size >= max_size:
        raise ValueError(
            f"overlap_size ({overlap_size}) must be smaller than max_size ({max_size})"
        )

    length = len(text)
    if length <= max_size:
        return [Segment(index=0, start_offset=0, end_offset=length, text=text)]

    # cut >= start + max_size - lookback > start + overlap_size
    lookback = min(overlap_size, max_size - overlap_size - 1)

    segments: list[Segment] = []
    start = 0
    while True:
        if length - start <= max_size:
            segments.append(
                Segment(index=len(segments), start_offset=start, end_offset=length, text=text[start:])
            )
            break

        cut = find_natural_boundary(text, start + max_size, lookback)
        segments.append(
            Segment(index=len(segments), start_offset=start, end_offset=cut, text=text[start:cut])
        )
        start = cut - overlap_size

    return segments


def segment_stats(segments: list[Segment]) -> dict:
    """Summary statistics for logging/debugging."""
    if not segments:
        return {"count": 0, "avg_size": 0, "min_size": 0, "max_size": 0, "total_size": 0}

    sizes = [s.length for s in segments]
    total = sum(sizes)
    return {
        "count": len(segments),
        "avg_size": round(total / len(segments)),
        "min_size": min(sizes),
        "max_size": max(sizes),
        "total_size": total,
    }


def validate_segments(segments: list[Segment], text: str) -> list[str]:
    """
    Check segments against the document they were cut from.

    Returns:
        List of problems (empty when the segmentation is sound)
    """
    problems: list[str] = []

    if not segments:
        return ["no segments"]

    if segments[0].start_offset != 0:
        problems.append(f"first segment starts at {segments[0].start_offset}, not 0")

    for seg in segments:
        if text[seg.start_offset:seg.end_offset] != seg.text:
            problems.append(f"segment {seg.index}: text does not match offsets")

    for current, nxt in zip(segments, segments[1:]):
        if nxt.index != current.index + 1:
            problems.append(f"segment {nxt.index}: index out of sequence")
        gap = nxt.start_offset - current.end_offset
        if gap > 0:
            problems.append(f"segments {current.index}-{nxt.index}: gap of {gap} chars")
        if nxt.start_offset < current.start_offset:
            problems.append(f"segments {current.index}-{nxt.index}: start offsets not ascending")

    if segments[-1].end_offset != len(text):
        problems.append(
            f"last segment ends at {segments[-1].end_offset}, document length is {len(text)}"
        )

    return problems


class Segmenter:
    """
    Settings-bound segmenter.

    Thin wrapper over :func:`segment` that reads sizes from Settings and
    logs segmentation statistics.
    """

    def __init__(self, settings: Settings):
        self.max_size = settings.MAX_SEGMENT_SIZE
        self.overlap_size = settings.OVERLAP_SIZE

    def segment(self, text: str) -> list[Segment]:
        segments = segment(text, self.max_size, self.overlap_size)
        logger.debug(
            "Segmented document",
            document_length=len(text),
            max_size=self.max_size,
            overlap_size=self.overlap_size,
            **segment_stats(segments),
        )
        return segments
