"""
Document segmentation.

- segmenter.py: overlapping, boundary-aware segments with offset tracking
"""

from redaction_layer.segmentation.segmenter import (
    Segmenter,
    find_natural_boundary,
    segment,
    segment_stats,
    validate_segments,
)

__all__ = [
    "Segmenter",
    "find_natural_boundary",
    "segment",
    "segment_stats",
    "validate_segments",
]
