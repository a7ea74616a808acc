"""Size-fair weighting of layout segments for the ring diagram.

Raw sizes on one drive can differ by six orders of magnitude (a 100 MiB EFI
partition next to a multi-TiB data partition), so a linear share would turn
small partitions into invisible slivers. Each segment is instead scored with

    score = log_128(size_mib) ** 4

where ``size_mib`` is clamped to at least 1 MiB so the logarithm is never
negative. A segment of 1 MiB or less scores exactly zero; such segments are
lifted to half the smallest positive score on the drive (or half of
``SCORE_FLOOR`` when none is positive), which keeps them visible without
changing the order. Scores are then normalized to weights summing to 1.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

from andromeda.domain import Layout, Segment, WeightedSegment

MIB = 2**20
LOG_BASE = 128
COMPRESSION_POWER = 4
SIZE_FLOOR_MIB = 1.0
# Score of a 2 MiB segment.
SCORE_FLOOR = math.log(2, LOG_BASE) ** COMPRESSION_POWER


def size_score(size_bytes: int) -> float:
    """Compressed score for a segment size, zero at or below 1 MiB."""
    size_mib = max(size_bytes / MIB, SIZE_FLOOR_MIB)
    return math.log(size_mib, LOG_BASE) ** COMPRESSION_POWER


def _lift(scores: List[float]) -> List[float]:
    lifted = min([score for score in scores if score > 0] + [SCORE_FLOOR]) / 2
    return [score if score > 0 else lifted for score in scores]


def weight(layout: Layout) -> List[WeightedSegment]:
    """Map a layout onto ring weights.

    Segments keep their layout order and index; ``start`` is the running sum
    of the preceding weights, so arcs drawn by accumulation never overlap.
    """
    segments: List[Segment] = list(layout)
    if not segments:
        return []
    scores = _lift([size_score(segment.size) for segment in segments])
    total = math.fsum(scores)

    weighted: List[WeightedSegment] = []
    start = 0.0
    for index, (segment, score) in enumerate(zip(segments, scores)):
        share = score / total
        weighted.append(
            WeightedSegment(index=index, segment=segment, weight=share, start=start)
        )
        start += share
    return weighted


def ring_sections(
    weighted: Iterable[WeightedSegment], selected_index: Optional[int] = None
) -> dict:
    """Payload for a render consumer: sections plus the selected index."""
    return {
        "sections": [item.to_dict() for item in weighted],
        "selected_index": selected_index,
    }
