"""Partition layout reconstruction.

Turns the unordered partition records reported for a drive into an ordered,
gap-complete description of the whole device.

Algorithm:
    1. No partitions: the layout is a single free segment covering the drive.
    2. Records are sorted by offset and checked for overlap and bounds.
    3. Each record becomes an ``Occupied`` segment. Any gap larger than
       ``GAP_THRESHOLD`` (before the first record, between records, or after
       the last one) becomes a ``Free`` segment.
    4. Gaps up to ``GAP_THRESHOLD`` are alignment padding. They are never
       offered as free space; instead they are merged into the neighbouring
       occupied segment (the following one for a leading gap, otherwise the
       preceding one). The segment grows by the padding while its
       ``record`` keeps the partition's own offset and size, so segment
       sizes always sum to the drive size.

Invariants of every returned layout:
    - offsets strictly ascending
    - ``span_end`` of one segment equals ``span_start`` of the next
    - first ``span_start`` is 0, last ``span_end`` is the drive size
    - no two adjacent free segments

Reconstruction is synchronous and has no side effects apart from logging.
Overlapping records are a hard error: a layout built from an inconsistent
partition table would be misleading, so nothing is repaired here.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from andromeda.domain import Free, Layout, Occupied, PartitionRecord, Segment
from andromeda.logging import LoggerFactory
from andromeda.storage.exceptions import (
    InvalidPartitionError,
    LayoutInconsistentError,
)

# One classic sector. Smaller gaps are alignment noise, not usable space.
GAP_THRESHOLD = 512

log = LoggerFactory.for_layout()


def _validate_drive_size(drive_size: int) -> None:
    if isinstance(drive_size, bool) or not isinstance(drive_size, int):
        raise InvalidPartitionError(0, drive_size, "drive size must be an integer")
    if drive_size <= 0:
        raise InvalidPartitionError(0, drive_size, "drive size must be positive")


def _validate_record(record: PartitionRecord, drive_size: int) -> None:
    if record.offset < 0:
        raise InvalidPartitionError(record.offset, record.size, "negative offset")
    if record.size <= 0:
        raise InvalidPartitionError(record.offset, record.size, "size must be positive")
    if record.end > drive_size:
        raise LayoutInconsistentError(
            drive_size,
            f"partition {record.name or record.offset} ends at {record.end}, "
            f"past the end of the drive",
        )


def _check_overlaps(records: List[PartitionRecord], drive_size: int) -> None:
    for previous, current in zip(records, records[1:]):
        if previous.end > current.offset:
            raise LayoutInconsistentError(
                drive_size,
                f"partition at {previous.offset} (size {previous.size}) overlaps "
                f"partition at {current.offset}",
            )


def sort_records(partitions: Iterable[PartitionRecord]) -> List[PartitionRecord]:
    """Return records ordered by offset."""
    return sorted(partitions, key=lambda record: record.offset)


def reconstruct(drive_size: int, partitions: Iterable[PartitionRecord]) -> Layout:
    """Build the ordered segment layout of a drive.

    Args:
        drive_size: Total addressable bytes of the drive
        partitions: Partition records in any order

    Returns:
        Tuple of ``Occupied`` and ``Free`` segments covering the drive

    Raises:
        InvalidPartitionError: If the drive size or a record is not a valid range
        LayoutInconsistentError: If records overlap or run past the drive end
    """
    _validate_drive_size(drive_size)
    records = sort_records(partitions)
    for record in records:
        _validate_record(record, drive_size)

    if not records:
        log.debug(f"No partitions on {drive_size} byte drive, layout is all free")
        return (Free(0, drive_size),)

    _check_overlaps(records, drive_size)

    segments: List[Segment] = []
    padding_before = 0
    leading_gap = records[0].offset
    if leading_gap > GAP_THRESHOLD:
        segments.append(Free(0, leading_gap))
    else:
        padding_before = leading_gap

    for position, record in enumerate(records):
        if position + 1 < len(records):
            next_offset = records[position + 1].offset
        else:
            next_offset = drive_size
        gap = next_offset - record.end

        if gap > GAP_THRESHOLD:
            segments.append(Occupied(record, padding_before=padding_before))
            segments.append(Free(record.end, gap))
        else:
            if gap:
                log.trace(f"Folding {gap} bytes of padding after offset {record.offset}")
            segments.append(
                Occupied(record, padding_before=padding_before, padding_after=gap)
            )
        padding_before = 0

    layout = tuple(segments)
    log.debug(
        f"Reconstructed {len(layout)} segments "
        f"({len(records)} partitions) for {drive_size} byte drive"
    )
    return layout


def check_layout(layout: Layout, drive_size: int) -> None:
    """Verify the layout invariants, raising ``LayoutInconsistentError``."""
    if not layout:
        raise LayoutInconsistentError(drive_size, "layout is empty")
    if layout[0].span_start != 0:
        raise LayoutInconsistentError(drive_size, "layout does not start at 0")
    if layout[-1].span_end != drive_size:
        raise LayoutInconsistentError(drive_size, "layout does not reach the drive end")
    for previous, current in zip(layout, layout[1:]):
        if current.offset <= previous.offset:
            raise LayoutInconsistentError(
                drive_size, f"segment at {current.offset} is out of order"
            )
        if previous.span_end != current.span_start:
            raise LayoutInconsistentError(
                drive_size, f"segments are not contiguous at {current.offset}"
            )
        if not previous.is_occupied and not current.is_occupied:
            raise LayoutInconsistentError(
                drive_size, f"adjacent free segments at {current.offset}"
            )


def free_segments(layout: Layout) -> List[Free]:
    return [segment for segment in layout if isinstance(segment, Free)]


def occupied_segments(layout: Layout) -> List[Occupied]:
    return [segment for segment in layout if isinstance(segment, Occupied)]


def segment_at(layout: Layout, index: Optional[int]) -> Optional[Segment]:
    """Return the segment at ``index`` or None when out of range."""
    if index is None or index < 0 or index >= len(layout):
        return None
    return layout[index]
