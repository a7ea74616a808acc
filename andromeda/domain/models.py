"""Domain model for drive and partition layouts.

A drive's layout is an ordered sequence of segments covering the whole device:
each segment is either occupied by a partition or free space. These objects are
plain frozen dataclasses so they can be shared freely between the fetch tasks,
the state owner and the renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


# ==============================================================================
# Drive identity
# ==============================================================================


@dataclass(frozen=True)
class DriveID:
    """A drive as discovered through the disk-management service."""

    model: str
    block_path: str  # e.g., /org/freedesktop/UDisks2/block_devices/sda
    drive_path: str  # e.g., /org/freedesktop/UDisks2/drives/Samsung_SSD_...

    @property
    def name(self) -> str:
        """Trailing segment of the block object path (e.g., sda)."""
        return object_path_name(self.block_path)


def object_path_name(object_path: str) -> str:
    """Return the trailing segment of a service object path."""
    name = object_path.rstrip("/").rsplit("/", 1)[-1]
    if not name:
        raise ValueError(f"Could not parse object path: {object_path!r}")
    return name


# ==============================================================================
# Partitions and segments
# ==============================================================================


@dataclass(frozen=True)
class PartitionRecord:
    """A partition reported by the partition table.

    Only ``offset`` and ``size`` take part in layout reconstruction; the
    remaining fields are descriptive payload carried through to the views.
    """

    offset: int
    size: int
    name: str = ""
    filesystem: str = "Unknown"
    uuid: str = ""
    number: int = 0
    object_path: str = ""
    filesystem_path: Optional[str] = None  # absent when nothing is mountable

    @property
    def end(self) -> int:
        return self.offset + self.size

    @property
    def has_filesystem(self) -> bool:
        return self.filesystem_path is not None


@dataclass(frozen=True)
class Occupied:
    """A segment occupied by a partition.

    ``offset`` and ``size`` cover the partition plus any alignment padding
    merged into it; the partition's own range stays on ``record``.
    """

    record: PartitionRecord
    # Alignment padding folded into this segment's span (see storage.layout).
    padding_before: int = 0
    padding_after: int = 0

    is_occupied = True

    @property
    def offset(self) -> int:
        return self.record.offset - self.padding_before

    @property
    def size(self) -> int:
        return self.padding_before + self.record.size + self.padding_after

    @property
    def span_start(self) -> int:
        return self.offset

    @property
    def span_end(self) -> int:
        return self.offset + self.size


@dataclass(frozen=True)
class Free:
    """Unallocated space large enough to be offered to the user."""

    offset: int
    size: int

    is_occupied = False

    @property
    def span_start(self) -> int:
        return self.offset

    @property
    def span_end(self) -> int:
        return self.offset + self.size


Segment = Union[Occupied, Free]
Layout = Tuple[Segment, ...]


# ==============================================================================
# Visualization
# ==============================================================================


@dataclass(frozen=True)
class WeightedSegment:
    """A layout segment with its share of the ring."""

    index: int  # position in the layout, used to correlate selection
    segment: Segment
    weight: float  # in (0, 1], all weights of a layout sum to 1
    start: float  # running sum of the preceding weights

    @property
    def is_occupied(self) -> bool:
        return self.segment.is_occupied

    @property
    def end(self) -> float:
        return self.start + self.weight

    def to_dict(self) -> dict:
        """Shape handed to render consumers."""
        return {
            "index": self.index,
            "weight": self.weight,
            "is_occupied": self.is_occupied,
        }


# ==============================================================================
# Drive data
# ==============================================================================


@dataclass(frozen=True)
class DriveData:
    """Everything known about one drive after a complete load."""

    drive_id: DriveID
    size: int
    layout: Layout
    serial: str = "Unknown"
    revision: str = "Unknown"
    ptype: Optional[str] = None  # "gpt", "dos" or None without a partition table
    partitions: List[PartitionRecord] = field(default_factory=list)

    @property
    def model(self) -> str:
        return self.drive_id.model

    @property
    def block_path(self) -> str:
        return self.drive_id.block_path

    @property
    def has_partition_table(self) -> bool:
        return self.ptype is not None

    def occupied_at(self, offset: int) -> Optional[Occupied]:
        """Find the occupied segment whose partition starts at ``offset``."""
        for segment in self.layout:
            if isinstance(segment, Occupied) and segment.record.offset == offset:
                return segment
        return None
