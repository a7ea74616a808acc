"""Domain models for drive layouts.

This package contains the type-safe objects shared by the layout engine,
the fetch orchestration and the presentation layer.
"""

from __future__ import annotations

from .models import (
    DriveData,
    DriveID,
    Free,
    Layout,
    Occupied,
    PartitionRecord,
    Segment,
    WeightedSegment,
    object_path_name,
)


__all__ = [
    "DriveData",
    "DriveID",
    "Free",
    "Layout",
    "Occupied",
    "PartitionRecord",
    "Segment",
    "WeightedSegment",
    "object_path_name",
]
