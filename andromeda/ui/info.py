"""Text models for the drive information panel and partition table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from andromeda.domain import DriveData, Free, Occupied
from andromeda.storage.units import format_bytes


@dataclass(frozen=True)
class InfoPanel:
    title: str
    rows: List[Tuple[str, str]]

    def lines(self, width: int = 40) -> List[str]:
        """Render as fixed-width text: title, rule, then label/value rows."""
        lines = [self.title, "-" * width]
        for field_name, value in self.rows:
            padding = max(1, width - len(field_name) - len(value))
            lines.append(f"{field_name}{' ' * padding}{value}")
        return lines


@dataclass(frozen=True)
class TableRow:
    index: int
    label: str
    filesystem: str
    offset: str
    size: str


def info_panel(drive: DriveData, selected_index: Optional[int] = None) -> InfoPanel:
    """Details of the selected segment, or of the drive when nothing is selected."""
    segment = None
    if selected_index is not None and 0 <= selected_index < len(drive.layout):
        segment = drive.layout[selected_index]

    if isinstance(segment, Occupied):
        record = segment.record
        return InfoPanel(
            title=record.name,
            rows=[
                ("Filesystem", record.filesystem),
                ("Offset", format_bytes(record.offset)),
                ("Size", format_bytes(record.size)),
            ],
        )
    if isinstance(segment, Free):
        return InfoPanel(
            title="Free Space",
            rows=[
                ("Offset", format_bytes(segment.offset)),
                ("Size", format_bytes(segment.size)),
            ],
        )
    return InfoPanel(
        title=drive.model,
        rows=[
            ("Serial", drive.serial),
            ("Revision", drive.revision),
            ("Size", format_bytes(drive.size)),
            ("Partitioning", drive.ptype or "Unknown"),
        ],
    )


def partition_table(drive: DriveData) -> List[TableRow]:
    """One row per layout segment, in layout order."""
    rows = []
    for index, segment in enumerate(drive.layout):
        if isinstance(segment, Occupied):
            label = segment.record.name
            filesystem = segment.record.filesystem
            offset, size = segment.record.offset, segment.record.size
        else:
            label = "Free Space"
            filesystem = ""
            offset, size = segment.offset, segment.size
        rows.append(
            TableRow(
                index=index,
                label=label,
                filesystem=filesystem,
                offset=format_bytes(offset),
                size=format_bytes(size),
            )
        )
    return rows
