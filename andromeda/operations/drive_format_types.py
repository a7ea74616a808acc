"""Choices offered when formatting a whole drive."""

from __future__ import annotations

from enum import Enum


class EraseMode(Enum):
    """How much of the drive is overwritten."""

    QUICK = "quick"
    FULL = "full"

    @property
    def label(self) -> str:
        return {
            EraseMode.QUICK: "Quick (less secure, faster)",
            EraseMode.FULL: "Full (more secure, slower)",
        }[self]


class TableType(Enum):
    """Partition table written to the drive."""

    GPT = "gpt"
    MBR = "dos"
    EMPTY = "empty"

    @property
    def label(self) -> str:
        return {
            TableType.GPT: "GUID Partition Table (Modern)",
            TableType.MBR: "Master Boot Record (Legacy)",
            TableType.EMPTY: "Empty",
        }[self]
