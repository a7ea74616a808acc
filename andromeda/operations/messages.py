"""Messages that edit the state of an open operation dialog."""

from __future__ import annotations

from dataclasses import dataclass

from .drive_format_types import EraseMode, TableType


@dataclass(frozen=True)
class SetEraseMode:
    mode: EraseMode


@dataclass(frozen=True)
class SetTableType:
    table: TableType


@dataclass(frozen=True)
class SetPartitionSizeText:
    text: str


@dataclass(frozen=True)
class SavePartitionSize:
    pass


@dataclass(frozen=True)
class SetVolumeName:
    name: str


@dataclass(frozen=True)
class SetFullErase:
    enabled: bool


@dataclass(frozen=True)
class SelectFilesystem:
    index: int
