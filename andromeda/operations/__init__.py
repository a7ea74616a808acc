"""Layout-changing operations.

The set of operations is closed: ``DriveFormat``, ``PartitionCreate`` and
``PartitionFormat``. Each carries its own dialog state; the functions here
dispatch over the three kinds and reject anything else.
"""

from __future__ import annotations

from typing import List, Optional, Union

from andromeda.domain import DriveData, Free, Occupied

from . import drive_format, partition_create, partition_format
from .drive_format import DriveFormat
from .drive_format_types import EraseMode, TableType
from .messages import (
    SavePartitionSize,
    SelectFilesystem,
    SetEraseMode,
    SetFullErase,
    SetPartitionSizeText,
    SetTableType,
    SetVolumeName,
)
from .partition_create import PartitionCreate
from .partition_format import PartitionFormat

Operation = Union[DriveFormat, PartitionCreate, PartitionFormat]

OPERATION_MESSAGES = (
    SavePartitionSize,
    SelectFilesystem,
    SetEraseMode,
    SetFullErase,
    SetPartitionSizeText,
    SetTableType,
    SetVolumeName,
)


def _module_for(operation: Operation):
    if isinstance(operation, DriveFormat):
        return drive_format
    if isinstance(operation, PartitionCreate):
        return partition_create
    if isinstance(operation, PartitionFormat):
        return partition_format
    raise TypeError(f"Unknown operation: {operation!r}")


def operation_title(operation: Operation) -> str:
    return _module_for(operation).TITLE


def operation_description(operation: Operation) -> str:
    return _module_for(operation).DESCRIPTION


def update_operation(operation: Operation, message) -> None:
    """Apply a dialog message to the operation's own state."""
    _module_for(operation).update(operation, message)


async def perform_operation(
    operation: Operation, client, drive: DriveData, *, no_user_interaction: bool = False
) -> None:
    """Run the operation against the service.

    Raises:
        OperationError: The matching subclass for the failed operation
    """
    await _module_for(operation).perform(
        operation, client, drive, no_user_interaction=no_user_interaction
    )


def available_operations(
    drive: DriveData, selected_index: Optional[int], *, default_filesystem: str = "ext4"
) -> List[Operation]:
    """Operations that can be offered for the drive and its selected segment.

    A free segment supplies offset and size to partition creation; an
    occupied segment supplies its offset to partition format.
    """
    operations: List[Operation] = [DriveFormat()]
    if selected_index is None or not 0 <= selected_index < len(drive.layout):
        return operations
    segment = drive.layout[selected_index]
    if isinstance(segment, Free) and drive.has_partition_table:
        operations.append(PartitionCreate(offset=segment.offset, max_size=segment.size))
    elif isinstance(segment, Occupied):
        operations.append(
            PartitionFormat(
                offset=segment.record.offset,
                fs_index=partition_format.filesystem_index(default_filesystem),
            )
        )
    return operations


def is_offered(operation: Operation, offered: List[Operation]) -> bool:
    """Whether ``operation`` targets what one of the ``offered`` operations covers.

    Partition creation may ask for less than the free segment holds, never
    more; partition format must name the selected partition's offset.
    """
    for candidate in offered:
        if type(candidate) is not type(operation):
            continue
        if isinstance(operation, PartitionCreate):
            if (
                operation.offset == candidate.offset
                and operation.max_size <= candidate.max_size
            ):
                return True
        elif isinstance(operation, PartitionFormat):
            if operation.offset == candidate.offset:
                return True
        else:
            return True
    return False


__all__ = [
    "DriveFormat",
    "EraseMode",
    "OPERATION_MESSAGES",
    "Operation",
    "PartitionCreate",
    "PartitionFormat",
    "SavePartitionSize",
    "SelectFilesystem",
    "SetEraseMode",
    "SetFullErase",
    "SetPartitionSizeText",
    "SetTableType",
    "SetVolumeName",
    "TableType",
    "available_operations",
    "is_offered",
    "operation_description",
    "operation_title",
    "perform_operation",
    "update_operation",
]
