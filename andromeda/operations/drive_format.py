"""Format a whole drive with a new (or no) partition table."""

from __future__ import annotations

from dataclasses import dataclass

from andromeda.domain import DriveData
from andromeda.logging import operation_context
from andromeda.services.interfaces import standard_options
from andromeda.storage.exceptions import FormatOperationError, ServiceError

from .drive_format_types import EraseMode, TableType
from .messages import SetEraseMode, SetTableType

TITLE = "Format Drive"
DESCRIPTION = (
    "This operation is not reversible, make sure you back up any important user data!"
)


@dataclass
class DriveFormat:
    erase: EraseMode = EraseMode.QUICK
    table: TableType = TableType.GPT


def update(operation: DriveFormat, message) -> None:
    if isinstance(message, SetEraseMode):
        operation.erase = message.mode
    elif isinstance(message, SetTableType):
        operation.table = message.table


def build_options(operation: DriveFormat, *, no_user_interaction: bool = False) -> dict:
    options = standard_options(no_user_interaction)
    if operation.erase is EraseMode.FULL:
        options["erase"] = "zero"
    return options


async def perform(
    operation: DriveFormat, client, drive: DriveData, *, no_user_interaction: bool = False
) -> None:
    options = build_options(operation, no_user_interaction=no_user_interaction)
    with operation_context(
        "format", device=drive.block_path, table=operation.table.value
    ) as log:
        try:
            await client.format_block(drive.block_path, operation.table.value, options)
        except ServiceError as error:
            raise FormatOperationError(
                f"Formatting {drive.drive_id.name} failed: {error}", device=drive.block_path
            ) from error
        log.debug(f"Wrote {operation.table.value} table to {drive.block_path}")
