"""Create a filesystem on an existing partition."""

from __future__ import annotations

from dataclasses import dataclass

from andromeda.domain import DriveData
from andromeda.logging import LoggerFactory, operation_context
from andromeda.services.interfaces import standard_options
from andromeda.storage.exceptions import FormatOperationError, ServiceError

from .messages import SelectFilesystem, SetFullErase, SetVolumeName

TITLE = "Format Partition"
DESCRIPTION = (
    "Create a filesystem for the selected partition, this erases all data on the volume! "
    "Please back up data before you format."
)

FILESYSTEMS = (
    ("ext4", "Linux (Ext4)"),
    ("ntfs", "Windows (NTFS)"),
    ("vfat", "Universal (FAT)"),
)

log = LoggerFactory.for_operation("format", job_id="format-dialog")


@dataclass
class PartitionFormat:
    offset: int
    name: str = ""
    erase: bool = False
    fs_index: int = 0

    @property
    def fs_type(self) -> str:
        return FILESYSTEMS[self.fs_index][0]


def filesystem_index(fs_type: str) -> int:
    for index, (name, _label) in enumerate(FILESYSTEMS):
        if name == fs_type:
            return index
    return 0


def update(operation: PartitionFormat, message) -> None:
    if isinstance(message, SetVolumeName):
        operation.name = message.name
    elif isinstance(message, SetFullErase):
        operation.erase = message.enabled
    elif isinstance(message, SelectFilesystem):
        if not 0 <= message.index < len(FILESYSTEMS):
            log.warning(f"Ignoring filesystem selection {message.index}, no such filesystem")
            return
        operation.fs_index = message.index


def build_options(operation: PartitionFormat, *, no_user_interaction: bool = False) -> dict:
    options = standard_options(no_user_interaction)
    options["update-partition-type"] = True
    if operation.erase:
        options["erase"] = "zero"
    # FAT labels are limited and upper-cased; leave them to the defaults.
    if operation.fs_type != "vfat":
        options["label"] = operation.name
    return options


async def perform(
    operation: PartitionFormat,
    client,
    drive: DriveData,
    *,
    no_user_interaction: bool = False,
) -> None:
    segment = drive.occupied_at(operation.offset)
    if segment is None:
        raise FormatOperationError(
            f"No partition starts at offset {operation.offset} on {drive.drive_id.name}",
            device=drive.block_path,
        )
    record = segment.record
    with operation_context(
        "format", device=record.object_path, fs_type=operation.fs_type
    ) as log:
        if record.filesystem_path is not None:
            try:
                await client.unmount(
                    record.filesystem_path, standard_options(no_user_interaction)
                )
            except ServiceError as error:
                # Unmount also fails when nothing is mounted.
                log.debug(f"Unmount of {record.name} skipped: {error}")
        try:
            await client.format_block(
                record.object_path,
                operation.fs_type,
                build_options(operation, no_user_interaction=no_user_interaction),
            )
        except ServiceError as error:
            raise FormatOperationError(
                f"Formatting {record.name} failed: {error}", device=record.object_path
            ) from error
