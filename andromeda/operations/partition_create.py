"""Create a partition inside a free segment."""

from __future__ import annotations

from dataclasses import dataclass, field

from andromeda.domain import DriveData
from andromeda.logging import operation_context
from andromeda.services.interfaces import standard_options
from andromeda.storage.exceptions import CreatePartitionError, ServiceError

from .messages import SavePartitionSize, SetPartitionSizeText

TITLE = "Create Partition"
DESCRIPTION = "Create a partition in the empty space"

# Partition sizes are kept to whole classic sectors.
SIZE_ALIGNMENT = 512


@dataclass
class PartitionCreate:
    offset: int
    max_size: int
    size: int = 0
    size_text: str = field(default="")

    def __post_init__(self) -> None:
        if not self.size:
            self.size = aligned_max(self.max_size)
        if not self.size_text:
            self.size_text = str(self.size)


def aligned_max(max_size: int) -> int:
    return (max_size // SIZE_ALIGNMENT) * SIZE_ALIGNMENT


def normalize_size(text: str, previous: int, max_size: int) -> int:
    """Parse a size entry, round it down to the alignment and clamp it.

    Unparseable input keeps the previous size.
    """
    try:
        size = int(text.strip())
    except ValueError:
        size = previous
    size = (size // SIZE_ALIGNMENT) * SIZE_ALIGNMENT
    return min(max(size, SIZE_ALIGNMENT), aligned_max(max_size))


def save_size(operation: PartitionCreate) -> None:
    operation.size = normalize_size(operation.size_text, operation.size, operation.max_size)
    operation.size_text = str(operation.size)


def update(operation: PartitionCreate, message) -> None:
    if isinstance(message, SetPartitionSizeText):
        operation.size_text = message.text
    elif isinstance(message, SavePartitionSize):
        save_size(operation)


async def perform(
    operation: PartitionCreate,
    client,
    drive: DriveData,
    *,
    no_user_interaction: bool = False,
) -> None:
    save_size(operation)
    if not drive.has_partition_table:
        raise CreatePartitionError(
            f"{drive.drive_id.name} has no partition table", device=drive.block_path
        )
    if operation.size < SIZE_ALIGNMENT or operation.size > operation.max_size:
        raise CreatePartitionError(
            f"Partition size {operation.size} does not fit {operation.max_size} bytes of free space",
            device=drive.block_path,
        )
    with operation_context(
        "create", device=drive.block_path, offset=operation.offset, size=operation.size
    ) as log:
        try:
            created = await client.create_partition(
                drive.block_path,
                operation.offset,
                operation.size,
                "",
                "",
                standard_options(no_user_interaction),
            )
        except ServiceError as error:
            raise CreatePartitionError(
                f"Creating a partition on {drive.drive_id.name} failed: {error}",
                device=drive.block_path,
            ) from error
        log.debug(f"Created {created}")
