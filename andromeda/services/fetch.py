"""Asynchronous drive metadata fetch.

Loading a drive resolves its drive-level properties one after another, then
resolves every partition concurrently. Each partition is an explicit
sequential task that fills a ``PartialPartition``: required properties
(offset and size) fail fast, optional ones fall back to placeholders.

Failure policy:
    - a required property that cannot be read aborts the whole load with a
      recoverable ``DriveLoadError``
    - a layout that cannot be reconstructed (overlapping or out-of-bounds
      partitions) aborts the load with a fatal ``DriveLoadError``
    - optional properties never fail a load

Any object with the ``UDisksClient`` coroutine methods (``get_property`` and
``has_interface``) can be passed as the client.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from andromeda.domain import DriveData, DriveID, PartitionRecord, object_path_name
from andromeda.logging import EventLogger, LoggerFactory
from andromeda.services.interfaces import (
    BLOCK_INTERFACE,
    DRIVE_INTERFACE,
    FILESYSTEM_INTERFACE,
    PARTITION_INTERFACE,
    PARTITION_TABLE_INTERFACE,
)
from andromeda.storage.exceptions import (
    DriveLoadError,
    InvalidPartitionError,
    LayoutError,
    PropertyReadError,
    ServiceError,
)
from andromeda.storage.layout import reconstruct

UNKNOWN = "Unknown"


def _object_paths(value) -> List[str]:
    if isinstance(value, (str, bytes)):
        raise TypeError(f"expected a list of object paths, got {type(value).__name__}")
    return [str(path) for path in value]


async def read_required(
    client, object_path: str, interface: str, name: str, convert: Optional[Callable] = None
) -> Any:
    """Read a property the load cannot do without.

    ``convert`` is applied to the raw value; a value it rejects is reported
    like an unreadable property.
    """
    value = await client.get_property(object_path, interface, name)
    if value is None:
        raise PropertyReadError(object_path, interface, name, "no value")
    if convert is None:
        return value
    try:
        return convert(value)
    except (TypeError, ValueError) as error:
        raise PropertyReadError(
            object_path, interface, name, f"unexpected value {value!r}"
        ) from error


async def read_optional(
    client,
    object_path: str,
    interface: str,
    name: str,
    default: Any,
    log=None,
    convert: Optional[Callable] = None,
) -> Any:
    """Read a display property, falling back to ``default`` on any service error."""
    try:
        value = await client.get_property(object_path, interface, name)
    except ServiceError as error:
        if log is not None:
            log.debug(f"Optional {name} unavailable on {object_path}: {error}")
        return default
    if value is None or value == "":
        return default
    if convert is None:
        return value
    try:
        return convert(value)
    except (TypeError, ValueError):
        if log is not None:
            log.debug(f"Optional {name} on {object_path} has unexpected value {value!r}")
        return default


@dataclass
class PartialPartition:
    """Partition metadata as it is being resolved."""

    object_path: str
    offset: Optional[int] = None
    size: Optional[int] = None
    number: int = 0
    filesystem: str = UNKNOWN
    uuid: str = ""
    filesystem_path: Optional[str] = None

    def into_record(self) -> PartitionRecord:
        for name in ("offset", "size"):
            if getattr(self, name) is None:
                raise PropertyReadError(
                    self.object_path, PARTITION_INTERFACE, name.capitalize(), "unresolved"
                )
        return PartitionRecord(
            offset=self.offset,
            size=self.size,
            name=object_path_name(self.object_path),
            filesystem=self.filesystem,
            uuid=self.uuid,
            number=self.number,
            object_path=self.object_path,
            filesystem_path=self.filesystem_path,
        )


async def fetch_partition(client, partition_path: str, log=None) -> PartitionRecord:
    """Resolve one partition's record."""
    partial = PartialPartition(object_path=partition_path)
    partial.offset = await read_required(
        client, partition_path, PARTITION_INTERFACE, "Offset", int
    )
    partial.size = await read_required(client, partition_path, PARTITION_INTERFACE, "Size", int)
    partial.number = await read_optional(
        client, partition_path, PARTITION_INTERFACE, "Number", 0, log, int
    )
    partial.filesystem = str(
        await read_optional(client, partition_path, BLOCK_INTERFACE, "IdType", UNKNOWN, log)
    )
    partial.uuid = str(
        await read_optional(client, partition_path, PARTITION_INTERFACE, "UUID", "", log)
    )
    if await client.has_interface(partition_path, FILESYSTEM_INTERFACE):
        partial.filesystem_path = partition_path
    return partial.into_record()


async def load_drive(client, drive_id: DriveID) -> DriveData:
    """Fetch a drive's metadata and reconstruct its layout.

    Raises:
        DriveLoadError: ``recoverable`` is False when the partition table
            reported by the service is inconsistent
    """
    block_path = drive_id.block_path
    log = LoggerFactory.for_fetch(drive_id.name)
    log.debug(f"Loading {block_path}")

    try:
        size = await read_required(client, block_path, BLOCK_INTERFACE, "Size", int)
        serial = str(
            await read_optional(client, drive_id.drive_path, DRIVE_INTERFACE, "Serial", UNKNOWN, log)
        )
        revision = str(
            await read_optional(
                client, drive_id.drive_path, DRIVE_INTERFACE, "Revision", UNKNOWN, log
            )
        )

        ptype = None
        partition_paths: List[str] = []
        if await client.has_interface(block_path, PARTITION_TABLE_INTERFACE):
            ptype = await read_optional(
                client, block_path, PARTITION_TABLE_INTERFACE, "Type", None, log
            )
            partition_paths = await read_required(
                client, block_path, PARTITION_TABLE_INTERFACE, "Partitions", _object_paths
            )

        records = await asyncio.gather(
            *(fetch_partition(client, path, log) for path in partition_paths)
        )
    except ServiceError as error:
        load_error = DriveLoadError(block_path, error, recoverable=True)
        EventLogger.log_drive_load_failed(log, block_path, error, recoverable=True)
        raise load_error from error

    if size <= 0:
        error = InvalidPartitionError(0, size, "drive reports no medium")
        EventLogger.log_drive_load_failed(log, block_path, error, recoverable=True)
        raise DriveLoadError(block_path, error, recoverable=True) from error

    try:
        layout = reconstruct(size, records)
    except LayoutError as error:
        EventLogger.log_drive_load_failed(log, block_path, error, recoverable=False)
        raise DriveLoadError(block_path, error, recoverable=False) from error

    EventLogger.log_drive_loaded(log, block_path, len(layout), partitions=len(records))
    return DriveData(
        drive_id=drive_id,
        size=size,
        layout=layout,
        serial=serial,
        revision=revision,
        ptype=ptype,
        partitions=sorted(records, key=lambda record: record.number),
    )
