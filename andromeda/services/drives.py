"""Drive discovery through the disk-management service."""

from __future__ import annotations

import asyncio
from typing import List, Optional

from andromeda.domain import DriveID, object_path_name
from andromeda.logging import LoggerFactory
from andromeda.services.fetch import read_optional, read_required
from andromeda.services.interfaces import (
    BLOCK_INTERFACE,
    DRIVE_INTERFACE,
    NO_DRIVE_PATH,
    NON_DRIVE_INTERFACES,
)
from andromeda.storage.exceptions import ServiceError

log = LoggerFactory.for_udisks()


async def identify_drive(client, block_path: str) -> Optional[DriveID]:
    """Return the ``DriveID`` for a whole-drive block device, else None.

    Partitions, loop devices and swap spaces are skipped, as are block
    devices without a backing drive (device-mapper targets, for example).
    """
    for interface in NON_DRIVE_INTERFACES:
        if await client.has_interface(block_path, interface):
            return None
    try:
        drive_path = str(await read_required(client, block_path, BLOCK_INTERFACE, "Drive"))
    except ServiceError as error:
        log.warning(f"Skipping {block_path}: {error}")
        return None
    if not drive_path or drive_path == NO_DRIVE_PATH:
        return None
    model = await read_optional(
        client, drive_path, DRIVE_INTERFACE, "Model", object_path_name(block_path), log
    )
    return DriveID(model=str(model).strip(), block_path=block_path, drive_path=drive_path)


async def list_drives(client) -> List[DriveID]:
    """Discover every whole drive, in the order the service reports them."""
    block_paths = await client.get_block_devices()
    identified = await asyncio.gather(
        *(identify_drive(client, block_path) for block_path in block_paths)
    )
    drives = [drive for drive in identified if drive is not None]
    log.info(f"Discovered {len(drives)} drives among {len(block_paths)} block devices")
    return drives


def select_drive(drives: List[DriveID], block_path_or_name: str) -> Optional[DriveID]:
    """Find a drive by block object path or by its short name (e.g., sda)."""
    for drive in drives:
        if block_path_or_name in (drive.block_path, drive.name):
            return drive
    return None
