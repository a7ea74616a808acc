"""UDisks2 object and interface names used by the fetch and operation code."""

from __future__ import annotations

from typing import Any, Dict

UDISKS_SERVICE = "org.freedesktop.UDisks2"
MANAGER_PATH = "/org/freedesktop/UDisks2/Manager"

MANAGER_INTERFACE = "org.freedesktop.UDisks2.Manager"
DRIVE_INTERFACE = "org.freedesktop.UDisks2.Drive"
BLOCK_INTERFACE = "org.freedesktop.UDisks2.Block"
PARTITION_INTERFACE = "org.freedesktop.UDisks2.Partition"
PARTITION_TABLE_INTERFACE = "org.freedesktop.UDisks2.PartitionTable"
FILESYSTEM_INTERFACE = "org.freedesktop.UDisks2.Filesystem"
LOOP_INTERFACE = "org.freedesktop.UDisks2.Loop"
SWAPSPACE_INTERFACE = "org.freedesktop.UDisks2.Swapspace"

PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"

# Block devices exposing any of these are not whole drives.
NON_DRIVE_INTERFACES = (
    PARTITION_INTERFACE,
    LOOP_INTERFACE,
    SWAPSPACE_INTERFACE,
)

NO_DRIVE_PATH = "/"


def standard_options(no_user_interaction: bool = False) -> Dict[str, Any]:
    """Options dict accepted by every UDisks2 method."""
    return {"auth.no_user_interaction": bool(no_user_interaction)}
