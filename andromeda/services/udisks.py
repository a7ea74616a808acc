"""UDisks2 client over the D-Bus system bus.

This is the only module that talks D-Bus. Every property read and method call
is one blocking dasbus round trip, run in a worker thread so callers can await
it; each await is a point where other drive or partition fetches may proceed.

One ``UDisksClient`` (and its bus connection) is shared by all concurrent
fetches. Mutating calls are serialized by the UDisks2 daemon itself.

Property reads go through ``org.freedesktop.DBus.Properties`` so a missing
interface surfaces as a service error rather than an introspection failure.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from dasbus.connection import SystemMessageBus
from dasbus.error import DBusError
from dasbus.typing import Bool, Int32, Str, UInt64, get_variant
from gi.repository import GLib

from andromeda.logging import LoggerFactory
from andromeda.services.interfaces import (
    BLOCK_INTERFACE,
    FILESYSTEM_INTERFACE,
    MANAGER_INTERFACE,
    MANAGER_PATH,
    PARTITION_TABLE_INTERFACE,
    PROPERTIES_INTERFACE,
    UDISKS_SERVICE,
    standard_options,
)
from andromeda.storage.exceptions import (
    ClientInitError,
    InterfaceMissingError,
    MethodCallError,
    PropertyReadError,
)

log = LoggerFactory.for_udisks()

# GLib's "no timeout" value; formats with a full erase can take hours.
MUTATION_TIMEOUT_MS = 2**31 - 1

_SERVICE_ERRORS = (DBusError, GLib.Error, AttributeError)

# Properties.Get replies InvalidArgs "No such interface" for a missing interface.
_MISSING_INTERFACE_MARKERS = ("No such interface", "UnknownInterface")


def is_missing_interface(error: BaseException) -> bool:
    text = str(error)
    return any(marker in text for marker in _MISSING_INTERFACE_MARKERS)


def to_variants(options: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a plain options dict into the ``a{sv}`` shape D-Bus expects."""
    variants = {}
    for key, value in options.items():
        if isinstance(value, bool):
            variants[key] = get_variant(Bool, value)
        elif isinstance(value, str):
            variants[key] = get_variant(Str, value)
        elif isinstance(value, int) and value >= 0:
            variants[key] = get_variant(UInt64, value)
        elif isinstance(value, int):
            variants[key] = get_variant(Int32, value)
        else:
            raise TypeError(f"Unsupported option type for {key}: {type(value).__name__}")
    return variants


class UDisksClient:
    """Async facade over the UDisks2 service."""

    def __init__(self, bus: SystemMessageBus):
        self._bus = bus

    @classmethod
    async def connect(cls) -> UDisksClient:
        """Open the system bus and make sure UDisks2 answers."""
        try:
            bus = SystemMessageBus()
            await asyncio.to_thread(lambda: bus.connection)
            client = cls(bus)
            await client.get_property(MANAGER_PATH, MANAGER_INTERFACE, "Version")
        except (DBusError, GLib.Error, PropertyReadError) as error:
            raise ClientInitError(str(error)) from error
        log.info("Connected to UDisks2")
        return client

    def disconnect(self) -> None:
        self._bus.disconnect()

    def _proxy(self, object_path: str, interface: str):
        return self._bus.get_proxy(UDISKS_SERVICE, object_path, interface_name=interface)

    async def get_property(self, object_path: str, interface: str, name: str) -> Any:
        """Read one property.

        Raises:
            InterfaceMissingError: The object does not implement ``interface``
            PropertyReadError: Any other failure
        """
        properties = self._proxy(object_path, PROPERTIES_INTERFACE)
        log.bind(tags=["udisks", "property"]).trace(f"Get {interface}.{name} on {object_path}")
        try:
            return await asyncio.to_thread(lambda: properties.Get(interface, name))
        except _SERVICE_ERRORS as error:
            if is_missing_interface(error):
                raise InterfaceMissingError(object_path, interface, name) from error
            raise PropertyReadError(object_path, interface, name, str(error)) from error

    async def has_interface(self, object_path: str, interface: str) -> bool:
        """Whether the object implements ``interface``.

        Answered with a ``GetAll`` round trip; objects without the interface
        reply with an error, which is the expected negative answer here.
        """
        properties = self._proxy(object_path, PROPERTIES_INTERFACE)
        try:
            await asyncio.to_thread(lambda: properties.GetAll(interface))
        except _SERVICE_ERRORS:
            return False
        return True

    async def get_block_devices(self, options: Optional[Dict[str, Any]] = None) -> List[str]:
        manager = self._proxy(MANAGER_PATH, MANAGER_INTERFACE)
        options = to_variants(options or standard_options())
        try:
            paths = await asyncio.to_thread(lambda: manager.GetBlockDevices(options))
        except _SERVICE_ERRORS as error:
            raise MethodCallError(
                MANAGER_PATH, MANAGER_INTERFACE, "GetBlockDevices", str(error)
            ) from error
        return [str(path) for path in paths]

    async def format_block(
        self, object_path: str, fs_type: str, options: Dict[str, Any]
    ) -> None:
        """Create a filesystem or partition table on a block device."""
        block = self._proxy(object_path, BLOCK_INTERFACE)
        log.debug(f"Format {object_path} as {fs_type} with {sorted(options)}")
        try:
            await asyncio.to_thread(
                lambda: block.Format(fs_type, to_variants(options), timeout=MUTATION_TIMEOUT_MS)
            )
        except _SERVICE_ERRORS as error:
            raise MethodCallError(object_path, BLOCK_INTERFACE, "Format", str(error)) from error

    async def create_partition(
        self,
        table_path: str,
        offset: int,
        size: int,
        partition_type: str,
        name: str,
        options: Dict[str, Any],
    ) -> str:
        """Create a partition and return its object path."""
        table = self._proxy(table_path, PARTITION_TABLE_INTERFACE)
        log.debug(f"Create partition on {table_path} at {offset} ({size} bytes)")
        try:
            created = await asyncio.to_thread(
                lambda: table.CreatePartition(
                    offset,
                    size,
                    partition_type,
                    name,
                    to_variants(options),
                    timeout=MUTATION_TIMEOUT_MS,
                )
            )
        except _SERVICE_ERRORS as error:
            raise MethodCallError(
                table_path, PARTITION_TABLE_INTERFACE, "CreatePartition", str(error)
            ) from error
        return str(created)

    async def unmount(self, filesystem_path: str, options: Dict[str, Any]) -> None:
        filesystem = self._proxy(filesystem_path, FILESYSTEM_INTERFACE)
        try:
            await asyncio.to_thread(lambda: filesystem.Unmount(to_variants(options)))
        except _SERVICE_ERRORS as error:
            raise MethodCallError(
                filesystem_path, FILESYSTEM_INTERFACE, "Unmount", str(error)
            ) from error
