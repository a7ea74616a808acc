"""
Pytest configuration and shared fixtures for andromeda tests.

This module provides a fake in-memory UDisks2 client and drive fixtures used
across the test modules.
"""

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pytest

from andromeda.domain import DriveData, DriveID, PartitionRecord
from andromeda.services.interfaces import (
    BLOCK_INTERFACE,
    DRIVE_INTERFACE,
    FILESYSTEM_INTERFACE,
    LOOP_INTERFACE,
    PARTITION_INTERFACE,
    PARTITION_TABLE_INTERFACE,
)
from andromeda.storage.exceptions import (
    InterfaceMissingError,
    MethodCallError,
    PropertyReadError,
)
from andromeda.storage.layout import reconstruct

BLOCK_PREFIX = "/org/freedesktop/UDisks2/block_devices/"
DRIVE_PREFIX = "/org/freedesktop/UDisks2/drives/"

MIB = 2**20
GIB = 2**30


# ==============================================================================
# Fake UDisks2 client
# ==============================================================================


class FakeUDisksClient:
    """In-memory stand-in for ``UDisksClient``.

    Objects are stored as ``{object_path: {interface: {property: value}}}``.
    Reading a property of a missing interface raises
    ``InterfaceMissingError`` and a missing name ``PropertyReadError``, just
    like the real client. Mutating calls are recorded in ``calls``; names
    listed in ``failing`` raise ``MethodCallError``.
    """

    def __init__(self) -> None:
        self.objects: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.block_devices: List[str] = []
        self.calls: List[Tuple[str, tuple]] = []
        self.failing: Set[str] = set()
        self.property_reads: List[Tuple[str, str, str]] = []
        self.disconnected = False

    # -- building -------------------------------------------------------

    def add_object(self, path: str, interface: str, **properties) -> None:
        self.objects.setdefault(path, {}).setdefault(interface, {}).update(properties)

    def add_drive(
        self,
        name: str,
        size: int,
        partitions: Iterable[Tuple[int, int, str]] = (),
        *,
        ptype: Optional[str] = "gpt",
        model: str = "Test Disk",
        serial: str = "SN-0001",
        revision: str = "1.0",
    ) -> DriveID:
        """Register a whole drive with its partitions.

        ``partitions`` are ``(offset, size, id_type)`` triples; an empty
        ``id_type`` leaves the partition without a filesystem.
        """
        block_path = BLOCK_PREFIX + name
        drive_path = DRIVE_PREFIX + model.replace(" ", "_") + "_" + name
        self.block_devices.append(block_path)
        self.add_object(block_path, BLOCK_INTERFACE, Size=size, Drive=drive_path, IdType="")
        self.add_object(drive_path, DRIVE_INTERFACE, Model=model, Serial=serial, Revision=revision)

        partition_paths = []
        for number, (offset, part_size, id_type) in enumerate(partitions, start=1):
            path = f"{BLOCK_PREFIX}{name}{number}"
            partition_paths.append(path)
            self.block_devices.append(path)
            self.add_object(path, BLOCK_INTERFACE, Size=part_size, Drive=drive_path, IdType=id_type)
            self.add_object(
                path,
                PARTITION_INTERFACE,
                Offset=offset,
                Size=part_size,
                Number=number,
                UUID=f"uuid-{name}{number}",
            )
            if id_type:
                self.add_object(path, FILESYSTEM_INTERFACE, MountPoints=[])

        if ptype is not None:
            self.add_object(block_path, PARTITION_TABLE_INTERFACE, Type=ptype, Partitions=partition_paths)
        return DriveID(model=model, block_path=block_path, drive_path=drive_path)

    def add_loop(self, name: str, size: int) -> None:
        block_path = BLOCK_PREFIX + name
        self.block_devices.append(block_path)
        self.add_object(block_path, BLOCK_INTERFACE, Size=size, Drive="/")
        self.add_object(block_path, LOOP_INTERFACE, Autoclear=True)

    def remove_property(self, path: str, interface: str, name: str) -> None:
        del self.objects[path][interface][name]

    # -- client API -----------------------------------------------------

    async def get_property(self, object_path: str, interface: str, name: str) -> Any:
        self.property_reads.append((object_path, interface, name))
        properties = self.objects.get(object_path, {}).get(interface)
        if properties is None:
            raise InterfaceMissingError(object_path, interface, name)
        if name not in properties:
            raise PropertyReadError(object_path, interface, name, "no such property")
        return properties[name]

    async def has_interface(self, object_path: str, interface: str) -> bool:
        return interface in self.objects.get(object_path, {})

    async def get_block_devices(self, options=None) -> List[str]:
        self._record("GetBlockDevices", options)
        return list(self.block_devices)

    async def format_block(self, object_path: str, fs_type: str, options: Dict[str, Any]) -> None:
        self._record("Format", object_path, fs_type, options)

    async def create_partition(
        self, table_path, offset, size, partition_type, name, options
    ) -> str:
        self._record("CreatePartition", table_path, offset, size, partition_type, name, options)
        return f"{table_path}99"

    async def unmount(self, filesystem_path: str, options: Dict[str, Any]) -> None:
        self._record("Unmount", filesystem_path, options)

    def disconnect(self) -> None:
        self.disconnected = True

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, args))
        if method in self.failing:
            path = args[0] if args and isinstance(args[0], str) else "/"
            raise MethodCallError(path, "org.freedesktop.UDisks2", method, "simulated failure")

    def calls_to(self, method: str) -> List[tuple]:
        return [args for name, args in self.calls if name == method]


# ==============================================================================
# Client fixtures
# ==============================================================================


@pytest.fixture
def fake_client() -> FakeUDisksClient:
    """Fixture providing an empty fake client."""
    return FakeUDisksClient()


@pytest.fixture
def populated_client() -> FakeUDisksClient:
    """
    Fixture providing a fake client with two drives and a loop device.

    sda: 32 GiB GPT disk with an EFI partition, a data partition and free
    space at the end. sdb: 8 GiB disk without a partition table.
    """
    client = FakeUDisksClient()
    client.add_drive(
        "sda",
        32 * GIB,
        [(MIB, 512 * MIB, "vfat"), (513 * MIB, 16 * GIB, "ext4")],
        model="Samsung SSD",
    )
    client.add_drive("sdb", 8 * GIB, ptype=None, model="USB Stick", serial="")
    client.add_loop("loop0", 100 * MIB)
    return client


def client_factory_for(client):
    """Build an async client factory returning ``client``."""

    async def factory():
        return client

    return factory


# ==============================================================================
# Domain fixtures
# ==============================================================================


@pytest.fixture
def drive_id() -> DriveID:
    return DriveID(
        model="Samsung SSD",
        block_path=BLOCK_PREFIX + "sda",
        drive_path=DRIVE_PREFIX + "Samsung_SSD_sda",
    )


@pytest.fixture
def sample_records() -> List[PartitionRecord]:
    """Two partitions with a 1 MiB leading gap and trailing free space."""
    return [
        PartitionRecord(
            offset=MIB,
            size=512 * MIB,
            name="sda1",
            filesystem="vfat",
            number=1,
            object_path=BLOCK_PREFIX + "sda1",
            filesystem_path=BLOCK_PREFIX + "sda1",
        ),
        PartitionRecord(
            offset=513 * MIB,
            size=16 * GIB,
            name="sda2",
            filesystem="ext4",
            number=2,
            object_path=BLOCK_PREFIX + "sda2",
            filesystem_path=BLOCK_PREFIX + "sda2",
        ),
    ]


@pytest.fixture
def sample_drive(drive_id, sample_records) -> DriveData:
    """A fully loaded 32 GiB GPT drive: Free, Occupied, Occupied, Free."""
    size = 32 * GIB
    return DriveData(
        drive_id=drive_id,
        size=size,
        layout=reconstruct(size, sample_records),
        serial="SN-0001",
        revision="1.0",
        ptype="gpt",
        partitions=list(sample_records),
    )


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def temp_settings_file(tmp_path):
    """Fixture providing a temporary settings file path."""
    return tmp_path / "settings.json"


@pytest.fixture
def sample_settings_data() -> Dict[str, Any]:
    return {
        "ring_size": 512,
        "ring_line_width": 12.0,
        "no_user_interaction": True,
    }


@pytest.fixture
def factory_for():
    """Fixture providing ``client_factory_for``."""
    return client_factory_for
