"""Custom exceptions for layout reconstruction, service access and operations.

Exception Hierarchy:
    StorageError (base)
        ├── LayoutError
        │   ├── InvalidPartitionError
        │   └── LayoutInconsistentError
        ├── ServiceError
        │   ├── ClientInitError
        │   ├── PropertyReadError
        │   │   └── InterfaceMissingError
        │   └── MethodCallError
        ├── DriveLoadError
        └── OperationError
            ├── FormatOperationError
            ├── CreatePartitionError
            └── OperationPendingError

Usage:
    from andromeda.storage.exceptions import LayoutInconsistentError

    if previous_end > record.offset:
        raise LayoutInconsistentError(drive_size, reason)
"""

from typing import Optional


class StorageError(Exception):
    """Base exception for all storage operations."""


class LayoutError(StorageError):
    """Base exception for layout reconstruction errors."""


class InvalidPartitionError(LayoutError):
    """A partition record (or the drive size) is not a usable byte range."""

    def __init__(self, offset: int, size: int, reason: str):
        self.offset = offset
        self.size = size
        self.reason = reason
        super().__init__(
            f"Invalid partition record (offset={offset}, size={size}): {reason}"
        )


class LayoutInconsistentError(LayoutError):
    """Partition records overlap or extend past the end of the drive."""

    def __init__(self, drive_size: int, reason: str):
        self.drive_size = drive_size
        self.reason = reason
        super().__init__(f"Inconsistent layout for {drive_size} byte drive: {reason}")


class ServiceError(StorageError):
    """Base exception for disk-management service failures."""


class ClientInitError(ServiceError):
    """The disk-management client could not be created."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to connect to the disk-management service: {reason}")


class PropertyReadError(ServiceError):
    """A property could not be read from a service object."""

    def __init__(self, object_path: str, interface: str, name: str, reason: str = ""):
        self.object_path = object_path
        self.interface = interface
        self.name = name
        self.reason = reason
        msg = f"Could not read {interface}.{name} on {object_path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class InterfaceMissingError(PropertyReadError):
    """A property was requested from an interface the object does not implement."""

    def __init__(self, object_path: str, interface: str, name: str):
        super().__init__(object_path, interface, name, "interface not implemented")


class MethodCallError(ServiceError):
    """A method call on a service object failed."""

    def __init__(self, object_path: str, interface: str, method: str, reason: str = ""):
        self.object_path = object_path
        self.interface = interface
        self.method = method
        self.reason = reason
        msg = f"{interface}.{method} failed on {object_path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class DriveLoadError(StorageError):
    """Loading a drive's metadata or layout failed."""

    def __init__(self, block_path: str, cause: Exception, recoverable: bool = True):
        self.block_path = block_path
        self.cause = cause
        self.recoverable = recoverable
        super().__init__(f"Failed to load {block_path}: {cause}")


class OperationError(StorageError):
    """Base exception for layout-changing operations."""

    def __init__(self, message: str, device: Optional[str] = None):
        self.device = device
        super().__init__(message)


class FormatOperationError(OperationError):
    """Formatting a drive or partition failed."""


class CreatePartitionError(OperationError):
    """Creating a partition in free space failed."""


class OperationPendingError(OperationError):
    """Another layout-changing operation has not finished yet."""

    def __init__(self, pending: str):
        self.pending = pending
        super().__init__(f"Cannot start a new operation while {pending} is pending")
