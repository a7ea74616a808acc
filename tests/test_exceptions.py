"""Tests for storage exception classes."""

import pytest

from andromeda.storage.exceptions import (
    ClientInitError,
    CreatePartitionError,
    DriveLoadError,
    FormatOperationError,
    InterfaceMissingError,
    InvalidPartitionError,
    LayoutError,
    LayoutInconsistentError,
    MethodCallError,
    OperationError,
    OperationPendingError,
    PropertyReadError,
    ServiceError,
    StorageError,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    def test_storage_error_is_base_exception(self):
        """Test that StorageError is base exception."""
        error = StorageError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    @pytest.mark.parametrize(
        "error,parents",
        [
            (InvalidPartitionError(0, 0, "x"), (LayoutError, StorageError)),
            (LayoutInconsistentError(10, "x"), (LayoutError, StorageError)),
            (ClientInitError("x"), (ServiceError, StorageError)),
            (PropertyReadError("/p", "i", "n"), (ServiceError, StorageError)),
            (
                InterfaceMissingError("/p", "i", "n"),
                (PropertyReadError, ServiceError, StorageError),
            ),
            (MethodCallError("/p", "i", "m"), (ServiceError, StorageError)),
            (DriveLoadError("/p", ValueError("x")), (StorageError,)),
            (FormatOperationError("x"), (OperationError, StorageError)),
            (CreatePartitionError("x"), (OperationError, StorageError)),
            (OperationPendingError("x"), (OperationError, StorageError)),
        ],
    )
    def test_inheritance(self, error, parents):
        for parent in parents:
            assert isinstance(error, parent)

    def test_load_error_is_not_a_service_error(self):
        """Test that callers catching ServiceError do not swallow load errors."""
        assert not isinstance(DriveLoadError("/p", ValueError()), ServiceError)


class TestLayoutErrors:
    """Test layout error messages and attributes."""

    def test_invalid_partition(self):
        error = InvalidPartitionError(100, 0, "size must be positive")

        assert error.offset == 100
        assert error.size == 0
        assert error.reason == "size must be positive"
        assert "offset=100" in str(error)
        assert "size must be positive" in str(error)

    def test_layout_inconsistent(self):
        error = LayoutInconsistentError(4096, "overlap")

        assert error.drive_size == 4096
        assert "4096 byte drive" in str(error)
        assert str(error).endswith("overlap")


class TestServiceErrors:
    """Test service error messages and attributes."""

    def test_property_read_with_reason(self):
        error = PropertyReadError("/obj", "org.Iface", "Size", "timeout")

        assert error.object_path == "/obj"
        assert error.interface == "org.Iface"
        assert error.name == "Size"
        assert str(error) == "Could not read org.Iface.Size on /obj: timeout"

    def test_property_read_without_reason(self):
        assert str(PropertyReadError("/obj", "org.Iface", "Size")) == (
            "Could not read org.Iface.Size on /obj"
        )

    def test_method_call(self):
        error = MethodCallError("/obj", "org.Iface", "Format", "busy")

        assert error.method == "Format"
        assert str(error) == "org.Iface.Format failed on /obj: busy"

    def test_interface_missing(self):
        error = InterfaceMissingError("/obj", "org.Iface", "Size")

        assert error.name == "Size"
        assert str(error) == "Could not read org.Iface.Size on /obj: interface not implemented"

    def test_client_init(self):
        error = ClientInitError("no system bus")

        assert error.reason == "no system bus"
        assert "no system bus" in str(error)


class TestDriveLoadError:
    """Test DriveLoadError."""

    def test_defaults_to_recoverable(self):
        cause = PropertyReadError("/obj", "org.Iface", "Size")
        error = DriveLoadError("/blk/sda", cause)

        assert error.recoverable is True
        assert error.cause is cause
        assert error.block_path == "/blk/sda"
        assert str(error).startswith("Failed to load /blk/sda: ")

    def test_fatal(self):
        error = DriveLoadError("/blk/sda", LayoutInconsistentError(1, "x"), recoverable=False)
        assert error.recoverable is False


class TestOperationErrors:
    """Test operation errors."""

    def test_device_attribute(self):
        error = FormatOperationError("failed", device="/blk/sda")

        assert error.device == "/blk/sda"
        assert str(error) == "failed"

    def test_pending(self):
        error = OperationPendingError("a disk write")

        assert error.pending == "a disk write"
        assert "a disk write is pending" in str(error)

    def test_raise_and_catch_as_base(self):
        with pytest.raises(OperationError):
            raise CreatePartitionError("no table")
