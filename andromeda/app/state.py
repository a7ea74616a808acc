"""Application state owner.

``App.update`` applies one message at a time and returns the follow-up work as
coroutines; each coroutine resolves to the next message. Nothing else mutates
drive, selection or operation state, so concurrent loads can never interleave
their writes: the last ``DriveLoaded`` for a drive simply replaces the
previous one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

from andromeda.app.error import AppError
from andromeda.app.messages import (
    AppErrorRaised,
    CancelOperation,
    ConfirmOperation,
    DismissLastError,
    DriveLoaded,
    DriveLoadFailed,
    InitClient,
    InitClientDone,
    LoadDrive,
    NoOp,
    OpenOperation,
    OperationFailed,
    OperationFinished,
    Quit,
    ReadDevices,
    ReadDevicesDone,
    SelectDrive,
    SelectSegment,
)
from andromeda.domain import DriveData, DriveID, WeightedSegment
from andromeda.logging import LoggerFactory
from andromeda.operations import (
    OPERATION_MESSAGES,
    Operation,
    PartitionCreate,
    available_operations,
    is_offered,
    operation_description,
    operation_title,
    perform_operation,
    update_operation,
)
from andromeda.services.drives import list_drives
from andromeda.services.fetch import load_drive
from andromeda.storage.exceptions import (
    DriveLoadError,
    OperationError,
    OperationPendingError,
)
from andromeda.storage.weighting import weight

log = LoggerFactory.for_app()

Effect = Awaitable[object]


@dataclass
class DriveView:
    """One drive in the navigation list."""

    drive_id: DriveID
    data: Optional[DriveData] = None
    selected_index: Optional[int] = None

    def weighted(self) -> List[WeightedSegment]:
        if self.data is None:
            return []
        return weight(self.data.layout)


@dataclass(frozen=True)
class Dialog:
    title: str
    body: str
    primary: Optional[str] = None
    secondary: Optional[str] = None
    destructive: bool = False


async def _message(message):
    return message


async def _load(client, drive_id: DriveID):
    try:
        return DriveLoaded(await load_drive(client, drive_id))
    except DriveLoadError as error:
        return DriveLoadFailed(drive_id, AppError.from_exception(error))


async def _perform(operation: Operation, client, drive: DriveData, no_user_interaction: bool):
    try:
        await perform_operation(
            operation, client, drive, no_user_interaction=no_user_interaction
        )
    except OperationError as error:
        return OperationFailed(AppError.from_exception(error))
    return OperationFinished(drive.block_path)


@dataclass
class App:
    client_factory: Callable[[], Awaitable[object]]
    no_user_interaction: bool = False
    default_filesystem: str = "ext4"
    client: Optional[object] = None
    drives: Dict[str, DriveView] = field(default_factory=dict)
    active_drive: Optional[str] = None
    current_operation: Optional[Operation] = None
    pending: bool = False
    errors: List[AppError] = field(default_factory=list)
    running: bool = True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def active_view(self) -> Optional[DriveView]:
        if self.active_drive is None:
            return None
        return self.drives.get(self.active_drive)

    def active_data(self) -> Optional[DriveData]:
        view = self.active_view()
        return view.data if view else None

    def offered_operations(self) -> List[Operation]:
        """Operations the active drive and its selected segment allow."""
        view = self.active_view()
        if view is None or view.data is None:
            return []
        return available_operations(
            view.data, view.selected_index, default_filesystem=self.default_filesystem
        )

    def dialog(self) -> Optional[Dialog]:
        """The dialog to present, most urgent first."""
        if self.errors:
            error = self.errors[-1]
            if error.recoverable:
                return Dialog("Warning", error.description, primary="Dismiss")
            return Dialog("Critical", error.description, primary="Quit", destructive=True)
        if self.current_operation is not None:
            operation = self.current_operation
            creating = isinstance(operation, PartitionCreate)
            return Dialog(
                operation_title(operation),
                operation_description(operation),
                primary="Create" if creating else "Confirm",
                secondary="Cancel",
                destructive=not creating,
            )
        if self.pending:
            return Dialog("Please Wait...", "Writing to disk.")
        return None

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, message) -> List[Effect]:
        """Apply one message and return the follow-up effects."""
        if isinstance(message, OPERATION_MESSAGES):
            if self.current_operation is not None:
                update_operation(self.current_operation, message)
            return []

        if isinstance(message, NoOp):
            return []
        if isinstance(message, Quit):
            self.running = False
            return []
        if isinstance(message, AppErrorRaised):
            self._push_error(message.error)
            return []
        if isinstance(message, DismissLastError):
            if self.errors and self.errors[-1].recoverable:
                self.errors.pop()
            return []

        if isinstance(message, InitClient):
            return [self._init_client()]
        if isinstance(message, InitClientDone):
            self.client = message.client
            return [_message(ReadDevices())]
        if isinstance(message, ReadDevices):
            return self._read_devices()
        if isinstance(message, ReadDevicesDone):
            return self._insert_drives(message.drives)
        if isinstance(message, LoadDrive):
            return self._load_drive(message.drive_id)
        if isinstance(message, DriveLoaded):
            self._drive_loaded(message.drive)
            return []
        if isinstance(message, DriveLoadFailed):
            self._drive_load_failed(message)
            return []

        if isinstance(message, SelectDrive):
            self._select_drive(message.block_path)
            return []
        if isinstance(message, SelectSegment):
            self._select_segment(message.index)
            return []

        if isinstance(message, OpenOperation):
            self._open_operation(message.operation)
            return []
        if isinstance(message, CancelOperation):
            self.current_operation = None
            return []
        if isinstance(message, ConfirmOperation):
            return self._confirm_operation()
        if isinstance(message, OperationFinished):
            self.pending = False
            self.current_operation = None
            view = self.drives.get(message.block_path)
            if view is None:
                return []
            return self._load_drive(view.drive_id)
        if isinstance(message, OperationFailed):
            self.pending = False
            self._push_error(message.error)
            return []

        raise TypeError(f"Unhandled message: {message!r}")

    def _push_error(self, error: AppError) -> None:
        if error.recoverable:
            log.warning(error.description)
        else:
            log.error(error.description)
        self.errors.append(error)

    async def _init_client(self):
        return InitClientDone(await self.client_factory())

    def _read_devices(self) -> List[Effect]:
        if self.client is None:
            self._push_error(
                AppError("Client not initialized, this is a bug, please report it!", False)
            )
            return []
        client = self.client

        async def read():
            return ReadDevicesDone(await list_drives(client))

        return [read()]

    def _insert_drives(self, drives: List[DriveID]) -> List[Effect]:
        effects: List[Effect] = []
        for drive_id in drives:
            view = self.drives.get(drive_id.block_path)
            if view is None:
                self.drives[drive_id.block_path] = DriveView(drive_id)
            effects.append(_message(LoadDrive(drive_id)))
        if self.active_drive is None and drives:
            self.active_drive = drives[0].block_path
        return effects

    def _load_drive(self, drive_id: DriveID) -> List[Effect]:
        if self.client is None:
            log.warning(f"Ignoring load of {drive_id.block_path} without a client")
            return []
        return [_load(self.client, drive_id)]

    def _drive_loaded(self, drive: DriveData) -> None:
        view = self.drives.get(drive.block_path)
        if view is None:
            view = DriveView(drive.drive_id)
            self.drives[drive.block_path] = view
        view.drive_id = drive.drive_id
        view.data = drive
        # Indices may have shifted; the old selection means nothing now.
        view.selected_index = None

    def _drive_load_failed(self, message: DriveLoadFailed) -> None:
        view = self.drives.get(message.drive_id.block_path)
        if view is not None and not message.error.recoverable:
            view.data = None
            view.selected_index = None
        self._push_error(message.error)

    def _select_drive(self, block_path: str) -> None:
        if block_path not in self.drives:
            log.warning(f"Unknown drive selected: {block_path}")
            return
        self.active_drive = block_path
        self.current_operation = None

    def _select_segment(self, index: Optional[int]) -> None:
        view = self.active_view()
        if view is None or view.data is None:
            return
        if index is not None and not 0 <= index < len(view.data.layout):
            log.warning(f"Segment index {index} out of range")
            return
        view.selected_index = index

    def _open_operation(self, operation: Operation) -> None:
        if not is_offered(operation, self.offered_operations()):
            title = operation_title(operation)
            self._push_error(AppError(f"{title} is not available for the current selection"))
            return
        self.current_operation = operation

    def _confirm_operation(self) -> List[Effect]:
        if self.pending:
            error = OperationPendingError("a disk write")
            self._push_error(AppError.from_exception(error))
            return []
        operation = self.current_operation
        drive = self.active_data()
        if operation is None or drive is None or self.client is None:
            return []
        self.current_operation = None
        self.pending = True
        return [_perform(operation, self.client, drive, self.no_user_interaction)]
