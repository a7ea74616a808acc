"""Messages consumed by the application state owner.

Every result of background work (client start, device listing, drive loads,
operations) comes back as one of these and is applied one at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from andromeda.app.error import AppError
from andromeda.domain import DriveData, DriveID


@dataclass(frozen=True)
class NoOp:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class AppErrorRaised:
    error: AppError


@dataclass(frozen=True)
class DismissLastError:
    pass


# Service requests and results


@dataclass(frozen=True)
class InitClient:
    pass


@dataclass(frozen=True)
class InitClientDone:
    client: Any


@dataclass(frozen=True)
class ReadDevices:
    pass


@dataclass(frozen=True)
class ReadDevicesDone:
    drives: List[DriveID]


@dataclass(frozen=True)
class LoadDrive:
    drive_id: DriveID


@dataclass(frozen=True)
class DriveLoaded:
    drive: DriveData


@dataclass(frozen=True)
class DriveLoadFailed:
    drive_id: DriveID
    error: AppError


# Selection


@dataclass(frozen=True)
class SelectDrive:
    block_path: str


@dataclass(frozen=True)
class SelectSegment:
    index: Optional[int]


# Operations


@dataclass(frozen=True)
class OpenOperation:
    operation: Any


@dataclass(frozen=True)
class ConfirmOperation:
    pass


@dataclass(frozen=True)
class CancelOperation:
    pass


@dataclass(frozen=True)
class OperationFinished:
    block_path: str


@dataclass(frozen=True)
class OperationFailed:
    error: AppError
