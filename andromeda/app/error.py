"""Errors as presented to the user."""

from __future__ import annotations

from dataclasses import dataclass

from andromeda.storage.exceptions import (
    ClientInitError,
    DriveLoadError,
    LayoutError,
)


@dataclass(frozen=True)
class AppError:
    """A user-facing error.

    Recoverable errors can be dismissed and the action retried; fatal ones
    leave the application unable to continue correctly.
    """

    description: str
    recoverable: bool = True

    @classmethod
    def from_exception(cls, error: BaseException) -> AppError:
        if isinstance(error, DriveLoadError):
            recoverable = error.recoverable
        elif isinstance(error, (ClientInitError, LayoutError)):
            recoverable = False
        else:
            recoverable = True
        return cls(description=str(error), recoverable=recoverable)
