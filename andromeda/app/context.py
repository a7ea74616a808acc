from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional


@dataclass(frozen=True)
class LogEntry:
    message: str
    level: str = "info"
    source: Optional[str] = None


@dataclass
class AppContext:
    log_buffer: Deque[LogEntry] = field(default_factory=lambda: deque(maxlen=200))

    def add_log(self, message: str, level: str = "info", source: Optional[str] = None) -> None:
        if message:
            self.log_buffer.append(LogEntry(message=message, level=level, source=source))

    def recent_logs(self, count: int = 10) -> list:
        return list(self.log_buffer)[-count:]
