from __future__ import annotations

import os
import sys
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from loguru import Logger
    from andromeda.app.context import AppContext

from loguru import logger

DEFAULT_LOG_DIR = Path(
    os.environ.get(
        "ANDROMEDA_LOG_DIR",
        Path.home() / ".local" / "state" / "andromeda" / "logs",
    )
)


def _should_log_property_read(record) -> bool:
    """Per-property service reads are only interesting when tracing."""
    tags = record["extra"].get("tags", [])

    if record["level"].no >= logger.level("WARNING").no:
        return True

    if "property" in tags:
        return record["level"].no <= logger.level("TRACE").no

    return True


def _should_log_padding(record) -> bool:
    """Padding folded into partition spans is noise outside TRACE mode."""
    message = record["message"].lower()

    if "padding" in message:
        return record["level"].no <= logger.level("TRACE").no

    return True


def _combined_filter(record) -> bool:
    """Combined filter for all log suppression rules."""
    return _should_log_property_read(record) and _should_log_padding(record)


def setup_logging(
    app_context: AppContext | None,
    *,
    debug: bool = False,
    trace: bool = False,
    log_dir: Path | None = None,
    app_min_level: str | None = None,
) -> Logger:
    """
    Setup logging sinks for the console, rotating files and the app log buffer.

    Log Files:
    - operations.log: INFO+ events (7 day retention)
    - debug.log: DEBUG+ events when --debug or --trace is enabled (3 day retention)
    - structured.jsonl: Structured JSON logs for analysis (7 day retention)

    Args:
        app_context: Application context whose log buffer receives records
        debug: Enable DEBUG level logging
        trace: Enable TRACE level logging (every service property read)
        log_dir: Custom log directory (defaults to ~/.local/state/andromeda/logs)
        app_min_level: Minimum log level for the app context sink
    """
    logger.remove()
    logger.configure(extra={"job_id": "-", "tags": [], "source": "APP"})

    if trace:
        console_level = "TRACE"
    elif debug:
        console_level = "DEBUG"
    else:
        console_level = "INFO"

    logger.add(
        sys.stderr,
        level=console_level,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        filter=_combined_filter,
        colorize=True,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[source]: <10}</cyan> | "
            "<blue>{extra[job_id]: <18}</blue> | "
            "{message}"
        ),
    )

    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_dir / "operations.log",
        level="INFO",
        rotation="5 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{extra[source]: <10} | "
            "{extra[job_id]: <18} | "
            "{message}"
        ),
    )

    if debug or trace:
        logger.add(
            log_dir / "debug.log",
            level="TRACE" if trace else "DEBUG",
            rotation="10 MB",
            retention="3 days",
            compression="zip",
            enqueue=True,
            backtrace=True,
            diagnose=True,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{extra[source]: <10} | "
                "{extra[job_id]: <18} | "
                "{extra[tags]} | "
                "{message}"
            ),
        )

    logger.add(
        log_dir / "structured.jsonl",
        level="INFO",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,
        serialize=True,
        format="{message}",
    )

    if app_context is not None:
        if app_min_level is None:
            resolved_level = "TRACE" if trace else "DEBUG" if debug else "INFO"
        else:
            resolved_level = app_min_level.upper()

        def _app_context_sink(message) -> None:
            record = message.record
            if record["level"].no >= logger.level(resolved_level).no:
                app_context.add_log(
                    record["message"],
                    level=record["level"].name.lower(),
                    source=record["extra"].get("source"),
                )

        logger.add(_app_context_sink, enqueue=True, filter=_combined_filter)

    return logger


def get_logger(
    *,
    job_id: str | None = None,
    tags: Iterable[str] | None = None,
    source: str | None = None,
) -> Logger:
    """
    Get a logger with bound context.

    Args:
        job_id: Job identifier for tracking operations
        tags: Tags for filtering (e.g., ["fetch", "udisks"])
        source: Source component (e.g., "layout", "udisks", "app")

    Returns:
        Logger with bound context
    """
    extras: dict[str, object] = {}
    if job_id is not None:
        extras["job_id"] = job_id
    if tags is not None:
        extras["tags"] = list(tags)
    if source is not None:
        extras["source"] = source
    return logger.bind(**extras)


@contextmanager
def operation_context(operation: str, **details):
    """
    Context manager for layout-changing operations with automatic timing.

    Logs operation start, completion and failure with duration, then re-raises
    any failure.

    Example:
        with operation_context("format", device="/dev/sda") as log:
            log.debug("Unmounting filesystem")
    """
    job_id = f"{operation}-{uuid.uuid4().hex[:8]}"

    with logger.contextualize(job_id=job_id, operation=operation, **details):
        start_time = time.time()
        log = LoggerFactory.for_operation(operation, job_id=job_id)

        log.info(f"{operation.capitalize()} started", **details)

        try:
            yield log
            duration = time.time() - start_time
            log.success(
                f"{operation.capitalize()} completed", duration_seconds=round(duration, 2)
            )
        except Exception as e:
            duration = time.time() - start_time
            log.error(
                f"{operation.capitalize()} failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=round(duration, 2),
            )
            raise


class LoggerFactory:
    """
    Factory for creating domain-specific loggers with automatic context.
    """

    @staticmethod
    def for_layout() -> Logger:
        """Logger for layout reconstruction and weighting."""
        return logger.bind(source="layout", tags=["layout"])

    @staticmethod
    def for_udisks() -> Logger:
        """Logger for raw disk-management service calls."""
        return logger.bind(source="udisks", tags=["udisks", "dbus"])

    @staticmethod
    def for_fetch(drive: str | None = None) -> Logger:
        """Logger for one drive's metadata fetch."""
        job_id = f"load-{drive}" if drive else f"load-{uuid.uuid4().hex[:8]}"
        return logger.bind(job_id=job_id, source="fetch", tags=["fetch", "udisks"])

    @staticmethod
    def for_operation(kind: str, job_id: str | None = None) -> Logger:
        """Logger for a layout-changing operation."""
        if job_id is None:
            job_id = f"{kind}-{uuid.uuid4().hex[:8]}"
        return logger.bind(job_id=job_id, source=kind, tags=["operation", kind])

    @staticmethod
    def for_app() -> Logger:
        """Logger for the state owner and message loop."""
        return logger.bind(source="app", tags=["app"])

    @staticmethod
    def for_system() -> Logger:
        """Logger for startup, shutdown and configuration."""
        return logger.bind(source="system", tags=["system"])


class EventLogger:
    """
    Structured event logger with consistent fields for common events.
    """

    @staticmethod
    def log_drive_loaded(log: Logger, block_path: str, segments: int, **extra) -> None:
        log.info(
            "Drive loaded: {block_path}",
            event_type="drive_loaded",
            block_path=block_path,
            segments=segments,
            **extra,
        )

    @staticmethod
    def log_drive_load_failed(
        log: Logger, block_path: str, error: Exception, recoverable: bool, **extra
    ) -> None:
        log.error(
            "Drive load failed: {block_path}: {error}",
            event_type="drive_load_failed",
            block_path=block_path,
            error=str(error),
            error_type=type(error).__name__,
            recoverable=recoverable,
            **extra,
        )
