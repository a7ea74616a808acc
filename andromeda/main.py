import argparse
import asyncio
import sys

from andromeda.app.context import AppContext
from andromeda.app.controller import AppController
from andromeda.app.messages import InitClient, SelectDrive, SelectSegment
from andromeda.app.state import App
from andromeda.config import settings
from andromeda.logging import LoggerFactory, setup_logging
from andromeda.operations import PartitionFormat, operation_title
from andromeda.services.drives import select_drive
from andromeda.storage.units import format_bytes
from andromeda.storage.weighting import weight
from andromeda.ui.info import info_panel, partition_table
from andromeda.ui.ring import RingStyle, render_ring


async def connect_udisks():
    # Imported here so everything but the live client works without D-Bus.
    from andromeda.services.udisks import UDisksClient

    return await UDisksClient.connect()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="andromeda", description="Inspect drive partition layouts"
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument(
        "--trace", action="store_true", help="Log every disk service property read"
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    subcommands.add_parser("list", help="List discovered drives")

    show = subcommands.add_parser("show", help="Show one drive's layout")
    show.add_argument("drive", metavar="BLOCK_PATH", help="Block object path or name (e.g., sda)")
    show.add_argument("--select", type=int, default=None, metavar="N", help="Select segment N")
    show.add_argument("--render", default=None, metavar="FILE", help="Write the ring diagram (PNG)")
    return parser


async def load_all(client_factory) -> App:
    """Connect, discover drives and load every one of them."""
    app = App(
        client_factory=client_factory,
        no_user_interaction=settings.get_bool("no_user_interaction"),
        default_filesystem=str(settings.get_setting("default_filesystem", "ext4")),
    )
    await AppController(app).run((InitClient(),), until_idle=True)
    return app


def _fatal(app: App):
    for error in app.errors:
        if not error.recoverable:
            return error
    return None


def _disconnect(app: App) -> None:
    if app.client is not None and hasattr(app.client, "disconnect"):
        app.client.disconnect()


def _operation_label(operation) -> str:
    if isinstance(operation, PartitionFormat):
        return f"{operation_title(operation)} ({operation.fs_type})"
    return operation_title(operation)


def run_list(app: App) -> int:
    if app.client is None:
        for error in app.errors:
            print(f"Error: {error.description}", file=sys.stderr)
        return 1
    if not app.drives:
        print("No drives found")
        return 0
    for block_path, view in app.drives.items():
        if view.data is None:
            status = "not loaded"
        else:
            status = f"{format_bytes(view.data.size)}, {len(view.data.layout)} segments"
        print(f"{view.drive_id.name:<10} {view.drive_id.model:<32} {status}")
        print(f"{'':<10} {block_path}")
    for error in app.errors:
        print(f"Warning: {error.description}", file=sys.stderr)
    return 0


def run_show(app: App, drive: str, select=None, render=None) -> int:
    fatal = _fatal(app)
    if app.client is None and fatal is not None:
        print(f"Error: {fatal.description}", file=sys.stderr)
        return 1

    drive_id = select_drive([view.drive_id for view in app.drives.values()], drive)
    if drive_id is None:
        print(f"Error: no such drive: {drive}", file=sys.stderr)
        return 1
    app.update(SelectDrive(drive_id.block_path))
    view = app.active_view()
    if view is None or view.data is None:
        for error in app.errors:
            print(f"Error: {error.description}", file=sys.stderr)
        return 1

    if select is not None:
        if not 0 <= select < len(view.data.layout):
            print(f"Error: segment {select} out of range", file=sys.stderr)
            return 1
        app.update(SelectSegment(select))

    for line in info_panel(view.data, view.selected_index).lines():
        print(line)
    print()
    for row in partition_table(view.data):
        marker = "*" if row.index == view.selected_index else " "
        print(
            f"{marker}{row.index:>3}  {row.label:<16} {row.filesystem:<8} "
            f"{row.offset:>12} {row.size:>12}"
        )
    labels = ", ".join(_operation_label(operation) for operation in app.offered_operations())
    print(f"\nOperations: {labels}")

    if render:
        image = render_ring(weight(view.data.layout), view.selected_index, RingStyle.from_settings())
        image.save(render)
        print(f"\nRing written to {render}")
    return 0


def main(argv=None, client_factory=connect_udisks):
    parser = build_parser()
    args = parser.parse_args(argv)

    app_context = AppContext()
    setup_logging(app_context, debug=args.debug, trace=args.trace)
    log = LoggerFactory.for_system()
    log.debug(f"Command: {args.command}")

    app = asyncio.run(load_all(client_factory))
    try:
        if args.command == "list":
            return run_list(app)
        return run_show(app, args.drive, args.select, args.render)
    finally:
        _disconnect(app)


if __name__ == "__main__":
    sys.exit(main())
