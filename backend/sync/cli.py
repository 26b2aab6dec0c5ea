"""
DesignSync Command Line Entry Point.

Watches the design file and syncs it to the linked remote workspace.
Requires Python 3.11+.

Usage:
    designsync [--file design.json] [--config-dir .designsync]
"""

import argparse
import asyncio
import contextlib
import signal
import sys
from pathlib import Path

from pydantic import ValidationError

from store.client import RemoteStoreClient
from sync.exceptions import ConfigurationError
from sync.session import SyncSession, require_workspace_config
from utils.config import Settings, SyncSettings, get_settings
from utils.logger import close_log_file, configure_logging, get_logger

logger = get_logger("designsync")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="designsync",
        description="Watch a design file and sync it to a remote workspace",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Design file to watch (default: design.json)",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding config.json (default: .designsync)",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Quiet period before a burst of edits is synced",
    )
    parser.add_argument("--log-level", default=None, help="Diagnostic log level")
    parser.add_argument("--log-format", choices=["console", "json"], default=None)
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with command line values layered on top."""
    sync_updates = {}
    if args.file is not None:
        sync_updates["design_file"] = args.file
    if args.config_dir is not None:
        sync_updates["config_dir"] = args.config_dir
    if args.debounce_ms is not None:
        sync_updates["debounce_delay_ms"] = args.debounce_ms
    if not sync_updates:
        return settings
    sync_settings = SyncSettings.model_validate({**settings.sync.model_dump(), **sync_updates})
    return settings.model_copy(update={"sync": sync_settings})


async def serve(settings: Settings) -> None:
    """Run the watch loop until SIGINT/SIGTERM."""
    workspace = require_workspace_config(settings)
    design_file = settings.sync.design_file
    if not design_file.parent.is_dir():
        raise ConfigurationError(
            f"Directory {design_file.parent} does not exist. "
            "Create it or pass --file with a path in an existing directory."
        )

    async with RemoteStoreClient(workspace.url) as client:
        connectivity = await client.check_connectivity()

        print(f"{settings.app_name} v{settings.app_version}")
        print(f"Remote URL: {workspace.url} ({connectivity.value})")
        print(f"Workspace ID: {workspace.workspace_id}")
        print("")

        if not design_file.exists():
            print(f"⚠ {design_file} does not exist yet; waiting for it to be created")

        session = SyncSession(
            design_file,
            workspace,
            client,
            debounce_delay_ms=settings.sync.debounce_delay_ms,
        )

        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            # add_signal_handler is unavailable on Windows; Ctrl+C then raises KeyboardInterrupt
            with contextlib.suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, stop_event.set)

        print(f"Watching {design_file} for changes...")
        print("Press Ctrl+C to stop")
        print("")

        await session.run(stop_event)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = apply_overrides(get_settings(), args)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        parser.exit(2, f"Error: invalid option: {problems}\n")
    configure_logging(level=args.log_level, fmt=args.log_format)

    try:
        asyncio.run(serve(settings))
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nStopped")
    finally:
        close_log_file()


if __name__ == "__main__":
    main()
