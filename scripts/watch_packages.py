#!/usr/bin/env python3
"""
PkgWatch Command-Line Watcher.

Watches Python packages and everything they import, logging each change
with the package it belongs to.
Requires Python 3.11+.

Usage:
    python scripts/watch_packages.py myapp myapp.plugins --cwd /path/to/project
"""

import argparse
import queue
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from utils.config import get_settings
from utils.exceptions import NotifierError
from utils.logger import configure_logging, get_logger
from watcher.package_watcher import PackageWatcher


logger = get_logger("watch_packages")


def drain_errors(watcher: PackageWatcher) -> int:
    """Log every pending error, returning how many there were."""
    count = 0
    while True:
        try:
            error = watcher.errors.get_nowait()
        except queue.Empty:
            return count
        logger.warning("watch_error", error=str(error), kind=type(error).__name__)
        count += 1


def run(import_paths: list[str], working_directory: str | None, list_packages: bool) -> None:
    """
    Watch the given import paths until interrupted.

    Args:
        import_paths: Import paths to watch
        working_directory: Directory import paths are resolved from
        list_packages: Log the discovered packages once discovery settles
    """
    poll_interval = get_settings().watcher.poll_interval

    with PackageWatcher(import_paths, working_directory) as watcher:
        pending = watcher.request_snapshot() if list_packages else None
        while True:
            drain_errors(watcher)

            if pending is not None:
                try:
                    snapshot = pending.get_nowait()
                except queue.Empty:
                    pass
                else:
                    pending = None
                    for package in sorted(snapshot.packages.values(), key=lambda p: p.import_path):
                        logger.info(
                            "watching_package",
                            import_path=package.import_path,
                            directory=package.directory,
                        )

            try:
                event = watcher.events.get(timeout=poll_interval)
            except queue.Empty:
                continue

            logger.info("package_changed", **event.to_dict())


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Watch Python packages and their dependencies for changes"
    )
    parser.add_argument(
        "import_paths",
        nargs="+",
        help="Import paths of the packages to watch",
    )
    parser.add_argument(
        "--cwd",
        default=None,
        help="Directory to resolve import paths from (defaults to the current directory)",
    )
    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default=None,
        help="Log output format",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        default=False,
        help="Log every discovered package once initial discovery completes",
    )

    args = parser.parse_args()
    configure_logging(args.format)

    if args.cwd is not None and not Path(args.cwd).is_dir():
        print(f"Error: Not a directory: {args.cwd}")
        sys.exit(1)

    try:
        run(args.import_paths, args.cwd, args.list)
    except KeyboardInterrupt:
        print("\nStopped by user")
    except NotifierError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
