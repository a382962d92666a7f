"""
PkgWatch Package Watcher.

Watches packages and, transitively, everything they import.
Requires Python 3.11+.
"""

import os
import queue
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from package_graph.builder import PackageGraphBuilder, Resolver
from package_graph.registry import PackageRegistry
from resolver.models import Package
from resolver.package_resolver import PackageResolver
from utils.config import Settings, get_settings
from utils.exceptions import WatcherClosedError
from utils.logger import LoggerMixin
from watcher.channels import put_until_stopped
from watcher.directory_watcher import DirectoryWatchInstaller
from watcher.event_proxy import EventProxy
from watcher.models import EnrichedEvent, RawEvent
from watcher.notifier import FilesystemNotifier


class Notifier(Protocol):
    """Filesystem notifier contract used by the watcher."""

    events: "queue.Queue[RawEvent]"
    errors: "queue.Queue[Exception]"

    def watch(self, directory: str) -> None: ...

    def close(self) -> None: ...


@dataclass(frozen=True)
class WatcherSnapshot:
    """Point-in-time view of what a watcher knows."""

    packages: dict[str, Package] = field(default_factory=dict)
    watched_directories: frozenset[str] = frozenset()


@dataclass
class _Request:
    """Message for the discovery thread."""

    import_path: str | None = None
    reply: "queue.Queue[WatcherSnapshot] | None" = None


def default_working_directory() -> str:
    """Current directory, or the filesystem root if it cannot be determined."""
    try:
        return os.getcwd()
    except OSError:
        return os.path.abspath(os.sep)


class PackageWatcher(LoggerMixin):
    """
    Watches a set of packages and every package they import.

    Construction opens the notifier and returns immediately. Discovery runs
    on a background thread that exclusively owns the registry; enriched
    events are relayed on another. Both are observed only through the
    events and errors queues.

    Usage:
        with PackageWatcher(["myapp"]) as watcher:
            event = watcher.events.get()
            print(event.path, event.import_path)
    """

    def __init__(
        self,
        import_paths: Iterable[str],
        working_directory: str | None = None,
        *,
        resolver: Resolver | None = None,
        notifier_factory: Callable[[], Notifier] | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the watcher and start watching.

        Args:
            import_paths: Import paths to watch
            working_directory: Directory import paths are resolved from,
                defaults to the current directory
            resolver: Package resolver, defaults to PackageResolver
            notifier_factory: Returns an opened notifier, defaults to
                FilesystemNotifier.open
            settings: Application settings

        Raises:
            NotifierError: If the notifier cannot be opened
        """
        self._settings = settings or get_settings()
        watcher_settings = self._settings.watcher
        self._poll_interval = watcher_settings.poll_interval

        self.working_directory = os.path.abspath(working_directory or default_working_directory())
        self._notifier = (notifier_factory or FilesystemNotifier.open)()

        self.events: "queue.Queue[EnrichedEvent]" = queue.Queue(maxsize=watcher_settings.queue_size)
        self.errors: "queue.Queue[Exception]" = queue.Queue(maxsize=watcher_settings.queue_size)
        self._requests: "queue.Queue[_Request]" = queue.Queue()
        self._stop_event = threading.Event()
        self._closed = False

        self._registry = PackageRegistry()
        self._installer = DirectoryWatchInstaller(
            self._notifier,
            self._report_error,
            hidden_prefix=watcher_settings.hidden_prefix,
        )
        self._builder = PackageGraphBuilder(
            resolver or PackageResolver(),
            self._registry,
            self._installer,
            self._report_error,
            self.working_directory,
            allow_binary=self._settings.resolver.allow_binary,
            include_stdlib=self._settings.resolver.include_stdlib,
            stop_event=self._stop_event,
        )
        self._proxy = EventProxy(
            self._notifier,
            self._registry,
            self.events,
            self.errors,
            self._stop_event,
            working_directory=self.working_directory,
            poll_interval=self._poll_interval,
        )

        self._import_paths = list(import_paths)
        self._proxy_thread = threading.Thread(
            target=self._proxy.run, name="pkgwatch-proxy", daemon=True
        )
        self._discovery_thread = threading.Thread(
            target=self._discover, name="pkgwatch-discovery", daemon=True
        )
        self._proxy_thread.start()
        self._discovery_thread.start()

        self.log.info(
            "package_watcher_started",
            import_paths=self._import_paths,
            working_directory=self.working_directory,
        )

    @property
    def closed(self) -> bool:
        """Check if the watcher has been closed."""
        return self._closed

    def _report_error(self, error: Exception) -> None:
        """Publish a non-fatal error."""
        put_until_stopped(self.errors, error, self._stop_event, self._poll_interval)

    def _discover(self) -> None:
        """Resolve the initial import paths, then serve requests until closed."""
        for import_path in self._import_paths:
            self._builder.watch_import_path(import_path)

        self.log.info(
            "initial_discovery_complete",
            packages=len(self._registry),
            directories=len(self._installer.watched_directories),
        )

        while not self._stop_event.is_set():
            try:
                request = self._requests.get(timeout=self._poll_interval)
            except queue.Empty:
                continue

            if request.import_path is not None:
                self._builder.watch_import_path(request.import_path)
            if request.reply is not None:
                request.reply.put(
                    WatcherSnapshot(
                        packages=self._registry.snapshot(),
                        watched_directories=self._installer.watched_directories,
                    )
                )

    def watch(self, import_path: str) -> None:
        """
        Add an import path to the watched set.

        Resolution happens asynchronously on the discovery thread.

        Raises:
            WatcherClosedError: If the watcher has been closed
        """
        if self._closed:
            raise WatcherClosedError("watcher is closed")
        self._requests.put(_Request(import_path=import_path))

    def request_snapshot(self) -> "queue.Queue[WatcherSnapshot]":
        """
        Queue a snapshot request without waiting for it.

        Returns:
            Queue that receives the snapshot once the discovery thread has
            served every earlier request

        Raises:
            WatcherClosedError: If the watcher has been closed
        """
        if self._closed:
            raise WatcherClosedError("watcher is closed")

        reply: "queue.Queue[WatcherSnapshot]" = queue.Queue(maxsize=1)
        self._requests.put(_Request(reply=reply))
        return reply

    def snapshot(self, timeout: float | None = None) -> WatcherSnapshot:
        """
        Ask the discovery thread for the packages and directories it knows.

        The request is served after every earlier import path has been
        resolved and watched.

        Args:
            timeout: Seconds to wait for the answer, None waits forever

        Raises:
            WatcherClosedError: If the watcher has been closed
            TimeoutError: If no answer arrives in time
        """
        reply = self.request_snapshot()

        deadline = None if timeout is None else time.monotonic() + timeout
        while not self._stop_event.is_set():
            wait = self._poll_interval
            if deadline is not None:
                wait = min(wait, deadline - time.monotonic())
                if wait <= 0:
                    raise TimeoutError(f"no snapshot within {timeout}s")
            try:
                return reply.get(timeout=wait)
            except queue.Empty:
                continue
        raise WatcherClosedError("watcher closed before answering")

    def packages(self, timeout: float | None = None) -> dict[str, Package]:
        """Watched packages indexed by import path."""
        return self.snapshot(timeout).packages

    def close(self) -> None:
        """
        Stop relaying events and release every watch.

        Raises:
            NotifierError: If the notifier fails to close
        """
        if self._closed:
            return
        self._closed = True
        self._stop_event.set()

        try:
            self._notifier.close()
        finally:
            join_timeout = self._settings.watcher.join_timeout_s
            self._proxy_thread.join(timeout=join_timeout)
            self._discovery_thread.join(timeout=join_timeout)
            self.log.info("package_watcher_closed")

    def __enter__(self) -> "PackageWatcher":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
