"""
PkgWatch Filesystem Notifier.

Per-directory, non-recursive change notification using watchdog.
Requires Python 3.11+.
"""

import os
import queue
import threading

from watchdog.events import (
    DirModifiedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from utils.exceptions import NotifierError, WatchRegistrationError
from utils.logger import LoggerMixin
from watcher.models import Op, RawEvent


class RawEventHandler(FileSystemEventHandler, LoggerMixin):
    """
    Translates watchdog events into RawEvents.

    Only created, modified, deleted and moved events are relayed. Access
    events (opened/closed) and modifications of a directory itself carry no
    change to the directory's files and are dropped.
    """

    def __init__(
        self,
        events: "queue.Queue[RawEvent]",
        errors: "queue.Queue[Exception]",
    ) -> None:
        """
        Initialize the handler.

        Args:
            events: Queue receiving translated events
            errors: Queue receiving translation failures
        """
        super().__init__()
        self._events = events
        self._errors = errors

    def _emit(self, event: FileSystemEvent, op: Op) -> None:
        """Put a RawEvent for a watchdog event on the events queue."""
        try:
            dest_path = getattr(event, "dest_path", None) or None
            raw = RawEvent(
                path=os.fsdecode(event.src_path),
                op=op,
                is_directory=event.is_directory,
                dest_path=os.fsdecode(dest_path) if dest_path else None,
            )
        except (TypeError, ValueError, UnicodeError) as e:
            self.log.warning("event_translation_failed", event=repr(event), error=str(e))
            error = NotifierError(f"failed to translate event {event!r}: {e}")
            error.__cause__ = e
            self._errors.put(error)
            return

        self._events.put(raw)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file/directory creation."""
        self._emit(event, Op.CREATE)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification."""
        if isinstance(event, DirModifiedEvent):
            return
        self._emit(event, Op.MODIFY)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle file/directory deletion."""
        self._emit(event, Op.REMOVE)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle file/directory move/rename."""
        self._emit(event, Op.RENAME)


class FilesystemNotifier(LoggerMixin):
    """
    Watches individual directories for changes to their direct entries.

    Each directory is scheduled non-recursively on a single watchdog
    observer. Raw events and asynchronous errors are delivered on the
    events and errors queues in the order they are received.
    """

    def __init__(self) -> None:
        """Initialize the notifier without starting it."""
        self.events: "queue.Queue[RawEvent]" = queue.Queue()
        self.errors: "queue.Queue[Exception]" = queue.Queue()
        self._handler = RawEventHandler(self.events, self.errors)
        self._observer: Observer | None = None
        self._watches: dict[str, ObservedWatch] = {}
        self._closed = False
        self._lock = threading.Lock()

    @classmethod
    def open(cls) -> "FilesystemNotifier":
        """
        Create and start a notifier.

        Raises:
            NotifierError: If the observer cannot be started
        """
        notifier = cls()
        notifier.start()
        return notifier

    def start(self) -> None:
        """Start the underlying observer thread."""
        if self._observer is not None:
            return

        observer = Observer()
        try:
            observer.start()
        except (OSError, RuntimeError) as e:
            raise NotifierError(f"failed to start filesystem observer: {e}") from e

        self._observer = observer
        self.log.debug("notifier_started", observer=type(observer).__name__)

    def watch(self, directory: str) -> None:
        """
        Watch the direct entries of a directory.

        Args:
            directory: Absolute directory path

        Raises:
            WatchRegistrationError: If the directory cannot be watched
        """
        with self._lock:
            observer = self._observer
            if observer is None or self._closed:
                raise WatchRegistrationError(directory, NotifierError("notifier is not running"))
            if directory in self._watches:
                return

            try:
                watch = observer.schedule(self._handler, directory, recursive=False)
            except (OSError, RuntimeError) as e:
                raise WatchRegistrationError(directory, e) from e

            self._watches[directory] = watch

    @property
    def watched_directories(self) -> frozenset[str]:
        """Directories currently registered with the observer."""
        with self._lock:
            return frozenset(self._watches)

    def close(self, timeout: float = 5.0) -> None:
        """
        Stop the observer and release every watch.

        Args:
            timeout: Seconds to wait for the observer thread to exit

        Raises:
            NotifierError: If the observer does not stop
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            observer, self._observer = self._observer, None
            self._watches.clear()

        if observer is None:
            return

        try:
            observer.stop()
            observer.join(timeout=timeout)
        except (OSError, RuntimeError) as e:
            raise NotifierError(f"failed to stop filesystem observer: {e}") from e

        if observer.is_alive():
            raise NotifierError(f"filesystem observer did not stop within {timeout}s")

        self.log.debug("notifier_closed")

    def __enter__(self) -> "FilesystemNotifier":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
