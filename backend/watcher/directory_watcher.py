"""
PkgWatch Directory Watch Installer.

Registers a package directory and its subdirectories with the notifier.
Requires Python 3.11+.
"""

import os
from collections.abc import Callable
from typing import Protocol

from utils.exceptions import WalkError, WatchRegistrationError
from utils.logger import LoggerMixin


class Notifier(Protocol):
    """The part of the filesystem notifier the installer drives."""

    def watch(self, directory: str) -> None: ...


class DirectoryWatchInstaller(LoggerMixin):
    """
    Recursively watches directory trees, at most once per directory.

    Hidden directories (base name starting with the hidden prefix) are never
    watched nor descended into. Walk and registration failures are reported
    through the error callback; a directory that failed to register is still
    remembered so it is not retried.
    """

    def __init__(
        self,
        notifier: Notifier,
        report_error: Callable[[Exception], None],
        hidden_prefix: str = ".",
    ) -> None:
        self._notifier = notifier
        self._report_error = report_error
        self._hidden_prefix = hidden_prefix
        self._watched: set[str] = set()

    @property
    def watched_directories(self) -> frozenset[str]:
        """Directories already handed to the notifier."""
        return frozenset(self._watched)

    def is_hidden(self, name: str) -> bool:
        """Check if a directory base name is hidden."""
        return name.startswith(self._hidden_prefix)

    def watch_directory(self, directory: str) -> None:
        """
        Watch a directory including its subdirectories.

        Args:
            directory: Root of the tree, usually a package directory
        """
        directory = os.path.abspath(directory)
        if directory in self._watched:
            return

        def on_error(error: OSError) -> None:
            path = error.filename or directory
            self.log.warning("walk_failed", directory=directory, path=str(path), error=str(error))
            self._report_error(WalkError(directory, os.fsdecode(path), error))

        for dirpath, dirnames, _ in os.walk(directory, onerror=on_error):
            if self.is_hidden(os.path.basename(dirpath)):
                dirnames.clear()
                continue

            dirnames[:] = [name for name in dirnames if not self.is_hidden(name)]

            if dirpath in self._watched:
                continue

            try:
                self._notifier.watch(dirpath)
            except WatchRegistrationError as e:
                self.log.warning("watch_failed", directory=dirpath, error=str(e))
                self._report_error(e)
            else:
                self.log.debug("directory_watched", directory=dirpath)

            self._watched.add(dirpath)
