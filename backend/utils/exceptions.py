"""
PkgWatch Exceptions.

Error types shared by discovery, directory watching and the notifier.
Requires Python 3.11+.
"""


class PkgWatchError(Exception):
    """Base exception for all watcher errors."""
    pass


class ResolutionError(PkgWatchError):
    """An import path could not be resolved to a package."""

    def __init__(self, import_path: str, reason: str) -> None:
        super().__init__(f"failed to find import path {import_path!r}: {reason}")
        self.import_path = import_path
        self.reason = reason


class WalkError(PkgWatchError):
    """A directory entry could not be enumerated while walking a package tree."""

    def __init__(self, directory: str, path: str, cause: OSError) -> None:
        super().__init__(
            f"error walking directory {directory} at entry {path}: {cause}"
        )
        self.directory = directory
        self.path = path
        self.__cause__ = cause


class WatchRegistrationError(PkgWatchError):
    """The notifier rejected a directory."""

    def __init__(self, directory: str, cause: BaseException) -> None:
        super().__init__(f"failed to watch directory {directory}: {cause}")
        self.directory = directory
        self.__cause__ = cause


class NotifierError(PkgWatchError):
    """The filesystem notifier failed to open, close or deliver an event."""
    pass


class WatcherClosedError(PkgWatchError):
    """The watcher has already been closed."""
    pass
