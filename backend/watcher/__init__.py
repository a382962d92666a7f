"""
PkgWatch Watcher Package.

File system monitoring of packages and their dependencies.
Requires Python 3.11+.
"""

from watcher.models import EnrichedEvent, Op, RawEvent
from watcher.notifier import FilesystemNotifier
from watcher.directory_watcher import DirectoryWatchInstaller
from watcher.event_proxy import EventProxy
from watcher.package_watcher import PackageWatcher, WatcherSnapshot

__all__ = [
    "EnrichedEvent",
    "Op",
    "RawEvent",
    "FilesystemNotifier",
    "DirectoryWatchInstaller",
    "EventProxy",
    "PackageWatcher",
    "WatcherSnapshot",
]
