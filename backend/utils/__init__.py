"""
PkgWatch Utilities Package.

Common utilities shared across all modules.
Requires Python 3.11+.
"""

from utils.config import Settings, get_settings
from utils.exceptions import (
    PkgWatchError,
    ResolutionError,
    WalkError,
    WatchRegistrationError,
    NotifierError,
    WatcherClosedError,
)
from utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "Settings",
    "get_settings",
    "PkgWatchError",
    "ResolutionError",
    "WalkError",
    "WatchRegistrationError",
    "NotifierError",
    "WatcherClosedError",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
