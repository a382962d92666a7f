"""
PkgWatch Watcher Data Models.

Raw filesystem events and their package-enriched form.
Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from enum import Enum
import time

from resolver.models import Package


class Op(str, Enum):
    """Kinds of filesystem change."""

    CREATE = "created"
    MODIFY = "modified"
    REMOVE = "deleted"
    RENAME = "moved"


@dataclass(frozen=True, slots=True)
class RawEvent:
    """
    A change to a single entry of a watched directory.

    Attributes:
        path: Absolute path of the changed entry
        op: Kind of change
        is_directory: Whether the entry is a directory
        dest_path: New path for RENAME events
        timestamp: Unix timestamp when the event was received
    """

    path: str
    op: Op
    is_directory: bool = False
    dest_path: str | None = None
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class EnrichedEvent:
    """A raw event plus the watched package owning its path, if any."""

    raw: RawEvent
    package: Package | None = None

    @property
    def path(self) -> str:
        return self.raw.path

    @property
    def op(self) -> Op:
        return self.raw.op

    @property
    def import_path(self) -> str | None:
        """Import path of the owning package."""
        return self.package.import_path if self.package else None

    def to_dict(self) -> dict:
        """Convert to dictionary for logging and serialization."""
        return {
            "path": self.raw.path,
            "op": self.raw.op.value,
            "is_directory": self.raw.is_directory,
            "dest_path": self.raw.dest_path,
            "timestamp": self.raw.timestamp,
            "package": self.import_path,
        }
