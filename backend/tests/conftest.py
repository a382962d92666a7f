"""
PkgWatch Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import queue
from pathlib import Path

import pytest

from resolver.models import Package
from utils.config import Settings, WatcherSettings
from utils.exceptions import ResolutionError, WatchRegistrationError
from watcher.models import RawEvent


class FakeNotifier:
    """In-memory notifier recording every registration."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.events: "queue.Queue[RawEvent]" = queue.Queue()
        self.errors: "queue.Queue[Exception]" = queue.Queue()
        self.watched: list[str] = []
        self.failing = failing or set()
        self.closed = False

    def watch(self, directory: str) -> None:
        self.watched.append(directory)
        if directory in self.failing:
            raise WatchRegistrationError(directory, OSError("no space left on device"))

    def close(self) -> None:
        self.closed = True


class FakeResolver:
    """Dictionary-backed resolver recording every lookup."""

    def __init__(
        self,
        packages: dict[str, Package],
        aliases: dict[str, str] | None = None,
    ) -> None:
        self.packages = packages
        self.aliases = aliases or {}
        self.calls: list[str] = []

    def resolve(
        self, import_path: str, working_directory: str, allow_binary: bool = True
    ) -> Package:
        self.calls.append(import_path)
        name = self.aliases.get(import_path, import_path)
        if name not in self.packages:
            raise ResolutionError(import_path, "cannot find package")
        return self.packages[name]


class RecordingInstaller:
    """Installer stand-in recording each requested directory."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def watch_directory(self, directory: str) -> None:
        self.calls.append(directory)


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create files (and their parent directories) below root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    """Create a recording notifier."""
    return FakeNotifier()


@pytest.fixture
def recording_installer() -> RecordingInstaller:
    """Create a recording installer."""
    return RecordingInstaller()


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with short poll intervals and roomy queues."""
    return Settings(
        watcher=WatcherSettings(poll_interval_ms=20, join_timeout_s=2.0, queue_size=16)
    )


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Create a project with two packages, a plain module and VCS metadata."""
    project = tmp_path / "project"
    return write_tree(
        project,
        {
            "shop/__init__.py": '"""Shop package."""\n\nfrom shop import cart\nimport inventory\n',
            "shop/cart.py": (
                "import json\n"
                "from .pricing import total\n"
                "\n"
                "def checkout(items):\n"
                "    import inventory.stock\n"
                "    return json.dumps(items)\n"
            ),
            "shop/payments/__init__.py": '"""Payments subpackage."""\n',
            "shop/.git/HEAD": "ref: refs/heads/main\n",
            "inventory/__init__.py": "from shop import cart\n",
            "inventory/stock.py": "COUNT = 3\n",
            "standalone.py": "VALUE = 1\n",
        },
    )
