"""
Tests for Event Proxy.

Requires Python 3.11+.
"""

import queue
import threading
from pathlib import Path

import pytest

from package_graph.registry import PackageRegistry
from resolver.models import Package
from utils.exceptions import NotifierError
from watcher.event_proxy import EventProxy
from watcher.models import EnrichedEvent, Op, RawEvent

from conftest import FakeNotifier


class TestEventProxy:
    """Test cases for EventProxy."""

    @pytest.fixture
    def package(self, tmp_path: Path) -> Package:
        """A package rooted at tmp_path/a/b."""
        return Package(import_path="p", directory=str(tmp_path / "a" / "b"))

    @pytest.fixture
    def registry(self, package: Package) -> PackageRegistry:
        """A registry holding the package."""
        registry = PackageRegistry()
        registry.add(package)
        return registry

    @pytest.fixture
    def stop_event(self) -> threading.Event:
        """Shutdown signal."""
        return threading.Event()

    @pytest.fixture
    def events(self) -> "queue.Queue[EnrichedEvent]":
        """Public event queue."""
        return queue.Queue(maxsize=8)

    @pytest.fixture
    def errors(self) -> "queue.Queue[Exception]":
        """Public error queue."""
        return queue.Queue(maxsize=8)

    @pytest.fixture
    def proxy(self, fake_notifier: FakeNotifier, registry: PackageRegistry, events, errors, stop_event):
        """Create a proxy over the fake notifier."""
        return EventProxy(
            fake_notifier,
            registry,
            events,
            errors,
            stop_event,
            poll_interval=0.02,
        )

    @pytest.fixture
    def running_proxy(self, proxy: EventProxy, stop_event: threading.Event):
        """Run the proxy loop on a thread for the duration of a test."""
        thread = threading.Thread(target=proxy.run, daemon=True)
        thread.start()
        yield proxy
        stop_event.set()
        thread.join(timeout=2.0)
        assert not thread.is_alive()

    def test_enrich_owned_path(self, proxy: EventProxy, package: Package, tmp_path: Path):
        """Test attribution of a path below a package directory."""
        raw = RawEvent(path=str(tmp_path / "a" / "b" / "c" / "file.py"), op=Op.MODIFY)

        event = proxy.enrich(raw)

        assert event.raw is raw
        assert event.package is package
        assert event.import_path == "p"

    def test_enrich_unowned_path(self, proxy: EventProxy, tmp_path: Path):
        """Test that unowned paths carry no package."""
        event = proxy.enrich(RawEvent(path=str(tmp_path / "x" / "y" / "file.py"), op=Op.CREATE))

        assert event.package is None
        assert event.import_path is None

    def test_relays_in_order(self, running_proxy: EventProxy, fake_notifier: FakeNotifier, events, tmp_path: Path):
        """Test that every raw event yields one enriched event, in order."""
        paths = [str(tmp_path / "a" / "b" / f"file{i}.py") for i in range(3)]
        for path in paths:
            fake_notifier.events.put(RawEvent(path=path, op=Op.MODIFY))

        received = [events.get(timeout=2.0) for _ in paths]

        assert all(isinstance(event, EnrichedEvent) for event in received)
        assert [event.path for event in received] == paths
        assert all(event.import_path == "p" for event in received)

    def test_forwards_notifier_errors(self, running_proxy: EventProxy, fake_notifier: FakeNotifier, errors):
        """Test that notifier errors reach the public queue unchanged."""
        error = NotifierError("event queue overflow")
        fake_notifier.errors.put(error)

        assert errors.get(timeout=2.0) is error

    def test_no_events_after_stop(
        self, proxy: EventProxy, fake_notifier: FakeNotifier, events, stop_event: threading.Event, tmp_path: Path
    ):
        """Test that nothing is published once the proxy has stopped."""
        thread = threading.Thread(target=proxy.run, daemon=True)
        thread.start()
        stop_event.set()
        thread.join(timeout=2.0)

        fake_notifier.events.put(RawEvent(path=str(tmp_path / "a" / "b" / "late.py"), op=Op.MODIFY))

        with pytest.raises(queue.Empty):
            events.get(timeout=0.2)
