"""
PkgWatch Event Proxy.

Relays raw notifier events as package-enriched events.
Requires Python 3.11+.
"""

import queue
import threading
from typing import Protocol

from package_graph.registry import PackageRegistry
from utils.logger import LoggerMixin
from watcher.channels import put_until_stopped
from watcher.models import EnrichedEvent, RawEvent


class EventSource(Protocol):
    """The notifier's outgoing streams."""

    events: "queue.Queue[RawEvent]"
    errors: "queue.Queue[Exception]"


class EventProxy(LoggerMixin):
    """
    Consumes raw events and publishes one enriched event for each.

    Notifier errors are forwarded unchanged to the public error queue. The
    loop exits once the stop event is set and publishes nothing afterwards.
    """

    def __init__(
        self,
        source: EventSource,
        registry: PackageRegistry,
        events: "queue.Queue[EnrichedEvent]",
        errors: "queue.Queue[Exception]",
        stop_event: threading.Event,
        working_directory: str | None = None,
        poll_interval: float = 0.1,
    ) -> None:
        """
        Initialize the proxy.

        Args:
            source: Notifier providing raw events and errors
            registry: Registry used to find owning packages
            events: Public queue of enriched events
            errors: Public error queue
            stop_event: Shutdown signal
            working_directory: Boundary of the ownership walk
            poll_interval: Seconds between shutdown checks while idle
        """
        self._source = source
        self._registry = registry
        self._events = events
        self._errors = errors
        self._stop_event = stop_event
        self._working_directory = working_directory
        self._poll_interval = poll_interval

    def enrich(self, raw: RawEvent) -> EnrichedEvent:
        """Attach the owning package to a raw event."""
        package = self._registry.owner_of(raw.path, self._working_directory)
        return EnrichedEvent(raw=raw, package=package)

    def run(self) -> None:
        """Relay events until stopped."""
        self.log.debug("event_proxy_started")
        while not self._stop_event.is_set():
            self._forward_errors()

            try:
                raw = self._source.events.get(timeout=self._poll_interval)
            except queue.Empty:
                continue

            if self._stop_event.is_set():
                break

            event = self.enrich(raw)
            self.log.debug(
                "event_relayed",
                path=raw.path,
                op=raw.op.value,
                package=event.import_path,
            )
            if not put_until_stopped(self._events, event, self._stop_event, self._poll_interval):
                break

        self.log.debug("event_proxy_stopped")

    def _forward_errors(self) -> None:
        """Forward every pending notifier error."""
        while not self._stop_event.is_set():
            try:
                error = self._source.errors.get_nowait()
            except queue.Empty:
                return
            put_until_stopped(self._errors, error, self._stop_event, self._poll_interval)
