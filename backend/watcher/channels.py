"""
PkgWatch Channel Helpers.

Blocking queue handoff that gives up once the watcher shuts down.
Requires Python 3.11+.
"""

import queue
import threading
from typing import TypeVar

T = TypeVar("T")


def put_until_stopped(
    channel: "queue.Queue[T]",
    item: T,
    stop_event: threading.Event,
    poll_interval: float,
) -> bool:
    """
    Put an item on a bounded queue, blocking until there is room.

    Args:
        channel: Destination queue
        item: Item to deliver
        stop_event: Aborts the wait once set
        poll_interval: Seconds between checks of stop_event

    Returns:
        True if delivered, False if the watcher stopped first
    """
    while not stop_event.is_set():
        try:
            channel.put(item, timeout=poll_interval)
            return True
        except queue.Full:
            continue
    return False
