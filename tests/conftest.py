"""
Shared test fixtures.

Queues own a thread pool, so every queue a test creates must be shut down
afterwards or its worker threads leak into the next test. The `make_queue`
fixture hands out queues and shuts them all down at teardown.

Tracker records what handlers actually did (start/end order, how many ran
at the same time), which is what most of the concurrency tests assert on.
"""

import threading
import time

import pytest

from scheduler.queue import PriorityQueue


class Tracker:
    """Thread-safe recorder of handler activity."""

    def __init__(self):
        self._lock = threading.Lock()
        self.events: list[tuple[str, object]] = []
        self.started: list[object] = []
        self.running = 0
        self.max_running = 0

    def handler(self, label, duration: float = 0.0):
        with self._lock:
            self.running += 1
            self.max_running = max(self.max_running, self.running)
            self.started.append(label)
            self.events.append(("start", label))
        try:
            if duration:
                time.sleep(duration)
            return label
        finally:
            with self._lock:
                self.running -= 1
                self.events.append(("end", label))


@pytest.fixture
def tracker():
    return Tracker()


@pytest.fixture
def make_queue():
    queues: list[PriorityQueue] = []

    def _make(**options) -> PriorityQueue:
        options.setdefault("comparator", lambda a, b: a.priority < b.priority)
        queue = PriorityQueue(**options)
        queues.append(queue)
        return queue

    yield _make

    for queue in queues:
        queue.shutdown(wait=False, cancel_pending=True)
