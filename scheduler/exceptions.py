"""
Exceptions raised by the priority queue.

Task failures are NOT represented here — a handler that raises never
propagates through the queue. Its exception is stored on that task's
Future instead (see worker/executor.py).
"""


class QueueError(Exception):
    """Base class for every error the queue raises itself."""


class InvalidHandlerError(QueueError, TypeError):
    """push() was called with something that cannot be called."""


class QueueClosedError(QueueError, RuntimeError):
    """push() was called after shutdown()."""


class WorkerAccountingError(QueueError, RuntimeError):
    """
    The active worker counter left the range [0, max_workers].

    This can only happen through a bug in the dispatch loop, so it is
    raised rather than logged.
    """
