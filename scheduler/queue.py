"""
PriorityQueue — the core orchestrator.

Callers push() work, the queue keeps it in a BinaryHeap, and the dispatch
loop (process) hands the highest-priority nodes to a thread pool, never
running more than `max_workers` handlers at once.

    push()                  process()                     worker thread
  ┌─────────┐  insert  ┌──────────────┐  submit  ┌──────────────────────────┐
  │ TaskNode│─────────>│  BinaryHeap  │─────────>│ TaskExecutor.execute()   │
  └─────────┘          │ (TieBreak-   │          │  → future.set_result /   │
       │ eager?        │  Comparator) │          │    future.set_exception  │
       └──────────────>└──────────────┘<─────────│ _finish(): active -= 1,  │
                          ▲ process()            │            process()     │
                          └──────────────────────┴──────────────────────────┘

State machine:
    IDLE         no active workers
    DISPATCHING  at least one handler running
    PAUSED       pushes accepted, no new launches (running ones finish)

Thread safety:
Every read-modify-write of the heap, the active worker counter, the
sequence counter and the delay timer happens under ONE re-entrant lock.
push() from many producers and _finish() from many workers therefore never
race on heap indices or the counter, and process() can be called from
anywhere, any number of times, without ever launching past max_workers.

fn_delay:
When set, successive launches are at least fn_delay seconds apart. The loop
never sleeps while holding the lock; it arms a single threading.Timer that
calls process() again once the gap has elapsed.
"""

import itertools
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from operator import attrgetter
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from config.queue import QueueConfig
from models.enums import QueueState
from models.task import TaskNode
from scheduler.comparators import NumericComparator, TieBreakComparator, as_comparator
from scheduler.exceptions import InvalidHandlerError, QueueClosedError, WorkerAccountingError
from scheduler.heap import BinaryHeap
from worker.executor import TaskExecutor


STATUS_MESSAGES = {
    "NO_COMPARATOR": (
        "No comparator function was supplied. This function should be supplied "
        "unless you really want the queue to order tasks by a numeric priority only."
    ),
}


class _PrefixAdapter(logging.LoggerAdapter):
    """Prefixes every message with '<name><delimiter>'."""

    def process(self, msg, kwargs):
        return f"{self.extra['prefix']}{msg}", kwargs


class PriorityQueue:

    def __init__(
        self,
        config: Optional[QueueConfig] = None,
        logger: Optional[logging.Logger] = None,
        **options: Any,
    ):
        config = config or QueueConfig()
        if options:
            config = config.merged(**options)
        self.config = config

        self.name: str = config.name
        self.log_delimiter: str = config.log_delimiter
        self.eager: bool = config.eager
        self.fn_delay: float = config.fn_delay
        self.max_workers: int = config.max_workers
        self.verbose: bool = config.verbose

        self._log = _PrefixAdapter(
            logger or logging.getLogger(__name__), {"prefix": f"{self.name}{self.log_delimiter}"}
        )

        domain = as_comparator(config.comparator)
        if domain is None:
            self._log.warning(STATUS_MESSAGES["NO_COMPARATOR"])
            domain = NumericComparator(key=attrgetter("priority"))
        self.comparator = domain

        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._heap = BinaryHeap(TieBreakComparator(domain))
        self._sequence = itertools.count()
        self._active_workers = 0
        self._paused: bool = config.paused
        self._closed = False
        self._stopped = False
        self._last_launch: Optional[float] = None
        self._timer: Optional[threading.Timer] = None

        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix=f"{self.name}-worker",
        )
        self._task_executor = TaskExecutor(self._log, verbose=self.verbose)

    # ── Queries ─────────────────────────────────────────────────

    @property
    def heap(self) -> BinaryHeap:
        return self._heap

    @property
    def active_workers(self) -> int:
        return self._active_workers

    @property
    def working(self) -> bool:
        return self._active_workers > 0

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> QueueState:
        if self._paused:
            return QueueState.PAUSED
        if self._active_workers > 0:
            return QueueState.DISPATCHING
        return QueueState.IDLE

    def size(self) -> int:
        with self._lock:
            return self._heap.size()

    def is_empty(self) -> bool:
        with self._lock:
            return self._heap.is_empty()

    def __len__(self) -> int:
        return self.size()

    def peek(self) -> Optional[TaskNode]:
        with self._lock:
            return self._heap.peek()

    def __repr__(self) -> str:
        return (
            f"<PriorityQueue {self.name} {self.state.value} "
            f"queued={self._heap.size()} active={self._active_workers}/{self.max_workers}>"
        )

    # ── Admission ───────────────────────────────────────────────

    def push(
        self,
        handler: Callable[..., Any],
        context: Any = None,
        *args: Any,
        priority: Any = 0,
        **kwargs: Any,
    ) -> Future:
        """
        Queue `handler(context, *args, **kwargs)` and return its Future.

        The Future resolves with the handler's return value, or holds the
        exception it raised. Never blocks on running work. In eager mode an
        unpaused queue starts dispatching right away.

        Raises:
            InvalidHandlerError: handler is not callable (nothing is queued)
            QueueClosedError: the queue has been shut down
        """
        if not callable(handler):
            raise InvalidHandlerError(
                f"Handler must be callable, got {type(handler).__name__}"
            )

        with self._lock:
            if self._closed:
                raise QueueClosedError(f"Queue {self.name} is shut down")

            node = TaskNode(
                handler=handler,
                context=context,
                args=args,
                sequence=next(self._sequence),
                priority=priority,
                kwargs=MappingProxyType(dict(kwargs)),
            )
            self._heap.insert(node)
            self._trace(f"Queued {node.label} (size={self._heap.size()})")
            dispatch = self.eager and not self._paused

        if dispatch:
            self.process()
        return node.future

    def push_many(
        self, tasks: Iterable[tuple | Mapping[str, Any]], priority: Any = 0
    ) -> list[Future]:
        """
        Queue a batch of tasks in one go.

        Each entry is either a `(handler, context, *args)` tuple, which gets
        the batch-wide `priority`, or a mapping with a "handler" key and
        optional "context", "args", "kwargs" and "priority" keys:

            queue.push_many([
                (send_email, user),
                {"handler": charge, "context": order, "priority": 1},
            ])

        The batch is validated up front, so one bad handler rejects the whole
        batch. Nodes are bulk-loaded with the heap's linear-time build.
        Returns the Futures in input order.
        """
        entries = [_batch_entry(task, priority) for task in tasks]
        for entry in entries:
            if not callable(entry["handler"]):
                raise InvalidHandlerError(
                    f"Handler must be callable, got {type(entry['handler']).__name__}"
                )

        with self._lock:
            if self._closed:
                raise QueueClosedError(f"Queue {self.name} is shut down")

            nodes = [
                TaskNode(
                    handler=entry["handler"],
                    context=entry["context"],
                    args=entry["args"],
                    sequence=next(self._sequence),
                    priority=entry["priority"],
                    kwargs=entry["kwargs"],
                )
                for entry in entries
            ]
            self._heap.build(nodes)
            self._trace(f"Queued batch of {len(nodes)} (size={self._heap.size()})")
            dispatch = self.eager and not self._paused

        if dispatch:
            self.process()
        return [node.future for node in nodes]

    # ── Selection & dispatch ────────────────────────────────────

    def dequeue(self) -> Optional[TaskNode]:
        """
        Remove and return the highest-priority node, or None if empty.

        This is the selection primitive process() uses. A node taken out
        directly is NOT executed; the caller owns it (and its Future).
        """
        with self._lock:
            return self._heap.extract_min()

    def process(self) -> None:
        """
        Launch queued nodes while there is capacity.

        Safe to call at any time from any thread; extra calls are no-ops
        when the queue is paused, full, empty or waiting out fn_delay.
        """
        with self._lock:
            while self._can_dispatch():
                remaining = self._delay_remaining()
                if remaining > 0:
                    self._schedule_dispatch(remaining)
                    return

                node = self._heap.extract_min()
                if not node.future.set_running_or_notify_cancel():
                    self._trace(f"Skipping cancelled {node.label}")
                    continue
                self._launch(node)

            self._changed.notify_all()

    def _can_dispatch(self) -> bool:
        return (
            not self._stopped
            and not self._paused
            and self._active_workers < self.max_workers
            and not self._heap.is_empty()
        )

    def _delay_remaining(self) -> float:
        if self.fn_delay <= 0 or self._last_launch is None:
            return 0.0
        return self.fn_delay - (time.monotonic() - self._last_launch)

    def _schedule_dispatch(self, delay: float) -> None:
        # One pending timer is enough; it re-runs the whole loop when it fires
        if self._timer is not None:
            return
        self._timer = threading.Timer(delay, self._on_timer)
        self._timer.daemon = True
        self._timer.start()

    def _on_timer(self) -> None:
        with self._lock:
            self._timer = None
        self.process()

    def _launch(self, node: TaskNode) -> None:
        self._active_workers += 1
        if self._active_workers > self.max_workers:
            raise WorkerAccountingError(
                f"{self._active_workers} active workers exceeds max_workers={self.max_workers}"
            )
        self._last_launch = time.monotonic()

        waited = self._last_launch - node.enqueued_at
        self._trace(
            f"Dispatching {node.label} after {waited:.3f}s "
            f"(active={self._active_workers}/{self.max_workers})"
        )
        future = self._executor.submit(self._run, node)
        future.add_done_callback(self._on_worker_done)

    def _run(self, node: TaskNode) -> None:
        try:
            self._task_executor.execute(node)
        finally:
            self._finish()

    def _finish(self) -> None:
        with self._lock:
            self._active_workers -= 1
            if self._active_workers < 0:
                raise WorkerAccountingError("Active worker count dropped below zero")
            self._changed.notify_all()
        self.process()

    def _on_worker_done(self, future: Future) -> None:
        """
        Callback fired when a worker thread returns.

        Task failures are already captured on the task's own Future, so the
        only thing that can surface here is an internal error.
        """
        exc = future.exception()
        if exc:
            self._log.error(f"Unhandled worker exception: {exc!r}")

    # ── Flow control ────────────────────────────────────────────

    def pause(self) -> None:
        """Stop launching new work. Running handlers finish normally."""
        with self._lock:
            self._paused = True
            self._changed.notify_all()
        self._trace("Paused")

    def resume(self) -> None:
        with self._lock:
            self._paused = False
        self._trace("Resumed")
        self.process()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no handler is running and nothing dispatchable is queued.

        While paused (or stopped) queued nodes are not waited for. A lazy
        queue (eager=False) only drains if something calls process().

        Returns:
            False if `timeout` expired first.
        """
        with self._changed:
            return self._changed.wait_for(self._settled, timeout)

    def _settled(self) -> bool:
        if self._active_workers:
            return False
        return self._paused or self._stopped or self._heap.is_empty()

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        """
        Stop accepting work and release the worker threads.

        With wait=True queued work is dispatched and awaited first (unless
        paused). Nodes still queued once the queue stops get their Futures
        cancelled.
        """
        with self._lock:
            self._closed = True
            if cancel_pending:
                self._cancel_queued()

        if wait:
            self.process()
            self.join()

        with self._lock:
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._cancel_queued()
            self._changed.notify_all()

        self._executor.shutdown(wait=wait)
        self._trace("Shut down")

    def _cancel_queued(self) -> None:
        cancelled = sum(1 for node in self._heap.drain() if node.future.cancel())
        if cancelled:
            self._log.warning(f"Cancelled {cancelled} queued tasks")

    def __enter__(self) -> "PriorityQueue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

    # ── Logging ─────────────────────────────────────────────────

    def _trace(self, message: str) -> None:
        if self.verbose:
            self._log.debug(message)


def _batch_entry(task: tuple | Mapping[str, Any], priority: Any) -> dict:
    """Normalize one push_many() entry into TaskNode fields."""
    if isinstance(task, Mapping):
        return {
            "handler": task.get("handler"),
            "context": task.get("context"),
            "args": tuple(task.get("args", ())),
            "kwargs": MappingProxyType(dict(task.get("kwargs", {}))),
            "priority": task.get("priority", priority),
        }

    entry = tuple(task)
    return {
        "handler": entry[0] if entry else None,
        "context": entry[1] if len(entry) > 1 else None,
        "args": entry[2:],
        "kwargs": MappingProxyType({}),
        "priority": priority,
    }


def create_queue(config: Optional[QueueConfig] = None, **options: Any) -> PriorityQueue:
    """Factory: `create_queue(max_workers=4, eager=True, comparator=...)`."""
    return PriorityQueue(config, **options)
