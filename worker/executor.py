"""
Task executor — runs a single dispatched TaskNode inside a worker thread.

This is the code that actually DOES THE WORK. The queue submits
executor.execute(node) to its thread pool, and this method handles the full
lifecycle of one task:

    1. Call the handler with its context and arguments
    2. If the handler returned a coroutine, drive it to completion
    3. On success: resolve the task's Future with the return value
    4. On failure: store the exception on the Future, log it, move on

The executor never re-raises a task failure. A broken handler must not
take the worker thread (or the queue) down with it; the caller finds out
through future.result() / future.exception(). Interpreter-level exits
(SystemExit, KeyboardInterrupt) are stored on the Future too, then re-raised.

Thread safety:
- Each execute() call only touches its own node and its own Future
- The executor holds no mutable state of its own
So multiple worker threads can call execute() simultaneously without locks.
"""

import asyncio
import inspect
import logging
import time
from typing import Any

from models.task import TaskNode

logger = logging.getLogger(__name__)


class TaskExecutor:

    def __init__(self, log: logging.LoggerAdapter | logging.Logger | None = None, verbose: bool = True):
        self._log = log or logger
        self._verbose = verbose

    def execute(self, node: TaskNode) -> bool:
        """
        Execute a single node. Called by PriorityQueue from a worker thread.

        Returns:
            True if the handler succeeded, False if it raised.
        """
        start_time = time.monotonic()
        try:
            result = node.invoke()
            if inspect.isawaitable(result):
                result = asyncio.run(_await(result))
        except (Exception, asyncio.CancelledError) as e:
            elapsed = time.monotonic() - start_time
            self._log.error(f"Task {node.label} failed after {elapsed:.3f}s: {e!r}")
            node.future.set_exception(e)
            return False
        except BaseException as e:
            # SystemExit / KeyboardInterrupt still settle the Future, then propagate
            self._log.error(f"Task {node.label} aborted: {e!r}")
            node.future.set_exception(e)
            raise

        elapsed = time.monotonic() - start_time
        if self._verbose:
            self._log.debug(f"Task {node.label} completed in {elapsed:.3f}s")
        node.future.set_result(result)
        return True


async def _await(awaitable: Any) -> Any:
    # asyncio.run() only accepts coroutines, not arbitrary awaitables
    return await awaitable
