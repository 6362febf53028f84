"""
TaskNode — one unit of work sitting in the queue.

A node is created by PriorityQueue.push() and consumed exactly once by the
dispatch loop. It is frozen: nothing about a task changes while it waits in
the heap. The only mutable thing it carries is its Future, which is the
caller's handle on the eventual result or exception. Nodes compare and
hash by identity, so they can live in sets and serve as dict keys.

Fields:
- handler:     the callable to run
- context:     passed as the first argument (the "receiver"), unless None
- args/kwargs: the remaining call arguments
- sequence:    strictly increasing push counter, the FIFO tiebreaker
- priority:    application value read by the default comparator
- future:      completion channel, settled once by the executor
- enqueued_at: monotonic timestamp of the push (for wait-time logging)
"""

import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping


@dataclass(frozen=True, eq=False)
class TaskNode:
    handler: Callable[..., Any]
    context: Any = None
    args: tuple = ()
    sequence: int = 0
    priority: Any = 0
    kwargs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    future: Future = field(default_factory=Future, repr=False)
    enqueued_at: float = field(default_factory=time.monotonic)

    def invoke(self) -> Any:
        """Call the handler with its bound context and arguments."""
        if self.context is None:
            return self.handler(*self.args, **self.kwargs)
        return self.handler(self.context, *self.args, **self.kwargs)

    @property
    def label(self) -> str:
        name = getattr(self.handler, "__qualname__", None) or repr(self.handler)
        return f"{name}#{self.sequence}"
