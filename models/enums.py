"""
Shared enumerations used across the entire project.

Using Python enums (inheriting from str) means:
- They serialize to JSON automatically ("IDLE", not "QueueState.IDLE")
- They compare equal to their plain string value in logs and tests
- Typos become immediate errors instead of silent bugs
"""

import enum


class QueueState(str, enum.Enum):
    IDLE = "IDLE"                  # no worker running, nothing being dispatched
    DISPATCHING = "DISPATCHING"    # at least one handler is executing
    PAUSED = "PAUSED"              # pushes accepted, no new dispatches
