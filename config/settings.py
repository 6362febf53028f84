"""
Centralized configuration using pydantic-settings.

How it works:
- Reads environment variables automatically (e.g., QUEUE_MAX_WORKERS env var → Settings.QUEUE_MAX_WORKERS)
- Falls back to defaults defined here if env vars are not set
- Can also read from a .env file in the project root

These are the process-wide DEFAULTS for every PriorityQueue. A single queue
can still override any of them at construction time through QueueConfig
(see config/queue.py).
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Queue defaults ──────────────────────────────────────────
    QUEUE_NAME: str = "Queue"
    QUEUE_LOG_DELIMITER: str = "::"
    QUEUE_MAX_WORKERS: int = 1         # concurrent handlers per queue
    QUEUE_FN_DELAY: float = 0.0        # seconds between successive dispatches
    QUEUE_EAGER: bool = False          # dispatch as soon as work is pushed
    QUEUE_PAUSED: bool = False         # start in the paused state
    QUEUE_VERBOSE: bool = True         # emit debug diagnostics

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import this everywhere
settings = Settings()
