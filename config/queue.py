"""
Per-queue configuration record.

QueueConfig is the explicit, typed version of the options a PriorityQueue
accepts. Two properties matter:

- Unknown keys are silently dropped (extra="ignore"), so callers can pass a
  larger dict of options without the queue growing surprise attributes.
- The camelCase spellings (fnDelay, maxWorkers, logDelimiter) are accepted
  as aliases next to the snake_case field names.

Defaults come from config.settings, so an operator can change them for a
whole process through environment variables.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config.settings import settings


class QueueConfig(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        arbitrary_types_allowed=True,
        frozen=True,
    )

    comparator: Optional[Any] = None
    eager: bool = Field(default_factory=lambda: settings.QUEUE_EAGER)
    fn_delay: float = Field(
        default_factory=lambda: settings.QUEUE_FN_DELAY, ge=0, alias="fnDelay"
    )
    max_workers: int = Field(
        default_factory=lambda: settings.QUEUE_MAX_WORKERS, ge=1, alias="maxWorkers"
    )
    paused: bool = Field(default_factory=lambda: settings.QUEUE_PAUSED)
    verbose: bool = Field(default_factory=lambda: settings.QUEUE_VERBOSE)
    name: str = Field(default_factory=lambda: settings.QUEUE_NAME)
    log_delimiter: str = Field(
        default_factory=lambda: settings.QUEUE_LOG_DELIMITER, alias="logDelimiter"
    )

    @field_validator("comparator")
    @classmethod
    def _comparator_must_be_callable(cls, value: Any) -> Any:
        if value is not None and not callable(value):
            raise ValueError("comparator must be callable: compare(a, b) -> bool")
        return value

    def merged(self, **overrides: Any) -> "QueueConfig":
        """Return a new config with `overrides` applied (unknown keys dropped)."""
        fields = type(self).model_fields
        aliases = {info.alias: name for name, info in fields.items() if info.alias}

        data = {name: getattr(self, name) for name in fields}
        for key, value in overrides.items():
            data[aliases.get(key, key)] = value
        return QueueConfig.model_validate(data)
