from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Tuple

from flattask.timeparse import to_utc_minute

ABSOLUTE_TIME_PATTERN = r'^[0-9]{2}:[0-9]{2} [0-9]{4}-[0-9]{2}-[0-9]{2}$'

class TaskRecord(BaseModel):
    """A single task as held in memory.

    Records are immutable values: the author list is collected by the caller
    and frozen into a tuple when the record is built.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1, description="Unique name of the task within its store")
    authors: Tuple[str, ...] = Field(default=(), description="Authors in the order they were given")
    start: Optional[datetime] = Field(default=None, description="Start of the task window (UTC), None for unbounded")
    end: Optional[datetime] = Field(default=None, description="End of the task window (UTC), None for unbounded")
    body: Optional[str] = Field(default=None, description="Free text; None means no body at all")

    @field_validator('start', 'end')
    @classmethod
    def normalise_time(cls, v):
        if v is None:
            return v
        return to_utc_minute(v)

    @property
    def window_inverted(self) -> bool:
        """True when both bounds are set and the end comes before the start."""
        return self.start is not None and self.end is not None and self.end < self.start

class RecordHeader(BaseModel):
    """The metadata section of a serialized record."""

    model_config = ConfigDict(extra='forbid', strict=True)

    title: str = Field(min_length=1, description="Unique name of the task within its store")
    authors: List[str] = Field(description="Authors in the order they were given")
    start: Optional[str] = Field(pattern=ABSOLUTE_TIME_PATTERN, description="Window start as 'HH:MM YYYY-MM-DD', null when unbounded")
    end: Optional[str] = Field(pattern=ABSOLUTE_TIME_PATTERN, description="Window end as 'HH:MM YYYY-MM-DD', null when unbounded")
