"""Session model for completed tracking intervals."""

from datetime import datetime, timedelta

from pydantic import BaseModel, field_validator


class Session(BaseModel):
    """A single completed tracking interval.

    Timestamps are naive local wall-clock values with second precision;
    sub-second parts are dropped on construction so that a session survives
    the history report unchanged.
    """

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _truncate_to_seconds(cls, value: datetime) -> datetime:
        return value.replace(microsecond=0)

    @property
    def duration(self) -> timedelta:
        """Elapsed time between start and end."""
        return self.end - self.start

    model_config = {"frozen": True}
