"""UTC timestamp type shared by the models."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Read naive values as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# Store rows come from timestamptz columns; local records must compare with them
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]
