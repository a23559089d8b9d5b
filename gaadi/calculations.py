"""Helper functions for date arithmetic and urgency classification."""

from datetime import date, datetime, timedelta, timezone
from typing import Union

from dateutil.parser import isoparse

from .status import Urgency

DateLike = Union[str, date, datetime]


def parse_date(value: DateLike) -> datetime:
    """
    Normalize an ISO string, date or datetime to a naive datetime.

    Aware values are converted to UTC before the zone is dropped, so values
    written by different clients compare consistently.
    """
    if isinstance(value, str):
        value = isoparse(value)
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_past(target: DateLike, now: DateLike) -> bool:
    """True when target falls on a calendar day before now."""
    return parse_date(target).date() < parse_date(now).date()


def days_left(target: DateLike, now: DateLike) -> int:
    """Whole days from now until target, truncated toward zero."""
    return int((parse_date(target) - parse_date(now)) / timedelta(days=1))


def classify_urgency(remaining_days: int, reminder_lead_time: int) -> Urgency:
    """Determine urgency by comparing remaining days to the reminder lead time."""
    if remaining_days < reminder_lead_time / 2:
        return Urgency.URGENT
    if remaining_days < reminder_lead_time:
        return Urgency.SOON
    return Urgency.NORMAL


def to_iso(value: DateLike) -> str:
    """
    Render a date-like value as the ISO string stored on records.

    Strings are checked but kept as given. Raises ValueError if unparseable.
    """
    if isinstance(value, str):
        parse_date(value)
        return value
    return value.isoformat()
