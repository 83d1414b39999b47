"""UTC clock helpers.

Timestamps are stored as naive UTC datetimes. Business rules that compare
dates (past-date checks, numbering) go through these helpers so tests can
pin the current day.
"""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return utcnow().date()
