"""Shared test constants and helpers."""

from datetime import UTC, datetime, timedelta

RDS_HOST = "mydb.abc123xyz.eu-west-1.rds.amazonaws.com"
ISSUED_AT = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)


class SteppingClock:
    """Clock advancing by a fixed step on every call."""

    def __init__(self, start: datetime = ISSUED_AT, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now
