"""
Dashboard filtering over the full record list.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable

from utils.records import ConversionRecord

ALL = "all"

_END_OF_DAY = time(23, 59, 59, 999000)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_bound(value: date | datetime) -> datetime:
    """A bare date starts at midnight UTC; a datetime is used as given."""
    if isinstance(value, datetime):
        return _as_utc(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def end_bound(value: date | datetime) -> datetime:
    """Widen to 23:59:59.999 UTC of the bound's day."""
    day = _as_utc(value).date() if isinstance(value, datetime) else value
    return datetime.combine(day, _END_OF_DAY, tzinfo=timezone.utc)


def _is_wildcard(value: str | None) -> bool:
    return not value or value == ALL


@dataclass(frozen=True)
class ConversionFilter:
    """All fields optional; unset fields (or the `all` sentinel) do not constrain."""

    start_date: date | datetime | None = None
    end_date: date | datetime | None = None
    sub_id_contains: str | None = None
    network: str | None = None
    kind: str | None = None

    @classmethod
    def last_days(cls, days: int, today: date | None = None, **kwargs) -> ConversionFilter:
        """Dashboard default window: `days` days back through the end of today."""
        today = today or datetime.now(timezone.utc).date()
        return cls(start_date=today - timedelta(days=days), end_date=today, **kwargs)

    def matches(self, record: ConversionRecord) -> bool:
        ts = _as_utc(record.timestamp)
        if self.start_date is not None and ts < start_bound(self.start_date):
            return False
        if self.end_date is not None and ts > end_bound(self.end_date):
            return False
        if self.sub_id_contains and self.sub_id_contains.lower() not in record.sub_id.lower():
            return False
        if not _is_wildcard(self.network) and record.network.value != self.network:
            return False
        if not _is_wildcard(self.kind) and record.kind.value != self.kind:
            return False
        return True


def filter_conversions(records: Iterable[ConversionRecord], spec: ConversionFilter) -> list[ConversionRecord]:
    """Records matching every active predicate, in their original order."""
    return [r for r in records if spec.matches(r)]
