from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_SHORT = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class Day:
    date: date
    label: str
    weekday: int
    weekday_label: str
    day_of_month: int
    month_index: int
    month_short: str

    @property
    def iso(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class MonthGroup:
    month_index: int
    month_short: str
    days: tuple[Day, ...] = field(default_factory=tuple)


def make_day(value: date) -> Day:
    month_index = value.month - 1
    weekday = value.weekday()
    return Day(
        date=value,
        label=f"{value.day} {MONTH_SHORT[month_index]}",
        weekday=weekday,
        weekday_label=WEEKDAY_LABELS[weekday],
        day_of_month=value.day,
        month_index=month_index,
        month_short=MONTH_SHORT[month_index],
    )


def build_axis(reference_date: date) -> list[Day]:
    """Every calendar day from Jan 1 of the reference year through the reference date."""
    current = date(reference_date.year, 1, 1)
    days = []
    while current <= reference_date:
        days.append(make_day(current))
        current += timedelta(days=1)
    return days


def group_by_month(axis: list[Day]) -> list[MonthGroup]:
    groups: list[MonthGroup] = []
    bucket: list[Day] = []
    for day in axis:
        if bucket and bucket[-1].month_index != day.month_index:
            groups.append(MonthGroup(bucket[0].month_index, bucket[0].month_short, tuple(bucket)))
            bucket = []
        bucket.append(day)
    if bucket:
        groups.append(MonthGroup(bucket[0].month_index, bucket[0].month_short, tuple(bucket)))
    return groups


