from __future__ import annotations

from datetime import date
from typing import Iterable


def day_key(day) -> str:
    """ISO date of a date, datetime, axis day or ISO string."""
    if not isinstance(day, date):
        day = getattr(day, "date", day)
    if isinstance(day, date):
        return day.isoformat()[:10]
    return str(day)[:10]


class EntryStore:
    """Sparse (habit, day) -> done map; a missing key reads as not done.

    Local writes stamp the key with a version from a store-wide clock so that a
    late server confirmation can be recognised as superseded and dropped.
    """

    def __init__(self, entries: Iterable[dict] | None = None):
        self._rows: dict[tuple[str, str], dict] = {}
        self._versions: dict[tuple[str, str], int] = {}
        self._clock = 0
        if entries:
            self.bulk_load(entries)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key) -> bool:
        habit_id, day = key
        return (str(habit_id), day_key(day)) in self._rows

    def get(self, habit_id, day) -> bool:
        row = self._rows.get((str(habit_id), day_key(day)))
        if not row:
            return False
        return bool(row.get("value"))

    def upsert(self, habit_id, day, value: bool) -> int:
        key = (str(habit_id), day_key(day))
        row = dict(self._rows.get(key) or {})
        row.update({"habit_id": key[0], "date": key[1], "value": bool(value)})
        self._rows[key] = row
        self._clock += 1
        self._versions[key] = self._clock
        return self._clock

    def version(self, habit_id, day) -> int:
        return self._versions.get((str(habit_id), day_key(day)), 0)

    def reconcile(self, row: dict, version: int) -> bool:
        key = (str(row.get("habit_id")), day_key(row.get("date")))
        if self._versions.get(key) != version:
            return False
        merged = dict(self._rows.get(key) or {})
        merged.update(row)
        merged["habit_id"], merged["date"] = key
        merged["value"] = bool(merged.get("value"))
        self._rows[key] = merged
        return True

    def remove_all_for_habit(self, habit_id) -> None:
        habit_key = str(habit_id)
        for key in [key for key in self._rows if key[0] == habit_key]:
            del self._rows[key]
        for key in [key for key in self._versions if key[0] == habit_key]:
            del self._versions[key]

    def bulk_load(self, entries: Iterable[dict]) -> None:
        self._rows = {}
        self._versions = {}
        for entry in entries or []:
            habit_id = entry.get("habit_id")
            if habit_id is None or not entry.get("date"):
                continue
            key = (str(habit_id), day_key(entry["date"]))
            row = dict(entry)
            row["habit_id"], row["date"] = key
            row["value"] = bool(row.get("value"))
            self._rows[key] = row

    def entries(self) -> list[dict]:
        return [dict(row) for row in self._rows.values()]
