from __future__ import annotations

from habitbloom.entry_store import EntryStore


def _habit_id(habit) -> str:
    if isinstance(habit, dict):
        return str(habit.get("id"))
    return str(habit)


def current_streak(habit, axis, store: EntryStore) -> int:
    habit_id = _habit_id(habit)
    count = 0
    for day in reversed(axis):
        if not store.get(habit_id, day):
            break
        count += 1
    return count


def longest_streak(habit, axis, store: EntryStore) -> int:
    habit_id = _habit_id(habit)
    best = 0
    running = 0
    for day in axis:
        if store.get(habit_id, day):
            running += 1
            best = max(best, running)
        else:
            running = 0
    return best


def day_summary(day, habits, store: EntryStore):
    total = len(habits)
    completed = sum(1 for habit in habits if store.get(_habit_id(habit), day))
    ratio = completed / total if total > 0 else 0.0
    return completed, total, ratio


def day_completion_ratio(day, habits, store: EntryStore) -> float:
    return day_summary(day, habits, store)[2]


def overall_completion_rate(axis, habits, store: EntryStore) -> int:
    possible = len(axis) * max(len(habits), 1)
    if possible <= 0:
        return 0
    done = 0
    for habit in habits:
        habit_id = _habit_id(habit)
        done += sum(1 for day in axis if store.get(habit_id, day))
    return round(done / possible * 100)


def longest_streak_overall(habits, axis, store: EntryStore) -> int:
    return max((longest_streak(habit, axis, store) for habit in habits), default=0)


def best_habit(habits, axis, store: EntryStore):
    """Habit with the longest streak; the earliest created one wins a tie."""
    best = None
    best_streak = -1
    for habit in habits:
        streak = longest_streak(habit, axis, store)
        if streak > best_streak:
            best = habit
            best_streak = streak
    return best


def ratio_bucket(ratio: float) -> int:
    if ratio <= 0:
        return 0
    if ratio < 0.25:
        return 1
    if ratio < 0.5:
        return 2
    if ratio < 0.75:
        return 3
    return 4
