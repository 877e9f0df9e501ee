import unittest
from datetime import date, timedelta

from habitbloom.axis import build_axis, group_by_month, make_day


class TestCalendarAxis(unittest.TestCase):
    def test_axis_spans_year_start_to_reference(self) -> None:
        for reference in (date(2024, 1, 1), date(2024, 2, 29), date(2025, 7, 4), date(2023, 12, 31)):
            axis = build_axis(reference)
            self.assertEqual(axis[0].date, date(reference.year, 1, 1))
            self.assertEqual(axis[-1].date, reference)
            for previous, current in zip(axis, axis[1:]):
                self.assertEqual(current.date - previous.date, timedelta(days=1))

    def test_axis_lengths(self) -> None:
        self.assertEqual(len(build_axis(date(2025, 1, 1))), 1)
        self.assertEqual(len(build_axis(date(2024, 12, 31))), 366)
        self.assertEqual(len(build_axis(date(2025, 12, 31))), 365)

    def test_axis_is_deterministic(self) -> None:
        self.assertEqual(build_axis(date(2025, 3, 10)), build_axis(date(2025, 3, 10)))

    def test_day_fields(self) -> None:
        day = make_day(date(2025, 3, 5))
        self.assertEqual(day.iso, "2025-03-05")
        self.assertEqual(day.label, "5 Mar")
        self.assertEqual(day.weekday, 2)
        self.assertEqual(day.weekday_label, "Wed")
        self.assertEqual(day.day_of_month, 5)
        self.assertEqual(day.month_index, 2)
        self.assertEqual(day.month_short, "Mar")

    def test_weekday_monday_is_zero(self) -> None:
        self.assertEqual(make_day(date(2024, 1, 1)).weekday, 0)
        self.assertEqual(make_day(date(2024, 1, 7)).weekday, 6)
        self.assertEqual(make_day(date(2024, 1, 7)).weekday_label, "Sun")

    def test_group_by_month(self) -> None:
        axis = build_axis(date(2025, 3, 10))
        groups = group_by_month(axis)
        self.assertEqual([group.month_short for group in groups], ["Jan", "Feb", "Mar"])
        self.assertEqual([len(group.days) for group in groups], [31, 28, 10])
        self.assertEqual(sum(len(group.days) for group in groups), len(axis))
        self.assertEqual(group_by_month([]), [])


if __name__ == "__main__":
    unittest.main()
