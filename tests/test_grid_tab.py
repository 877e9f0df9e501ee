import unittest
from datetime import date

from fakes import FakeStorage, InlineExecutor
from habitbloom.session import AuthSession, open_session
from habitbloom.tabs.grid_tab import apply_selection, chart_key


class FakeAuthApi:
    def __call__(self, method, path, params=None, json=None, timeout=10, authenticated=True, token=None):
        return {"token": "tok", "user": {"id": "u1", "email": "ana@example.com", "username": "ana"}}


class TestGridSelection(unittest.TestCase):
    def setUp(self) -> None:
        auth = AuthSession(request=FakeAuthApi())
        auth.sign_in_with_password("ana@example.com", "secret1")
        self.storage = FakeStorage()
        self.session = open_session(auth, today=date(2025, 1, 10), transport=self.storage, executor=InlineExecutor())
        self.addCleanup(self.session.close)
        self.habit = self.session.create_habit("Read")
        self.habit_id = self.habit["id"]
        self.state = {}

    def select(self, days):
        self.state[chart_key(self.habit_id)] = {"selection": {"points": [{"customdata": day} for day in days]}}
        return apply_selection(self.session, self.habit_id, days, self.state)

    def stored(self, day_iso):
        return self.storage.rows[("u1", self.habit_id, day_iso)]["value"]

    def test_clicking_the_same_cell_twice_toggles_back(self) -> None:
        self.assertTrue(self.select(["2025-01-05"]))
        self.session.adapter.settle()
        self.assertTrue(self.session.store.get(self.habit_id, "2025-01-05"))
        self.assertTrue(self.stored("2025-01-05"))

        self.assertTrue(self.select(["2025-01-05"]))
        self.session.adapter.settle()
        self.assertFalse(self.session.store.get(self.habit_id, "2025-01-05"))
        self.assertFalse(self.stored("2025-01-05"))

    def test_selection_state_is_cleared(self) -> None:
        self.select(["2025-01-05"])
        self.assertNotIn(chart_key(self.habit_id), self.state)

    def test_box_selection_paints_the_range(self) -> None:
        days = ["2025-01-02", "2025-01-03", "2025-01-04"]
        self.assertTrue(self.select(days))
        self.session.adapter.settle()
        for day_iso in days:
            self.assertTrue(self.session.store.get(self.habit_id, day_iso))
            self.assertTrue(self.stored(day_iso))
        self.assertEqual(self.session.selected_date, "2025-01-02")
        self.assertFalse(self.session.controller.dragging)
        self.assertEqual(self.session.adapter.pending_writes(), 0)

    def test_empty_selection_does_nothing(self) -> None:
        self.state[chart_key(self.habit_id)] = {"selection": {"points": []}}
        self.assertFalse(apply_selection(self.session, self.habit_id, [], self.state))
        self.assertIn(chart_key(self.habit_id), self.state)
        self.assertEqual(self.storage.rows, {})


if __name__ == "__main__":
    unittest.main()
