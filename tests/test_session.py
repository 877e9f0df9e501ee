import unittest
from datetime import date

from fakes import FakeStorage, InlineExecutor
from habitbloom.data.api_client import RemoteError
from habitbloom.session import SIGNED_IN, SIGNED_OUT, USER_UPDATED, AuthSession, display_name, open_session
from habitbloom.validation import ValidationError, check_new_password, check_signup, clean_habit_name


class FakeAuthApi:
    def __init__(self):
        self.calls = []
        self.fail = None

    def __call__(self, method, path, params=None, json=None, timeout=10, authenticated=True, token=None):
        self.calls.append((method, path, json, authenticated, token))
        if self.fail is not None:
            raise self.fail
        if path in ("/v1/auth/signup", "/v1/auth/login"):
            return {"token": "tok", "user": {"id": "u1", "email": json["email"], "username": "ana"}}
        if path == "/v1/auth/user":
            return {"id": "u1", "email": "ana@example.com", "username": "ana"}
        return {"ok": True}


class TestValidation(unittest.TestCase):
    def test_habit_name(self) -> None:
        self.assertEqual(clean_habit_name("  Read  a   book "), "Read a book")
        self.assertEqual(len(clean_habit_name("x" * 100)), 60)
        with self.assertRaises(ValidationError):
            clean_habit_name("")

    def test_new_password(self) -> None:
        with self.assertRaisesRegex(ValidationError, "at least 6"):
            check_new_password("abc", "abc")
        with self.assertRaisesRegex(ValidationError, "do not match"):
            check_new_password("secret1", "secret2")
        self.assertEqual(check_new_password("secret1", "secret1"), "secret1")

    def test_signup(self) -> None:
        with self.assertRaisesRegex(ValidationError, "username"):
            check_signup("a@b.c", "secret1", " ")
        self.assertEqual(check_signup(" A@B.C ", "secret1", " ana "), ("a@b.c", "secret1", "ana"))


class TestAuthSession(unittest.TestCase):
    def setUp(self) -> None:
        self.api = FakeAuthApi()
        self.auth = AuthSession(request=self.api)
        self.events = []
        self.auth.subscribe(lambda event, user: self.events.append(event))

    def test_sign_in_stores_token_and_notifies(self) -> None:
        user = self.auth.sign_in_with_password(" Ana@Example.com ", "secret1")
        self.assertEqual(user["id"], "u1")
        self.assertEqual(self.auth.access_token(), "tok")
        self.assertEqual(self.api.calls[0][2]["email"], "ana@example.com")
        self.assertFalse(self.api.calls[0][3])
        self.assertEqual(self.events, [SIGNED_IN])

    def test_sign_up_validates_before_calling(self) -> None:
        with self.assertRaises(ValidationError):
            self.auth.sign_up("ana@example.com", "123", "ana")
        self.assertEqual(self.api.calls, [])

    def test_update_user_passes_token(self) -> None:
        self.auth.sign_in_with_password("ana@example.com", "secret1")
        self.auth.update_user("newpass", "newpass")
        method, path, payload, _, token = self.api.calls[-1]
        self.assertEqual((method, path, token), ("PUT", "/v1/auth/password", "tok"))
        self.assertEqual(payload, {"password": "newpass"})
        self.assertEqual(self.events[-1], USER_UPDATED)

    def test_sign_out_clears_even_when_request_fails(self) -> None:
        self.auth.sign_in_with_password("ana@example.com", "secret1")
        self.api.fail = RemoteError(500, "boom")
        self.auth.sign_out()
        self.assertIsNone(self.auth.token)
        self.assertIsNone(self.auth.user)
        self.assertEqual(self.events[-1], SIGNED_OUT)

    def test_unsubscribe(self) -> None:
        extra = []
        unsubscribe = self.auth.subscribe(lambda event, user: extra.append(event))
        unsubscribe()
        self.auth.sign_out()
        self.assertEqual(extra, [])

    def test_current_user_needs_token(self) -> None:
        self.assertIsNone(self.auth.get_current_user())
        self.auth.sign_in_with_password("ana@example.com", "secret1")
        self.assertEqual(self.auth.get_current_user()["username"], "ana")

    def test_display_name(self) -> None:
        self.assertEqual(display_name({"username": "ana", "email": "a@b.c"}), "ana")
        self.assertEqual(display_name({"email": "a@b.c"}), "a@b.c")
        self.assertEqual(display_name(None), "")


class TestHabitSession(unittest.TestCase):
    def setUp(self) -> None:
        self.auth = AuthSession(request=FakeAuthApi())
        self.auth.sign_in_with_password("ana@example.com", "secret1")
        self.storage = FakeStorage()
        self.session = open_session(
            self.auth,
            today=date(2025, 1, 10),
            transport=self.storage,
            executor=InlineExecutor(),
        )

    def tearDown(self) -> None:
        self.session.close()

    def test_open_requires_sign_in(self) -> None:
        with self.assertRaises(RuntimeError):
            open_session(AuthSession(request=FakeAuthApi()), transport=self.storage)

    def test_summary_without_habits(self) -> None:
        self.assertTrue(self.session.load())
        summary = self.session.summary()
        self.assertEqual(summary["selected_date"], "2025-01-10")
        self.assertEqual(summary["total_habits"], 0)
        self.assertEqual(summary["selected_ratio"], 0.0)
        self.assertEqual(summary["overall_completion_rate"], 0)
        self.assertEqual(summary["longest_streak"], 0)
        self.assertIsNone(summary["best_habit"])

    def test_click_writes_through_to_storage(self) -> None:
        habit = self.session.create_habit("Read")
        self.session.controller.click(habit["id"], "2025-01-09")
        self.session.adapter.settle()
        self.assertTrue(self.storage.rows[("u1", habit["id"], "2025-01-09")]["value"])
        summary = self.session.summary()
        self.assertEqual(summary["selected_date"], "2025-01-09")
        self.assertEqual(summary["selected_completed"], 1)
        self.assertEqual(summary["pending_writes"], 0)
        stats = self.session.habit_stats()
        self.assertEqual(stats[0]["longest_streak"], 1)
        self.assertEqual(stats[0]["current_streak"], 0)

    def test_drag_through_event_bus(self) -> None:
        habit = self.session.create_habit("Walk")
        self.session.events.emit("press", habit["id"], "2025-01-01")
        self.session.events.emit("enter", habit["id"], "2025-01-02")
        self.session.events.emit("enter", habit["id"], "2025-01-03")
        self.session.events.emit("release")
        self.session.adapter.settle()
        self.assertEqual(len(self.storage.rows), 3)

    def test_create_habit_reports_validation_message(self) -> None:
        self.assertIsNone(self.session.create_habit("  "))
        self.assertEqual(self.session.message, "Habit name cannot be empty.")

    def test_delete_habit(self) -> None:
        habit = self.session.create_habit("Read")
        self.session.controller.click(habit["id"], "2025-01-05")
        self.assertTrue(self.session.delete_habit(habit["id"]))
        self.assertEqual(self.session.habits, [])
        self.assertFalse(self.session.store.get(habit["id"], "2025-01-05"))

    def test_load_failure_sets_message(self) -> None:
        self.storage.fail_next.append(RemoteError(500, {"detail": "Database down"}))
        self.assertFalse(self.session.load())
        self.assertEqual(self.session.message, "Database down")
        self.assertFalse(self.session.loaded)

    def test_change_password_messages(self) -> None:
        self.assertFalse(self.session.change_password(self.auth, "abc", "abc"))
        self.assertEqual(self.session.password_message, "Password must be at least 6 characters.")
        self.assertTrue(self.session.change_password(self.auth, "secret2", "secret2"))
        self.assertEqual(self.session.password_message, "Password updated successfully.")

    def test_close_detaches_controller(self) -> None:
        self.session.close()
        self.assertEqual(self.session.events.listener_count("release"), 0)


if __name__ == "__main__":
    unittest.main()
