import os
import tempfile
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from backend import db
from backend.main import create_app
from backend.settings import reset_settings


class BackendTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        env = {
            "DATABASE_URL": f"sqlite:///{os.path.join(self.tmpdir.name, 'test.db')}",
            "TOKEN_SECRET": "test-secret",
        }
        patcher = mock.patch.dict(os.environ, env)
        patcher.start()
        self.addCleanup(patcher.stop)
        reset_settings()
        self.addCleanup(reset_settings)
        db._engine = None
        db._session_factory = None
        self.client = TestClient(create_app())
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def signup(self, email="ana@example.com", username="ana", password="secret1"):
        response = self.client.post(
            "/v1/auth/signup",
            json={"email": email, "password": password, "username": username},
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}


class TestAuthRoutes(BackendTestCase):
    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"ok": True})

    def test_signup_and_login(self) -> None:
        user, headers = self.signup()
        self.assertEqual(user["email"], "ana@example.com")
        self.assertNotIn("password_hash", user)
        response = self.client.post("/v1/auth/login", json={"email": "ANA@example.com", "password": "secret1"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["id"], user["id"])
        me = self.client.get("/v1/auth/user", headers=headers)
        self.assertEqual(me.json()["username"], "ana")

    def test_duplicate_signup(self) -> None:
        self.signup()
        response = self.client.post(
            "/v1/auth/signup",
            json={"email": "ana@example.com", "password": "secret1", "username": "ana"},
        )
        self.assertEqual(response.status_code, 400)

    def test_short_password(self) -> None:
        response = self.client.post(
            "/v1/auth/signup",
            json={"email": "bo@example.com", "password": "123", "username": "bo"},
        )
        self.assertEqual(response.status_code, 400)

    def test_wrong_password(self) -> None:
        self.signup()
        response = self.client.post("/v1/auth/login", json={"email": "ana@example.com", "password": "nope123"})
        self.assertEqual(response.status_code, 400)

    def test_password_change(self) -> None:
        _, headers = self.signup()
        response = self.client.put("/v1/auth/password", json={"password": "another1"}, headers=headers)
        self.assertEqual(response.status_code, 200)
        response = self.client.post("/v1/auth/login", json={"email": "ana@example.com", "password": "another1"})
        self.assertEqual(response.status_code, 200)

    def test_reset_does_not_reveal_accounts(self) -> None:
        response = self.client.post("/v1/auth/reset", json={"email": "ghost@example.com"})
        self.assertEqual(response.json(), {"ok": True})

    def test_missing_and_bad_tokens(self) -> None:
        self.assertEqual(self.client.get("/v1/habits").status_code, 401)
        response = self.client.get("/v1/habits", headers={"Authorization": "Bearer garbage"})
        self.assertEqual(response.status_code, 401)


class TestHabitAndEntryRoutes(BackendTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user, self.headers = self.signup()

    def create_habit(self, name="Read"):
        response = self.client.post("/v1/habits", json={"name": name}, headers=self.headers)
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def put_entry(self, habit_id, day_iso, value):
        return self.client.put(
            "/v1/entries",
            json={"habit_id": habit_id, "date": day_iso, "value": value, "user_id": self.user["id"]},
            headers=self.headers,
        )

    def test_create_and_list_habits_in_creation_order(self) -> None:
        first = self.create_habit("  Read   more ")
        second = self.create_habit("Walk")
        self.assertEqual(first["name"], "Read more")
        items = self.client.get("/v1/habits", params={"user_id": self.user["id"]}, headers=self.headers).json()["items"]
        self.assertEqual([item["id"] for item in items], [first["id"], second["id"]])

    def test_blank_habit_name(self) -> None:
        response = self.client.post("/v1/habits", json={"name": "   "}, headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_rename_habit(self) -> None:
        habit = self.create_habit()
        response = self.client.patch(f"/v1/habits/{habit['id']}", json={"name": "Read daily"}, headers=self.headers)
        self.assertEqual(response.json()["name"], "Read daily")
        response = self.client.patch("/v1/habits/missing", json={"name": "x"}, headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_upsert_is_idempotent(self) -> None:
        habit = self.create_habit()
        self.assertEqual(self.put_entry(habit["id"], "2025-01-02", True).status_code, 200)
        self.assertEqual(self.put_entry(habit["id"], "2025-01-02", True).status_code, 200)
        items = self.client.get("/v1/entries", headers=self.headers).json()["items"]
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["date"], "2025-01-02")
        self.assertIs(items[0]["value"], True)

    def test_upsert_overwrites_value(self) -> None:
        habit = self.create_habit()
        self.put_entry(habit["id"], "2025-01-02", True)
        row = self.put_entry(habit["id"], "2025-01-02", False).json()
        self.assertIs(row["value"], False)
        items = self.client.get("/v1/entries", headers=self.headers).json()["items"]
        self.assertEqual(len(items), 1)
        self.assertIs(items[0]["value"], False)

    def test_entries_date_range(self) -> None:
        habit = self.create_habit()
        for day_iso in ("2025-01-01", "2025-01-05", "2025-01-09"):
            self.put_entry(habit["id"], day_iso, True)
        response = self.client.get(
            "/v1/entries", params={"start": "2025-01-02", "end": "2025-01-09"}, headers=self.headers
        )
        self.assertEqual([item["date"] for item in response.json()["items"]], ["2025-01-05", "2025-01-09"])
        response = self.client.get(
            "/v1/entries", params={"start": "2025-01-09", "end": "2025-01-02"}, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)

    def test_entry_for_unknown_habit(self) -> None:
        self.assertEqual(self.put_entry("missing", "2025-01-02", True).status_code, 404)

    def test_delete_habit_cascades_entries(self) -> None:
        habit = self.create_habit()
        other = self.create_habit("Walk")
        self.put_entry(habit["id"], "2025-01-02", True)
        self.put_entry(other["id"], "2025-01-02", True)
        response = self.client.delete(f"/v1/habits/{habit['id']}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        items = self.client.get("/v1/entries", headers=self.headers).json()["items"]
        self.assertEqual([item["habit_id"] for item in items], [other["id"]])
        self.assertEqual(self.client.delete(f"/v1/habits/{habit['id']}", headers=self.headers).status_code, 404)

    def test_other_users_are_out_of_scope(self) -> None:
        habit = self.create_habit()
        _, other_headers = self.signup(email="bo@example.com", username="bo")
        response = self.client.get("/v1/habits", params={"user_id": self.user["id"]}, headers=other_headers)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get("/v1/habits", headers=other_headers).json()["items"], [])
        response = self.client.put(
            "/v1/entries",
            json={"habit_id": habit["id"], "date": "2025-01-02", "value": True},
            headers=other_headers,
        )
        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
