from __future__ import annotations

import logging
import os
from datetime import date
from typing import Callable

from habitbloom import metrics
from habitbloom.axis import build_axis
from habitbloom.batch_edit import BatchEditController, PointerEvents
from habitbloom.data import api_client
from habitbloom.data.api_client import RemoteError
from habitbloom.entry_store import EntryStore
from habitbloom.sync import HttpStorage, RemoteSyncAdapter
from habitbloom.validation import (
    ValidationError,
    check_new_password,
    check_reset_email,
    check_signup,
)

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
USER_UPDATED = "USER_UPDATED"


class AuthSession:
    """Client for the auth service; listeners hear about sign in/out and user changes."""

    def __init__(self, request=None):
        self._request = request or api_client.request
        self.token: str | None = None
        self.user: dict | None = None
        self._listeners: list[Callable[[str, dict | None], None]] = []

    def subscribe(self, listener: Callable[[str, dict | None], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self.user)

    def access_token(self) -> str | None:
        return self.token

    def _start(self, payload: dict) -> dict:
        self.token = payload["token"]
        self.user = payload["user"]
        self._notify(SIGNED_IN)
        return self.user

    def sign_up(self, email, password, username) -> dict:
        clean_email, clean_password, clean_username = check_signup(email, password, username)
        payload = self._request(
            "POST",
            "/v1/auth/signup",
            json={"email": clean_email, "password": clean_password, "username": clean_username},
            authenticated=False,
        )
        return self._start(payload)

    def sign_in_with_password(self, email, password) -> dict:
        payload = self._request(
            "POST",
            "/v1/auth/login",
            json={"email": str(email or "").strip().lower(), "password": password or ""},
            authenticated=False,
        )
        return self._start(payload)

    def get_current_user(self) -> dict | None:
        if not self.token:
            return None
        self.user = self._request("GET", "/v1/auth/user", token=self.token)
        return self.user

    def update_user(self, password, confirmation) -> None:
        clean_password = check_new_password(password, confirmation)
        self._request("PUT", "/v1/auth/password", json={"password": clean_password}, token=self.token)
        self._notify(USER_UPDATED)

    def reset_password_for_email(self, email) -> None:
        clean_email = check_reset_email(email)
        self._request("POST", "/v1/auth/reset", json={"email": clean_email}, authenticated=False)

    def sign_out(self) -> None:
        if self.token:
            try:
                self._request("POST", "/v1/auth/logout", token=self.token)
            except (RemoteError, RuntimeError) as exc:
                logger.warning("Sign out request failed: %s", exc)
        self.token = None
        self.user = None
        self._notify(SIGNED_OUT)


def sync_workers() -> int:
    try:
        return max(1, int(os.getenv("HABITBLOOM_SYNC_WORKERS", "1")))
    except ValueError:
        return 1


def display_name(user: dict | None) -> str:
    if not user:
        return ""
    return user.get("username") or user.get("email") or ""


class HabitSession:
    """Everything one signed-in user works with until logout.

    The day axis is fixed when the session opens; analytics are recomputed
    from the store on every call to ``summary``.
    """

    def __init__(self, user: dict, adapter: RemoteSyncAdapter, today: date | None = None):
        self.user = user
        self.adapter = adapter
        self.store = adapter.store
        self.axis = build_axis(today or date.today())
        self.habits: list[dict] = []
        self.events = PointerEvents()
        self.controller = BatchEditController(
            self.store,
            writer=self._mirror_write,
            selected_date=self.axis[-1].iso,
        ).attach(self.events)
        self.message = ""
        self.password_message = ""
        self.theme = "light"
        self.loaded = False

    @property
    def selected_date(self) -> str:
        return self.controller.selected_date or self.axis[-1].iso

    def select_date(self, day_iso: str) -> None:
        self.controller.selected_date = str(day_iso)[:10]

    def _mirror_write(self, habit_id: str, day_iso: str, value: bool, version: int) -> None:
        self.adapter.push_entry(habit_id, day_iso, value, version)

    def load(self) -> bool:
        try:
            self.habits = list(self.adapter.load())
        except (RemoteError, RuntimeError) as exc:
            logger.error("Error fetching habits and entries: %s", exc)
            self.message = getattr(exc, "message", str(exc))
            return False
        self.loaded = True
        return True

    def sync(self) -> None:
        self.adapter.flush_outbox()

    def create_habit(self, name) -> dict | None:
        self.message = ""
        try:
            habit = self.adapter.create_habit(name)
        except ValidationError as exc:
            self.message = str(exc)
            return None
        except (RemoteError, RuntimeError) as exc:
            logger.error("Error creating habit: %s", exc)
            self.message = getattr(exc, "message", str(exc))
            return None
        self.habits.append(habit)
        return habit

    def delete_habit(self, habit_id) -> bool:
        self.message = ""
        try:
            self.adapter.delete_habit(habit_id)
        except (RemoteError, RuntimeError) as exc:
            logger.error("Error deleting habit: %s", exc)
            self.message = getattr(exc, "message", str(exc))
            return False
        self.habits = [habit for habit in self.habits if str(habit.get("id")) != str(habit_id)]
        return True

    def change_password(self, auth: AuthSession, password, confirmation) -> bool:
        self.password_message = ""
        try:
            auth.update_user(password, confirmation)
        except ValidationError as exc:
            self.password_message = str(exc)
            return False
        except (RemoteError, RuntimeError) as exc:
            logger.error("Password change failed: %s", exc)
            self.password_message = getattr(exc, "message", None) or "Failed to update password."
            return False
        self.password_message = "Password updated successfully."
        return True

    def habit_stats(self) -> list[dict]:
        return [
            {
                "habit": habit,
                "current_streak": metrics.current_streak(habit, self.axis, self.store),
                "longest_streak": metrics.longest_streak(habit, self.axis, self.store),
            }
            for habit in self.habits
        ]

    def summary(self) -> dict:
        completed, total, ratio = metrics.day_summary(self.selected_date, self.habits, self.store)
        return {
            "selected_date": self.selected_date,
            "selected_completed": completed,
            "total_habits": total,
            "selected_ratio": ratio,
            "overall_completion_rate": metrics.overall_completion_rate(self.axis, self.habits, self.store),
            "longest_streak": metrics.longest_streak_overall(self.habits, self.axis, self.store),
            "best_habit": metrics.best_habit(self.habits, self.axis, self.store),
            "pending_writes": self.adapter.pending_writes(),
            "rejected_writes": len(self.adapter.rejected),
        }

    def close(self) -> None:
        self.controller.close()
        self.adapter.shutdown()


def open_session(auth: AuthSession, today: date | None = None, transport=None, executor=None) -> HabitSession:
    if not auth.user:
        raise RuntimeError("Sign in before opening a habit session")
    adapter = RemoteSyncAdapter(
        transport or HttpStorage(auth.access_token),
        EntryStore(),
        str(auth.user["id"]),
        executor=executor,
        max_workers=sync_workers(),
    )
    return HabitSession(auth.user, adapter, today=today)
