from __future__ import annotations

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from habitbloom.data import api_client
from habitbloom.data.api_client import RemoteError
from habitbloom.entry_store import EntryStore
from habitbloom.validation import clean_habit_name

logger = logging.getLogger(__name__)

MAX_RETRY_DELAY_SECONDS = 300


class HttpStorage:
    """Storage contract spoken over the HabitBloom API.

    ``token_getter`` is read on whichever thread performs the call.
    """

    def __init__(self, token_getter=None):
        self.token_getter = token_getter

    def _request(self, method: str, path: str, **kwargs):
        token = self.token_getter() if self.token_getter else None
        return api_client.request(method, path, token=token, **kwargs)

    def fetch_habits(self, user_id: str) -> list[dict]:
        return self._request("GET", "/v1/habits", params={"user_id": user_id})["items"]

    def fetch_entries(self, user_id: str) -> list[dict]:
        return self._request("GET", "/v1/entries", params={"user_id": user_id})["items"]

    def upsert_entry(self, user_id: str, habit_id: str, day_iso: str, value: bool) -> dict:
        return self._request(
            "PUT",
            "/v1/entries",
            json={"user_id": user_id, "habit_id": habit_id, "date": day_iso, "value": bool(value)},
        )

    def create_habit(self, user_id: str, name: str) -> dict:
        return self._request("POST", "/v1/habits", json={"user_id": user_id, "name": name})

    def delete_habit(self, user_id: str, habit_id: str) -> None:
        self._request("DELETE", f"/v1/habits/{habit_id}", params={"user_id": user_id})


@dataclass
class PendingWrite:
    habit_id: str
    date: str
    value: bool
    version: int
    attempts: int = 0
    next_retry_at: float = 0.0
    last_error: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.habit_id, self.date


def retry_delay(attempts: int) -> int:
    return min(MAX_RETRY_DELAY_SECONDS, 2 ** min(attempts, 8))


def is_permanent(exc: Exception) -> bool:
    if isinstance(exc, RemoteError):
        return 400 <= exc.status_code < 500 and exc.status_code not in {408, 429}
    return False


class RemoteSyncAdapter:
    """Write-through cache coordinator between the entry store and remote storage.

    Entry writes leave on ``executor`` without blocking the caller. Their
    outcomes are applied by ``settle`` on the caller's thread, so the store is
    only ever touched from one thread. A confirmation whose store version has
    been superseded by a newer local write is dropped. Transient failures go to
    the outbox and are retried with exponential backoff; writes the server
    rejects outright are kept in ``rejected`` for the UI to report.
    """

    def __init__(
        self,
        transport,
        store: EntryStore,
        user_id: str,
        executor: Executor | None = None,
        clock=time.monotonic,
        max_workers: int = 1,
    ):
        self.transport = transport
        self.store = store
        self.user_id = user_id
        self.clock = clock
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)), thread_name_prefix="habitbloom-sync"
        )
        self._in_flight: list[tuple[Future, PendingWrite]] = []
        self._outbox: dict[tuple[str, str], PendingWrite] = {}
        self.rejected: list[PendingWrite] = []

    def fetch_habits(self) -> list[dict]:
        return self.transport.fetch_habits(self.user_id)

    def fetch_entries(self) -> list[dict]:
        return self.transport.fetch_entries(self.user_id)

    def load(self) -> list[dict]:
        habits = self.fetch_habits()
        self.store.bulk_load(self.fetch_entries())
        self._outbox.clear()
        return habits

    def create_habit(self, name: str) -> dict:
        clean_name = clean_habit_name(name)
        return self.transport.create_habit(self.user_id, clean_name)

    def delete_habit(self, habit_id: str) -> None:
        habit_id = str(habit_id)
        self.transport.delete_habit(self.user_id, habit_id)
        self.store.remove_all_for_habit(habit_id)
        for key in [key for key in self._outbox if key[0] == habit_id]:
            del self._outbox[key]

    def push_entry(self, habit_id: str, day_iso: str, value: bool, version: int) -> Future:
        write = PendingWrite(str(habit_id), day_iso, bool(value), version)
        self._outbox.pop(write.key, None)
        return self._submit(write)

    def upsert_entry(self, habit_id: str, day_iso: str, value: bool) -> dict:
        """Blocking write; the returned row is also reconciled into the store."""
        version = self.store.upsert(habit_id, day_iso, value)
        row = self.transport.upsert_entry(self.user_id, str(habit_id), day_iso, bool(value))
        self.store.reconcile(row, version)
        return row

    def _submit(self, write: PendingWrite) -> Future:
        future = self.executor.submit(
            self.transport.upsert_entry, self.user_id, write.habit_id, write.date, write.value
        )
        self._in_flight.append((future, write))
        return future

    def settle(self) -> int:
        """Applies every finished write; returns how many were processed."""
        finished = []
        running = []
        for item in self._in_flight:
            (finished if item[0].done() else running).append(item)
        if not finished:
            return 0
        self._in_flight = running
        for future, write in finished:
            exc = future.exception()
            if exc is None:
                if not self.store.reconcile(future.result(), write.version):
                    logger.debug("Dropped superseded confirmation for %s/%s", write.habit_id, write.date)
                continue
            self._handle_failure(write, exc)
        return len(finished)

    def wait(self, timeout: float | None = None) -> int:
        futures = [future for future, _ in self._in_flight]
        if futures:
            wait(futures, timeout=timeout)
        return self.settle()

    def _handle_failure(self, write: PendingWrite, exc: BaseException) -> None:
        if self.store.version(write.habit_id, write.date) != write.version:
            logger.info("Failed write for %s/%s already superseded: %s", write.habit_id, write.date, exc)
            return
        write.last_error = str(exc)[:500]
        if isinstance(exc, Exception) and is_permanent(exc):
            logger.error("Entry write for %s/%s rejected: %s", write.habit_id, write.date, exc)
            self.rejected.append(write)
            return
        write.attempts += 1
        write.next_retry_at = self.clock() + retry_delay(write.attempts)
        logger.warning(
            "Entry write for %s/%s failed (attempt %d), retrying later: %s",
            write.habit_id,
            write.date,
            write.attempts,
            exc,
        )
        self._outbox[write.key] = write

    def flush_outbox(self, force: bool = False) -> int:
        """Resubmits queued writes that are due; returns how many were sent."""
        self.settle()
        now = self.clock()
        sent = 0
        for key, write in list(self._outbox.items()):
            if self.store.version(write.habit_id, write.date) != write.version:
                del self._outbox[key]
                continue
            if not force and write.next_retry_at > now:
                continue
            del self._outbox[key]
            self._submit(write)
            sent += 1
        return sent

    def pending_writes(self) -> int:
        return len(self._outbox) + len(self._in_flight)

    def outbox(self) -> list[PendingWrite]:
        return list(self._outbox.values())

    def clear_rejected(self) -> list[PendingWrite]:
        rejected, self.rejected = self.rejected, []
        return rejected

    def shutdown(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=False)
