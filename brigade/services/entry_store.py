"""
Journal entry persistence: remote record stores, the local fallback cache
and the two-tier repository that combines them.

Precedence and reconciliation:

* The remote store is authoritative whenever it answers. Every successful
  remote read or write refreshes the local mirror for that user.
* When a remote call fails, the operation is applied to the local mirror
  and queued under ``journal_pending_<user_id>``. The caller gets a
  ``StoreResult`` with ``source=local`` and the error text instead of an
  exception.
* Before any later remote call for that user the queue is replayed in
  order. Replay stops at the first failure, leaving the rest queued, and
  the whole operation falls back to the mirror again.
"""
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Literal, Optional, Protocol, TypeVar

import httpx
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from brigade.core.config import DEFAULT_ENTRIES_TABLE
from brigade.core.exceptions import RecordStoreError
from brigade.core.logging_config import LogCategory, log_info, log_warning
from brigade.models.enums import RecordSource
from brigade.models.journal_entry import JournalEntry
from brigade.schemas.journal import JournalEntryRead, StoreStatus

logger = logging.getLogger(LogCategory.STORE.value)

EDITABLE_FIELDS = frozenset({"content", "mood", "is_private"})
ENTRIES_KEY_TEMPLATE = "journal_entries_{user_id}"
PENDING_KEY_TEMPLATE = "journal_pending_{user_id}"

T = TypeVar("T")


def newest_first(entries: List[JournalEntryRead]) -> List[JournalEntryRead]:
    return sorted(entries, key=lambda entry: entry.created_at, reverse=True)


class RecordStore(Protocol):
    """Remote table of journal entries. Every method raises RecordStoreError on failure."""

    def select(self, user_id: uuid.UUID) -> List[JournalEntryRead]: ...

    def insert(self, entry: JournalEntryRead) -> JournalEntryRead: ...

    def update(self, entry_id: uuid.UUID, patch: Dict[str, Any]) -> bool: ...

    def delete(self, entry_id: uuid.UUID) -> bool: ...


class SqlRecordStore:
    """Record store backed by the service database."""

    def __init__(self, session: Session):
        self.session = session

    def _commit(self, operation: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RecordStoreError(operation, exc) from exc

    def select(self, user_id: uuid.UUID) -> List[JournalEntryRead]:
        statement = (
            select(JournalEntry)
            .where(JournalEntry.user_id == user_id)
            .order_by(JournalEntry.created_at.desc())
        )
        try:
            rows = self.session.exec(statement).all()
        except SQLAlchemyError as exc:
            raise RecordStoreError("select", exc) from exc
        return [JournalEntryRead.model_validate(row) for row in rows]

    def insert(self, entry: JournalEntryRead) -> JournalEntryRead:
        row = JournalEntry(
            id=entry.id,
            user_id=entry.user_id,
            content=entry.content,
            mood=entry.mood,
            prompt_id=entry.prompt_id,
            is_private=entry.is_private,
            created_at=entry.created_at,
        )
        try:
            self.session.add(row)
        except SQLAlchemyError as exc:
            raise RecordStoreError("insert", exc) from exc
        self._commit("insert")
        self.session.refresh(row)
        return JournalEntryRead.model_validate(row)

    def update(self, entry_id: uuid.UUID, patch: Dict[str, Any]) -> bool:
        try:
            row = self.session.get(JournalEntry, entry_id)
        except SQLAlchemyError as exc:
            raise RecordStoreError("update", exc) from exc
        if row is None:
            return False
        for field, value in patch.items():
            setattr(row, field, value)
        self.session.add(row)
        self._commit("update")
        return True

    def delete(self, entry_id: uuid.UUID) -> bool:
        try:
            row = self.session.get(JournalEntry, entry_id)
        except SQLAlchemyError as exc:
            raise RecordStoreError("delete", exc) from exc
        if row is None:
            return False
        self.session.delete(row)
        self._commit("delete")
        return True


class SupabaseRecordStore:
    """Record store backed by a hosted PostgREST (Supabase) table."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        table: str = DEFAULT_ENTRIES_TABLE,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self._path = f"/rest/v1/{table}"
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
        }
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        operation: str,
        method: str,
        *,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
        return_rows: bool = False,
    ) -> Any:
        headers = dict(self._headers)
        if return_rows:
            headers["Prefer"] = "return=representation"
        try:
            response = self._client.request(method, self._path, params=params, json=payload, headers=headers)
            response.raise_for_status()
            return response.json() if (return_rows or method == "GET") else None
        except (httpx.HTTPError, ValueError) as exc:
            raise RecordStoreError(operation, exc) from exc

    def select(self, user_id: uuid.UUID) -> List[JournalEntryRead]:
        rows = self._request(
            "select", "GET",
            params={"select": "*", "user_id": f"eq.{user_id}", "order": "created_at.desc"},
        )
        return [JournalEntryRead.model_validate(row) for row in rows]

    def insert(self, entry: JournalEntryRead) -> JournalEntryRead:
        rows = self._request("insert", "POST", payload=entry.model_dump(mode="json"), return_rows=True)
        return JournalEntryRead.model_validate(rows[0]) if rows else entry

    def update(self, entry_id: uuid.UUID, patch: Dict[str, Any]) -> bool:
        rows = self._request(
            "update", "PATCH", params={"id": f"eq.{entry_id}"}, payload=patch, return_rows=True
        )
        return bool(rows)

    def delete(self, entry_id: uuid.UUID) -> bool:
        rows = self._request("delete", "DELETE", params={"id": f"eq.{entry_id}"}, return_rows=True)
        return bool(rows)


class PendingMutation(BaseModel):
    """A write applied locally while the remote store was unreachable."""
    op: Literal["insert", "update", "delete"]
    entry_id: uuid.UUID
    entry: Optional[JournalEntryRead] = None
    patch: Optional[Dict[str, Any]] = None


class LocalEntryCache:
    """
    Per-user mirror of journal entries in a key-value string cache.

    Cache backend failures are logged and treated as an empty cache.
    """

    def __init__(self, cache_backend):
        self._cache = cache_backend

    def _read(self, key: str) -> Optional[list]:
        try:
            raw = self._cache.get(key)
        except Exception as e:
            logger.error(f"Cache get operation failed: key={key}, error={type(e).__name__}: {e}")
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding unreadable cache value for key={key}")
            return None
        return data if isinstance(data, list) else None

    def _write(self, key: str, items: list) -> None:
        try:
            self._cache.set(key, json.dumps(items))
        except Exception as e:
            logger.error(f"Cache set operation failed: key={key}, error={type(e).__name__}: {e}")

    def load(self, user_id: uuid.UUID) -> List[JournalEntryRead]:
        data = self._read(ENTRIES_KEY_TEMPLATE.format(user_id=user_id)) or []
        entries = []
        for item in data:
            try:
                entries.append(JournalEntryRead.model_validate(item))
            except ValueError:
                logger.warning(f"Skipping malformed cached entry for user {user_id}")
        return entries

    def save(self, user_id: uuid.UUID, entries: List[JournalEntryRead]) -> None:
        self._write(
            ENTRIES_KEY_TEMPLATE.format(user_id=user_id),
            [entry.model_dump(mode="json") for entry in entries],
        )

    def pending(self, user_id: uuid.UUID) -> List[PendingMutation]:
        data = self._read(PENDING_KEY_TEMPLATE.format(user_id=user_id)) or []
        mutations = []
        for item in data:
            try:
                mutations.append(PendingMutation.model_validate(item))
            except ValueError:
                logger.warning(f"Dropping malformed queued mutation for user {user_id}")
        return mutations

    def set_pending(self, user_id: uuid.UUID, mutations: List[PendingMutation]) -> None:
        self._write(
            PENDING_KEY_TEMPLATE.format(user_id=user_id),
            [mutation.model_dump(mode="json") for mutation in mutations],
        )

    def enqueue(self, user_id: uuid.UUID, mutation: PendingMutation) -> None:
        self.set_pending(user_id, self.pending(user_id) + [mutation])


@dataclass
class StoreResult(Generic[T]):
    """Outcome of a repository call and which tier produced it."""
    value: T
    source: RecordSource
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.source == RecordSource.LOCAL

    def status(self) -> StoreStatus:
        return StoreStatus(source=self.source, degraded=self.degraded, error=self.error)


class JournalRepository:
    """Remote-first journal storage with a local mirror and write queue."""

    def __init__(self, remote: RecordStore, local: LocalEntryCache):
        self.remote = remote
        self.local = local

    def _apply_remote(self, user_id: uuid.UUID, mutation: PendingMutation) -> None:
        if mutation.op == "insert":
            self.remote.insert(mutation.entry)
        elif mutation.op == "update":
            self.remote.update(mutation.entry_id, mutation.patch or {})
        else:
            # Queued deletes may name ids never seen online; only remove the user's own rows.
            owned = {entry.id for entry in self.remote.select(user_id)}
            if mutation.entry_id in owned:
                self.remote.delete(mutation.entry_id)

    def _replay_pending(self, user_id: uuid.UUID) -> None:
        mutations = self.local.pending(user_id)
        if not mutations:
            return
        replayed = 0
        try:
            for mutation in mutations:
                self._apply_remote(user_id, mutation)
                replayed += 1
        finally:
            self.local.set_pending(user_id, mutations[replayed:])
        log_info("Replayed queued journal mutations", user_id=str(user_id), count=replayed)

    def _fallback(self, operation: str, user_id: uuid.UUID, exc: RecordStoreError) -> str:
        log_warning(
            f"Remote journal {operation} failed, using local cache",
            user_id=str(user_id), error=str(exc)
        )
        return str(exc)

    def cached_entries(self, user_id: uuid.UUID) -> List[JournalEntryRead]:
        return newest_first(self.local.load(user_id))

    def list_entries(self, user_id: uuid.UUID) -> StoreResult[List[JournalEntryRead]]:
        """All entries for a user, newest first."""
        try:
            self._replay_pending(user_id)
            entries = newest_first(self.remote.select(user_id))
        except RecordStoreError as exc:
            error = self._fallback("read", user_id, exc)
            return StoreResult(self.cached_entries(user_id), RecordSource.LOCAL, error)

        self.local.save(user_id, entries)
        return StoreResult(entries, RecordSource.REMOTE)

    def insert_entry(self, entry: JournalEntryRead) -> StoreResult[JournalEntryRead]:
        try:
            self._replay_pending(entry.user_id)
            stored = self.remote.insert(entry)
        except RecordStoreError as exc:
            error = self._fallback("insert", entry.user_id, exc)
            self.local.enqueue(entry.user_id, PendingMutation(op="insert", entry_id=entry.id, entry=entry))
            self._mirror_insert(entry)
            return StoreResult(entry, RecordSource.LOCAL, error)

        self._mirror_insert(stored)
        return StoreResult(stored, RecordSource.REMOTE)

    def update_entry(self, user_id: uuid.UUID, entry_id: uuid.UUID, patch: Dict[str, Any]) -> StoreResult[None]:
        patch = {field: value for field, value in patch.items() if field in EDITABLE_FIELDS}
        try:
            self._replay_pending(user_id)
            self.remote.update(entry_id, patch)
        except RecordStoreError as exc:
            error = self._fallback("update", user_id, exc)
            self.local.enqueue(user_id, PendingMutation(op="update", entry_id=entry_id, patch=patch))
            self._mirror_update(user_id, entry_id, patch)
            return StoreResult(None, RecordSource.LOCAL, error)

        self._mirror_update(user_id, entry_id, patch)
        return StoreResult(None, RecordSource.REMOTE)

    def delete_entry(self, user_id: uuid.UUID, entry_id: uuid.UUID) -> StoreResult[None]:
        """Delete an entry; the local mirror is updated whatever the remote outcome."""
        self._mirror_delete(user_id, entry_id)
        try:
            self._replay_pending(user_id)
            self.remote.delete(entry_id)
        except RecordStoreError as exc:
            error = self._fallback("delete", user_id, exc)
            self.local.enqueue(user_id, PendingMutation(op="delete", entry_id=entry_id))
            return StoreResult(None, RecordSource.LOCAL, error)
        return StoreResult(None, RecordSource.REMOTE)

    def _mirror_insert(self, entry: JournalEntryRead) -> None:
        entries = [cached for cached in self.local.load(entry.user_id) if cached.id != entry.id]
        self.local.save(entry.user_id, newest_first([entry] + entries))

    def _mirror_update(self, user_id: uuid.UUID, entry_id: uuid.UUID, patch: Dict[str, Any]) -> None:
        entries = [
            cached.model_copy(update=patch) if cached.id == entry_id else cached
            for cached in self.local.load(user_id)
        ]
        self.local.save(user_id, entries)

    def _mirror_delete(self, user_id: uuid.UUID, entry_id: uuid.UUID) -> None:
        entries = self.local.load(user_id)
        remaining = [cached for cached in entries if cached.id != entry_id]
        if len(remaining) != len(entries):
            self.local.save(user_id, remaining)
