from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Protocol

import orjson

from .supabase import SupabaseGateway

Record = Dict[str, Any]


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Record]: ...

    def set(self, key: str, value: Record) -> None: ...

    def delete(self, key: str) -> bool: ...

    def lock(self, key: str) -> Any: ...


class _KeyLocks:
    """One re-entrant lock per key, alive only while some caller holds it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, Any] = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._locks)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            key_lock = self._locks.setdefault(key, threading.RLock())
        with key_lock:
            yield


@dataclass
class InMemoryStore:
    records: Dict[str, Record] = field(default_factory=dict)
    _locks: _KeyLocks = field(default_factory=_KeyLocks, repr=False)

    def get(self, key: str) -> Optional[Record]:
        record = self.records.get(key)
        return dict(record) if record is not None else None

    def set(self, key: str, value: Record) -> None:
        self.records[key] = dict(value)

    def delete(self, key: str) -> bool:
        return self.records.pop(key, None) is not None

    def lock(self, key: str):
        return self._locks.hold(key)

    def __len__(self) -> int:
        return len(self.records)


class JsonFileStore:
    """Key/value records persisted to a single JSON document."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._io_lock = threading.RLock()
        self._locks = _KeyLocks()
        self._cache: Optional[Dict[str, Record]] = None

    def _load(self) -> Dict[str, Record]:
        if self._cache is None:
            if self._path.exists():
                self._cache = dict(orjson.loads(self._path.read_bytes() or b"{}"))
            else:
                self._cache = {}
        return self._cache

    def _persist(self) -> None:
        if self._cache is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(self._cache, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
        self._path.write_bytes(payload + b"\n")

    def get(self, key: str) -> Optional[Record]:
        with self._io_lock:
            record = self._load().get(key)
            return dict(record) if record is not None else None

    def set(self, key: str, value: Record) -> None:
        with self._io_lock:
            self._load()[key] = dict(value)
            self._persist()

    def delete(self, key: str) -> bool:
        with self._io_lock:
            removed = self._load().pop(key, None) is not None
            if removed:
                self._persist()
            return removed

    def lock(self, key: str):
        return self._locks.hold(key)


@dataclass
class SupabaseStore:
    """Records kept in a ``(key text primary key, payload jsonb)`` Supabase table."""

    gateway: SupabaseGateway
    table_name: str
    _locks: _KeyLocks = field(default_factory=_KeyLocks, repr=False)

    def get(self, key: str) -> Optional[Record]:
        response = self.gateway.table(self.table_name).select("payload").eq("key", key).limit(1).execute()
        rows = response.data or []
        if not rows:
            return None
        return dict(rows[0].get("payload") or {})

    def set(self, key: str, value: Record) -> None:
        self.gateway.table(self.table_name).upsert({"key": key, "payload": value}, on_conflict="key").execute()

    def delete(self, key: str) -> bool:
        response = self.gateway.table(self.table_name).delete().eq("key", key).execute()
        return bool(response.data)

    def lock(self, key: str):
        return self._locks.hold(key)


__all__ = ["InMemoryStore", "JsonFileStore", "KeyValueStore", "Record", "SupabaseStore"]
