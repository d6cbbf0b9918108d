"""Persistence for the latest parsed dashboard snapshot.

The backing store is a plain key -> text blob store with last-write-wins
semantics. ``SnapshotStore`` layers JSON (de)serialization of
``DashboardRecord`` on top and treats anything unreadable as "no prior data".
"""

from __future__ import annotations

import json
import logging
import os
import re
import sqlite3
import tempfile
import threading
import time
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from govdash.config import Settings
from govdash.models import DashboardRecord, record_from_dict, record_to_dict


logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Reading from or writing to the snapshot store failed."""


class BlobStore(Protocol):
    def put(self, key: str, value: str) -> None: ...

    def get(self, key: str) -> Optional[str]: ...


_SAFE_KEY = re.compile(r"[^A-Za-z0-9._-]+")


class FileBlobStore:
    """One UTF-8 file per key under ``root/name``."""

    def __init__(self, root: Union[str, Path], name: str = "dashboard-data") -> None:
        self._dir = Path(root).resolve() / name

    def _path(self, key: str) -> Path:
        safe = _SAFE_KEY.sub("_", key).strip("._") or "_"
        return self._dir / f"{safe}.json"

    def put(self, key: str, value: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        target = self._path(key)
        fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")


class SQLiteBlobStore:
    """Blobs kept in a single SQLite table, keyed by (store, key)."""

    def __init__(self, db_path: Union[str, Path], name: str = "dashboard-data") -> None:
        self._db_path = Path(db_path).resolve()
        self._name = name
        self._init_lock = threading.Lock()
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    def ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS blobs (
                      store TEXT NOT NULL,
                      key TEXT NOT NULL,
                      value TEXT NOT NULL,
                      updated_time REAL NOT NULL,
                      PRIMARY KEY (store, key)
                    )
                    """
                )
            self._initialized = True

    def put(self, key: str, value: str) -> None:
        self.ensure_initialized()
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO blobs (store, key, value, updated_time) VALUES (?, ?, ?, ?)",
                (self._name, key, value, time.time()),
            )

    def get(self, key: str) -> Optional[str]:
        self.ensure_initialized()
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM blobs WHERE store = ? AND key = ?", (self._name, key)).fetchone()
            return row["value"] if row else None


_STORE_LOCK = threading.Lock()
_STORE_CACHE: Dict[str, BlobStore] = {}


def get_blob_store(settings: Settings) -> BlobStore:
    """Return the configured backend, reusing one instance per location."""
    backend = (settings.store_backend or "file").strip().lower()
    if backend in ("file", "fs"):
        location = Path(settings.store_path).resolve()
    elif backend in ("sqlite", "sqlite3"):
        location = Path(settings.store_path)
        if location.suffix == "":
            location = location / "govdash.db"
        location = location.resolve()
    else:
        raise ValueError(f"Unsupported store backend: {settings.store_backend}")
    cache_key = f"{backend}:{location}|{settings.store_name}"
    with _STORE_LOCK:
        store = _STORE_CACHE.get(cache_key)
        if store is None:
            if backend in ("file", "fs"):
                store = FileBlobStore(location, settings.store_name)
            else:
                store = SQLiteBlobStore(location, settings.store_name)
            _STORE_CACHE[cache_key] = store
        return store


class SnapshotStore:
    """Save and load the latest ``DashboardRecord`` under a single key."""

    def __init__(self, blobs: BlobStore, key: str = "latest") -> None:
        self.blobs = blobs
        self.key = key

    def save(self, record: DashboardRecord) -> None:
        payload = json.dumps(record_to_dict(record), ensure_ascii=False)
        try:
            self.blobs.put(self.key, payload)
        except Exception as exc:
            logger.exception("saving snapshot %r failed", self.key)
            raise StoreError(f"save failed: {exc}") from exc
        logger.info("saved snapshot %r (%d bytes)", self.key, len(payload))

    def load_latest(self) -> Optional[DashboardRecord]:
        try:
            raw = self.blobs.get(self.key)
        except Exception as exc:
            logger.exception("reading snapshot %r failed", self.key)
            raise StoreError(f"read failed: {exc}") from exc
        if not raw or not raw.strip():
            return None
        try:
            return record_from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("stored snapshot %r is not a valid record (%s); treating as empty", self.key, exc)
            return None


def snapshot_store_from_settings(settings: Settings) -> SnapshotStore:
    return SnapshotStore(get_blob_store(settings), key=settings.store_key)
