"""Key-value backends for partial records: SQLite (primary), filesystem (fallback), in-memory."""

import os
import sqlite3
import threading
import time
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Protocol, runtime_checkable

from common.exceptions import BackendError
from store.database import get_db_connection, init_database


@runtime_checkable
class StorageBackend(Protocol):
    """
    Minimal key-value contract every backend honours.

    Failures are reported by raising BackendError; an absent key is not a
    failure and is reported as None by get.
    """

    name: str

    def put(self, key: str, body: bytes) -> None:
        ...

    def list(self, prefix: str) -> List[str]:
        ...

    def get(self, key: str) -> Optional[bytes]:
        ...


class SQLiteBackend:
    """
    Durable backend storing each key as one row of an SQLite table.
    Every call opens its own connection, so threads never share one.
    """

    name = "sqlite"

    def __init__(self, db_path: str):
        """
        Initialize backend. The schema is created lazily on first use so an
        unreachable database only fails the calls that touch it.

        Args:
            db_path: Path to the SQLite file
        """
        self.db_path = db_path
        self._initialized = False
        self._init_lock = threading.Lock()

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if not self._initialized:
                init_database(self.db_path)
                self._initialized = True

    def put(self, key: str, body: bytes) -> None:
        try:
            self._ensure_initialized()
            with get_db_connection(self.db_path) as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO partials (key, body, updated_at) VALUES (?, ?, ?)",
                    (key, body, time.time())
                )
                conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise BackendError(f"sqlite put failed for {key}: {e}") from e

    def list(self, prefix: str) -> List[str]:
        try:
            self._ensure_initialized()
            with get_db_connection(self.db_path) as conn:
                rows = conn.execute(
                    "SELECT key FROM partials WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix)
                ).fetchall()
        except (sqlite3.Error, OSError) as e:
            raise BackendError(f"sqlite list failed for {prefix}: {e}") from e
        return [row["key"] for row in rows]

    def get(self, key: str) -> Optional[bytes]:
        try:
            self._ensure_initialized()
            with get_db_connection(self.db_path) as conn:
                row = conn.execute(
                    "SELECT body FROM partials WHERE key = ?", (key,)
                ).fetchone()
        except (sqlite3.Error, OSError) as e:
            raise BackendError(f"sqlite get failed for {key}: {e}") from e
        if row is None:
            return None
        return bytes(row["body"])


class FilesystemBackend:
    """
    Ephemeral backend mapping each key to a file below a root directory.
    Writes go through a temporary file and an atomic rename, so a reader
    sees either the previous body or the new one.
    """

    name = "filesystem"

    def __init__(self, root: str):
        self.root = Path(root)

    def _resolve(self, key: str) -> Path:
        """
        Map a key to a path, refusing keys that escape the root.

        Raises:
            BackendError: If the key resolves outside the root directory
        """
        root = self.root.resolve()
        path = (root / key).resolve()
        try:
            path.relative_to(root)
        except ValueError:
            raise BackendError(f"Key escapes storage root: {key}")
        return path

    def put(self, key: str, body: bytes) -> None:
        path = self._resolve(key)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(body)
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise BackendError(f"filesystem put failed for {key}: {e}") from e

    def list(self, prefix: str) -> List[str]:
        directory, _, name_prefix = prefix.rpartition("/")
        dir_path = self._resolve(directory) if directory else self.root
        if not dir_path.is_dir():
            return []

        keys = []
        try:
            for entry in sorted(dir_path.iterdir()):
                if entry.name.startswith(".") or not entry.name.startswith(name_prefix):
                    continue
                if entry.is_file():
                    keys.append(f"{directory}/{entry.name}" if directory else entry.name)
        except OSError as e:
            raise BackendError(f"filesystem list failed for {prefix}: {e}") from e
        return keys

    def get(self, key: str) -> Optional[bytes]:
        path = self._resolve(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise BackendError(f"filesystem get failed for {key}: {e}") from e


class InMemoryBackend:
    """
    Dictionary backend guarded by a lock. Contents vanish with the process.
    """

    name = "memory"

    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def put(self, key: str, body: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(body)

    def list(self, prefix: str) -> List[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)
