"""Document storage and per-key locking.

A document is a JSON array of records, addressed by a short key such as
``users`` or ``tasks_<owner_id>``. Documents are always read and written
whole; writes replace the previous version atomically.
"""

import copy
import json
import logging
import os
import re
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Protocol

from taskmanager.errors import CorruptionError, StorageError

logger = logging.getLogger(__name__)

Record = dict[str, Any]

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_key(key: str) -> str:
    """Reject keys that could escape the data directory."""
    if not isinstance(key, str) or not _KEY_PATTERN.match(key):
        raise StorageError(f"Invalid document key: {key!r}")
    return key


class DocumentStore(Protocol):
    """Whole-document persistence used by the stores."""

    def read(self, key: str) -> list[Record]:
        """Return the document for ``key``; a missing document is empty."""
        ...

    def write(self, key: str, records: list[Record]) -> None:
        """Replace the document for ``key`` as one atomic unit."""
        ...


class JsonFileDocumentStore:
    """One pretty-printed JSON file per key under ``data_dir``."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{validate_key(key)}.json"

    def read(self, key: str) -> list[Record]:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Failed to read {path.name}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt document {path}: {e}")
            raise CorruptionError(f"Document {path.name} is not valid JSON") from e

        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            logger.error(f"Corrupt document {path}: expected an array of objects")
            raise CorruptionError(f"Document {path.name} is not an array of records")
        return data

    def write(self, key: str, records: list[Record]) -> None:
        path = self.path_for(key)
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{path.stem}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {path.name}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning(f"Could not remove temp file {tmp_name}")


class InMemoryDocumentStore:
    """Dict-backed store for tests; copies on the way in and out."""

    def __init__(self, documents: dict[str, list[Record]] | None = None):
        self.documents: dict[str, list[Record]] = copy.deepcopy(documents or {})

    def read(self, key: str) -> list[Record]:
        return copy.deepcopy(self.documents.get(validate_key(key), []))

    def write(self, key: str, records: list[Record]) -> None:
        self.documents[validate_key(key)] = copy.deepcopy(records)


class KeyedLocks:
    """Lazily created mutex per key.

    Holders of different keys never contend. Acquisition is bounded by
    ``timeout`` seconds and surfaces as StorageError when exceeded. A key's
    lock is dropped once no thread holds or waits for it.
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}
        self._guard = threading.Lock()

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._checkout(key)
        try:
            if not lock.acquire(timeout=self.timeout):
                raise StorageError(f"Timed out waiting for lock on {key}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(key)
