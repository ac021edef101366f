"""
Persistent key-value storage used by every discovery component.

Values are plain strings; components serialize their state to JSON before
writing. Backends raise StoreReadError / StoreWriteError, and the helpers
here turn those into StoreResult values so callers can fall back to defaults.
"""
import json
import re
from pathlib import Path
from typing import Any, Dict, Optional

from .models import StoreResult


VIEWS_KEY = "animal_views"
QUIZ_STATS_KEY = "animal_atlas_quiz_stats"

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StoreError(Exception):
    """Base exception for persistent store errors."""
    pass


class StoreReadError(StoreError):
    """Raised when a stored value cannot be read or parsed."""
    pass


class StoreWriteError(StoreError):
    """Raised when a value cannot be persisted."""
    pass


class PersistentStore:
    """Durable string key -> string value store with synchronous access."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None if the key is absent."""
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        """Remove the key. Deleting a missing key is not an error."""
        raise NotImplementedError


class MemoryStore(PersistentStore):
    """In-process store, used for tests and throwaway runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StoreWriteError(f"Value for '{key}' must be a string")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class FileStore(PersistentStore):
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: str = "./data/"):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StoreError(f"Invalid store key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            if not path.exists():
                return None
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except PermissionError:
            raise StoreReadError(f"Permission denied: Cannot read {path}")
        except OSError as e:
            raise StoreReadError(f"Failed to read {path}: {e}")

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                f.write(value)
            tmp_path.replace(path)
        except PermissionError:
            raise StoreWriteError(f"Permission denied: Cannot write {path}")
        except OSError as e:
            raise StoreWriteError(f"Failed to write {path}: {e}")

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreWriteError(f"Failed to delete {path}: {e}")


def read_json(store: PersistentStore, key: str, default: Any = None) -> StoreResult:
    """
    Read and decode a JSON value.

    A missing key is a successful read of ``default``. Backend errors and
    unparseable values are returned as failures.
    """
    try:
        raw = store.get(key)
    except StoreError as e:
        return StoreResult.fail(str(e))

    if raw is None:
        return StoreResult.ok(default)

    try:
        return StoreResult.ok(json.loads(raw))
    except (json.JSONDecodeError, TypeError) as e:
        return StoreResult.fail(f"Corrupt value under '{key}': {e}")


def write_json(store: PersistentStore, key: str, value: Any) -> StoreResult:
    """Encode ``value`` as JSON and persist it under ``key``."""
    try:
        payload = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        return StoreResult.fail(f"Cannot serialize value for '{key}': {e}")

    try:
        store.set(key, payload)
    except StoreError as e:
        return StoreResult.fail(str(e))
    return StoreResult.ok(value)


def delete_key(store: PersistentStore, key: str) -> StoreResult:
    try:
        store.delete(key)
    except StoreError as e:
        return StoreResult.fail(str(e))
    return StoreResult.ok()
