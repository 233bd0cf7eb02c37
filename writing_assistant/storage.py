"""
Key-value persistence backends.

The composer only needs ``get(key, default)`` / ``set(key, value)`` with
JSON-serializable values and no transactional guarantees. Read failures are
logged and reported as a missing value; write failures raise ``StorageError``.
"""

from __future__ import annotations

import copy
import json
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from redis import Redis, RedisError, from_url as redis_from_url

from writing_assistant.config import StorageConfig
from writing_assistant.exceptions import StorageError

NOTES_KEY = "composer-notes"
DOCUMENT_GOAL_KEY = "document-goal"


class KeyValueStorage:
    """Interface for scoped key-value storage."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """Process-local storage. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so non-serializable values fail like the other backends
        try:
            self._data[key] = json.loads(json.dumps(value))
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key!r} is not JSON-serializable: {e}") from e


class JsonFileStorage(KeyValueStorage):
    """All keys kept in a single JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self.path}: top-level value is not an object")
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
                os.replace(tmp_path, self.path)
            except (OSError, TypeError, ValueError) as e:
                raise StorageError(f"Failed to write {key!r} to {self.path}: {e}") from e


class RedisStorage(KeyValueStorage):
    """Values stored as JSON strings under ``<prefix><key>``."""

    def __init__(self, client: Redis, key_prefix: str = "") -> None:
        self.client = client
        self.key_prefix = key_prefix

    def _redis_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str, default: Any = None) -> Any:
        try:
            raw = self.client.get(self._redis_key(key))
        except RedisError as e:
            logger.warning(f"Redis read failed for {key!r}: {e}")
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Ignoring corrupt Redis value for {key!r}: {e}")
            return default

    def set(self, key: str, value: Any) -> None:
        try:
            self.client.set(self._redis_key(key), json.dumps(value))
        except (RedisError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {key!r} to Redis: {e}") from e


def create_storage(cfg: StorageConfig) -> KeyValueStorage:
    """Build the storage backend selected in configuration."""
    if cfg.backend == "memory":
        return MemoryStorage()
    if cfg.backend == "redis":
        redis_url = cfg.redis_url
        # Append db if not provided (use cfg.redis_db)
        if redis_url.rstrip("/").count("/") == 2:
            redis_url = f"{redis_url}/{cfg.redis_db}"
        return RedisStorage(redis_from_url(redis_url), key_prefix=cfg.key_prefix)
    return JsonFileStorage(cfg.file_path)
