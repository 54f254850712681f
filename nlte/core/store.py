"""
Per-user key-value storage.

Contacts and scheduled transfers are kept per wallet under a namespace.
The core only talks to ``KeyValueStore``; any backend can implement it.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def normalize_user_key(user_key: str) -> str:
    """Wallet addresses key the store; compare them case-insensitively."""

    return user_key.strip().lower()


class KeyValueStore(ABC):
    """Base storage interface"""

    @abstractmethod
    def get(self, user_key: str, namespace: str, default: Any = None) -> Any:
        """Return the value stored for (user, namespace) or ``default``."""
        pass

    @abstractmethod
    def set(self, user_key: str, namespace: str, value: Any) -> None:
        """Replace the value stored for (user, namespace)."""
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, user_key: str, namespace: str, default: Any = None) -> Any:
        bucket = self._data.get(normalize_user_key(user_key), {})
        if namespace not in bucket:
            return default
        return copy.deepcopy(bucket[namespace])

    def set(self, user_key: str, namespace: str, value: Any) -> None:
        bucket = self._data.setdefault(normalize_user_key(user_key), {})
        bucket[namespace] = copy.deepcopy(value)

    def clear(self) -> None:
        self._data.clear()


class JsonFileKeyValueStore(KeyValueStore):
    """Single JSON document on disk: ``{user_key: {namespace: value}}``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError:
            logger.error("Store file %s is not valid JSON; treating as empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, user_key: str, namespace: str, default: Any = None) -> Any:
        with self._lock:
            bucket = self._load().get(normalize_user_key(user_key), {})
        return bucket.get(namespace, default)

    def set(self, user_key: str, namespace: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data.setdefault(normalize_user_key(user_key), {})[namespace] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, sort_keys=True)
            tmp_path.replace(self.path)


def build_store(path: Optional[str] = None) -> KeyValueStore:
    if path:
        return JsonFileKeyValueStore(path)
    return InMemoryKeyValueStore()


__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "build_store",
    "normalize_user_key",
]
