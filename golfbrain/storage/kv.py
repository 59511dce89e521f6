"""Key-value persistence for the golf data aggregate.

The whole aggregate is stored as one JSON document under a single key.
Loads never raise: missing or unreadable documents come back as ``None``.
Saves are fire-and-forget; failures are logged and counted, never raised.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from golfbrain.config import get_settings
from golfbrain.metrics import STORE_SAVE_FAILURES

logger = logging.getLogger(__name__)

KEY_RE = r"[A-Za-z0-9][A-Za-z0-9_.-]{0,127}"


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[Dict[str, Any]]: ...

    def save(self, key: str, payload: Dict[str, Any]) -> None: ...


def _write_json_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(content, encoding="utf-8")
    tmp_path.replace(path)


class JsonFileStore(KeyValueStore):
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()

    def _path(self, key: str) -> Path:
        if not re.fullmatch(KEY_RE, key):
            raise ValueError(f"invalid store key '{key}'")
        return self.root / f"{key}.json"

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("failed to read stored data", extra={"key": key})
            return None
        return data if isinstance(data, dict) else None

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        try:
            _write_json_atomic(self._path(key), json.dumps(payload, indent=2))
        except Exception:
            STORE_SAVE_FAILURES.inc()
            logger.exception("failed to persist data", extra={"key": key})


class InMemoryStore(KeyValueStore):
    def __init__(self) -> None:
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._items.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        try:
            raw = json.dumps(payload)
        except (TypeError, ValueError):
            STORE_SAVE_FAILURES.inc()
            logger.exception("failed to persist data", extra={"key": key})
            return
        with self._lock:
            self._items[key] = raw


def create_store(backend: str | None = None) -> KeyValueStore:
    settings = get_settings()
    backend = (backend or settings.store_backend).strip().lower()
    if backend == "file":
        return JsonFileStore(settings.data_dir)
    if backend == "memory":
        return InMemoryStore()
    raise RuntimeError(f"Unsupported GOLFBRAIN_STORE_BACKEND '{backend}'")


__all__ = ["KeyValueStore", "JsonFileStore", "InMemoryStore", "create_store"]
