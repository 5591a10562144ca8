from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class FileStorage:
    """Durable key/value storage, one JSON file per key under `root`."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self.root / f"{safe}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read storage key %s: %s", key, e)
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class MemoryStorage:
    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


def read_state(storage: KeyValueStorage, key: str) -> dict[str, Any] | None:
    """Read a `{"state": ..., "version": n}` document written by `write_state`."""
    raw = storage.get_item(key)
    if raw is None:
        return None
    try:
        document = json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable storage document for key %s", key)
        return None
    state = document.get("state") if isinstance(document, dict) else None
    return state if isinstance(state, dict) else None


def write_state(storage: KeyValueStorage, key: str, state_json: str, *, version: int = 0) -> None:
    storage.set_item(key, f'{{"state": {state_json}, "version": {version}}}')
