"""
Key-value persistence for tokensync.

The selection store, commit signature and remembered credential all live in
a small key-value store. ``JsonFileKeyValueStore`` keeps them in one JSON
object on disk; ``MemoryKeyValueStore`` keeps them in a dict.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Error from key-value store operations."""

    pass


class KeyValueStore(Protocol):
    """
    Minimal persistent key-value contract.

    Implementations may raise StoreError (or OSError) on any call; callers
    decide how to degrade.
    """

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process store, used for tests and embedding."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileKeyValueStore:
    """
    Store backed by a single JSON object file.

    Every write rewrites the whole file atomically (temp file + replace), so a
    crash mid-write never leaves a truncated store behind.

    Example:
        >>> store = JsonFileKeyValueStore(Path("/tmp/tokensync/store.json"))
        >>> store.set("gh.selected", {"owner": "acme"})
        >>> store.get("gh.selected")
        {'owner': 'acme'}
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StoreError(f"Failed to parse {self.path}: {e}")
        except OSError as e:
            raise StoreError(f"Failed to read {self.path}: {e}")
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} does not contain a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=".store_",
            suffix=".json.tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(temp_path, self.path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StoreError(f"Failed to write {self.path}: {e}")

    def get(self, key: str) -> Any:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        logger.debug("Stored %s in %s", key, self.path)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
