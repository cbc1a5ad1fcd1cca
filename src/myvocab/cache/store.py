"""Key-value persistence backing the response cache.

:class:`JsonFileStore` keeps one JSON document per namespace and rewrites it
atomically (temp file + ``os.replace``) so a crash never leaves a partial
entry behind. :class:`MemoryStore` is the non-persistent equivalent.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class MemoryStore:
    """Process-local store; contents vanish with the process."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return self._data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()

    def close(self) -> None:
        """No handle to release."""

    def __len__(self) -> int:
        return len(self._data)


class JsonFileStore:
    """Durable store persisted as a single JSON object on disk.

    The file is read lazily on first access. Writes are serialized by an
    asyncio lock; each one rewrites the whole document atomically.

    Args:
        path: Location of the JSON document. Parent directories are created
            on first write.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: dict[str, Any] | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data
        self._data = {}
        if self._path.is_file():
            try:
                with open(self._path, encoding="utf-8") as f:
                    raw = json.load(f)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Ignoring corrupt store file %s: %s", self._path, exc)
            else:
                if isinstance(raw, dict):
                    self._data = raw
                else:
                    logger.warning("Ignoring store file %s: top level is not an object", self._path)
        return self._data

    def _flush(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        os.replace(tmp_path, self._path)

    async def get(self, key: str) -> Any | None:
        return self._load().get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            data = {**self._load(), key: value}
            self._flush(data)
            self._data = data

    async def delete(self, key: str) -> None:
        async with self._lock:
            current = self._load()
            if key in current:
                data = {k: v for k, v in current.items() if k != key}
                self._flush(data)
                self._data = data

    async def clear(self) -> None:
        async with self._lock:
            self._data = {}
            if self._path.is_file():
                self._path.unlink()

    def close(self) -> None:
        """Drop the in-memory copy; the next access re-reads the file."""
        self._data = None
