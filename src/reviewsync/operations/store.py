"""Durable key-value persistence for the pending-operation list."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from reviewsync.errors import StorageError

logger = logging.getLogger(__name__)

OPERATIONS_KEY: str = "operations"


class QueueStore(Protocol):
    """
    Persistence collaborator for the Operation Log.

    Entries are the JSON-serializable dicts produced by ``Operation.to_dict``.
    ``save_operations`` always overwrites the full list.
    """

    async def get_operations(self) -> list[dict[str, Any]]: ...

    async def save_operations(self, operations: list[dict[str, Any]]) -> None: ...


class MemoryQueueStore:
    """In-process store. Keeps encoded JSON so reloads see a fresh copy."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self.save_count = 0

    async def get_operations(self) -> list[dict[str, Any]]:
        raw = self._values.get(OPERATIONS_KEY)
        return json.loads(raw) if raw else []

    async def save_operations(self, operations: list[dict[str, Any]]) -> None:
        self._values[OPERATIONS_KEY] = json.dumps(operations)
        self.save_count += 1


class JsonFileQueueStore:
    """
    Key-value JSON file store.

    The file holds one JSON object; the queue lives under ``"operations"``.
    Writes go to a temp file in the same directory and are moved into place,
    so a crash never leaves a half-written queue behind. A corrupt file makes
    reads fail with StorageError and is replaced by the next write. File I/O
    runs in a worker thread to keep the event loop responsive.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get_operations(self) -> list[dict[str, Any]]:
        async with self._lock:
            data = await asyncio.to_thread(self._read)

        value = data.get(OPERATIONS_KEY, [])
        if not isinstance(value, list):
            raise StorageError(
                "Stored operations must be a list",
                details={"path": str(self._path)},
            )
        return value

    async def save_operations(self, operations: list[dict[str, Any]]) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write_key, OPERATIONS_KEY, list(operations))

    # ----------------------------
    # Internals (worker thread)
    # ----------------------------
    def _read(self) -> dict[str, Any]:
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            raise StorageError(
                "Queue store is not valid JSON",
                details={"path": str(self._path)},
                cause=exc,
            ) from exc
        except OSError as exc:
            raise StorageError(
                "Failed to read queue store",
                details={"path": str(self._path)},
                cause=exc,
            ) from exc

        if not isinstance(data, dict):
            raise StorageError(
                "Queue store must contain a JSON object",
                details={"path": str(self._path)},
            )
        return data

    def _write_key(self, key: str, value: Any) -> None:
        try:
            data = self._read()
        except StorageError as exc:
            logger.warning("Overwriting unreadable queue store %s: %s", self._path, exc)
            data = {}
        data[key] = value

        parent = self._path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(
                "Failed to write queue store",
                details={"path": str(self._path)},
                cause=exc,
            ) from exc
