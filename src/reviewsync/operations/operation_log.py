"""OperationLog: ordered pending operations mirrored to a QueueStore."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from reviewsync.errors import StorageError

from .kinds import OperationKind
from .operation import Operation
from .store import QueueStore

logger = logging.getLogger(__name__)


class OperationLog:
    """
    In-memory ordered sequence of pending operations.

    Invariants:
        - At most one Operation per entity id.
        - Insertion order is execution order on drain.
        - Every mutation is mirrored to the store before the coroutine returns.

    Each mutation updates the in-memory list before its first await, so it is
    atomic with respect to other tasks on the same event loop. A failed store
    write is logged and the in-memory log stays authoritative; a restart
    before the next successful write may lose the change.
    """

    def __init__(self, store: QueueStore) -> None:
        self._store = store
        self._ops: list[Operation] = []
        self.last_persist_failed = False

    # ----------------------------
    # Read APIs
    # ----------------------------
    def snapshot(self) -> tuple[Operation, ...]:
        return tuple(self._ops)

    def get(self, entity_id: str) -> Optional[Operation]:
        for op in self._ops:
            if op.entity_id == entity_id:
                return op
        return None

    def __len__(self) -> int:
        return len(self._ops)

    def __contains__(self, entity_id: object) -> bool:
        return any(op.entity_id == entity_id for op in self._ops)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.snapshot())

    # ----------------------------
    # Mutations
    # ----------------------------
    async def load(self) -> tuple[Operation, ...]:
        """
        Replace the in-memory log with the store's contents.

        Undecodable entries are skipped; for duplicate entity ids only the
        last entry survives, as if each had been appended in turn.

        Raises:
            StorageError: if the store cannot be read.
        """
        raw_entries = await self._store.get_operations()

        ops: list[Operation] = []
        for index, raw in enumerate(raw_entries):
            try:
                op = Operation.from_dict(raw)
            except ValueError as exc:
                logger.warning("Skipping invalid queued operation #%d: %s", index, exc)
                continue
            ops = [o for o in ops if o.entity_id != op.entity_id]
            ops.append(op)

        self._ops = ops
        logger.debug("Loaded %d queued operation(s)", len(ops))
        return self.snapshot()

    async def append(self, op: Operation) -> None:
        """Drop any queued operation for the same entity, then append ``op``."""
        self._ops = [o for o in self._ops if o.entity_id != op.entity_id]
        self._ops.append(op)
        logger.debug("Queued %s for %s", op.kind.value, op.entity_id)
        await self._persist()

    async def remove(self, entity_id: str) -> Optional[Operation]:
        """Remove the queued operation for ``entity_id``; returns it, or None."""
        removed = self.get(entity_id)
        if removed is None:
            return None

        self._ops = [o for o in self._ops if o.entity_id != entity_id]
        logger.debug("Removed queued %s for %s", removed.kind.value, entity_id)
        await self._persist()
        return removed

    async def cancel_if_queued(self, entity_id: str, kind: OperationKind) -> bool:
        """
        Cancel the queued operation for ``entity_id`` if it is of ``kind``.

        Returns:
            True when cancelled (no remote call is needed), False when nothing
            of that kind is queued for the entity.
        """
        queued = self.get(entity_id)
        if queued is None or queued.kind is not kind:
            return False

        self._ops = [o for o in self._ops if o.entity_id != entity_id]
        logger.debug("Cancelled queued %s for %s", kind.value, entity_id)
        await self._persist()
        return True

    async def drain_all(self) -> tuple[Operation, ...]:
        """
        Take every queued operation and clear the log and its persisted copy.

        Draining an empty log does not touch the store.
        """
        drained = self.snapshot()
        if not drained:
            return drained

        self._ops = []
        logger.debug("Drained %d queued operation(s)", len(drained))
        await self._persist()
        return drained

    async def restore(self, ops: Iterable[Operation]) -> list[Operation]:
        """
        Put drained operations back at the front of the log, in order.

        Entities that were queued again while the drain ran keep their newer
        entry. Returns the operations actually restored.
        """
        restored: list[Operation] = []
        seen: set[str] = set()
        for op in ops:
            if op.entity_id in self or op.entity_id in seen:
                continue
            seen.add(op.entity_id)
            restored.append(op)

        if not restored:
            return restored

        self._ops = restored + self._ops
        logger.debug("Restored %d operation(s) to the queue", len(restored))
        await self._persist()
        return restored

    # ----------------------------
    # Internals
    # ----------------------------
    async def _persist(self) -> None:
        payload = [op.to_dict() for op in self._ops]
        try:
            await self._store.save_operations(payload)
        except StorageError as exc:
            self.last_persist_failed = True
            logger.warning(
                "Failed to persist %d queued operation(s); keeping them in memory: %s",
                len(payload),
                exc,
            )
            return
        self.last_persist_failed = False
