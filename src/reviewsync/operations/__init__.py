"""Public operation-queue exports for reviewsync."""

from __future__ import annotations

from .kinds import OperationKind
from .operation import Operation
from .operation_log import OperationLog
from .store import OPERATIONS_KEY, JsonFileQueueStore, MemoryQueueStore, QueueStore

__all__ = [
    "OperationKind",
    "Operation",
    "OperationLog",
    "QueueStore",
    "MemoryQueueStore",
    "JsonFileQueueStore",
    "OPERATIONS_KEY",
]
