"""Local state exports for reviewsync."""

from __future__ import annotations

from .paths import ReviewPaths
from .projection import EntityStateProjection, project
from .states import (
    Confirmed,
    PendingCreate,
    PendingDelete,
    ReviewState,
    SyncState,
    is_pending,
)

__all__ = [
    "EntityStateProjection",
    "project",
    "ReviewPaths",
    "ReviewState",
    "Confirmed",
    "PendingCreate",
    "PendingDelete",
    "SyncState",
    "is_pending",
]
