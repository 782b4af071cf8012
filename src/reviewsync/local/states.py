"""Per-entity review state: Confirmed | PendingCreate | PendingDelete."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SyncState(str, Enum):
    SYNCED = "synced"
    PENDING_CREATE = "pending_create"
    PENDING_DELETE = "pending_delete"


@dataclass(slots=True, frozen=True)
class Confirmed:
    """Remote state is known; ``url`` is None when the movie has no review."""

    url: Optional[str] = None

    @property
    def sync_state(self) -> SyncState:
        return SyncState.SYNCED


@dataclass(slots=True, frozen=True)
class PendingCreate:
    """A recorded review not yet confirmed; playable from ``local_path``."""

    local_path: str

    @property
    def sync_state(self) -> SyncState:
        return SyncState.PENDING_CREATE


@dataclass(slots=True, frozen=True)
class PendingDelete:
    """A deletion not yet confirmed; the review is already hidden."""

    @property
    def sync_state(self) -> SyncState:
        return SyncState.PENDING_DELETE


ReviewState = Union[Confirmed, PendingCreate, PendingDelete]


def is_pending(state: ReviewState) -> bool:
    return not isinstance(state, Confirmed)
