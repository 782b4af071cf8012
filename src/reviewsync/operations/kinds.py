"""Queued operation kinds for reviewsync."""

from __future__ import annotations

from enum import Enum


class OperationKind(str, Enum):
    """Deferred remote effects. Values are the persisted ``type`` strings."""

    CREATE = "post"
    DELETE = "delete"
