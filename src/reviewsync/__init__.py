"""reviewsync public API."""

from __future__ import annotations

import logging

from reviewsync.config import ClientSettings
from reviewsync.connectivity import ConnectivityEvent, ConnectivityObserver, Subscription
from reviewsync.controller import MoviesController
from reviewsync.coordinator import SyncCoordinator
from reviewsync.errors import (
    ApiError,
    AuthError,
    ConflictError,
    ForbiddenError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidStateError,
    NetworkError,
    NetworkUnavailableError,
    NotFoundError,
    PayloadTooLargeError,
    PermissionDeniedError,
    RateLimitError,
    ReviewSyncError,
    StorageError,
    SyncFailedError,
    map_http_error,
)
from reviewsync.local import (
    Confirmed,
    EntityStateProjection,
    PendingCreate,
    PendingDelete,
    ReviewPaths,
    SyncState,
)
from reviewsync.models import DrainResult, Movie, OperationResult
from reviewsync.operations import (
    JsonFileQueueStore,
    MemoryQueueStore,
    Operation,
    OperationKind,
    OperationLog,
)
from reviewsync.session import ReviewSession

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # High-level
    "ReviewSession",
    "SyncCoordinator",
    "MoviesController",
    "ClientSettings",
    # Queue
    "Operation",
    "OperationKind",
    "OperationLog",
    "MemoryQueueStore",
    "JsonFileQueueStore",
    # State
    "EntityStateProjection",
    "ReviewPaths",
    "Confirmed",
    "PendingCreate",
    "PendingDelete",
    "SyncState",
    "ConnectivityObserver",
    "ConnectivityEvent",
    "Subscription",
    # Models
    "Movie",
    "OperationResult",
    "DrainResult",
    # Errors
    "ReviewSyncError",
    "PermissionDeniedError",
    "NetworkUnavailableError",
    "SyncFailedError",
    "StorageError",
    "InvalidStateError",
    "InvalidArgumentError",
    "AuthError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "PayloadTooLargeError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
