"""Public error exports for reviewsync."""

from __future__ import annotations

from .exceptions import (
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
    is_transient,
    map_http_error,
)

__all__ = [
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
    "is_transient",
    "map_http_error",
]
