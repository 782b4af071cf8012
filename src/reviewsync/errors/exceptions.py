"""Exception hierarchy and HTTP error mapping for reviewsync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class ReviewSyncError(Exception):
    """
    Base exception for reviewsync.

    Attributes:
        details: Optional structured information (e.g., HTTP status, movie id).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class PermissionDeniedError(ReviewSyncError):
    """Raised when a device capability (microphone) is not granted."""


class NetworkUnavailableError(ReviewSyncError):
    """Raised when the connectivity observer reports the device as offline."""


class SyncFailedError(ReviewSyncError):
    """Raised when a direct remote effect failed and was not queued."""


class StorageError(ReviewSyncError):
    """Raised when the persistent queue store cannot be read or written."""


class InvalidStateError(ReviewSyncError):
    """Raised when an action is not allowed in the entity's current state."""


class InvalidArgumentError(ReviewSyncError):
    """Raised when arguments are invalid (HTTP 400/422, bad config, etc.)."""


class AuthError(ReviewSyncError):
    """Raised when the remote service rejects the credentials (HTTP 401)."""


class ForbiddenError(ReviewSyncError):
    """Raised when access is denied by the remote service (HTTP 403)."""


class NotFoundError(ReviewSyncError):
    """Raised when a movie or review is not found (HTTP 404)."""


class ConflictError(ReviewSyncError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class PayloadTooLargeError(ReviewSyncError):
    """Raised when the uploaded review is rejected as too large (HTTP 413)."""


class RateLimitError(ReviewSyncError):
    """Raised when rate-limited (HTTP 429)."""


class NetworkError(ReviewSyncError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(ReviewSyncError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to reviewsync exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> ReviewSyncError:
    """
    Map an HTTP error to a reviewsync exception.

    Policy:
        - 400/422 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> ForbiddenError
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 413 -> PayloadTooLargeError
        - 429 -> RateLimitError
        - 5xx -> ApiError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code in (400, 422):
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        return ForbiddenError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 413:
        return PayloadTooLargeError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)


def is_transient(exc: BaseException) -> bool:
    """
    Return True if a failed remote call is worth retrying later.

    Network failures, rate limits and server-side (5xx) errors are transient;
    everything else needs a different request to succeed.
    """
    if isinstance(exc, (NetworkError, RateLimitError, NetworkUnavailableError)):
        return True
    if isinstance(exc, ApiError):
        status_code = exc.details.get("status_code")
        return isinstance(status_code, int) and 500 <= status_code <= 599
    return False
