"""Movies service controller (remote collaborator of the sync coordinator)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import httpx

from reviewsync.config import ClientSettings
from reviewsync.errors import (
    ApiError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    ReviewSyncError,
    is_transient,
    map_http_error,
)
from reviewsync.models import Movie

from .endpoints import (
    REVIEW_CONTENT_TYPE,
    REVIEW_FORM_FIELD,
    SAVED_MOVIES_PATH,
    review_filename,
    review_path,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 0.5


class MoviesController:
    """
    Async client for the movies service.

    Notes:
        - The underlying ``httpx.AsyncClient`` is NOT exposed.
        - Every public call maps failures to reviewsync errors; transient
          failures are retried with exponential backoff first.
    """

    def __init__(self, settings: ClientSettings) -> None:
        self._retry_policy = _RetryPolicy(
            max_retries=settings.max_retries,
            initial_delay_sec=settings.initial_delay_sec,
        )
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=httpx.Timeout(settings.timeout_sec),
        )
        self._owns_client = True

    @classmethod
    def from_client(
        cls,
        client: httpx.AsyncClient,
        *,
        max_retries: int = 0,
        initial_delay_sec: float = 0.0,
    ) -> "MoviesController":
        """Create controller from a pre-built client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._retry_policy = _RetryPolicy(
            max_retries=max_retries,
            initial_delay_sec=initial_delay_sec,
        )
        obj._client = client
        obj._owns_client = False
        return obj

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "MoviesController":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ----------------------------
    # Public API
    # ----------------------------
    async def list_saved(self) -> list[Movie]:
        """GET /movies/saved."""
        response = await self._execute(lambda: self._client.get(SAVED_MOVIES_PATH))
        payload = _json_body(response)
        if not isinstance(payload, list):
            raise ApiError(
                "Saved movies response must be a list",
                details={"status_code": response.status_code},
            )

        movies: list[Movie] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            try:
                movies.append(Movie.from_dict(item))
            except ValueError as exc:
                logger.warning("Skipping malformed movie in saved list: %s", exc)
        return movies

    async def upload_review(self, movie_id: str, local_path: str) -> str:
        """
        POST /movies/{id}/review with the staged audio as multipart form data.

        Returns:
            The remote ``reviewUrl``.

        Raises:
            InvalidArgumentError: if the staged audio file cannot be read.
        """
        if not movie_id:
            raise InvalidArgumentError("movie_id must be a non-empty string")

        try:
            content = await asyncio.to_thread(Path(local_path).read_bytes)
        except OSError as exc:
            raise InvalidArgumentError(
                "Staged review audio is not readable",
                details={"movie_id": movie_id, "local_path": local_path},
                cause=exc,
            ) from exc

        files = {
            REVIEW_FORM_FIELD: (review_filename(movie_id), content, REVIEW_CONTENT_TYPE),
        }
        response = await self._execute(
            lambda: self._client.post(review_path(movie_id), files=files)
        )

        payload = _json_body(response)
        review_url = payload.get("reviewUrl") if isinstance(payload, dict) else None
        if not isinstance(review_url, str) or not review_url:
            raise ApiError(
                "Upload response is missing reviewUrl",
                details={"movie_id": movie_id, "status_code": response.status_code},
            )
        return review_url

    async def delete_review(self, movie_id: str) -> None:
        """DELETE /movies/{id}/review (expects 204)."""
        if not movie_id:
            raise InvalidArgumentError("movie_id must be a non-empty string")
        await self._execute(lambda: self._client.delete(review_path(movie_id)))

    # ----------------------------
    # Internals
    # ----------------------------
    async def _execute(self, send: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                response = await send()
                response.raise_for_status()
                return response
            except Exception as exc:
                mapped = _map_exception(exc)
                if is_transient(mapped) and attempt < self._retry_policy.max_retries:
                    logger.warning(
                        "Transient movies API failure (%s), retry %d/%d in %.2fs",
                        mapped.__class__.__name__,
                        attempt + 1,
                        self._retry_policy.max_retries,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")


def _map_exception(exc: Exception) -> ReviewSyncError:
    if isinstance(exc, ReviewSyncError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        info = _http_error_to_info(exc.response)
        return map_http_error(info, cause=exc)

    if isinstance(exc, (httpx.TransportError, OSError, TimeoutError)):
        return NetworkError("Network error", cause=exc)

    return ApiError("Movies API error", cause=exc)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ApiError(
            "Movies API returned invalid JSON",
            details={"status_code": response.status_code},
            cause=exc,
        ) from exc


def _http_error_to_info(response: httpx.Response) -> HttpErrorInfo:
    message: Optional[str] = None
    details: dict[str, Any] = {"url": str(response.request.url)}

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                message = value
                break

    return HttpErrorInfo(
        status_code=response.status_code,
        reason=response.reason_phrase or None,
        message=message,
        details=details,
    )
