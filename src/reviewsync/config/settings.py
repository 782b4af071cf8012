"""Client settings for reviewsync."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlparse

from reviewsync.errors import InvalidArgumentError

ENV_API_URL = "REVIEWSYNC_API_URL"
ENV_DOCUMENTS_DIR = "REVIEWSYNC_DOCUMENTS_DIR"
ENV_QUEUE_FILE = "REVIEWSYNC_QUEUE_FILE"
ENV_TIMEOUT = "REVIEWSYNC_TIMEOUT"
ENV_MAX_RETRIES = "REVIEWSYNC_MAX_RETRIES"


@dataclass(slots=True, frozen=True)
class ClientSettings:
    """
    Settings shared by the remote controller, the queue store and the
    local review path convention.

    Attributes:
        api_url: Base URL of the movies service (http or https).
        documents_dir: Directory where recorded reviews are staged.
        queue_file: JSON file backing the operation queue. Defaults to
            ``<documents_dir>/operations.json``.
        timeout_sec: Per-request timeout.
        max_retries: Retries for transient failures (0 disables retrying).
        initial_delay_sec: First backoff delay; doubled on every retry.
    """

    api_url: str
    documents_dir: str = "."
    queue_file: Optional[str] = None
    timeout_sec: float = 10.0
    max_retries: int = 3
    initial_delay_sec: float = 0.5

    def __post_init__(self) -> None:
        if not isinstance(self.api_url, str) or not self.api_url.strip():
            raise InvalidArgumentError("api_url must be a non-empty string")

        parsed = urlparse(self.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidArgumentError(
                "api_url must be an absolute http(s) URL",
                details={"api_url": self.api_url},
            )

        if not isinstance(self.documents_dir, str) or not self.documents_dir.strip():
            raise InvalidArgumentError("documents_dir must be a non-empty string")

        if self.timeout_sec <= 0:
            raise InvalidArgumentError("timeout_sec must be positive")
        if self.max_retries < 0:
            raise InvalidArgumentError("max_retries must be >= 0")
        if self.initial_delay_sec < 0:
            raise InvalidArgumentError("initial_delay_sec must be >= 0")

    @property
    def base_url(self) -> str:
        """api_url without a trailing slash."""
        return self.api_url.rstrip("/")

    @property
    def resolved_queue_file(self) -> str:
        if self.queue_file:
            return self.queue_file
        return os.path.join(self.documents_dir, "operations.json")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        """
        Build settings from environment variables.

        Required: REVIEWSYNC_API_URL.
        Optional: REVIEWSYNC_DOCUMENTS_DIR, REVIEWSYNC_QUEUE_FILE,
        REVIEWSYNC_TIMEOUT, REVIEWSYNC_MAX_RETRIES.
        """
        env = os.environ if environ is None else environ

        api_url = env.get(ENV_API_URL, "").strip()
        if not api_url:
            raise InvalidArgumentError(f"Missing env var: {ENV_API_URL}")

        kwargs: dict[str, object] = {"api_url": api_url}

        documents_dir = env.get(ENV_DOCUMENTS_DIR, "").strip()
        if documents_dir:
            kwargs["documents_dir"] = documents_dir

        queue_file = env.get(ENV_QUEUE_FILE, "").strip()
        if queue_file:
            kwargs["queue_file"] = queue_file

        timeout = env.get(ENV_TIMEOUT, "").strip()
        if timeout:
            kwargs["timeout_sec"] = _parse_number(ENV_TIMEOUT, timeout, float)

        retries = env.get(ENV_MAX_RETRIES, "").strip()
        if retries:
            kwargs["max_retries"] = _parse_number(ENV_MAX_RETRIES, retries, int)

        return cls(**kwargs)  # type: ignore[arg-type]


def _parse_number(name: str, raw: str, kind: type) -> float | int:
    try:
        return kind(raw)
    except ValueError as exc:
        raise InvalidArgumentError(
            f"Invalid value for {name}",
            details={"value": raw},
            cause=exc,
        ) from exc
