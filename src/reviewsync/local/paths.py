"""Deterministic staging paths for recorded reviews."""

from __future__ import annotations

import logging
import os

from reviewsync.controller.endpoints import review_filename

logger = logging.getLogger(__name__)


class ReviewPaths:
    """
    ``<documents_dir>/<movie_id>.mp3`` is both the recording target and the
    review URL shown while an upload is pending.
    """

    def __init__(self, documents_dir: str) -> None:
        if not documents_dir:
            raise ValueError("documents_dir must be a non-empty string")
        self.documents_dir = documents_dir

    def review_path(self, movie_id: str) -> str:
        if not movie_id or os.sep in movie_id or (os.altsep and os.altsep in movie_id):
            raise ValueError(f"Invalid movie id for a review path: {movie_id!r}")
        return os.path.join(self.documents_dir, review_filename(movie_id))

    def ensure_dir(self) -> None:
        os.makedirs(self.documents_dir, exist_ok=True)

    def exists(self, movie_id: str) -> bool:
        return os.path.isfile(self.review_path(movie_id))

    def discard(self, movie_id: str) -> bool:
        """Remove the staged review. Returns False if there was nothing to remove."""
        path = self.review_path(movie_id)
        try:
            os.unlink(path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Failed to remove staged review %s: %s", path, exc)
            return False
        return True
