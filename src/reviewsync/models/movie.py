"""Data model for saved movies and their review resource."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from reviewsync.util.time import parse_optional_timestamp, to_rfc3339


@dataclass(slots=True, frozen=True)
class Movie:
    """
    A movie in the user's library as returned by ``GET /movies/saved``.

    Notes:
        - ``review_url`` is the remote-confirmed review location, or None when
          the movie has no review. The value shown to the user while a change
          is pending comes from the projection, not from this field.
        - Wire keys are camelCase (``posterUrl``, ``reviewUrl``, ...).
    """

    id: str
    title: str = ""
    rating: str = ""
    poster_url: str = ""
    review_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def with_review_url(self, review_url: Optional[str]) -> "Movie":
        """Return a copy with ``review_url`` replaced."""
        return dataclasses.replace(self, review_url=review_url)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Movie":
        """
        Build a Movie from its wire dict.

        Raises:
            ValueError: if ``id`` is missing or not a non-empty string.
        """
        movie_id = data.get("id")
        if isinstance(movie_id, int) and not isinstance(movie_id, bool):
            movie_id = str(movie_id)
        if not isinstance(movie_id, str) or not movie_id.strip():
            raise ValueError("Movie id must be a non-empty string")

        review_url = data.get("reviewUrl")
        return cls(
            id=movie_id,
            title=_str_or_empty(data.get("title")),
            rating=_str_or_empty(data.get("rating")),
            poster_url=_str_or_empty(data.get("posterUrl")),
            review_url=review_url if isinstance(review_url, str) and review_url else None,
            created_at=parse_optional_timestamp(data.get("createdAt")),
            updated_at=parse_optional_timestamp(data.get("updatedAt")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire dict (JSON-serializable)."""
        return {
            "id": self.id,
            "title": self.title,
            "rating": self.rating,
            "posterUrl": self.poster_url,
            "reviewUrl": self.review_url,
            "createdAt": to_rfc3339(self.created_at) if self.created_at else None,
            "updatedAt": to_rfc3339(self.updated_at) if self.updated_at else None,
        }


def _str_or_empty(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""
