"""Queued operation model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from reviewsync.models import Movie

from .kinds import OperationKind


@dataclass(slots=True, frozen=True)
class Operation:
    """
    A deferred create/delete of a movie's review.

    The whole Movie is kept (not just its id) so the persisted queue is
    self-describing after a restart.
    """

    kind: OperationKind
    movie: Movie

    @property
    def entity_id(self) -> str:
        return self.movie.id

    @classmethod
    def create(cls, movie: Movie) -> "Operation":
        return cls(kind=OperationKind.CREATE, movie=movie)

    @classmethod
    def delete(cls, movie: Movie) -> "Operation":
        return cls(kind=OperationKind.DELETE, movie=movie)

    def to_dict(self) -> dict[str, Any]:
        """Serialize as ``{"type": "post"|"delete", "movie": {...}}``."""
        return {"type": self.kind.value, "movie": self.movie.to_dict()}

    @classmethod
    def from_dict(cls, data: Any) -> "Operation":
        """
        Parse a persisted entry.

        Raises:
            ValueError: if the entry is not a dict, the type is unknown, or
                the movie is invalid.
        """
        if not isinstance(data, dict):
            raise ValueError("Operation entry must be an object")

        try:
            kind = OperationKind(data.get("type"))
        except ValueError as exc:
            raise ValueError(f"Unsupported operation type: {data.get('type')!r}") from exc

        movie = data.get("movie")
        if not isinstance(movie, dict):
            raise ValueError("Operation entry is missing 'movie'")

        return cls(kind=kind, movie=Movie.from_dict(movie))
