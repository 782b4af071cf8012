"""EntityStateProjection: confirmed movies + pending overrides (no I/O)."""

from __future__ import annotations

from typing import Iterable, Optional

from reviewsync.errors import InvalidArgumentError
from reviewsync.models import Movie

from .states import Confirmed, PendingCreate, PendingDelete, ReviewState, is_pending


def project(movie: Movie, state: ReviewState) -> Movie:
    """Return the movie as the rest of the application should see it."""
    if isinstance(state, PendingCreate):
        return movie.with_review_url(state.local_path)
    if isinstance(state, PendingDelete):
        return movie.with_review_url(None)
    return movie.with_review_url(state.url)


class EntityStateProjection:
    """
    User-visible movie/review state.

    Confirmed movies hold the last remote-confirmed ``review_url``. Pending
    overrides (PendingCreate/PendingDelete) are kept separately, so the
    confirmed URL survives until the remote effect is confirmed and a delete
    hides the review immediately.
    """

    def __init__(self, movies: Iterable[Movie] = ()) -> None:
        self._order: list[str] = []
        self._confirmed: dict[str, Movie] = {}
        self._overrides: dict[str, ReviewState] = {}
        self.load(movies)

    def load(self, movies: Iterable[Movie]) -> None:
        """Replace confirmed data and drop every pending override."""
        self._order = []
        self._confirmed = {}
        self._overrides = {}
        for movie in movies:
            if movie.id not in self._confirmed:
                self._order.append(movie.id)
            self._confirmed[movie.id] = movie

    # ----------------------------
    # Read APIs
    # ----------------------------
    def has(self, movie_id: str) -> bool:
        return movie_id in self._confirmed

    def confirmed(self, movie_id: str) -> Movie:
        self._require(movie_id)
        return self._confirmed[movie_id]

    def state_of(self, movie_id: str) -> ReviewState:
        self._require(movie_id)
        override = self._overrides.get(movie_id)
        if override is not None:
            return override
        return Confirmed(self._confirmed[movie_id].review_url)

    def get(self, movie_id: str) -> Movie:
        return project(self.confirmed(movie_id), self.state_of(movie_id))

    def movies(self) -> list[Movie]:
        return [self.get(movie_id) for movie_id in self._order]

    def pending_ids(self) -> list[str]:
        return [mid for mid in self._order if is_pending(self.state_of(mid))]

    def playback_url(self, movie_id: str) -> Optional[str]:
        """
        Where the review should be played from.

        A pending recording plays from the staged file; a confirmed review
        plays from the service (the service returns host-relative URLs
        without a scheme).
        """
        state = self.state_of(movie_id)
        if isinstance(state, PendingCreate):
            return "file://" + state.local_path
        if isinstance(state, Confirmed) and state.url:
            if "://" in state.url:
                return state.url
            return "http://" + state.url
        return None

    # ----------------------------
    # Transitions
    # ----------------------------
    def set_state(self, movie_id: str, state: ReviewState) -> None:
        """Set the override; a Confirmed state also updates confirmed data."""
        if isinstance(state, Confirmed):
            self.record_confirmed_url(movie_id, state.url)
            self._overrides.pop(movie_id, None)
            return
        self._require(movie_id)
        self._overrides[movie_id] = state

    def record_confirmed_url(self, movie_id: str, review_url: Optional[str]) -> None:
        """Update confirmed data only; a pending override keeps precedence."""
        self._require(movie_id)
        self._confirmed[movie_id] = self._confirmed[movie_id].with_review_url(review_url)

    def mark_pending_create(self, movie_id: str, local_path: str) -> None:
        self.set_state(movie_id, PendingCreate(local_path))

    def mark_pending_delete(self, movie_id: str) -> None:
        self.set_state(movie_id, PendingDelete())

    def confirm_review(self, movie_id: str, review_url: str) -> None:
        self.set_state(movie_id, Confirmed(review_url))

    def confirm_deleted(self, movie_id: str) -> None:
        self.set_state(movie_id, Confirmed(None))

    def _require(self, movie_id: str) -> None:
        if movie_id not in self._confirmed:
            raise InvalidArgumentError(
                "Unknown movie", details={"movie_id": movie_id}
            )
