"""ReviewSession: the app-facing surface (current movie, recording, delete)."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, Protocol

from reviewsync.config import ClientSettings
from reviewsync.connectivity import ConnectivityObserver
from reviewsync.controller import MoviesController
from reviewsync.coordinator import SyncCoordinator
from reviewsync.errors import InvalidStateError, PermissionDeniedError
from reviewsync.local import EntityStateProjection, ReviewPaths
from reviewsync.models import Movie

logger = logging.getLogger(__name__)

PermissionGate = Callable[[], Awaitable[bool]]


class Recorder(Protocol):
    """Audio capture driver."""

    async def start(self, path: str) -> None: ...

    async def stop(self) -> None: ...


class SavedMoviesSource(Protocol):
    async def list_saved(self) -> list[Movie]: ...


class ReviewSession:
    """
    One user's library session.

    Flow: load() -> select() -> start_recording() -> stop_recording()
    (hands the review to the coordinator) or delete_current_review().
    """

    def __init__(
        self,
        coordinator: SyncCoordinator,
        movies_source: SavedMoviesSource,
        paths: ReviewPaths,
        recorder: Recorder,
        permission_gate: PermissionGate,
    ) -> None:
        self._coordinator = coordinator
        self._movies_source = movies_source
        self._paths = paths
        self._recorder = recorder
        self._permission_gate = permission_gate

        self._current_id: Optional[str] = None
        self._recording = False
        self._loaded = False
        self._owned_controller: Optional[MoviesController] = None

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        connectivity: ConnectivityObserver,
        recorder: Recorder,
        permission_gate: PermissionGate,
    ) -> "ReviewSession":
        controller = MoviesController(settings)
        coordinator = SyncCoordinator.from_settings(
            settings,
            connectivity,
            EntityStateProjection(),
            controller=controller,
        )
        session = cls(
            coordinator,
            controller,
            ReviewPaths(settings.documents_dir),
            recorder,
            permission_gate,
        )
        session._owned_controller = controller
        return session

    # ----------------------------
    # Read APIs
    # ----------------------------
    @property
    def coordinator(self) -> SyncCoordinator:
        return self._coordinator

    @property
    def movies(self) -> list[Movie]:
        return self._coordinator.projection.movies()

    @property
    def current_movie(self) -> Optional[Movie]:
        if self._current_id is None:
            return None
        return self._coordinator.projection.get(self._current_id)

    @property
    def recording(self) -> bool:
        return self._recording

    @property
    def pending_sync(self) -> dict[str, bool]:
        return self._coordinator.pending_sync

    def playback_url(self) -> Optional[str]:
        """Playback source for the current movie's review, if it has one."""
        if self._current_id is None:
            return None
        return self._coordinator.projection.playback_url(self._current_id)

    # ----------------------------
    # Lifecycle
    # ----------------------------
    async def load(self) -> list[Movie]:
        """Fetch the saved library, restore queued operations, pick the first movie."""
        if self._loaded:
            raise InvalidStateError("Session already loaded")

        movies = await self._movies_source.list_saved()
        self._coordinator.projection.load(movies)
        await self._coordinator.start()

        self._current_id = movies[0].id if movies else None
        self._loaded = True
        logger.info("Loaded %d saved movie(s)", len(movies))
        return self.movies

    async def close(self) -> None:
        if self._recording:
            await self._recorder.stop()
            self._recording = False
        await self._coordinator.close()
        if self._owned_controller is not None:
            await self._owned_controller.aclose()

    # ----------------------------
    # User actions
    # ----------------------------
    async def select(self, movie_id: str) -> Movie:
        """Make ``movie_id`` current; an active recording is finished first."""
        self._ensure_loaded()
        movie = self._coordinator.projection.get(movie_id)
        if movie_id == self._current_id:
            return movie

        if self._recording:
            await self.stop_recording()

        self._current_id = movie_id
        return self._coordinator.projection.get(movie_id)

    async def start_recording(self) -> str:
        """
        Start capturing a review for the current movie.

        Returns:
            The staging path being recorded to.

        Raises:
            PermissionDeniedError: microphone access was not granted; nothing
                changes.
        """
        movie_id = self._require_current()
        if self._recording:
            raise InvalidStateError("Already recording")

        if not await self._permission_gate():
            raise PermissionDeniedError(
                "Microphone permission denied", details={"movie_id": movie_id}
            )

        path = self._paths.review_path(movie_id)
        self._paths.ensure_dir()
        await self._recorder.start(path)
        self._recording = True
        return path

    async def stop_recording(self) -> None:
        """Stop capturing and hand the review to the coordinator (no-op if idle)."""
        if not self._recording:
            return
        movie_id = self._require_current()

        await self._recorder.stop()
        self._recording = False
        await self._coordinator.record_uploaded(movie_id)

    async def delete_current_review(self) -> None:
        movie_id = self._require_current()
        if self._recording:
            raise InvalidStateError("Cannot delete a review while recording")
        await self._coordinator.record_deleted(movie_id)

    # ----------------------------
    # Internals
    # ----------------------------
    def _ensure_loaded(self) -> None:
        if not self._loaded:
            raise InvalidStateError("Session is not loaded. Call load() first.")

    def _require_current(self) -> str:
        self._ensure_loaded()
        if self._current_id is None:
            raise InvalidStateError("No movie selected")
        return self._current_id
