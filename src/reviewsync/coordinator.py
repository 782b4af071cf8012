"""SyncCoordinator: executes or defers review create/delete, drains on reconnect."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from reviewsync.config import ClientSettings
from reviewsync.connectivity import ConnectivityEvent, ConnectivityObserver, Subscription
from reviewsync.controller import MoviesController
from reviewsync.errors import (
    InvalidStateError,
    NetworkUnavailableError,
    NotFoundError,
    ReviewSyncError,
    StorageError,
    SyncFailedError,
    is_transient,
)
from reviewsync.local import (
    Confirmed,
    EntityStateProjection,
    PendingDelete,
    ReviewPaths,
    ReviewState,
    is_pending,
)
from reviewsync.models import DrainResult, Movie, OperationResult
from reviewsync.operations import (
    JsonFileQueueStore,
    Operation,
    OperationKind,
    OperationLog,
    QueueStore,
)
from reviewsync.util.time import now_utc

logger = logging.getLogger(__name__)


class ReviewService(Protocol):
    """Remote effects the coordinator needs (MoviesController implements it)."""

    async def upload_review(self, movie_id: str, local_path: str) -> str: ...

    async def delete_review(self, movie_id: str) -> None: ...


class SyncCoordinator:
    """
    Single writer of the Operation Log and the pending-sync state.

    Per-entity states: Synced (Confirmed), PendingCreate, PendingDelete, as
    held by the projection. Every user action bumps a per-entity intent
    counter; remote completions only touch the projection when their intent
    is still the latest one. Remote calls for one entity are serialized by a
    per-entity lock; different entities interleave freely.
    """

    def __init__(
        self,
        controller: ReviewService,
        store: QueueStore,
        connectivity: ConnectivityObserver,
        projection: EntityStateProjection,
        paths: ReviewPaths,
    ) -> None:
        self._controller = controller
        self._log = OperationLog(store)
        self._connectivity = connectivity
        self._projection = projection
        self._paths = paths

        self._intents: dict[str, int] = {}
        self._entity_locks: dict[str, asyncio.Lock] = {}
        self._drain_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._subscription: Optional[Subscription] = None
        self._started = False
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        connectivity: ConnectivityObserver,
        projection: EntityStateProjection,
        *,
        controller: Optional[ReviewService] = None,
    ) -> "SyncCoordinator":
        """Wire the default collaborators (httpx controller, JSON file store)."""
        return cls(
            controller if controller is not None else MoviesController(settings),
            JsonFileQueueStore(settings.resolved_queue_file),
            connectivity,
            projection,
            ReviewPaths(settings.documents_dir),
        )

    # ----------------------------
    # Lifecycle
    # ----------------------------
    async def start(self) -> None:
        """
        Load the persisted queue, reflect it in the projection and subscribe
        to connectivity transitions. Drains right away when already online.
        """
        if self._started:
            raise InvalidStateError("SyncCoordinator already started")
        if self._closed:
            raise InvalidStateError("SyncCoordinator is closed")

        self._loop = asyncio.get_running_loop()

        try:
            ops = await self._log.load()
        except StorageError as exc:
            logger.error("Could not load queued operations, starting empty: %s", exc)
            ops = ()

        for op in ops:
            if not self._projection.has(op.entity_id):
                continue
            if op.kind is OperationKind.CREATE:
                self._projection.mark_pending_create(
                    op.entity_id, self._paths.review_path(op.entity_id)
                )
            else:
                self._projection.mark_pending_delete(op.entity_id)

        self._subscription = self._connectivity.subscribe(self._on_connectivity_event)
        self._started = True
        logger.info("Sync coordinator started with %d queued operation(s)", len(ops))

        if ops and self._connectivity.is_connected:
            self._schedule_drain()

    async def close(self) -> None:
        """Unsubscribe and wait for scheduled drains; entry points fail afterwards."""
        if self._closed:
            return
        self._closed = True

        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

        await self.wait_idle()
        logger.info("Sync coordinator closed")

    async def wait_idle(self) -> None:
        """Wait until drains scheduled by connectivity events have finished."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ----------------------------
    # Read APIs
    # ----------------------------
    @property
    def projection(self) -> EntityStateProjection:
        return self._projection

    @property
    def pending_sync(self) -> dict[str, bool]:
        """Movie id -> has an unconfirmed remote effect (queued or in flight)."""
        return {
            movie.id: is_pending(self._projection.state_of(movie.id))
            for movie in self._projection.movies()
        }

    def is_pending(self, movie_id: str) -> bool:
        return is_pending(self._projection.state_of(movie_id))

    def state_of(self, movie_id: str) -> ReviewState:
        return self._projection.state_of(movie_id)

    def queued_operations(self) -> tuple[Operation, ...]:
        return self._log.snapshot()

    # ----------------------------
    # User actions
    # ----------------------------
    async def record_uploaded(self, movie_id: str) -> None:
        """
        A review for ``movie_id`` was just captured at its staging path.

        Online: upload now. Offline (or on a transient failure): queue a
        Create and show the staged file as the review.

        Raises:
            InvalidArgumentError: if the movie is unknown.
            SyncFailedError: if the direct upload failed permanently.
        """
        self._ensure_running()
        movie = self._projection.confirmed(movie_id)
        intent = self._bump_intent(movie_id)

        local_path = self._paths.review_path(movie_id)
        self._projection.mark_pending_create(movie_id, local_path)

        if not self._connectivity.is_connected:
            logger.info("Offline: queueing review upload for %s", movie_id)
            await self._log.append(Operation.create(movie))
            return

        await self._log.remove(movie_id)
        await self._upload_direct(movie, local_path, intent)

    async def record_deleted(self, movie_id: str) -> None:
        """
        The user deleted the review of ``movie_id``.

        A still-queued Create is cancelled instead of queuing a Delete: the
        staged file is discarded, the movie shows no review and the service
        is never contacted.

        Raises:
            InvalidArgumentError: if the movie is unknown.
            InvalidStateError: if there is no review to delete or a delete is
                already pending.
            SyncFailedError: if the direct delete failed permanently.
        """
        self._ensure_running()
        movie = self._projection.confirmed(movie_id)
        state = self._projection.state_of(movie_id)
        if isinstance(state, PendingDelete):
            raise InvalidStateError(
                "Review deletion is already pending", details={"movie_id": movie_id}
            )
        if isinstance(state, Confirmed) and state.url is None:
            raise InvalidStateError(
                "Movie has no review to delete", details={"movie_id": movie_id}
            )

        intent = self._bump_intent(movie_id)

        if await self._log.cancel_if_queued(movie_id, OperationKind.CREATE):
            self._paths.discard(movie_id)
            self._projection.confirm_deleted(movie_id)
            logger.info("Cancelled queued review upload for %s", movie_id)
            return

        self._projection.mark_pending_delete(movie_id)

        if not self._connectivity.is_connected:
            logger.info("Offline: queueing review deletion for %s", movie_id)
            await self._log.append(Operation.delete(movie))
            return

        await self._delete_direct(movie, intent)

    async def on_connectivity_restored(self) -> DrainResult:
        """
        Drain the queue and replay every operation in order.

        Failed operations go back to the queue (unless a newer action for the
        same movie was recorded meanwhile); successful ones are confirmed in
        the projection. Drains never run concurrently.

        Operations queued after a transient failure while online stay queued
        until the next offline-to-online transition or an explicit call here.

        Raises:
            NetworkUnavailableError: if the connectivity observer reports the
                device as offline; the queue is left untouched.
        """
        self._ensure_running()
        if not self._connectivity.is_connected:
            raise NetworkUnavailableError(
                "Cannot drain queued operations while offline",
                details={"queued": len(self._log)},
            )
        async with self._drain_lock:
            return await self._drain()

    # ----------------------------
    # Direct (online) paths
    # ----------------------------
    async def _upload_direct(self, movie: Movie, local_path: str, intent: int) -> None:
        movie_id = movie.id
        async with self._lock_for(movie_id):
            if not self._is_latest(movie_id, intent):
                logger.debug("Upload for %s superseded before sending", movie_id)
                return

            try:
                review_url = await self._controller.upload_review(movie_id, local_path)
            except ReviewSyncError as exc:
                if not self._is_latest(movie_id, intent):
                    logger.info("Superseded upload for %s failed: %s", movie_id, exc)
                    return
                if is_transient(exc):
                    logger.warning(
                        "Upload for %s failed (%s); queueing for retry", movie_id, exc
                    )
                    await self._log.append(Operation.create(movie))
                    return
                self._revert_to_confirmed(movie_id)
                raise SyncFailedError(
                    "Review upload failed",
                    details={"movie_id": movie_id, "error_type": exc.__class__.__name__},
                    cause=exc,
                ) from exc

            if not self._is_latest(movie_id, intent):
                logger.info("Upload for %s completed after a newer action", movie_id)
                self._projection.record_confirmed_url(movie_id, review_url)
                return

            self._projection.confirm_review(movie_id, review_url)
            self._paths.discard(movie_id)
            logger.info("Uploaded review for %s", movie_id)

    async def _delete_direct(self, movie: Movie, intent: int) -> None:
        movie_id = movie.id
        async with self._lock_for(movie_id):
            if not self._is_latest(movie_id, intent):
                logger.debug("Delete for %s superseded before sending", movie_id)
                return

            try:
                await self._delete_remote(movie_id)
            except ReviewSyncError as exc:
                if not self._is_latest(movie_id, intent):
                    logger.info("Superseded delete for %s failed: %s", movie_id, exc)
                    return
                if is_transient(exc):
                    logger.warning(
                        "Delete for %s failed (%s); queueing for retry", movie_id, exc
                    )
                    await self._log.append(Operation.delete(movie))
                    return
                self._revert_to_confirmed(movie_id)
                raise SyncFailedError(
                    "Review deletion failed",
                    details={"movie_id": movie_id, "error_type": exc.__class__.__name__},
                    cause=exc,
                ) from exc

            if not self._is_latest(movie_id, intent):
                self._projection.record_confirmed_url(movie_id, None)
                return

            self._projection.confirm_deleted(movie_id)
            logger.info("Deleted review for %s", movie_id)

    async def _delete_remote(self, movie_id: str) -> None:
        try:
            await self._controller.delete_review(movie_id)
        except NotFoundError:
            logger.debug("Review for %s was already gone remotely", movie_id)

    # ----------------------------
    # Drain
    # ----------------------------
    async def _drain(self) -> DrainResult:
        ops = await self._log.drain_all()
        if not ops:
            return _drain_result([])

        logger.info("Draining %d queued operation(s)", len(ops))
        intents = {op.entity_id: self._intents.get(op.entity_id, 0) for op in ops}
        results: list[OperationResult] = []
        failed: list[Operation] = []

        index = 0
        try:
            for index, op in enumerate(ops):
                result = await self._replay(op, intents[op.entity_id])
                results.append(result)
                if result.status == "failed":
                    failed.append(op)
        except BaseException:
            # Unexpected error or cancellation: keep what has not completed.
            await self._restore_failed(failed + list(ops[index:]), intents)
            raise

        await self._restore_failed(failed, intents)

        drain = _drain_result(results)
        logger.info(
            "Drain finished: %d succeeded, %d failed, %d skipped",
            drain.summary["success"],
            drain.summary["failed"],
            drain.summary["skipped"],
        )
        return drain

    async def _replay(self, op: Operation, intent: int) -> OperationResult:
        movie_id = op.entity_id
        async with self._lock_for(movie_id):
            if not self._is_latest(movie_id, intent):
                logger.debug("Queued %s for %s superseded; skipping", op.kind.value, movie_id)
                return OperationResult(entity_id=movie_id, kind=op.kind.value, status="skipped")

            review_url: Optional[str] = None
            try:
                if op.kind is OperationKind.CREATE:
                    review_url = await self._controller.upload_review(
                        movie_id, self._paths.review_path(movie_id)
                    )
                else:
                    await self._delete_remote(movie_id)
            except ReviewSyncError as exc:
                logger.warning("Replaying %s for %s failed: %s", op.kind.value, movie_id, exc)
                return OperationResult(
                    entity_id=movie_id,
                    kind=op.kind.value,
                    status="failed",
                    error_type=exc.__class__.__name__,
                    error_message=str(exc),
                    error_details=exc.details,
                )

            self._apply_replayed(op, review_url, latest=self._is_latest(movie_id, intent))
            return OperationResult(
                entity_id=movie_id,
                kind=op.kind.value,
                status="success",
                review_url=review_url,
            )

    def _apply_replayed(self, op: Operation, review_url: Optional[str], *, latest: bool) -> None:
        movie_id = op.entity_id
        if not self._projection.has(movie_id):
            logger.debug("Replayed %s for %s (not in library)", op.kind.value, movie_id)
            return

        if not latest:
            self._projection.record_confirmed_url(movie_id, review_url)
            return

        if op.kind is OperationKind.CREATE:
            self._projection.confirm_review(movie_id, review_url)  # type: ignore[arg-type]
            self._paths.discard(movie_id)
        else:
            self._projection.confirm_deleted(movie_id)

    async def _restore_failed(self, ops: list[Operation], intents: dict[str, int]) -> None:
        still_wanted = [op for op in ops if self._is_latest(op.entity_id, intents[op.entity_id])]
        if still_wanted:
            await self._log.restore(still_wanted)

    # ----------------------------
    # Connectivity
    # ----------------------------
    def _on_connectivity_event(self, event: ConnectivityEvent) -> None:
        if not event.is_connected or self._closed or self._loop is None:
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._schedule_drain()
        else:
            self._loop.call_soon_threadsafe(self._schedule_drain)

    def _schedule_drain(self) -> None:
        if self._closed:
            return
        task = asyncio.ensure_future(self._drain_in_background())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _drain_in_background(self) -> None:
        try:
            await self.on_connectivity_restored()
        except NetworkUnavailableError:
            logger.info("Went offline before the scheduled drain started")
        except Exception:
            logger.exception("Background drain failed")

    # ----------------------------
    # Internals
    # ----------------------------
    def _ensure_running(self) -> None:
        if self._closed:
            raise InvalidStateError("SyncCoordinator is closed")
        if not self._started:
            raise InvalidStateError("SyncCoordinator is not started. Call start() first.")

    def _bump_intent(self, movie_id: str) -> int:
        intent = self._intents.get(movie_id, 0) + 1
        self._intents[movie_id] = intent
        return intent

    def _is_latest(self, movie_id: str, intent: int) -> bool:
        return self._intents.get(movie_id, 0) == intent

    def _lock_for(self, movie_id: str) -> asyncio.Lock:
        lock = self._entity_locks.get(movie_id)
        if lock is None:
            lock = asyncio.Lock()
            self._entity_locks[movie_id] = lock
        return lock

    def _revert_to_confirmed(self, movie_id: str) -> None:
        confirmed = self._projection.confirmed(movie_id)
        self._projection.set_state(movie_id, Confirmed(confirmed.review_url))


def _drain_result(results: list[OperationResult]) -> DrainResult:
    summary: dict[str, int] = {"success": 0, "failed": 0, "skipped": 0}
    for r in results:
        summary[r.status] = summary.get(r.status, 0) + 1

    return DrainResult(
        status="partial" if summary["failed"] else "success",
        results=results,
        summary=summary,
        finished_at=now_utc(),
    )
