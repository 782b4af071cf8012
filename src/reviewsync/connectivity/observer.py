"""Connectivity observer: publishes online/offline transitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ConnectivityEvent:
    is_connected: bool


Listener = Callable[[ConnectivityEvent], None]


class Subscription:
    """Handle returned by ``ConnectivityObserver.subscribe``; close() is idempotent."""

    def __init__(self, observer: "ConnectivityObserver", listener: Listener) -> None:
        self._observer: Optional[ConnectivityObserver] = observer
        self._listener = listener

    @property
    def active(self) -> bool:
        return self._observer is not None

    def close(self) -> None:
        if self._observer is None:
            return
        self._observer._remove(self._listener)
        self._observer = None


class ConnectivityObserver:
    """
    Last known connectivity plus transition events.

    The platform layer calls ``update()`` whenever it learns the network
    state; listeners only hear about actual transitions.
    """

    def __init__(self, initial: bool = False) -> None:
        self._connected = bool(initial)
        self._listeners: list[Listener] = []

    @property
    def is_connected(self) -> bool:
        return self._connected

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(self, listener)

    def update(self, is_connected: bool) -> bool:
        """Record the current state. Returns True if it was a transition."""
        is_connected = bool(is_connected)
        if is_connected == self._connected:
            return False

        self._connected = is_connected
        logger.info("Connectivity changed: %s", "online" if is_connected else "offline")

        event = ConnectivityEvent(is_connected=is_connected)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Connectivity listener failed")
        return True

    def _remove(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass
