"""Connectivity exports for reviewsync."""

from __future__ import annotations

from .observer import ConnectivityEvent, ConnectivityObserver, Subscription

__all__ = ["ConnectivityEvent", "ConnectivityObserver", "Subscription"]
