"""Public config exports for reviewsync."""

from __future__ import annotations

from .settings import ClientSettings

__all__ = ["ClientSettings"]
