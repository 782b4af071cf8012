"""Remote controller exports for reviewsync."""

from __future__ import annotations

from .movies_controller import MoviesController

__all__ = ["MoviesController"]
