"""Public model exports for reviewsync."""

from __future__ import annotations

from .movie import Movie
from .results import DrainResult, DrainStatus, OperationResult, OperationStatus

__all__ = [
    "Movie",
    "OperationStatus",
    "DrainStatus",
    "OperationResult",
    "DrainResult",
]
