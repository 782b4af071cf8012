"""Endpoint paths and upload form fields for the movies service."""

from __future__ import annotations

SAVED_MOVIES_PATH: str = "/movies/saved"

REVIEW_FORM_FIELD: str = "review"
REVIEW_CONTENT_TYPE: str = "audio/mpeg"
REVIEW_FILE_EXTENSION: str = ".mp3"


def review_path(movie_id: str) -> str:
    return f"/movies/{movie_id}/review"


def review_filename(movie_id: str) -> str:
    return f"{movie_id}{REVIEW_FILE_EXTENSION}"
