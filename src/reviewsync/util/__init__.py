from .time import (
    normalize_dt,
    now_utc,
    parse_optional_timestamp,
    parse_rfc3339,
    to_rfc3339,
)

__all__ = [
    "now_utc",
    "normalize_dt",
    "parse_rfc3339",
    "parse_optional_timestamp",
    "to_rfc3339",
]
