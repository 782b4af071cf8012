import unittest
from datetime import datetime, timezone

from reviewsync.util.time import (
    normalize_dt,
    now_utc,
    parse_optional_timestamp,
    parse_rfc3339,
    to_rfc3339,
)


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_normalize_dt_rejects_naive(self) -> None:
        with self.assertRaises(ValueError):
            normalize_dt(datetime(2025, 1, 1, 12, 0, 0))

    def test_parse_rfc3339_js_iso_string(self) -> None:
        dt = parse_rfc3339("2024-03-01T10:15:00.000Z")
        self.assertEqual(dt, datetime(2024, 3, 1, 10, 15, tzinfo=timezone.utc))

    def test_parse_rfc3339_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56+09:00")
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_to_rfc3339_milliseconds_z(self) -> None:
        dt = datetime(2024, 3, 1, 10, 15, 0, 123456, tzinfo=timezone.utc)
        self.assertEqual(to_rfc3339(dt), "2024-03-01T10:15:00.123Z")

    def test_parse_optional_timestamp(self) -> None:
        self.assertIsNone(parse_optional_timestamp(None))
        self.assertIsNone(parse_optional_timestamp(""))
        self.assertIsNone(parse_optional_timestamp("yesterday"))
        self.assertIsNone(parse_optional_timestamp(12345))
        self.assertEqual(
            parse_optional_timestamp("2024-03-01T10:15:00Z"),
            datetime(2024, 3, 1, 10, 15, tzinfo=timezone.utc),
        )


if __name__ == "__main__":
    unittest.main()
