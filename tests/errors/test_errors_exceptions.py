import unittest

from reviewsync.errors.exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    ForbiddenError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PayloadTooLargeError,
    RateLimitError,
    ReviewSyncError,
    StorageError,
    is_transient,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = ReviewSyncError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_details_default_to_empty_dict(self) -> None:
        self.assertEqual(StorageError("x").details, {})

    def test_map_http_error_basic(self) -> None:
        cases = {
            400: InvalidArgumentError,
            422: InvalidArgumentError,
            401: AuthError,
            403: ForbiddenError,
            404: NotFoundError,
            409: ConflictError,
            412: ConflictError,
            413: PayloadTooLargeError,
            429: RateLimitError,
            503: ApiError,
            418: ApiError,
        }
        for status, expected in cases.items():
            err = map_http_error(HttpErrorInfo(status_code=status))
            self.assertIsInstance(err, expected, msg=str(status))

    def test_map_http_error_message_and_details(self) -> None:
        err = map_http_error(
            HttpErrorInfo(
                status_code=404,
                reason="Not Found",
                message="movie not found",
                details={"url": "/movies/1/review"},
            )
        )
        self.assertEqual(str(err), "movie not found")
        self.assertEqual(err.details["status_code"], 404)
        self.assertEqual(err.details["reason"], "Not Found")
        self.assertEqual(err.details["url"], "/movies/1/review")

        err = map_http_error(HttpErrorInfo(status_code=500))
        self.assertEqual(str(err), "HTTP error 500")

    def test_is_transient(self) -> None:
        self.assertTrue(is_transient(NetworkError("down")))
        self.assertTrue(is_transient(RateLimitError("slow down")))
        self.assertTrue(is_transient(map_http_error(HttpErrorInfo(status_code=502))))

        self.assertFalse(is_transient(map_http_error(HttpErrorInfo(status_code=418))))
        self.assertFalse(is_transient(AuthError("no")))
        self.assertFalse(is_transient(ApiError("unknown")))
        self.assertFalse(is_transient(ValueError("x")))


if __name__ == "__main__":
    unittest.main()
