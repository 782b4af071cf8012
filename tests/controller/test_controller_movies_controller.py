import os
import tempfile
import unittest

import httpx

from reviewsync.config import ClientSettings
from reviewsync.controller import MoviesController
from reviewsync.errors import (
    ApiError,
    AuthError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    RateLimitError,
)


MOVIES = [
    {
        "id": "m1",
        "title": "Alien",
        "rating": "8.5",
        "posterUrl": "http://img/alien.jpg",
        "reviewUrl": None,
        "createdAt": "2024-03-01T10:15:00.000Z",
        "updatedAt": "2024-03-01T10:15:00.000Z",
    },
    {"id": "m2", "title": "Heat", "reviewUrl": "api.local/reviews/m2.mp3"},
    {"title": "broken entry without id"},
]


class TestMoviesControllerMocked(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.requests: list[httpx.Request] = []
        self._tmp = tempfile.TemporaryDirectory()
        self.audio_path = os.path.join(self._tmp.name, "m1.mp3")
        with open(self.audio_path, "wb") as f:
            f.write(b"ID3-fake-audio")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _controller(self, handler, *, max_retries: int = 0) -> MoviesController:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(
            base_url="http://api.local",
            transport=httpx.MockTransport(recording_handler),
        )
        self.addAsyncCleanup(client.aclose)
        return MoviesController.from_client(client, max_retries=max_retries)

    async def test_list_saved_parses_movies_and_skips_malformed(self) -> None:
        controller = self._controller(lambda request: httpx.Response(200, json=MOVIES))

        movies = await controller.list_saved()

        self.assertEqual([m.id for m in movies], ["m1", "m2"])
        self.assertEqual(movies[1].review_url, "api.local/reviews/m2.mp3")
        self.assertEqual(self.requests[0].method, "GET")
        self.assertEqual(self.requests[0].url.path, "/movies/saved")

    async def test_upload_review_posts_multipart_audio(self) -> None:
        controller = self._controller(
            lambda request: httpx.Response(200, json={"reviewUrl": "api.local/reviews/m1.mp3"})
        )

        url = await controller.upload_review("m1", self.audio_path)

        self.assertEqual(url, "api.local/reviews/m1.mp3")
        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url.path, "/movies/m1/review")
        self.assertTrue(request.headers["content-type"].startswith("multipart/form-data"))
        body = request.read()
        self.assertIn(b'name="review"', body)
        self.assertIn(b'filename="m1.mp3"', body)
        self.assertIn(b"audio/mpeg", body)
        self.assertIn(b"ID3-fake-audio", body)

    async def test_upload_missing_file_is_invalid_argument(self) -> None:
        controller = self._controller(lambda request: httpx.Response(200, json={}))

        with self.assertRaises(InvalidArgumentError):
            await controller.upload_review("m1", os.path.join(self._tmp.name, "nope.mp3"))
        self.assertEqual(self.requests, [])

    async def test_upload_without_review_url_is_api_error(self) -> None:
        controller = self._controller(lambda request: httpx.Response(200, json={"ok": True}))
        with self.assertRaises(ApiError):
            await controller.upload_review("m1", self.audio_path)

    async def test_delete_review(self) -> None:
        controller = self._controller(lambda request: httpx.Response(204))

        await controller.delete_review("m2")

        self.assertEqual(self.requests[0].method, "DELETE")
        self.assertEqual(self.requests[0].url.path, "/movies/m2/review")

    async def test_http_errors_are_mapped(self) -> None:
        controller = self._controller(
            lambda request: httpx.Response(404, json={"message": "Movie not found"})
        )
        with self.assertRaises(NotFoundError) as ctx:
            await controller.delete_review("m9")
        self.assertEqual(str(ctx.exception), "Movie not found")
        self.assertEqual(ctx.exception.details["status_code"], 404)

        controller = self._controller(lambda request: httpx.Response(401))
        with self.assertRaises(AuthError):
            await controller.list_saved()

    async def test_transport_errors_become_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        controller = self._controller(handler)
        with self.assertRaises(NetworkError):
            await controller.delete_review("m1")

    async def test_transient_errors_are_retried(self) -> None:
        responses = [httpx.Response(503), httpx.Response(429), httpx.Response(204)]
        controller = self._controller(lambda request: responses.pop(0), max_retries=3)

        await controller.delete_review("m1")
        self.assertEqual(len(self.requests), 3)

    async def test_retries_are_bounded(self) -> None:
        controller = self._controller(lambda request: httpx.Response(429), max_retries=2)

        with self.assertRaises(RateLimitError):
            await controller.delete_review("m1")
        self.assertEqual(len(self.requests), 3)

    async def test_permanent_errors_are_not_retried(self) -> None:
        controller = self._controller(lambda request: httpx.Response(400), max_retries=3)

        with self.assertRaises(InvalidArgumentError):
            await controller.delete_review("m1")
        self.assertEqual(len(self.requests), 1)


class TestMoviesControllerSettings(unittest.IsolatedAsyncioTestCase):
    async def test_builds_owned_client_from_settings(self) -> None:
        settings = ClientSettings(api_url="http://api.local/", timeout_sec=3.0, max_retries=1)
        async with MoviesController(settings) as controller:
            self.assertEqual(controller._client.base_url.host, "api.local")
            self.assertEqual(controller._retry_policy.max_retries, 1)
        self.assertTrue(controller._client.is_closed)


if __name__ == "__main__":
    unittest.main()
