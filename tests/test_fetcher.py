import random
import unittest

import aiohttp
from aiohttp import web
from aiohttp.test_utils import TestServer

from ttywaifu.config import SlideshowConfig
from ttywaifu.errors import ErrorKind, Failure
from ttywaifu.fetcher import Fetcher, backoff_delay, build_query, parse_response
from ttywaifu.models import ImageRecord
from ttywaifu.tags import DEFAULT_CATALOG

IMAGE_ENTRY = {
    "image_id": 8108,
    "url": "https://x/y/image123.png",
    "byte_size": 3264871,
    "width": 2480,
    "height": 3508,
    "is_nsfw": False,
    "extension": ".png",
    "artist": {"artist_id": 1, "name": "Some Artist", "twitter": "https://twitter.com/someartist"},
    "tags": [
        {"tag_id": 12, "name": "waifu", "description": "A female anime/manga character.", "is_nsfw": False},
    ],
}


class TestBackoff(unittest.TestCase):

    def test_backoff_delays_are_capped(self):
        self.assertEqual([backoff_delay(n) for n in range(1, 6)], [1000, 2000, 4000, 8000, 10000])
        self.assertEqual(backoff_delay(12), 10000)

    def test_build_query_repeats_tags(self):
        self.assertEqual(
            build_query(["maid", "uniform"], 2000),
            [("included_tags", "maid"), ("included_tags", "uniform"), ("height", ">=2000")],
        )

    def test_parse_response_rejects_missing_data(self):
        for payload in (None, [], {}, {"images": []}, {"images": [{"image_id": 1}]}, {"images": ["nope"]}):
            result = parse_response(payload)
            self.assertIsInstance(result, Failure, payload)
            self.assertEqual(result.kind, ErrorKind.MALFORMED_RESPONSE)

    def test_parse_response_returns_first_image(self):
        second = dict(IMAGE_ENTRY, url="https://x/y/other.png")
        record = parse_response({"images": [IMAGE_ENTRY, second]})
        self.assertIsInstance(record, ImageRecord)
        self.assertEqual(record.url, "https://x/y/image123.png")
        self.assertEqual(record.artist.name, "Some Artist")
        self.assertEqual(record.tags[0].name, "waifu")


class TestTagSelection(unittest.TestCase):

    def make_fetcher(self, **overrides):
        return Fetcher(None, SlideshowConfig(**overrides), DEFAULT_CATALOG, rng=random.Random(7))

    def test_custom_tags_used_verbatim(self):
        fetcher = self.make_fetcher(custom_tags=("maid", "uniform"))
        self.assertEqual(fetcher.select_tags(), ["maid", "uniform"])

    def test_general_pool_only_without_nsfw(self):
        fetcher = self.make_fetcher(include_nsfw=False)
        picks = {fetcher.select_tags()[0] for _ in range(500)}
        self.assertTrue(picks <= set(DEFAULT_CATALOG.general))

    def test_union_pool_with_nsfw(self):
        fetcher = self.make_fetcher(include_nsfw=True)
        picks = [fetcher.select_tags() for _ in range(500)]
        self.assertTrue(all(len(tags) == 1 for tags in picks))
        chosen = {tags[0] for tags in picks}
        self.assertTrue(chosen <= set(DEFAULT_CATALOG.general + DEFAULT_CATALOG.explicit))
        self.assertTrue(chosen & set(DEFAULT_CATALOG.explicit))
        self.assertTrue(chosen & set(DEFAULT_CATALOG.general))


class TestFetchOneSingleAttempt(unittest.IsolatedAsyncioTestCase):

    async def test_single_attempt_reports_its_failure(self):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        fetcher = Fetcher(None, SlideshowConfig(max_retries=1, custom_tags=("maid",)), sleep=fake_sleep)

        async def bad_gateway(params):
            return Failure(ErrorKind.NETWORK_STATUS, "status 502", status=502)

        fetcher._attempt = bad_gateway
        result = await fetcher.fetch_one()
        self.assertEqual(result.kind, ErrorKind.NETWORK_STATUS)
        self.assertEqual(result.status, 502)
        self.assertEqual(result.attempts, 1)
        self.assertEqual(slept, [])


class TestFetchOne(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.replies = []
        self.queries = []
        self.delays = []
        app = web.Application()
        app.router.add_get("/search", self.handle_search)
        self.server = TestServer(app)
        await self.server.start_server()
        self.session = aiohttp.ClientSession()

    async def asyncTearDown(self):
        await self.session.close()
        await self.server.close()

    async def handle_search(self, request):
        self.queries.append(request.query)
        reply = self.replies.pop(0) if self.replies else web.Response(status=500)
        return reply

    async def fake_sleep(self, seconds):
        self.delays.append(seconds)

    def make_fetcher(self, **overrides):
        overrides.setdefault("custom_tags", ("waifu",))
        config = SlideshowConfig(api_url=str(self.server.make_url("/search")), **overrides)
        return Fetcher(self.session, config, sleep=self.fake_sleep)

    async def test_succeeds_on_third_attempt_after_two_delays(self):
        self.replies = [
            web.Response(status=500),
            web.Response(status=503),
            web.json_response({"images": [IMAGE_ENTRY]}),
        ]
        result = await self.make_fetcher(max_retries=3).fetch_one()
        self.assertIsInstance(result, ImageRecord)
        self.assertEqual(result.url, "https://x/y/image123.png")
        self.assertEqual(len(self.queries), 3)
        self.assertEqual(self.delays, [1.0, 2.0])

    async def test_always_failing_source_gives_terminal_failure(self):
        for retries in (1, 3, 5):
            self.queries.clear()
            self.delays.clear()
            result = await self.make_fetcher(max_retries=retries).fetch_one()
            self.assertIsInstance(result, Failure)
            self.assertEqual(result.kind, ErrorKind.NETWORK_STATUS)
            self.assertEqual(result.attempts, retries)
            self.assertEqual(len(self.queries), retries)
            self.assertEqual(len(self.delays), retries - 1)

    async def test_empty_and_malformed_bodies_are_retried(self):
        self.replies = [
            web.json_response({"images": []}),
            web.Response(text="<html>not json</html>"),
        ]
        result = await self.make_fetcher(max_retries=2).fetch_one()
        self.assertIsInstance(result, Failure)
        self.assertEqual(result.kind, ErrorKind.MALFORMED_RESPONSE)
        self.assertEqual(self.delays, [1.0])

    async def test_query_carries_tags_and_height_filter(self):
        self.replies = [web.json_response({"images": [IMAGE_ENTRY]})]
        await self.make_fetcher(custom_tags=("maid", "uniform")).fetch_one()
        query = self.queries[0]
        self.assertEqual(query.getall("included_tags"), ["maid", "uniform"])
        self.assertEqual(query["height"], ">=2000")

    async def test_unreachable_api_is_a_network_failure(self):
        config = SlideshowConfig(api_url="http://127.0.0.1:1/search", max_retries=2, timeout=2000)
        result = await Fetcher(self.session, config, sleep=self.fake_sleep).fetch_one()
        self.assertIsInstance(result, Failure)
        self.assertIn(result.kind, (ErrorKind.NETWORK_ERROR, ErrorKind.NETWORK_TIMEOUT))
        self.assertEqual(self.delays, [1.0])


if __name__ == '__main__':
    unittest.main()
