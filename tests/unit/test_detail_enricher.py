import os
import sys
import time
import unittest
from typing import Dict, List, Optional

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from showfeed.config import DEFAULT_TITLE_PATTERN
from showfeed.scraping_components.page_renderer import PageRenderer, RenderError
from showfeed.scrapers.whatnot.detail_enricher import DetailEnricher, resolve_detail_fields
from showfeed.scrapers.whatnot.title_filter import compile_title_pattern
from showfeed.scrapers.whatnot.whatnot_datamodels import ShowCandidate, ShowRecord

PATTERN = compile_title_pattern(DEFAULT_TITLE_PATTERN)
JUNE_1 = 1717264800000

DETAIL_NO_SCHEDULE = "<html><body><p>No schedule yet</p></body></html>"
DETAIL_FULL = """
<html><head>
  <meta property="og:title" content="BoBA Tuesday Night Throwdown">
  <meta name="twitter:title" content="Twitter title">
  <meta property="og:image" content="/images/og.jpg">
  <script type="application/ld+json">{"@type": "LiveEvent", "startDate": "2024-06-01T18:00:00Z"}</script>
</head><body>
  <h1>Heading title</h1>
  <img src="/images/first.jpg">
  <a href="/user/cardking"> cardking </a>
</body></html>
"""
DETAIL_FALLBACKS = """
<html><head><meta name="twitter:image" content="https://cdn.example/tw.jpg"></head>
<body><h1>  Bo Jackson   Battle Arena </h1><div data-test="seller-name">Arena Breaks</div></body></html>
"""


class FakeRenderer(PageRenderer):
    """Serves canned markup by URL and records every navigation."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, default: str = DETAIL_NO_SCHEDULE,
                 failures: Optional[Dict[str, Exception]] = None):
        self.pages = pages or {}
        self.default = default
        self.failures = failures or {}
        self.visited: List[str] = []

    async def render(self, url, *, scroll=False, settle_ms=None):
        self.visited.append(url)
        if url in self.failures:
            raise self.failures[url]
        return self.pages.get(url, self.default)


def _candidate(slug, title="BoBA breaks", start_raw=None, host="", thumbnail=None):
    return ShowCandidate(title=title, url=f"https://x/live/{slug}", start_raw=start_raw, host=host, thumbnail=thumbnail)


class TestResolveDetailFields(unittest.TestCase):

    def test_metadata_preferred(self):
        fields = resolve_detail_fields(DETAIL_FULL, "https://www.whatnot.com/live/aaa")
        self.assertEqual(fields.title, "BoBA Tuesday Night Throwdown")
        self.assertEqual(fields.thumbnail, "https://www.whatnot.com/images/og.jpg")
        self.assertEqual(fields.host, "cardking")
        self.assertEqual(fields.start, JUNE_1)

    def test_heading_and_twitter_fallbacks(self):
        fields = resolve_detail_fields(DETAIL_FALLBACKS, "https://www.whatnot.com/live/bbb")
        self.assertEqual(fields.title, "Bo Jackson Battle Arena")
        self.assertEqual(fields.thumbnail, "https://cdn.example/tw.jpg")
        self.assertEqual(fields.host, "Arena Breaks")
        self.assertIsNone(fields.start)

    def test_empty_page_yields_nothing(self):
        fields = resolve_detail_fields("", "https://www.whatnot.com/live/ccc")
        self.assertEqual((fields.title, fields.thumbnail, fields.host, fields.start), ("", "", "", None))


class TestDetailEnricher(unittest.IsolatedAsyncioTestCase):

    def _enricher(self, renderer, mode="search"):
        return DetailEnricher(renderer, mode=mode, title_pattern=PATTERN)

    async def test_cap_visits_first_candidates_only(self):
        candidates = [_candidate(i) for i in range(50)]
        renderer = FakeRenderer()
        records = await self._enricher(renderer).enrich(candidates, max_visits=30)
        self.assertEqual(renderer.visited, [c.url for c in candidates[:30]])
        self.assertEqual(len(records), 30)

    async def test_duplicate_url_with_and_without_start(self):
        candidates = [
            _candidate("1", start_raw="2024-06-01T18:00:00Z"),
            _candidate("1", start_raw=None),
        ]
        renderer = FakeRenderer()
        records = await self._enricher(renderer).enrich(candidates, max_visits=30)
        self.assertEqual(renderer.visited, ["https://x/live/1", "https://x/live/1"])
        self.assertEqual([r.start for r in records], [JUNE_1, None])

    async def test_detail_values_override_candidate(self):
        url = "https://x/live/full"
        renderer = FakeRenderer(pages={url: DETAIL_FULL})
        candidate = ShowCandidate(title="card title", url=url, start_raw="2025-01-01T00:00:00Z",
                                  host="card host", thumbnail="https://x/card.jpg")
        (record,) = await self._enricher(renderer).enrich([candidate], max_visits=5)
        self.assertEqual(record, ShowRecord(
            title="BoBA Tuesday Night Throwdown",
            url=url,
            host="cardking",
            thumbnail="https://x/images/og.jpg",
            start=JUNE_1,
        ))

    async def test_search_mode_drops_failures_and_unmatched_undated(self):
        candidates = [
            _candidate("fails"),
            _candidate("unmatched", title="Pokemon packs"),
            _candidate("dated", title="Pokemon packs", start_raw="2024-06-01T18:00:00Z"),
            _candidate("matched", host="card host"),
        ]
        renderer = FakeRenderer(failures={"https://x/live/fails": RenderError("boom")})
        records = await self._enricher(renderer).enrich(candidates, max_visits=30)
        self.assertEqual([r.url for r in records], ["https://x/live/dated", "https://x/live/matched"])
        self.assertEqual(records[1].host, "card host")

    async def test_timeout_is_a_per_candidate_failure(self):
        candidates = [_candidate("slow"), _candidate("ok")]
        renderer = FakeRenderer(failures={"https://x/live/slow": PlaywrightTimeoutError("Timeout 60000ms exceeded.")})
        records = await self._enricher(renderer).enrich(candidates, max_visits=30)
        self.assertEqual([r.url for r in records], ["https://x/live/ok"])

    async def test_unexpected_error_does_not_abort_batch(self):
        candidates = [_candidate("bad"), _candidate("good")]
        renderer = FakeRenderer(failures={"https://x/live/bad": KeyError("content")})
        records = await self._enricher(renderer).enrich(candidates, max_visits=30)
        self.assertEqual([r.url for r in records], ["https://x/live/good"])

    async def test_seller_mode_degrades_failed_visit(self):
        candidate = ShowCandidate(title="Show A", url="https://x/live/1", thumbnail="t.png", start_raw=None)
        renderer = FakeRenderer(failures={"https://x/live/1": RenderError("navigation failed")})
        (record,) = await self._enricher(renderer, mode="seller").enrich([candidate], max_visits=30)
        self.assertEqual(record.to_feed_dict(), {
            "title": "Show A",
            "url": "https://x/live/1",
            "thumbnail": "t.png",
            "start": None,
        })

    async def test_seller_mode_keeps_everything_without_host(self):
        candidates = [_candidate("1", title="Pokemon packs", host="someone")]
        renderer = FakeRenderer(pages={"https://x/live/1": DETAIL_FULL.replace("BoBA Tuesday Night Throwdown", "Pokemon night")})
        (record,) = await self._enricher(renderer, mode="seller").enrich(candidates, max_visits=30)
        self.assertIsNone(record.host)
        self.assertEqual(record.title, "Pokemon night")
        self.assertNotIn("host", record.to_feed_dict())

    async def test_deadline_stops_visits(self):
        renderer = FakeRenderer()
        records = await self._enricher(renderer).enrich([_candidate("1")], max_visits=30,
                                                        deadline=time.monotonic() - 1)
        self.assertEqual(records, [])
        self.assertEqual(renderer.visited, [])

    async def test_zero_cap_visits_nothing(self):
        renderer = FakeRenderer()
        self.assertEqual(await self._enricher(renderer).enrich([_candidate("1")], max_visits=0), [])
        self.assertEqual(renderer.visited, [])


if __name__ == '__main__':
    unittest.main()
