import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence
from urllib.parse import urljoin

from playwright.async_api import TimeoutError as PlaywrightTimeoutError, Error as PlaywrightError

from showfeed.data_quality.cleaning import clean_and_normalize_text, first_non_empty
from showfeed.parse_components.extract_meta_data import extract_meta_data
from showfeed.parse_components.parse_dates import parse_start_ms
from showfeed.parse_components.parse_start_time import PageDocument, resolve_start_time
from showfeed.scraping_components.page_renderer import PageRenderer, RenderError
from showfeed.scrapers.whatnot.candidate_extractor import image_source
from showfeed.scrapers.whatnot.site_config import DEFAULT_SELECTORS
from showfeed.scrapers.whatnot.target_resolver import SELLER_MODE
from showfeed.scrapers.whatnot.title_filter import title_matches
from showfeed.scrapers.whatnot.whatnot_datamodels import ShowCandidate, ShowRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetailFields:
    """What a show detail page says about itself; empty/None when it says nothing."""
    title: str = ""
    thumbnail: str = ""
    host: str = ""
    start: Optional[int] = None


def resolve_detail_fields(html: str, page_url: str = "", host_selectors: Optional[Sequence[str]] = None) -> DetailFields:
    doc = PageDocument(html)
    soup = doc.soup
    meta = extract_meta_data(soup)

    heading = soup.find("h1")
    title = first_non_empty(
        meta.get("og_title"),
        meta.get("twitter_title"),
        heading.get_text(" ", strip=True) if heading else None,
    )

    meta_image = meta.get("og_image") or meta.get("twitter_image")
    thumbnail = urljoin(page_url, meta_image) if meta_image else image_source(soup.find("img"), page_url)

    host = ""
    for selector in host_selectors or DEFAULT_SELECTORS["detail_host"]:
        el = soup.select_one(selector)
        if el is not None:
            host = clean_and_normalize_text(el.get_text(" ", strip=True)) or ""
            if host:
                break

    return DetailFields(title=title, thumbnail=thumbnail or "", host=host, start=resolve_start_time(doc))


def merge_with_candidate(candidate: ShowCandidate, fields: DetailFields, track_host: bool) -> ShowRecord:
    """New record from detail-page fields, each falling back to the candidate's own value."""
    start = fields.start if fields.start is not None else parse_start_ms(candidate.start_raw)
    return ShowRecord(
        title=fields.title or candidate.title,
        url=candidate.url,
        host=(fields.host or candidate.host) if track_host else None,
        thumbnail=fields.thumbnail or candidate.thumbnail or "",
        start=start,
    )


def degraded_record(candidate: ShowCandidate) -> ShowRecord:
    """Seller-page record built only from the listing card."""
    return ShowRecord(
        title=candidate.title,
        url=candidate.url,
        host=None,
        thumbnail=candidate.thumbnail or "",
        start=parse_start_ms(candidate.start_raw),
    )


class DetailEnricher:
    """
    Visits show detail pages one at a time and turns candidates into records.

    Search mode keeps a record only when its title matches the show pattern or
    it has a start time, and drops candidates whose page fails. Seller mode
    keeps everything and falls back to the card's own fields on failure.
    """

    def __init__(self, renderer: PageRenderer, mode: str, title_pattern: Pattern[str],
                 host_selectors: Optional[Sequence[str]] = None, settle_ms: Optional[int] = None):
        self.renderer = renderer
        self.mode = mode
        self.title_pattern = title_pattern
        self.host_selectors = host_selectors
        self.settle_ms = settle_ms

    @property
    def is_seller_mode(self) -> bool:
        return self.mode == SELLER_MODE

    async def enrich_one(self, candidate: ShowCandidate) -> ShowRecord:
        html = await self.renderer.render(candidate.url, settle_ms=self.settle_ms)
        fields = resolve_detail_fields(html, candidate.url, self.host_selectors)
        return merge_with_candidate(candidate, fields, track_host=not self.is_seller_mode)

    def keep(self, record: ShowRecord) -> bool:
        if self.is_seller_mode:
            return True
        return title_matches(record.title, self.title_pattern) or record.start is not None

    async def enrich(self, candidates: List[ShowCandidate], max_visits: int,
                     deadline: Optional[float] = None) -> List[ShowRecord]:
        """
        Enriches the first ``max_visits`` candidates in order; the rest are never
        visited. ``deadline`` is a ``time.monotonic()`` value after which no
        further visits start.
        """
        records: List[ShowRecord] = []
        batch = candidates[:max(max_visits, 0)]
        if len(candidates) > len(batch):
            logger.info(f"Enrichment capped at {len(batch)} of {len(candidates)} candidates.")

        for index, candidate in enumerate(batch):
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(f"Run deadline reached; skipping {len(batch) - index} remaining detail visits.")
                break
            try:
                record = await self.enrich_one(candidate)
            except PlaywrightTimeoutError:
                logger.warning(f"Timeout loading detail page {candidate.url}")
                record = None
            except (PlaywrightError, RenderError) as e:
                logger.warning(f"Could not render detail page {candidate.url}: {e}")
                record = None
            except Exception as e:
                logger.error(f"Unexpected error enriching {candidate.url}: {e}", exc_info=True)
                record = None

            if record is None:
                if self.is_seller_mode:
                    records.append(degraded_record(candidate))
                continue
            if self.keep(record):
                records.append(record)
            else:
                logger.debug(f"Dropping '{record.title}' ({record.url}): no title match and no start time.")

        logger.info(f"Enriched {len(records)} records from {len(batch)} detail visits.")
        return records
