import itertools
import logging
import time
from pathlib import Path
from typing import List, Optional

from showfeed.config import Settings
from showfeed.data_quality.dedupe import normalize_records
from showfeed.publisher import publish_schedule, write_debug_html, write_debug_index, write_raw_candidates
from showfeed.scraping_components.page_renderer import PageRenderer
from showfeed.scrapers.whatnot.candidate_extractor import extract_candidates
from showfeed.scrapers.whatnot.detail_enricher import DetailEnricher
from showfeed.scrapers.whatnot.site_config import SiteConfig
from showfeed.scrapers.whatnot.target_resolver import SELLER_MODE, Target, resolve_targets
from showfeed.scrapers.whatnot.title_filter import compile_title_pattern, filter_by_title
from showfeed.scrapers.whatnot.whatnot_datamodels import ShowRecord

logger = logging.getLogger(__name__)


class ShowScheduleScraper:
    """
    Runs the listing -> candidates -> detail enrichment pipeline for every
    configured target and returns the deduplicated, sorted records.

    Each target yields its own record list; the lists are only combined in
    ``run`` once every target has been processed.
    """

    def __init__(self, current_settings: Settings, renderer: PageRenderer, site: Optional[SiteConfig] = None):
        self.settings = current_settings
        self.renderer = renderer
        self.site = site or SiteConfig()
        self.feed = current_settings.feed
        self.title_pattern = compile_title_pattern(self.feed.title_pattern)
        self.output_dir: Path = current_settings.file_outputs.output_directory
        self.targets: List[Target] = resolve_targets(self.feed, self.site.search_url_template)
        self.enricher = DetailEnricher(
            renderer=renderer,
            mode=self.feed.mode,
            title_pattern=self.title_pattern,
            host_selectors=self.site.selector_list("detail_host"),
            settle_ms=current_settings.browser.detail_settle_ms,
        )
        logger.info(f"{self.site.scraper_name} initialized with {len(self.targets)} target(s) in {self.feed.mode} mode.")

    @property
    def debug_enabled(self) -> bool:
        return self.settings.file_outputs.enable_debug_artifacts

    async def _save_listing_artifacts(self, target: Target, html: str) -> None:
        if not self.debug_enabled:
            return
        write_debug_html(self.output_dir, target.slug, html)
        if not self.settings.file_outputs.enable_screenshots:
            return
        try:
            await self.renderer.screenshot(self.output_dir / f"debug-{target.slug}.png")
        except Exception as e:
            logger.warning(f"Screenshot failed for '{target.label}': {e}")

    async def scrape_target(self, target: Target, deadline: Optional[float] = None) -> List[ShowRecord]:
        logger.info(f"Scraping target '{target.label}': {target.url}")
        html = await self.renderer.render(target.url, scroll=True, settle_ms=self.settings.browser.listing_settle_ms)
        await self._save_listing_artifacts(target, html)

        candidates = extract_candidates(html, self.site.base_url, self.site.selectors)
        if self.debug_enabled:
            write_raw_candidates(self.output_dir, target.slug, [c.model_dump() for c in candidates])

        chosen = candidates if target.mode == SELLER_MODE else filter_by_title(candidates, self.title_pattern)
        return await self.enricher.enrich(chosen, self.feed.enrich_max, deadline)

    async def run(self) -> List[ShowRecord]:
        deadline = time.monotonic() + self.feed.run_timeout_s if self.feed.run_timeout_s else None
        per_target: List[List[ShowRecord]] = []

        for target in self.targets:
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(f"Run deadline reached; skipping target '{target.label}'.")
                continue
            try:
                records = await self.scrape_target(target, deadline)
            except Exception as e:
                logger.error(f"Target '{target.label}' failed: {e}", exc_info=True)
                if self.debug_enabled:
                    write_raw_candidates(self.output_dir, target.slug, {"error": str(e)})
                records = []
            logger.info(f"Target '{target.label}' contributed {len(records)} records.")
            per_target.append(records)

        final = normalize_records(itertools.chain.from_iterable(per_target))
        logger.info(f"Scraping finished. {len(final)} unique shows across {len(self.targets)} targets.")
        return final

    def publish(self, records: List[ShowRecord]) -> Path:
        filename = self.settings.file_outputs.schedule_filename
        path = publish_schedule(records, self.output_dir, filename)
        if self.debug_enabled:
            write_debug_index(self.output_dir, "Show Schedule", len(records), filename, self.targets)
        return path
