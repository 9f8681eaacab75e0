import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import sentry_sdk
from pydantic import ValidationError

from showfeed.config import BrowserSettings, FeedSettings, FileOutputSettings, Settings, settings as global_settings
from showfeed.publisher import publish_empty_feed
from showfeed.scraping_components.page_renderer import PageRenderer, PlaywrightRenderer
from showfeed.scrapers.whatnot.site_config import SiteConfig
from showfeed.scrapers.whatnot.whatnot_datamodels import ShowRecord
from showfeed.scrapers.whatnot.whatnot_scraper import ShowScheduleScraper
from showfeed.sentry_setup import init_sentry
from showfeed.utils import setup_logger

logger = logging.getLogger("showfeed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape livestream show listings into a JSON schedule feed.")
    parser.add_argument("--mode", choices=["search", "seller"], help="Search-phrase listings or a single seller page.")
    parser.add_argument("--query", action="append", dest="queries", help="Search phrase (repeatable). Replaces configured queries.")
    parser.add_argument("--seller-url", help="Seller shows page, for --mode seller.")
    parser.add_argument("--title-pattern", help="Case-insensitive regex for preferred show titles.")
    parser.add_argument("--max", type=int, dest="enrich_max", help="Max detail pages to visit per target.")
    parser.add_argument("--run-timeout", type=float, dest="run_timeout_s", help="Stop visiting pages after N seconds and publish what was collected.")
    parser.add_argument("--output-dir", type=Path, help="Directory for schedule.json and debug artifacts.")
    parser.add_argument("--headless", action=argparse.BooleanOptionalAction, default=None, help="Run browser in headless mode.")
    parser.add_argument("--no-debug", action="store_true", help="Skip debug HTML, screenshots and raw dumps.")
    return parser


def apply_cli_overrides(base: Settings, args: argparse.Namespace) -> Settings:
    """
    Settings with the given flags applied. Sub-settings are re-validated, so a
    flag outside its field's bounds (``--max -1``, ``--run-timeout 0``) raises
    ``pydantic.ValidationError``.
    """
    feed_updates = {
        key: value for key, value in {
            "mode": args.mode,
            "queries": args.queries,
            "seller_url": args.seller_url,
            "title_pattern": args.title_pattern,
            "enrich_max": args.enrich_max,
            "run_timeout_s": args.run_timeout_s,
        }.items() if value is not None
    }
    browser_updates = {"headless": args.headless} if args.headless is not None else {}
    output_updates = {}
    if args.output_dir is not None:
        output_updates["output_directory"] = args.output_dir
    if args.no_debug:
        output_updates["enable_debug_artifacts"] = False

    # model_copy(update=...) skips validation; rebuild each sub-model from its dump instead
    return base.model_copy(update={
        "feed": FeedSettings.model_validate({**base.feed.model_dump(), **feed_updates}),
        "browser": BrowserSettings.model_validate({**base.browser.model_dump(), **browser_updates}),
        "file_outputs": FileOutputSettings.model_validate({**base.file_outputs.model_dump(), **output_updates}),
    })


async def run_and_publish(current: Settings, renderer: Optional[PageRenderer] = None,
                          site: Optional[SiteConfig] = None) -> List[ShowRecord]:
    """
    One full run. Any failure ends with an empty feed on disk rather than an
    exception, so downstream consumers always find valid JSON.
    """
    output_dir = current.file_outputs.output_directory
    schedule_filename = current.file_outputs.schedule_filename
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        site = site or SiteConfig()
        renderer = renderer or PlaywrightRenderer(current.browser, site)
        async with renderer:
            scraper = ShowScheduleScraper(current, renderer, site)
            records = await scraper.run()
        scraper.publish(records)
        return records
    except Exception as e:
        logger.critical(f"SCRAPER ERROR: {e}", exc_info=True)
        sentry_sdk.capture_exception(e)
        try:
            publish_empty_feed(output_dir, schedule_filename, e)
        except OSError as write_error:
            logger.critical(f"Could not write empty feed to {output_dir}: {write_error}", exc_info=True)
        return []


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        current = apply_cli_overrides(global_settings, args)
    except ValidationError as e:
        parser.error(f"invalid option value: {e}")

    main_logger = setup_logger(
        "showfeed",
        "showfeed_run",
        level=getattr(logging, current.log_level.upper(), logging.INFO),
        log_dir=current.file_outputs.log_output_directory,
    )
    main_logger.info(f"Starting show schedule scrape (mode={current.feed.mode}).")
    init_sentry(current)

    try:
        records = asyncio.run(run_and_publish(current))
    except KeyboardInterrupt:
        main_logger.warning("Scraper run interrupted.")
        return 130
    main_logger.info(f"Run complete: {len(records)} shows published.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
