import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright
from playwright_stealth import Stealth

from showfeed.config import BrowserSettings
from showfeed.scraping_components.overlays import auto_scroll, dismiss_overlays
from showfeed.scrapers.whatnot.site_config import SiteConfig

logger = logging.getLogger(__name__)


class RenderError(Exception):
    """Raised when a page cannot be rendered."""


class PageRenderer(ABC):
    """Navigates to a URL and returns the rendered document markup."""

    async def start(self) -> None:
        pass

    @abstractmethod
    async def render(self, url: str, *, scroll: bool = False, settle_ms: Optional[int] = None) -> str:
        ...

    async def screenshot(self, path: Path) -> None:
        pass

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "PageRenderer":
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class PlaywrightRenderer(PageRenderer):
    """
    One Chromium browser, one context and one page shared by every navigation
    of a run. Navigations are sequential; nothing here is safe to call
    concurrently.
    """

    def __init__(self, browser_settings: BrowserSettings, site: SiteConfig):
        self.browser_settings = browser_settings
        self.site = site
        self.playwright_instance: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def start(self) -> None:
        cfg = self.browser_settings
        self.playwright_instance = await async_playwright().start()
        # Launch args from the site YAML (automation flags off, sandbox off for containers)
        self.browser = await self.playwright_instance.chromium.launch(
            headless=cfg.headless,
            args=self.site.launch_args + [f"--window-size={cfg.viewport_width},{cfg.viewport_height}"],
        )
        # Desktop Chrome fingerprint: fixed viewport, UA, locale and timezone
        self.context = await self.browser.new_context(
            viewport={"width": cfg.viewport_width, "height": cfg.viewport_height},
            user_agent=cfg.user_agent,
            locale=cfg.locale,
            timezone_id=cfg.timezone_id,
        )
        # Evasion script runs before any page script on every navigation
        if self.site.init_script:
            await self.context.add_init_script(self.site.init_script)
        if cfg.apply_stealth:
            await Stealth().apply_stealth_async(self.context)
        self.page = await self.context.new_page()
        logger.info(f"Browser initialized (headless={cfg.headless}).")

    async def render(self, url: str, *, scroll: bool = False, settle_ms: Optional[int] = None) -> str:
        if self.page is None:
            raise RenderError("Renderer not started; call start() or use it as an async context manager.")
        cfg = self.browser_settings

        # Live pages long-poll; "networkidle" never fires on them
        await self.page.goto(url, wait_until="domcontentloaded", timeout=cfg.navigation_timeout_ms)
        # Let client-side rendering fill in the cards
        await self.page.wait_for_timeout(settle_ms if settle_ms is not None else cfg.detail_settle_ms)
        # Cookie banner / app prompt can cover the content
        await dismiss_overlays(self.page, self.site.selector_list("overlay_close"), cfg.overlay_click_timeout_ms)
        if scroll:
            await auto_scroll(self.page, cfg.scroll_step_px, cfg.scroll_pause_ms, cfg.scroll_max_px)
        logger.debug(f"Rendered {url}")
        return await self.page.content()

    async def screenshot(self, path: Path) -> None:
        if self.page is None:
            raise RenderError("Renderer not started.")
        await self.page.screenshot(path=str(path), full_page=True)

    async def close(self) -> None:
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
            logger.info("Browser closed.")
        if self.playwright_instance:
            await self.playwright_instance.stop()
        self.page = self.context = self.browser = self.playwright_instance = None
