import logging
from typing import List, Optional

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError, Error as PlaywrightError

logger = logging.getLogger(__name__)

DEFAULT_OVERLAY_SELECTORS = [
    'button:has-text("Accept")',
    'button:has-text("Got it")',
    'button:has-text("Close")',
    '[data-test="close-button"]',
    '[aria-label="Close"]',
    '[data-testid="banner-close"]',
    '[data-testid="modal-close"]',
]


async def dismiss_overlays(
    page: Page,
    selectors: Optional[List[str]] = None,
    click_timeout_ms: int = 400
) -> int:
    """
    Clicks away cookie banners, app-install prompts and modals.
    Every selector is tried once; returns how many overlays were clicked.
    """
    clicked = 0
    for selector in selectors or DEFAULT_OVERLAY_SELECTORS:
        try:
            element_locator = page.locator(selector).first
            if not await element_locator.is_visible():
                continue
            await element_locator.click(timeout=click_timeout_ms)
            clicked += 1
            logger.debug(f"Overlay dismissed with selector: {selector}")
        except PlaywrightTimeoutError:
            logger.debug(f"Overlay selector not clickable in time: {selector}")
        except PlaywrightError as e:
            logger.debug(f"Overlay selector '{selector}' failed: {e}")
    return clicked


async def auto_scroll(page: Page, step_px: int = 700, pause_ms: int = 220, max_px: int = 7000) -> None:
    """Scrolls down in steps to trigger lazy loading, then back to the top."""
    scrolled = 0
    while scrolled < max_px:
        await page.evaluate("(step) => window.scrollBy(0, step)", step_px)
        await page.wait_for_timeout(pause_ms)
        scrolled += step_px
    await page.evaluate("() => window.scrollTo(0, 0)")
