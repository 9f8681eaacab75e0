import itertools
import logging
from typing import Any, Dict, List, Optional, Set
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from showfeed.data_quality.cleaning import clean_and_normalize_text, first_non_empty
from showfeed.scrapers.whatnot.site_config import DEFAULT_SELECTORS
from showfeed.scrapers.whatnot.whatnot_datamodels import ShowCandidate

logger = logging.getLogger(__name__)

CARD_TAGS = ("article", "section", "div")


def resolve_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Absolute http(s) URL for an href, or None if it does not resolve to one."""
    if not href or not href.strip():
        return None
    absolute = urljoin(base_url, href.strip())
    parsed = urlparse(absolute)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return absolute


def find_card_container(link: Tag) -> Optional[Tag]:
    """The link itself when marked as a card, else the nearest enclosing article/section/div or card-marked ancestor."""
    for node in itertools.chain([link], link.parents):
        if not isinstance(node, Tag) or node.name == "[document]":
            continue
        if node.name in CARD_TAGS or "card" in (node.get("data-test") or ""):
            return node
    return None


def _link_title(link: Tag) -> str:
    heading = link.select_one("h1, h2, h3")
    return first_non_empty(
        link.get("aria-label"),
        heading.get_text(" ", strip=True) if heading else None,
        link.get_text(" ", strip=True),
    )


def _card_start_raw(container: Optional[Tag], selector: str) -> Optional[str]:
    if container is None:
        return None
    time_el = container.select_one(selector)
    if time_el is None:
        return None
    return clean_and_normalize_text(time_el.get("datetime") or time_el.get("data-start-time"))


def _first_text(container: Optional[Tag], selectors: List[str]) -> str:
    if container is None:
        return ""
    for selector in selectors:
        el = container.select_one(selector)
        if el is not None:
            text = clean_and_normalize_text(el.get_text(" ", strip=True))
            if text:
                return text
    return ""


def image_source(img: Optional[Tag], base_url: str) -> Optional[str]:
    if img is None:
        return None
    srcset = (img.get("srcset") or "").strip()
    src = img.get("src") or img.get("data-src") or (srcset.split()[0] if srcset else None)
    if not src or not src.strip():
        return None
    return urljoin(base_url, src.strip())


def extract_candidates(
    html: str,
    base_url: str,
    selectors: Optional[Dict[str, Any]] = None
) -> List[ShowCandidate]:
    """
    Reads show cards off a rendered listing page.

    Every anchor matching the show-link selector becomes one candidate; links
    that do not resolve to an absolute URL are dropped, and a URL seen earlier
    on the same page is skipped. Returns [] when the page has no show links.
    """
    selectors = {**DEFAULT_SELECTORS, **(selectors or {})}
    host_selectors = selectors["card_host"]
    if isinstance(host_selectors, str):
        host_selectors = [host_selectors]

    soup = BeautifulSoup(html or "", "html.parser")
    candidates: List[ShowCandidate] = []
    seen_urls: Set[str] = set()

    for link in soup.select(selectors["show_link"]):
        url = resolve_url(link.get("href"), base_url)
        if not url:
            logger.debug(f"Skipping show link without a resolvable URL: {link.get('href')!r}")
            continue
        if url in seen_urls:
            continue
        seen_urls.add(url)

        container = find_card_container(link)
        candidates.append(ShowCandidate(
            title=_link_title(link),
            url=url,
            start_raw=_card_start_raw(container, selectors["card_time"]),
            host=_first_text(container, host_selectors),
            thumbnail=image_source(container.select_one("img") if container is not None else None, base_url),
        ))

    logger.info(f"Extracted {len(candidates)} show candidates from listing page.")
    return candidates
