from dataclasses import dataclass
from typing import List
from urllib.parse import quote, urlparse

from showfeed.config import FeedSettings
from showfeed.data_quality.cleaning import slugify

SEARCH_MODE = "search"
SELLER_MODE = "seller"


@dataclass(frozen=True)
class Target:
    """One listing page to visit."""
    label: str
    slug: str
    url: str
    mode: str


def build_search_url(template: str, query: str) -> str:
    return template.format(query=quote(query, safe=""))


def seller_slug(seller_url: str) -> str:
    """'https://www.whatnot.com/user/some_seller/shows' -> 'some-seller'."""
    segments = [s for s in urlparse(seller_url).path.split("/") if s]
    if "user" in segments and segments.index("user") + 1 < len(segments):
        name = segments[segments.index("user") + 1]
    else:
        name = segments[-1] if segments else ""
    return slugify(name) or "seller"


def resolve_targets(feed: FeedSettings, search_url_template: str) -> List[Target]:
    if feed.mode == SELLER_MODE:
        if not feed.seller_url:
            raise ValueError("Seller-page mode requires a seller URL (FEED_SELLER_URL or --seller-url).")
        return [Target(
            label=feed.seller_url,
            slug=seller_slug(feed.seller_url),
            url=feed.seller_url,
            mode=SELLER_MODE,
        )]

    targets: List[Target] = []
    seen = set()
    for query in feed.queries:
        query = query.strip()
        if not query or query.lower() in seen:
            continue
        seen.add(query.lower())
        targets.append(Target(
            label=query,
            slug=slugify(query) or "query",
            url=build_search_url(search_url_template, query),
            mode=SEARCH_MODE,
        ))
    return targets
