import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from showfeed.config import FeedSettings
from showfeed.scrapers.whatnot.target_resolver import (
    SEARCH_MODE,
    SELLER_MODE,
    build_search_url,
    resolve_targets,
    seller_slug,
)

TEMPLATE = "https://www.whatnot.com/search?query={query}&referringSource=typed&searchVertical=LIVESTREAM"


def test_build_search_url_encodes_query():
    url = build_search_url(TEMPLATE, "Bo Jackson Battle Arena")
    assert url.startswith("https://www.whatnot.com/search?query=Bo%20Jackson%20Battle%20Arena&")
    assert build_search_url(TEMPLATE, "a&b/c").startswith("https://www.whatnot.com/search?query=a%26b%2Fc&")


def test_search_targets_in_order_without_duplicates():
    feed = FeedSettings(mode="search", queries=["BoBA", "Bo Battle Arena", "boba", "  ", "Bo Battle Arena "])
    targets = resolve_targets(feed, TEMPLATE)
    assert [t.label for t in targets] == ["BoBA", "Bo Battle Arena"]
    assert [t.slug for t in targets] == ["boba", "bo-battle-arena"]
    assert all(t.mode == SEARCH_MODE for t in targets)


def test_seller_target():
    feed = FeedSettings(mode="seller", seller_url="https://www.whatnot.com/user/Card_King/shows")
    (target,) = resolve_targets(feed, TEMPLATE)
    assert target.mode == SELLER_MODE
    assert target.url == "https://www.whatnot.com/user/Card_King/shows"
    assert target.slug == "card-king"


def test_seller_mode_requires_url():
    with pytest.raises(ValueError):
        resolve_targets(FeedSettings(mode="seller", seller_url=None), TEMPLATE)


@pytest.mark.parametrize("url, expected", [
    ("https://www.whatnot.com/user/abc/shows", "abc"),
    ("https://www.whatnot.com/abc", "abc"),
    ("https://www.whatnot.com/", "seller"),
])
def test_seller_slug(url, expected):
    assert seller_slug(url) == expected
