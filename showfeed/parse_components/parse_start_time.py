"""
Start-time resolution for a show detail page.

The chain is an ordered list of strategies. Each strategy reads the page and
yields raw candidate values (strings or numbers) in its own preference order.
The first raw value that parses into epoch milliseconds wins, and later
strategies are not consulted. A value that does not parse is discarded and
resolution moves on.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup

from showfeed.parse_components.parse_dates import (
    EPOCH_MS_RE,
    ISO_TIMESTAMP_RE,
    is_epoch_ms,
    parse_start_ms,
)
from showfeed.parse_components.parse_json_ld import (
    iter_event_start_dates,
    iter_json_payloads,
    iter_start_like_values,
)

logger = logging.getLogger(__name__)


@dataclass
class PageDocument:
    """Rendered markup of one page plus its lazily built soup."""
    html: str
    _soup: Optional[BeautifulSoup] = field(default=None, repr=False)

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html or "", "html.parser")
        return self._soup


class StartTimeResult(NamedTuple):
    start: int
    source: str


StartStrategy = Callable[[PageDocument], Iterator[Any]]


def explicit_attributes(doc: PageDocument) -> Iterator[Any]:
    """time[datetime], data-start-time, and startDate meta tags."""
    time_el = doc.soup.select_one("time[datetime], [data-start-time]")
    if time_el is not None:
        yield time_el.get("datetime") or time_el.get("data-start-time")

    for selector in ('meta[itemprop="startDate"]', 'meta[name="startDate"]', 'meta[property$="start_time"]'):
        meta_tag = doc.soup.select_one(selector)
        if meta_tag is not None and meta_tag.get("content"):
            yield meta_tag["content"]


def structured_event_data(doc: PageDocument) -> Iterator[Any]:
    """schema.org Event/LiveEvent/VideoObject startDate in JSON-LD."""
    for payload in iter_json_payloads(doc.soup, ld_only=True):
        yield from iter_event_start_dates(payload)


def embedded_start_keys(doc: PageDocument) -> Iterator[Any]:
    """Any start-time-like key in any embedded JSON payload."""
    for payload in iter_json_payloads(doc.soup):
        for value in iter_start_like_values(payload):
            if isinstance(value, str) or is_epoch_ms(value):
                yield value


def raw_markup_scan(doc: PageDocument) -> Iterator[Any]:
    """First ISO-8601 timestamp in the markup, then the first epoch-ms integer."""
    iso_match = ISO_TIMESTAMP_RE.search(doc.html or "")
    if iso_match:
        yield iso_match.group(0)
    epoch_match = EPOCH_MS_RE.search(doc.html or "")
    if epoch_match:
        yield int(epoch_match.group(0))


START_TIME_STRATEGIES: Tuple[Tuple[str, StartStrategy], ...] = (
    ("explicit_attributes", explicit_attributes),
    ("structured_event_data", structured_event_data),
    ("embedded_start_keys", embedded_start_keys),
    ("raw_markup_scan", raw_markup_scan),
)


def resolve_start_time_with_source(
    doc: PageDocument,
    strategies: Tuple[Tuple[str, StartStrategy], ...] = START_TIME_STRATEGIES
) -> Optional[StartTimeResult]:
    for name, strategy in strategies:
        rejected: List[Any] = []
        for raw_value in strategy(doc):
            start = parse_start_ms(raw_value)
            if start is not None:
                logger.debug(f"Start time {start} resolved by '{name}' from {raw_value!r}")
                return StartTimeResult(start=start, source=name)
            rejected.append(raw_value)
        if rejected:
            logger.debug(f"Strategy '{name}' yielded only unparseable values: {rejected[:3]}")
    return None


def resolve_start_time(doc: PageDocument) -> Optional[int]:
    result = resolve_start_time_with_source(doc)
    return result.start if result else None
