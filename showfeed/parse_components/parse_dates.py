import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# 13-digit integers between 2001-09-09 and 2286-11-20 in milliseconds
EPOCH_MS_MIN = 1_000_000_000_000
EPOCH_MS_MAX = 9_999_999_999_999

ISO_TIMESTAMP_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?"
)
EPOCH_MS_RE = re.compile(r"(?<!\d)1\d{12}(?!\d)")
_PLACEHOLDER_VALUES = {"tba", "tbd", "coming soon", "n/a", "none", "null", ""}
# Full YYYY-MM-DD (or YYYYMMDD) date at the start; "2024-06" alone is not a start time
ISO_DATE_RE = re.compile(r"\d{4}-?\d{2}-?\d{2}(?:[T ]|$)")
_SENTINEL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def is_epoch_ms(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return EPOCH_MS_MIN <= value <= EPOCH_MS_MAX


def datetime_to_ms(dt_obj: datetime) -> int:
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=timezone.utc)
    return int(round(dt_obj.timestamp() * 1000))


def parse_start_ms(value: Any) -> Optional[int]:
    """
    Parses a start-time value into epoch milliseconds.

    Accepts date/time strings that carry a full calendar date (ISO-8601 or
    anything dateutil reads, naive values taken as UTC), epoch-ms numbers and
    digit-only epoch-ms strings. Time-only and yearless strings ("7:00 PM",
    "May 5") are rejected.
    Returns None for anything that does not parse; never raises.
    """
    if value is None:
        return None
    if is_epoch_ms(value):
        return int(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.lower() in _PLACEHOLDER_VALUES or not any(ch.isdigit() for ch in text):
        return None
    if text.isdigit():
        number = int(text)
        return number if is_epoch_ms(number) else None

    if ISO_DATE_RE.match(text):
        try:
            return datetime_to_ms(date_parser.isoparse(text))
        except (ValueError, OverflowError):
            pass
    try:
        # Date parts missing from the text come from the default, so they differ between the two parses
        first = date_parser.parse(text, default=_SENTINEL_DEFAULTS[0])
        second = date_parser.parse(text, default=_SENTINEL_DEFAULTS[1])
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Could not parse start time string '{text}': {e}")
        return None
    if first.date() != second.date():
        logger.debug(f"Start time string '{text}' has no full calendar date; ignoring.")
        return None
    return datetime_to_ms(first)
