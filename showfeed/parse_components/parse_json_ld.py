import json
import logging
import re
from typing import Any, Iterator, List

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

JSON_SCRIPT_TYPES = {"application/ld+json", "application/json"}
START_KEY_RE = re.compile(r"starts?[_-]?(?:time|date|at|ts)", re.IGNORECASE)
MAX_SCAN_DEPTH = 40


def _load_script_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None


def iter_json_payloads(soup: BeautifulSoup, ld_only: bool = False) -> Iterator[Any]:
    """
    Yields the decoded payload of every embedded JSON script, in document order.
    With ``ld_only`` only ``application/ld+json`` scripts are considered.
    Scripts that do not decode are skipped.
    """
    for script_tag in soup.find_all("script"):
        script_type = (script_tag.get("type") or "").strip().lower()
        text = script_tag.string or script_tag.get_text() or ""
        if ld_only:
            if script_type != "application/ld+json":
                continue
        elif script_type not in JSON_SCRIPT_TYPES and not text.lstrip().startswith(("{", "[")):
            continue
        payload = _load_script_json(text.strip())
        if payload is None:
            logger.debug(f"Skipping undecodable script payload (type='{script_type}').")
            continue
        yield payload


def _types_of(node: dict) -> List[str]:
    raw_type = node.get("@type")
    if isinstance(raw_type, str):
        return [raw_type]
    if isinstance(raw_type, list):
        return [t for t in raw_type if isinstance(t, str)]
    return []


def _is_event_type(node: dict) -> bool:
    return any(t.split("/")[-1].endswith("Event") for t in _types_of(node))


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value] if value is not None else []


def iter_event_start_dates(payload: Any, depth: int = 0) -> Iterator[Any]:
    """
    Yields ``startDate`` values from schema.org structured data:
    Event/LiveEvent (any ``*Event`` type), the ``publication`` / ``event``
    sub-objects of a VideoObject, and ``@graph`` containers or top-level lists
    of such objects.
    """
    if depth > MAX_SCAN_DEPTH:
        return
    if isinstance(payload, list):
        for item in payload:
            yield from iter_event_start_dates(item, depth + 1)
        return
    if not isinstance(payload, dict):
        return

    if _is_event_type(payload) and payload.get("startDate") is not None:
        yield payload["startDate"]

    if "VideoObject" in _types_of(payload):
        for sub_key in ("publication", "event"):
            for sub in _as_list(payload.get(sub_key)):
                if isinstance(sub, dict) and sub.get("startDate") is not None:
                    yield sub["startDate"]

    if "@graph" in payload:
        yield from iter_event_start_dates(payload["@graph"], depth + 1)


def iter_start_like_values(payload: Any, depth: int = 0) -> Iterator[Any]:
    """
    Depth-first scan of any decoded payload for keys that look like a start
    time (startTime, start_time, startsAt, scheduledStartTime, startDate, ...).
    Yields string and numeric values only.
    """
    if depth > MAX_SCAN_DEPTH:
        return
    if isinstance(payload, dict):
        for key, value in payload.items():
            if isinstance(key, str) and START_KEY_RE.search(key):
                if isinstance(value, (str, int, float)) and not isinstance(value, bool):
                    yield value
            if isinstance(value, (dict, list)):
                yield from iter_start_like_values(value, depth + 1)
    elif isinstance(payload, list):
        for item in payload:
            yield from iter_start_like_values(item, depth + 1)
