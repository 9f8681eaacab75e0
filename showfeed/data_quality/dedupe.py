"""
Final normalization of the collected show records: duplicate removal on the
``(url, start)`` identity, then a total ordering for publishing.
"""
from typing import Iterable, List, Set, Tuple, Union

from showfeed.scrapers.whatnot.whatnot_datamodels import ShowRecord

NO_START = "nostart"

DedupeKey = Tuple[str, Union[int, str]]


def dedupe_key(record: ShowRecord) -> DedupeKey:
    # None gets its own bucket, so two undated records for one URL still collide
    return record.url, record.start if record.start is not None else NO_START


def dedupe_records(records: Iterable[ShowRecord]) -> List[ShowRecord]:
    """Drops later records whose key was already seen; first occurrence wins."""
    seen: Set[DedupeKey] = set()
    unique: List[ShowRecord] = []
    for record in records:
        key = dedupe_key(record)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def sort_key(record: ShowRecord) -> Tuple[bool, int, str]:
    """Dated before undated, earlier before later, then title ascending."""
    return record.start is None, record.start or 0, record.title


def sort_records(records: Iterable[ShowRecord]) -> List[ShowRecord]:
    return sorted(records, key=sort_key)


def normalize_records(records: Iterable[ShowRecord]) -> List[ShowRecord]:
    return sort_records(dedupe_records(records))
