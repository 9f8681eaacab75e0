import logging
import re
from typing import List, Optional, Pattern, Union

from showfeed.scrapers.whatnot.whatnot_datamodels import ShowCandidate

logger = logging.getLogger(__name__)


def compile_title_pattern(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern, re.IGNORECASE)


def title_matches(title: Optional[str], pattern: Pattern[str]) -> bool:
    return bool(title) and pattern.search(title) is not None


def filter_by_title(candidates: List[ShowCandidate], pattern: Pattern[str]) -> List[ShowCandidate]:
    """
    Candidates whose title matches the show pattern. When none match, the full
    list comes back unchanged so a markup change cannot empty the feed.
    Only used for search listings; seller pages are never filtered.
    """
    preferred = [c for c in candidates if title_matches(c.title, pattern)]
    if preferred:
        logger.info(f"Title filter kept {len(preferred)}/{len(candidates)} candidates.")
        return preferred
    if candidates:
        logger.warning(f"No candidate title matched '{pattern.pattern}'. Keeping all {len(candidates)} candidates.")
    return list(candidates)
