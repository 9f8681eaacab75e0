import re
import html
from typing import Optional


def normalize_whitespace(text: Optional[str]) -> Optional[str]:
    """
    Normalizes whitespace in a string.
    - Strips leading/trailing whitespace.
    - Replaces runs of internal whitespace with a single space.
    - Returns None if the input is None or nothing is left after stripping.
    """
    if text is None:
        return None

    text = re.sub(r'\s+', ' ', text.strip())
    return text if text else None


def clean_html_entities(text: Optional[str]) -> Optional[str]:
    """Converts HTML character entities (&amp;, &nbsp;, ...) to their Unicode characters."""
    if text is None:
        return None
    return html.unescape(text)


def clean_and_normalize_text(text: Optional[str]) -> Optional[str]:
    """HTML entity decoding followed by whitespace normalization."""
    if text is None:
        return None
    return normalize_whitespace(clean_html_entities(text))


def first_non_empty(*values: Optional[str]) -> str:
    """Returns the first value that is non-empty after cleaning, else ''."""
    for value in values:
        cleaned = clean_and_normalize_text(value)
        if cleaned:
            return cleaned
    return ""


def slugify(text: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', text.lower()).strip('-')
