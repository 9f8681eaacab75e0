from typing import Dict, Optional

from bs4 import BeautifulSoup


def _meta_content(soup: BeautifulSoup, key: str) -> Optional[str]:
    # Sites publish og:* under either property= or name=
    for attr in ("property", "name"):
        meta_tag = soup.find("meta", attrs={attr: key})
        if meta_tag and meta_tag.get("content"):
            content = meta_tag["content"].strip()
            if content:
                return content
    return None


def extract_meta_data(soup: BeautifulSoup) -> Dict[str, str]:
    """
    Extract Open Graph and Twitter card data from a parsed page.
    Only keys that were found are present in the result.
    """
    data: Dict[str, str] = {}

    meta_mappings = {
        "og:title": "og_title",
        "og:image": "og_image",
        "og:url": "og_url",
        "og:description": "og_description",
        "twitter:title": "twitter_title",
        "twitter:image": "twitter_image",
    }
    for meta_key, key in meta_mappings.items():
        content = _meta_content(soup, meta_key)
        if content:
            data[key] = content

    title_tag = soup.find("title")
    if title_tag and title_tag.string and title_tag.string.strip():
        data["html_title"] = title_tag.string.strip()

    return data
