"""
Livestream show schedule scraper.

Collects upcoming shows from marketplace search listings or a seller page and
publishes them as a static JSON feed.
"""
__version__ = "0.1.0"
