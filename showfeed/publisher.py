"""
Writes the published feed and the operator-facing debug artifacts.

The feed (``schedule.json``) is the only contract: a pretty-printed JSON array,
replaced atomically. Everything else is best-effort and never raises.
"""
import html
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from showfeed.scrapers.whatnot.whatnot_datamodels import ShowRecord
from showfeed.utils import dump_json, write_text_atomic

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.html"
PAGE_STYLE = "background:#0b0b0b;color:#fff;font:16px/1.5 system-ui;padding:24px"
LINK_STYLE = "color:#ED67A1"


def publish_schedule(records: Iterable[ShowRecord], output_dir: Path, filename: str = "schedule.json") -> Path:
    feed = [record.to_feed_dict() for record in records]
    path = write_text_atomic(Path(output_dir) / filename, dump_json(feed))
    logger.info(f"Published {len(feed)} shows to {path}")
    return path


def publish_empty_feed(output_dir: Path, filename: str = "schedule.json", error: Optional[BaseException] = None) -> Path:
    """Fallback publish after a run-level failure: '[]' plus an error index page."""
    path = write_text_atomic(Path(output_dir) / filename, "[]")
    logger.warning(f"Published empty feed to {path}" + (f" after error: {error}" if error else ""))
    try:
        write_text_atomic(
            Path(output_dir) / INDEX_FILENAME,
            f'<!doctype html><meta charset="utf-8"><body style="{PAGE_STYLE}">'
            '<h1>Scraper error</h1><p>See the scraper logs for details.</p>',
        )
    except OSError as e:
        logger.error(f"Could not write error index page: {e}", exc_info=True)
    return path


def write_raw_candidates(output_dir: Path, slug: str, data: Any) -> Optional[Path]:
    path = Path(output_dir) / f"raw-{slug}.json"
    try:
        return write_text_atomic(path, dump_json(data))
    except (OSError, TypeError, ValueError) as e:
        logger.warning(f"Could not write raw candidate dump {path}: {e}")
        return None


def write_debug_html(output_dir: Path, slug: str, markup: str) -> Optional[Path]:
    path = Path(output_dir) / f"debug-{slug}.html"
    try:
        return write_text_atomic(path, markup)
    except OSError as e:
        logger.warning(f"Could not write debug page {path}: {e}")
        return None


def render_index(title: str, item_count: int, schedule_filename: str, targets: Sequence[Any]) -> str:
    """``targets`` are objects with ``label`` and ``slug`` attributes."""
    rows: List[str] = []
    for target in targets:
        label = html.escape(target.label)
        slug = html.escape(target.slug, quote=True)
        rows.append(
            f'<li><a style="{LINK_STYLE}" href="debug-{slug}.html">debug {label}</a> | '
            f'<a style="{LINK_STYLE}" href="raw-{slug}.json">raw {label}</a> | '
            f'<a style="{LINK_STYLE}" href="debug-{slug}.png">screenshot {label}</a></li>'
        )
    return (
        f'<!doctype html><meta charset="utf-8">\n'
        f'<body style="{PAGE_STYLE}">\n'
        f'<h1>{html.escape(title)} ({item_count} items)</h1>\n'
        f'<p><a style="{LINK_STYLE}" href="{html.escape(schedule_filename, quote=True)}">{html.escape(schedule_filename)}</a></p>\n'
        f'<ul>\n{"".join(rows)}\n</ul>\n'
    )


def write_debug_index(output_dir: Path, title: str, item_count: int, schedule_filename: str,
                      targets: Sequence[Any]) -> Optional[Path]:
    path = Path(output_dir) / INDEX_FILENAME
    try:
        return write_text_atomic(path, render_index(title, item_count, schedule_filename, targets))
    except OSError as e:
        logger.warning(f"Could not write debug index {path}: {e}")
        return None
