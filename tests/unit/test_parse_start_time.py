import json
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from showfeed.parse_components.parse_start_time import (
    PageDocument,
    resolve_start_time,
    resolve_start_time_with_source,
)

JUNE_1 = 1717264800000
JAN_1_2025 = 1735689600000


def _ld(payload):
    return f'<script type="application/ld+json">{json.dumps(payload)}</script>'


def _resolve(html):
    return resolve_start_time_with_source(PageDocument(html))


def test_time_element_wins_over_json_ld():
    html = ('<html><body><time datetime="2024-06-01T18:00:00Z">Jun 1</time>'
            + _ld({"@type": "Event", "startDate": "2025-01-01T00:00:00Z"}) + '</body></html>')
    result = _resolve(html)
    assert result.start == JUNE_1
    assert result.source == "explicit_attributes"


def test_data_start_time_attribute():
    result = _resolve('<div data-start-time="2024-06-01T18:00:00Z"></div>')
    assert result.source == "explicit_attributes"
    assert result.start == JUNE_1


def test_start_date_meta_tag():
    result = _resolve('<meta itemprop="startDate" content="2024-06-01T18:00:00Z">')
    assert result == (JUNE_1, "explicit_attributes")


def test_json_ld_event_before_embedded_keys():
    html = (_ld({"@type": "LiveEvent", "startDate": "2024-06-01T18:00:00Z"})
            + '<script type="application/json">{"show": {"startTime": 1735689600000}}</script>')
    result = _resolve(html)
    assert result == (JUNE_1, "structured_event_data")


def test_video_object_publication():
    html = _ld({
        "@type": "VideoObject",
        "name": "BoBA breaks",
        "publication": {"@type": "BroadcastEvent", "isLiveBroadcast": True, "startDate": "2024-06-01T18:00:00Z"},
    })
    assert _resolve(html) == (JUNE_1, "structured_event_data")


def test_graph_container():
    html = _ld({"@context": "https://schema.org", "@graph": [
        {"@type": "WebPage", "name": "Show"},
        {"@type": "Event", "startDate": "2024-06-01T18:00:00Z"},
    ]})
    assert _resolve(html) == (JUNE_1, "structured_event_data")


def test_unparseable_start_date_moves_to_next_layer():
    html = (_ld({"@type": "Event", "startDate": "TBD"})
            + '<script type="application/json">{"props": {"show": {"scheduledStartTime": 1717264800000}}}</script>')
    result = _resolve(html)
    assert result == (JUNE_1, "embedded_start_keys")


def test_tbd_only_gives_none():
    html = _ld({"@type": "Event", "startDate": "TBD"})
    assert resolve_start_time(PageDocument(html)) is None


def test_embedded_string_start_key():
    html = '<script id="__NEXT_DATA__" type="application/json">{"a": [{"starts_at": "2024-06-01T18:00:00Z"}]}</script>'
    assert _resolve(html) == (JUNE_1, "embedded_start_keys")


def test_embedded_non_epoch_number_is_ignored():
    html = '<script type="application/json">{"startTime": 42}</script>'
    assert _resolve(html) is None


def test_raw_markup_iso_then_epoch():
    assert _resolve('<p>Goes live 2024-06-01T18:00:00Z</p>') == (JUNE_1, "raw_markup_scan")
    assert _resolve('<p data-x="1735689600000">soon</p>') == (JAN_1_2025, "raw_markup_scan")


def test_raw_markup_prefers_iso_over_epoch():
    html = '<p data-x="1735689600000">2024-06-01T18:00:00Z</p>'
    assert _resolve(html).start == JUNE_1


def test_broken_json_script_is_skipped():
    html = '<script type="application/ld+json">{not json</script><time datetime="TBD"></time>'
    assert resolve_start_time(PageDocument(html)) is None


def test_empty_document():
    assert resolve_start_time(PageDocument("")) is None


def test_time_only_embedded_value_moves_to_next_layer():
    html = '<script type="application/json">{"startTime": "7:00 PM"}</script><p>Live 2024-06-01T18:00:00Z</p>'
    assert _resolve(html) == (JUNE_1, "raw_markup_scan")
