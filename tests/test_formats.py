import json

import pytest

from conftest import ttp_log, ttp_record
from routeplot import formats
from routeplot.formats import (
    FORMAT_REGISTRY, FormatDesc, extract_csv, extract_json, extract_routes,
    extract_text, extract_ttp, get_format, supported_formats,
)
from routeplot.models import ErrorKind, RouteParseError
from routeplot.projections import flatten_points

SCENARIO_A = (
    '{"formatVersion":"0.0.12","routes":[{"legs":[{"points":[{"latitude":52.0,"longitude":4.0}]}],'
    '"summary":{"lengthInMeters":0,"travelTimeInSeconds":0},"guidance":{"instructions":[]}}]}'
)
SCENARIO_B = "GeoPoint(latitude = 52.1, longitude = 4.9), GeoPoint(latitude = 52.2, longitude = 5.0)"

OUT = formats.TTP_OUTGOING
IN = formats.TTP_INCOMING


# ─── Structured route data ───────────────────────────────────

def test_scenario_a_structured_route():
    outcome = extract_routes(SCENARIO_A)
    assert outcome.is_success
    assert "JSON" in outcome.message
    routes = outcome.value
    assert len(routes) == 1
    assert len(flatten_points(routes[0])) == 1


def test_structured_routes_returned_unchanged(structured_route):
    text = json.dumps({"formatVersion": "0.0.12", "routes": [structured_route, structured_route]})
    outcome = extract_routes(text)
    assert outcome.is_success
    assert [r.to_dict() for r in outcome.value] == [structured_route, structured_route]


def test_json_wrong_version_is_reported():
    text = json.dumps({"formatVersion": "0.0.11", "routes": [{"legs": []}]})
    outcome = extract_json(text)
    assert outcome.kind is ErrorKind.UNSUPPORTED_VERSION
    assert "0.0.11" in outcome.message

    outcome = extract_routes(text)
    assert not outcome.is_success
    assert outcome.kind is ErrorKind.UNSUPPORTED_VERSION


def test_json_mismatch_cases():
    assert extract_json("{not json").kind is ErrorKind.FORMAT_MISMATCH
    assert extract_json("[1, 2]").kind is ErrorKind.FORMAT_MISMATCH
    assert extract_json('{"routes": []}').kind is ErrorKind.FORMAT_MISMATCH


def test_deeply_nested_json_is_a_mismatch():
    text = "[" * 100000
    assert extract_json(text).kind is ErrorKind.FORMAT_MISMATCH
    outcome = extract_routes(text)
    assert not outcome.is_success
    assert outcome.kind is ErrorKind.EXHAUSTED


def test_json_without_routes():
    text = '{"formatVersion":"0.0.12","routes":[]}'
    assert extract_json(text).kind is ErrorKind.NO_DATA
    assert extract_routes(text).kind is ErrorKind.EXHAUSTED


# ─── TTP ─────────────────────────────────────────────────────

def test_ttp_single_channel_dedup_and_zero_timestamp():
    text = ttp_log(
        "# comment line",
        ttp_record("0", OUT, 52.0, 4.0, 1),
        ttp_record("10", OUT, 52.01, 4.01, 5.126),
        ttp_record("20", OUT, 52.02, 4.02, 6),
        ttp_record("20", OUT, 52.9, 4.9, 6),
        ttp_record("35", OUT, 52.03, 4.03, 7),
        "END",
    )
    outcome = extract_ttp(text)
    assert outcome.is_success
    assert "outgoing" in outcome.message
    points = flatten_points(outcome.value[0])
    assert [p.timestamp for p in points] == ["10", "20", "35"]
    assert points[1].latitude == 52.02
    assert points[0].speed == 5.13
    summary = outcome.value[0].summary
    assert summary.travel_time_in_seconds == 25
    assert summary.length_in_meters > 0


def test_ttp_record_without_speed_blocks_its_timestamp():
    text = ttp_log(
        ttp_record("10", IN, 52.01, 4.01, 5),
        ttp_record("20", IN, 52.02, 4.02, ""),
        ttp_record("20", IN, 52.03, 4.03, 5),
        ttp_record("30", IN, 52.04, 4.04, 5),
    )
    points = flatten_points(extract_ttp(text).value[0])
    assert [p.timestamp for p in points] == ["10", "30"]


def test_ttp_rejected_timestamp_blocks_other_channel():
    text = ttp_log(
        ttp_record("20", IN, 52.02, 4.02, ""),
        ttp_record("20", OUT, 52.12, 4.12, 5),
        ttp_record("30", OUT, 52.13, 4.13, 5),
    )
    outcome = extract_ttp(text)
    assert "outgoing" in outcome.message
    assert [p.timestamp for p in flatten_points(outcome.value[0])] == ["30"]


def test_ttp_channel_with_more_points_wins():
    text = ttp_log(
        ttp_record("10", IN, 52.01, 4.01, 5),
        ttp_record("10", OUT, 52.11, 4.11, 5),
        ttp_record("20", OUT, 52.12, 4.12, 5),
        ttp_record("20", IN, 52.02, 4.02, 5),
        ttp_record("30", OUT, 52.13, 4.13, 5),
    )
    outcome = extract_ttp(text)
    assert "outgoing" in outcome.message
    assert len(flatten_points(outcome.value[0])) == 3


def test_ttp_tie_goes_to_incoming():
    text = ttp_log(
        ttp_record("10", IN, 52.01, 4.01, 5),
        ttp_record("10", OUT, 52.11, 4.11, 5),
        ttp_record("20", OUT, 52.12, 4.12, 5),
        ttp_record("20", IN, 52.02, 4.02, 5),
    )
    outcome = extract_ttp(text)
    assert "incoming" in outcome.message
    assert flatten_points(outcome.value[0])[0].latitude == 52.01


def test_ttp_custom_channel_codes():
    text = ttp_log(
        ttp_record("10", "7", 52.01, 4.01, 5),
        ttp_record("20", "7", 52.02, 4.02, 5),
    )
    assert extract_ttp(text).kind is ErrorKind.NO_DATA
    outcome = extract_routes(text, incoming="7", outgoing="8")
    assert outcome.is_success
    assert "incoming" in outcome.message


def test_ttp_header_and_version():
    assert extract_ttp("hello\n1,2,3").kind is ErrorKind.FORMAT_MISMATCH
    old = ttp_log(ttp_record("10", OUT, 52.0, 4.0, 1),
                  header="BEGIN:ApplicationVersion=TomTom Positioning 0.6")
    outcome = extract_ttp(old)
    assert outcome.kind is ErrorKind.UNSUPPORTED_VERSION
    assert extract_routes(old).kind is ErrorKind.UNSUPPORTED_VERSION


def test_ttp_unreadable_timestamps_are_demoted():
    text = ttp_log(
        ttp_record("x", OUT, 52.1, 4.9, 12.5),
        ttp_record("y", OUT, 52.15, 4.95, 13),
    )
    with pytest.raises(RouteParseError):
        extract_ttp(text)
    outcome = extract_routes(text)
    assert not outcome.is_success
    assert outcome.kind is ErrorKind.EXHAUSTED


def test_scenario_d_falls_through_json_to_ttp():
    text = ttp_log(
        ttp_record("1000", OUT, 52.0, 4.0, 10),
        ttp_record("1001", OUT, 52.001, 4.001, 10),
    )
    assert extract_json(text).kind is ErrorKind.FORMAT_MISMATCH
    outcome = extract_routes(text)
    assert outcome.is_success
    assert "outgoing" in outcome.message


# ─── CSV ─────────────────────────────────────────────────────

CSV_TEXT = (
    "lat,lon,source_timestamp,speed\n"
    "52.0,4.0,1000,10.456\n"
    "52.01,4.01,1010,11\n"
    ",4.02,1020,3\n"
    "52.03,4.03,,3\n"
    "abc,4.04,1030,3\n"
)


def test_csv_rows():
    outcome = extract_csv(CSV_TEXT)
    assert outcome.is_success
    points = flatten_points(outcome.value[0])
    assert len(points) == 2
    assert points[0].speed == 10.46
    assert points[0].timestamp == "1000"
    assert outcome.value[0].summary.travel_time_in_seconds == 10
    assert outcome.value[0].summary.length_in_meters > 0


def test_csv_empty_speed_is_none():
    outcome = extract_csv("lat,lon,source_timestamp,speed\n52.0,4.0,1,\n")
    assert flatten_points(outcome.value[0])[0].speed is None


def test_csv_requires_named_columns():
    assert extract_csv("a,b,c\n1,2,3\n").kind is ErrorKind.FORMAT_MISMATCH
    assert extract_csv("lat,lon,speed\n52,4,1\n").kind is ErrorKind.FORMAT_MISMATCH


def test_csv_custom_columns():
    text = "latitude;longitude;t;v\n52.0;4.0;1;2\n52.1;4.1;5;2\n"
    outcome = extract_csv(text, delimiter=";", col_lat="latitude", col_lon="longitude",
                          col_timestamp="t", col_speed="v")
    assert outcome.is_success
    assert outcome.value[0].summary.travel_time_in_seconds == 4


def test_csv_without_usable_rows():
    assert extract_csv("lat,lon,source_timestamp,speed\n,,,\n").kind is ErrorKind.NO_DATA


def test_dispatcher_prefers_csv_over_text():
    outcome = extract_routes(CSV_TEXT)
    assert outcome.message == "using telemetry CSV"


# ─── Free text ───────────────────────────────────────────────

def test_scenario_b_named_geopoints():
    outcome = extract_routes(SCENARIO_B)
    assert outcome.is_success
    route = outcome.value[0]
    points = flatten_points(route)
    assert len(points) == 2
    assert all(p.timestamp is None and p.speed is None for p in points)
    assert route.summary.length_in_meters > 0
    assert route.summary.travel_time_in_seconds == 0


def test_text_positional_geopoints():
    outcome = extract_text("GeoPoint(52.1, 4.9)\nGeoPoint(52.2 5.0)")
    assert outcome.message == "using GeoPoint(…, …) coordinates"
    assert [p.longitude for p in flatten_points(outcome.value[0])] == [4.9, 5.0]


def test_text_named_pairs():
    outcome = extract_routes('{"lat": 52.1, "lon": 4.9}, {"lat": 52.2, "lon": 5.0}')
    assert outcome.message == "using latitude/longitude coordinates"
    assert len(flatten_points(outcome.value[0])) == 2


def test_text_bare_pairs():
    outcome = extract_text("52.1, 4.9\n52.2 5.0\n-33.9, 18.4")
    points = flatten_points(outcome.value[0])
    assert [(p.latitude, p.longitude) for p in points] == [(52.1, 4.9), (52.2, 5.0), (-33.9, 18.4)]


def test_text_drops_zero_values():
    points = flatten_points(extract_text("0, 4.9 52.1, 4.9").value[0])
    assert [(p.latitude, p.longitude) for p in points] == [(52.1, 4.9)]


def test_text_wrapped_form_has_priority():
    outcome = extract_text("GeoPoint(latitude = 52.1, longitude = 4.9) 53.0, 6.0")
    assert len(flatten_points(outcome.value[0])) == 1


def test_text_without_coordinates():
    assert extract_text("no numbers here").kind is ErrorKind.NO_DATA
    assert extract_routes("no numbers here").kind is ErrorKind.EXHAUSTED


# ─── Dispatcher ──────────────────────────────────────────────

def test_registry_order():
    assert supported_formats() == ["json", "ttp", "csv", "text"]
    assert get_format("CSV").name == "Telemetry CSV"
    assert get_format("gpx") is None


def test_scenario_c_empty_input_runs_no_extractor(monkeypatch):
    def explode(text):
        raise AssertionError("extractor called")

    monkeypatch.setattr(formats, "FORMAT_REGISTRY", [FormatDesc("boom", "Boom", explode)])
    for text in ("", "   \n"):
        outcome = extract_routes(text)
        assert outcome.kind is ErrorKind.EMPTY_INPUT


def test_extractor_errors_fall_through(monkeypatch):
    def broken(text):
        raise RouteParseError("broken")

    registry = [FormatDesc("broken", "Broken", broken), get_format("text")]
    monkeypatch.setattr(formats, "FORMAT_REGISTRY", registry)
    assert extract_routes(SCENARIO_B).is_success


def test_only_restricts_formats():
    assert extract_routes(CSV_TEXT, only=["text"]).message == "using plain coordinates"
    assert extract_routes(SCENARIO_A, only=["csv"]).kind is ErrorKind.EXHAUSTED


def test_only_accepts_a_single_key():
    assert extract_routes(CSV_TEXT, only="text").message == "using plain coordinates"
    assert extract_routes(CSV_TEXT, only="csvtext").kind is ErrorKind.EXHAUSTED


def test_registry_lists_every_extractor():
    assert [f.extractor for f in FORMAT_REGISTRY] == [
        extract_json, extract_ttp, extract_csv, extract_text,
    ]
