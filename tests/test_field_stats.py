"""Tests for per-field statistics collection."""

import json

import pytest

from trafficspec.analyzer import RAW_RESPONSE_FIELD, FieldStatisticsEngine, classify_value
from trafficspec.config import FieldType


@pytest.mark.parametrize("value,expected", [
    (None, FieldType.NULL),
    ([], FieldType.ARRAY),
    ([1, 2], FieldType.ARRAY),
    (True, FieldType.BOOLEAN),
    (False, FieldType.BOOLEAN),
    (0, FieldType.NUMBER),
    (2.5, FieldType.NUMBER),
    ("", FieldType.STRING),
    ({}, FieldType.OBJECT),
])
def test_classify_value(value, expected):
    assert classify_value(value) is expected


def test_nested_paths():
    engine = FieldStatisticsEngine()
    engine.add_sample(json.dumps({
        "user": {"id": 7, "profile": {"name": "a"}},
        "laps": [{"time": 60}, 5, {"time": 58}],
        "tags": ["x", "y"],
    }))

    assert set(engine.get_all_fields()) == {
        "user",
        "user.id",
        "user.profile",
        "user.profile.name",
        "laps",
        "laps[0].time",
        "laps[2].time",
        "tags",
    }


def test_top_level_array_walks_objects():
    engine = FieldStatisticsEngine()
    engine.add_sample([{"id": 1}, "noise", {"id": 2}])

    assert set(engine.get_all_fields()) == {"[0].id", "[2].id"}


def test_value_samples_are_fifo_capped():
    engine = FieldStatisticsEngine()
    for n in range(12):
        engine.add_sample({"n": n})

    stats = engine.get_field_statistics("n")
    assert stats.count == 12
    assert list(stats.values) == list(range(2, 12))


def test_length_and_value_ranges():
    engine = FieldStatisticsEngine()
    engine.add_sample({"name": "ab", "speed": 9.5})
    engine.add_sample({"name": "abcdef", "speed": -1})
    engine.add_sample({"name": "abcd", "speed": 30})

    name = engine.get_field_statistics("name")
    speed = engine.get_field_statistics("speed")
    assert (name.min_length, name.max_length) == (2, 6)
    assert (speed.min_value, speed.max_value) == (-1, 30)


def test_type_histogram_and_primary_type():
    engine = FieldStatisticsEngine()
    engine.add_sample({"id": "1"})
    engine.add_sample({"id": 1})
    engine.add_sample({"flag": None})
    engine.add_sample({"flag": None})
    engine.add_sample({"flag": True})

    assert engine.get_field_statistics("id").types == {"string": 1, "number": 1}
    assert engine.get_field_statistics("id").primary_type == "string"
    assert engine.get_field_statistics("flag").primary_type == "null"


@pytest.mark.parametrize("value,pattern", [
    ("12345", "numeric_string"),
    ("runner@example.com", "email"),
    ("2024-03-01T10:00:00", "date"),
    ("123e4567-e89b-12d3-a456-426614174000", "uuid"),
    ("AA:BB:CC:DD:EE:FF", "mac_address"),
    ("aa-bb-cc-dd-ee-ff", "mac_address"),
])
def test_pattern_detectors(value, pattern):
    engine = FieldStatisticsEngine()
    engine.add_sample({"field": value})

    assert pattern in engine.get_field_statistics("field").patterns


def test_indicators_only_for_responses():
    request_engine = FieldStatisticsEngine()
    response_engine = FieldStatisticsEngine(response_mode=True)
    for engine in (request_engine, response_engine):
        engine.add_sample({"status": "OK", "result": "fail"})

    assert request_engine.get_field_statistics("status").patterns == []
    assert response_engine.get_field_statistics("status").patterns == ["success_indicator"]
    assert response_engine.get_field_statistics("result").patterns == ["error_indicator"]


def test_non_json_request_body_is_dropped():
    engine = FieldStatisticsEngine()
    engine.add_sample("distance=5&duration=1800")

    assert engine.total_samples == 1
    assert engine.get_all_fields() == []


def test_non_json_response_body_is_recorded():
    engine = FieldStatisticsEngine(response_mode=True)
    engine.add_sample("<html>Bad Gateway</html>", 502)

    stats = engine.get_field_statistics(RAW_RESPONSE_FIELD)
    assert stats.count == 1
    assert stats.status_codes == {502}
    assert list(stats.values) == ["<html>Bad Gateway</html>"]


def test_empty_bodies_count_as_samples():
    engine = FieldStatisticsEngine()
    engine.add_sample(None)
    engine.add_sample("")
    engine.add_sample({"a": 1})

    assert engine.total_samples == 3
    assert engine.field_frequency() == {"a": pytest.approx(1 / 3)}


def test_error_patterns_for_error_statuses():
    engine = FieldStatisticsEngine(response_mode=True)
    engine.add_sample({"message": "invalid token", "code": 401}, 401)
    engine.add_sample({"message": "invalid token", "code": 401}, 401)
    engine.add_sample({"message": "saved"}, 200)

    assert engine.get_error_patterns() == {"message:invalid token": 2}
    assert engine.get_status_code_statistics() == {401: 2, 200: 1}
    assert engine.get_field_statistics("message").status_codes == {200, 401}


def test_bytes_body_is_decoded():
    engine = FieldStatisticsEngine()
    engine.add_sample(b'{"distance": 5}')

    assert engine.get_all_fields() == ["distance"]


def test_summary_and_clear():
    engine = FieldStatisticsEngine(response_mode=True)
    engine.add_sample({"email": "a@b.co"}, 200)

    summary = engine.get_summary()
    assert summary["total_samples"] == 1
    assert summary["total_fields"] == 1
    assert summary["common_patterns"] == {"email": 1}
    assert summary["status_code_distribution"] == {200: 1}

    engine.clear()
    assert engine.total_samples == 0
    assert engine.get_all_fields() == []
    assert engine.get_status_code_statistics() == {}
    assert engine.get_error_patterns() == {}
