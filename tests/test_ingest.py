"""Tests for HAR transcript ingestion."""

import json
from datetime import datetime, timezone

import pytest
import yaml

from trafficspec.errors import CaptureFormatNotImplementedError, InvalidFormatError
from trafficspec.ingest import TrafficIngestor, parse_headers

EPOCH_2024_MS = datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp() * 1000


def test_single_submission_scenario(submit_har):
    ingestor = TrafficIngestor()
    result = ingestor.parse(json.dumps(submit_har))

    assert result.total_requests == 1
    assert result.total_responses == 1

    stats = ingestor.get_statistics()
    assert stats.total_transactions == 1
    assert stats.completed_transactions == 1
    assert stats.unique_endpoints == 1
    assert stats.completion_rate == 100


def test_empty_transcript(make_har):
    ingestor = TrafficIngestor()
    result = ingestor.parse(json.dumps(make_har()))

    assert result.total_requests == 0
    assert result.total_responses == 0
    assert result.transactions == []
    assert result.time_range.start is None
    assert ingestor.get_statistics().completion_rate == 0


def test_non_json_input_raises_invalid_format():
    with pytest.raises(InvalidFormatError):
        TrafficIngestor().parse("this is not json")


def test_invalid_format_is_a_value_error():
    with pytest.raises(ValueError):
        TrafficIngestor().parse("{")


_GOOD_REQUEST = {"method": "POST", "url": "https://api.example.com/freerun/submit"}


def _single_entry(**overrides):
    entry = {"startedDateTime": "2024-01-01T00:00:00.000Z", "time": 10, "request": dict(_GOOD_REQUEST)}
    entry.update(overrides)
    return {"log": {"entries": [entry]}}


@pytest.mark.parametrize("document", [
    {},
    {"log": {}},
    {"log": {"entries": "nope"}},
    [1, 2, 3],
    _single_entry(time="abc"),
    _single_entry(request={"method": "GET", "url": 42}),
    _single_entry(request={"method": "GET"}),
    _single_entry(request=dict(_GOOD_REQUEST, postData="raw")),
    _single_entry(response={"status": 200, "content": "x"}),
    _single_entry(response={"status": "ok"}),
])
def test_missing_entries_shape_raises(document):
    with pytest.raises(InvalidFormatError):
        TrafficIngestor().parse(json.dumps(document))


def test_binary_input_not_implemented():
    with pytest.raises(CaptureFormatNotImplementedError):
        TrafficIngestor().parse(b"\xd4\xc3\xb2\xa1\x02\x00\x04\x00")


def test_pcap_file_not_implemented(tmp_path):
    capture = tmp_path / "capture.pcap"
    capture.write_bytes(b"\x0a\x0d\x0d\x0a" + b"\x00" * 32)

    with pytest.raises(CaptureFormatNotImplementedError):
        TrafficIngestor().parse_file(capture)


def test_parse_file(tmp_path, submit_har):
    path = tmp_path / "session.har"
    path.write_text(json.dumps(submit_har))

    result = TrafficIngestor().parse_file(path)
    assert result.total_requests == 1


def test_headers_lowercased_last_wins():
    headers = parse_headers([
        {"name": "X-Token", "value": "first"},
        {"name": "Accept", "value": "*/*"},
        {"name": "x-token", "value": "second"},
    ])
    assert headers == {"x-token": "second", "accept": "*/*"}


def test_response_linked_to_request(submit_har):
    result = TrafficIngestor().parse(submit_har)
    transaction = result.transactions[0]

    assert transaction.request.method == "POST"
    assert transaction.request.body == json.dumps({"distance": 5.0, "duration": 1800})
    assert transaction.request.timestamp == EPOCH_2024_MS
    assert transaction.response.request_id == transaction.request.id
    assert transaction.response.status == 200
    assert transaction.response.timestamp == EPOCH_2024_MS + 120
    assert transaction.duration == 120


def test_request_ids_are_unique(make_har, make_entry):
    entry = make_entry("https://api.example.com/freerun/records")
    result = TrafficIngestor().parse(make_har(entry, entry, entry))

    ids = {t.request.id for t in result.transactions}
    assert len(ids) == 3


def test_time_range(make_har, make_entry):
    result = TrafficIngestor().parse(make_har(
        make_entry("https://a.example.com/x", started="2024-01-01T00:00:10.000Z"),
        make_entry("https://a.example.com/y", started="2024-01-01T00:00:00.000Z"),
        make_entry("https://a.example.com/z", started="2024-01-01T00:00:05.000Z"),
    ))

    assert result.time_range.start == EPOCH_2024_MS
    assert result.time_range.end == EPOCH_2024_MS + 10_000


def test_incomplete_transactions(make_har, make_entry):
    ingestor = TrafficIngestor()
    result = ingestor.parse(make_har(
        make_entry("https://a.example.com/ok"),
        make_entry("https://a.example.com/lost", with_response=False),
    ))

    assert result.total_requests == 2
    assert result.total_responses == 1
    assert len(ingestor.extract_responses()) == 1

    stats = ingestor.get_statistics()
    assert stats.completed_transactions == 1
    assert stats.completion_rate == 50


def test_extract_with_url_filter(session_har):
    ingestor = TrafficIngestor()
    ingestor.parse(session_har)

    assert len(ingestor.extract_requests()) == 5
    assert len(ingestor.extract_requests("freerun/submit")) == 2
    assert len(ingestor.extract_responses("cdn.example.com")) == 1


def test_store_accumulates_until_clear(submit_har):
    ingestor = TrafficIngestor()
    ingestor.parse(submit_har)
    ingestor.parse(submit_har)
    assert len(ingestor) == 2
    assert ingestor.get_statistics().unique_endpoints == 1

    ingestor.clear()
    assert len(ingestor) == 0
    assert ingestor.get_transactions() == []


def test_discover_endpoints_groups_all_traffic(session_har):
    ingestor = TrafficIngestor()
    ingestor.parse(session_har)

    endpoints = ingestor.discover_endpoints()
    assert len(endpoints) == 4
    assert endpoints[0].path == "/freerun/submit"
    assert endpoints[0].frequency == 2


def test_invalid_timestamp(make_har, make_entry):
    with pytest.raises(InvalidFormatError):
        TrafficIngestor().parse(make_har(make_entry("https://a.example.com/", started="yesterday")))


def test_save_result_json_and_yaml(tmp_path, submit_har):
    ingestor = TrafficIngestor()
    ingestor.parse(submit_har)
    stats = ingestor.get_statistics()

    json_path = ingestor.save_result(tmp_path / "stats.json", stats)
    yaml_path = ingestor.save_result(tmp_path / "out" / "stats.yaml", stats)

    assert json.loads(json_path.read_text())["totalTransactions"] == 1
    assert yaml.safe_load(yaml_path.read_text())["completionRate"] == 100.0
