"""Shared fixtures: HAR transcript builders and an RSA key pair."""

import json

import pytest

from trafficspec.crypto import generate_key_pair


def build_entry(
    url,
    method="GET",
    body=None,
    status=200,
    response_body=None,
    started="2024-01-01T00:00:00.000Z",
    time_ms=120,
    request_headers=None,
    with_response=True,
):
    """Build one HAR entry. Dict bodies are JSON-encoded."""
    request = {
        "method": method,
        "url": url,
        "headers": request_headers or [{"name": "Content-Type", "value": "application/json"}],
    }
    if body is not None:
        request["postData"] = {
            "mimeType": "application/json",
            "text": body if isinstance(body, str) else json.dumps(body),
        }

    entry = {"startedDateTime": started, "time": time_ms, "request": request}
    if with_response:
        response = {"status": status, "headers": [{"name": "Content-Type", "value": "application/json"}]}
        if response_body is not None:
            response["content"] = {
                "mimeType": "application/json",
                "text": response_body if isinstance(response_body, str) else json.dumps(response_body),
            }
        entry["response"] = response
    return entry


def build_har(*entries):
    return {"log": {"version": "1.2", "entries": list(entries)}}


@pytest.fixture
def make_entry():
    return build_entry


@pytest.fixture
def make_har():
    return build_har


@pytest.fixture
def submit_har():
    """Single free-run submission with a successful response."""
    return build_har(
        build_entry(
            "https://api.example.com/freerun/submit",
            method="POST",
            body={"distance": 5.0, "duration": 1800},
            response_body={"success": True, "recordId": "12345"},
        )
    )


@pytest.fixture
def session_har():
    """Submit, list and detail calls plus unrelated noise."""
    return build_har(
        build_entry(
            "https://api.example.com/freerun/submit",
            method="POST",
            body={"distance": 5.0, "duration": 1800, "avgSpeed": 10},
            response_body={"success": True, "recordId": "1"},
            started="2024-01-01T00:00:00.000Z",
        ),
        build_entry(
            "https://api.example.com/freerun/submit",
            method="POST",
            body={"distance": 3.2, "duration": 1200, "avgSpeed": 9.6},
            response_body={"success": True, "recordId": "2"},
            started="2024-01-01T00:05:00.000Z",
        ),
        build_entry(
            "https://api.example.com/freerun/records",
            response_body={"success": True, "records": [{"id": 1}, {"id": 2}]},
            started="2024-01-01T00:06:00.000Z",
        ),
        build_entry(
            "https://api.example.com/freerun/detail",
            response_body={"success": True, "record": {"id": 1, "distance": 5.0}},
            started="2024-01-01T00:07:00.000Z",
        ),
        build_entry(
            "https://cdn.example.com/static/app.js",
            response_body="console.log('hi')",
            started="2024-01-01T00:08:00.000Z",
        ),
    )


@pytest.fixture(scope="session")
def rsa_keys():
    """(public_pem, private_pem) for a 2048-bit key."""
    return generate_key_pair(2048)


@pytest.fixture(scope="session")
def other_rsa_keys():
    return generate_key_pair(2048)
