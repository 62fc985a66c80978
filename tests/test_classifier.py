"""Tests for endpoint role classification."""

import pytest

from trafficspec.analyzer import ASSEMBLER_RULES, DISCOVERY_RULES, RoleClassifier, pick_most_frequent
from trafficspec.config import ApiEndpoint, ClassificationRules, EndpointRole


def _endpoint(method, path, frequency=1):
    return ApiEndpoint(path=path, method=method, frequency=frequency)


MIXED_ENDPOINTS = [
    _endpoint("POST", "/freerun/submit"),
    _endpoint("POST", "/records/create"),
    _endpoint("GET", "/freerun/records"),
    _endpoint("GET", "/freerun/list"),
    _endpoint("GET", "/freerun/detail"),
    _endpoint("GET", "/freerun/42"),
    _endpoint("GET", "/submit"),
    _endpoint("DELETE", "/freerun/42"),
    _endpoint("PUT", "/freerun/info"),
    _endpoint("POST", "/platform/recreord/freeRun"),
    _endpoint("GET", "/history"),
]


@pytest.mark.parametrize("classifier", [DISCOVERY_RULES, ASSEMBLER_RULES])
def test_buckets_partition_endpoints(classifier):
    buckets = classifier.classify(MIXED_ENDPOINTS)

    assert set(buckets) == {"submit", "query", "detail", "other"}
    assert sum(len(b) for b in buckets.values()) == len(MIXED_ENDPOINTS)
    for endpoint in MIXED_ENDPOINTS:
        assert sum(endpoint in bucket for bucket in buckets.values()) == 1


@pytest.mark.parametrize("method,path,role", [
    ("POST", "/freerun/submit", EndpointRole.SUBMIT),
    ("POST", "/record/ADD", EndpointRole.SUBMIT),
    ("GET", "/freerun/records", EndpointRole.QUERY),
    ("GET", "/freerun/query", EndpointRole.QUERY),
    ("GET", "/freerun/detail", EndpointRole.DETAIL),
    ("GET", "/user/info", EndpointRole.DETAIL),
    ("GET", "/freerun/123", EndpointRole.DETAIL),
    ("get", "/freerun/123", EndpointRole.DETAIL),
    ("GET", "/submit", EndpointRole.OTHER),
    ("POST", "/freerun/records", EndpointRole.OTHER),
    ("DELETE", "/freerun/123", EndpointRole.OTHER),
])
def test_discovery_roles(method, path, role):
    assert DISCOVERY_RULES.role_of(_endpoint(method, path)) is role


def test_assembler_table_is_independent():
    free_run = _endpoint("POST", "/platform/recreord/freeRun")
    history = _endpoint("GET", "/freerun/history")

    assert DISCOVERY_RULES.role_of(free_run) is EndpointRole.OTHER
    assert ASSEMBLER_RULES.role_of(free_run) is EndpointRole.SUBMIT
    assert DISCOVERY_RULES.role_of(history) is EndpointRole.OTHER
    assert ASSEMBLER_RULES.role_of(history) is EndpointRole.QUERY


def test_numeric_suffix_can_be_disabled():
    classifier = RoleClassifier(ClassificationRules(detail_numeric_suffix=False))
    assert classifier.role_of(_endpoint("GET", "/freerun/123")) is EndpointRole.OTHER


def test_pick_most_frequent_prefers_earliest_on_ties():
    first = _endpoint("GET", "/a", frequency=3)
    second = _endpoint("GET", "/b", frequency=3)
    lower = _endpoint("GET", "/c", frequency=1)

    assert pick_most_frequent([lower, first, second]) is first
    assert pick_most_frequent([]) is None
