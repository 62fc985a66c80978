"""Tests for structural equality of decoded JSON values."""

import pytest

from trafficspec.crypto import deep_equal


@pytest.mark.parametrize("left,right", [
    (None, None),
    (1, 1.0),
    ("a", "a"),
    ({"a": 1, "b": [1, {"c": None}]}, {"b": [1, {"c": None}], "a": 1}),
    ([], []),
    ({}, {}),
    ([1, [2, [3]]], [1, [2, [3]]]),
    ((1, 2), [1, 2]),
])
def test_equal(left, right):
    assert deep_equal(left, right)
    assert deep_equal(right, left)


@pytest.mark.parametrize("left,right", [
    (None, 0),
    (None, {}),
    (True, 1),
    (False, 0),
    (1, "1"),
    ({"a": 1}, {"a": 1, "b": 2}),
    ({"a": 1}, {"b": 1}),
    ({"a": {"b": 1}}, {"a": {"b": 2}}),
    ([1, 2], [2, 1]),
    ([1, 2], [1, 2, 3]),
    ([], {}),
    ({"0": 1}, [1]),
])
def test_not_equal(left, right):
    assert not deep_equal(left, right)
    assert not deep_equal(right, left)
