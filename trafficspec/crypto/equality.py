"""Structural equality for decoded JSON values."""

from typing import Any


def deep_equal(left: Any, right: Any) -> bool:
    """Compare two decoded JSON values structurally.

    Mappings must have the same key set with equal values. Sequences must
    have the same length and equal elements in order. Booleans never equal
    numbers, even though ``True == 1`` in Python.
    """
    if left is right:
        return True

    if left is None or right is None:
        return False

    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if isinstance(left, dict) or isinstance(right, dict):
        if not (isinstance(left, dict) and isinstance(right, dict)):
            return False
        if left.keys() != right.keys():
            return False
        return all(deep_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)) or isinstance(right, (list, tuple)):
        if not (isinstance(left, (list, tuple)) and isinstance(right, (list, tuple))):
            return False
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right

    return type(left) is type(right) and left == right
