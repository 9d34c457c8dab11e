"""
Unit Tests: Deep Equality and ChangeSets
"""

import pytest

from sessionmerge.core.types import ABSENT, REMOVED
from sessionmerge.merge.diff import compute_changes, deep_equal


class TestDeepEqual:
    """Tests for deep_equal."""

    @pytest.mark.parametrize(
        "a, b",
        [
            (1, 1),
            (1, 1.0),
            ("x", "x"),
            (None, None),
            ([1, [2, 3]], [1, [2, 3]]),
            ([1, 2], (1, 2)),
            ({"a": 1, "b": [1]}, {"b": [1], "a": 1.0}),
            (ABSENT, ABSENT),
        ],
    )
    def test_equal(self, a, b):
        assert deep_equal(a, b)
        assert deep_equal(b, a)

    @pytest.mark.parametrize(
        "a, b",
        [
            (True, 1),
            (False, 0),
            (0, None),
            ("1", 1),
            ([1, 2], [2, 1]),
            ([1], [1, 1]),
            ({"a": 1}, {"a": 1, "b": None}),
            ({"a": 1}, [("a", 1)]),
            (ABSENT, None),
            (ABSENT, REMOVED),
        ],
    )
    def test_not_equal(self, a, b):
        assert not deep_equal(a, b)
        assert not deep_equal(b, a)


class TestComputeChanges:
    """Tests for compute_changes."""

    def test_no_changes(self):
        assert compute_changes({"a": 1, "b": {"c": 2}}, {"a": 1.0, "b": {"c": 2}}) == {}

    def test_modified_and_added(self):
        changes = compute_changes({"a": 1, "b": 2}, {"a": 5, "b": 2, "c": 3})
        assert changes == {"a": 5, "c": 3}

    def test_removed(self):
        changes = compute_changes({"a": 1, "b": 2}, {"b": 2})
        assert changes == {"a": REMOVED}

    def test_removed_marker_same_as_omitted(self):
        omitted = compute_changes({"a": 1, "b": 2}, {"b": 2})
        marked = compute_changes({"a": 1, "b": 2}, {"a": REMOVED, "b": 2})
        assert marked == omitted

    def test_removed_marker_for_unknown_key_is_ignored(self):
        assert compute_changes({"a": 1}, {"a": 1, "z": REMOVED}) == {}

    def test_bool_swap_is_a_change(self):
        assert compute_changes({"flag": 1}, {"flag": True}) == {"flag": True}

    def test_empty_snapshot(self):
        assert compute_changes({}, {"a": 1}) == {"a": 1}
        assert compute_changes({"a": 1}, {}) == {"a": REMOVED}
