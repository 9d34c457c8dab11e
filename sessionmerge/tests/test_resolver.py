"""
Unit Tests: Conflict Resolvers
"""

from sessionmerge.core.types import ABSENT, REMOVED
from sessionmerge.merge.resolver import (
    KeyedResolver,
    accumulate_numeric,
    external_wins,
    last_writer_wins,
    union_lists,
)


class TestLastWriterWins:
    def test_returns_new(self):
        assert last_writer_wins("k", 1, 3, 2) == 3

    def test_returns_removal(self):
        assert last_writer_wins("k", 1, REMOVED, 2) is REMOVED


class TestExternalWins:
    def test_returns_external(self):
        assert external_wins("k", 1, 3, 2) == 2

    def test_absent_external_stays_absent(self):
        assert external_wins("k", 1, 3, ABSENT) is REMOVED


class TestAccumulateNumeric:
    def test_applies_delta_to_external(self):
        # visits: 1 -> 2 here, 1 -> 5 elsewhere
        assert accumulate_numeric("visits", 1, 2, 5) == 6

    def test_missing_sides_count_as_zero(self):
        assert accumulate_numeric("visits", ABSENT, 3, 4) == 7
        assert accumulate_numeric("visits", 2, 3, ABSENT) == 1

    def test_floats(self):
        assert accumulate_numeric("total", 1.5, 2.5, 10) == 11.0

    def test_non_numeric_defers_to_new(self):
        assert accumulate_numeric("k", 1, "x", 5) == "x"
        assert accumulate_numeric("k", 1, 2, "5") == 2
        assert accumulate_numeric("k", 1, REMOVED, 5) is REMOVED

    def test_bools_are_not_numbers(self):
        assert accumulate_numeric("k", False, True, True) is True


class TestUnionLists:
    def test_keeps_both_additions(self):
        assert union_lists("tags", ["new"], ["new", "beta"], ["new", "admin"]) == [
            "new",
            "admin",
            "beta",
        ]

    def test_honours_local_removal(self):
        assert union_lists("tags", ["a", "b"], ["a"], ["a", "b", "c"]) == ["a", "c"]

    def test_external_absent(self):
        assert union_lists("tags", ["a"], ["a", "b"], ABSENT) == ["a", "b"]

    def test_no_duplicates_by_deep_equality(self):
        assert union_lists("ids", [], [1, {"x": 1}], [1.0, {"x": 1}]) == [1.0, {"x": 1}]

    def test_non_list_defers_to_new(self):
        assert union_lists("tags", ["a"], "a", ["a"]) == "a"
        assert union_lists("tags", ["a"], ["a", "b"], "a") == ["a", "b"]
        assert union_lists("tags", ["a"], REMOVED, ["a"]) is REMOVED


class TestKeyedResolver:
    def test_exact_key(self):
        resolver = KeyedResolver({"visits": accumulate_numeric})
        assert resolver("visits", 1, 2, 5) == 6
        assert resolver("other", 1, 2, 5) == 2

    def test_longest_prefix_wins(self):
        resolver = KeyedResolver(
            prefixes={"cart": external_wins, "cart_items": union_lists},
        )
        assert resolver.resolver_for("cart_items_v2") is union_lists
        assert resolver.resolver_for("cart_total") is external_wins

    def test_exact_beats_prefix(self):
        resolver = KeyedResolver({"cart_total": accumulate_numeric}, prefixes={"cart": external_wins})
        assert resolver.resolver_for("cart_total") is accumulate_numeric

    def test_fallback(self):
        resolver = KeyedResolver(fallback=external_wins)
        assert resolver("anything", 1, 2, 3) == 3

    def test_register(self):
        resolver = KeyedResolver()
        resolver.register("visits", accumulate_numeric)
        resolver.register_prefix("tags", union_lists)

        assert resolver.resolver_for("visits") is accumulate_numeric
        assert resolver.resolver_for("tags_seen") is union_lists
        assert resolver.resolver_for("theme") is last_writer_wins
