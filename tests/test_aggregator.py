"""Tests for the profile aggregator."""
import pytest

from optcache.aggregator import ProfileAggregator
from optcache.errors import EmptyIdentityError
from optcache.models import CounterBundle, ProfileKind


def _bundle(static=None, dynamic=None):
    b = CounterBundle()
    for loc, n in (static or {}).items():
        b.add(ProfileKind.STATIC, loc, n)
    for loc, n in (dynamic or {}).items():
        b.add(ProfileKind.DYNAMIC, loc, n)
    return b


def _assert_consistent(agg):
    for identity, bundle in agg.active_items():
        assert bundle.is_consistent, f"totals drifted for {identity!r}"


class TestRegister:
    def test_included_identity_in_working_set(self):
        agg = ProfileAggregator()
        agg.register("ab", _bundle({"X": 2}, {"Y": 5}), include=True)
        assert agg.snapshot() == ["ab"]
        assert agg.bundle("ab").static_total == 2
        assert agg.bundle("ab").dynamic_total == 5

    def test_excluded_identity_keeps_counters(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"L1": 3}), include=False)
        assert len(agg) == 0
        assert "a" in agg
        assert agg.bundle("a").static_total == 3

    def test_register_twice_sums(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"L": 1}), include=True)
        agg.register("a", _bundle({"L": 2, "M": 4}), include=True)
        assert agg.bundle("a").static_by_location == {"L": 3, "M": 4}
        assert agg.bundle("a").static_total == 7


class TestMerge:
    def test_merge_creates_target(self):
        agg = ProfileAggregator()
        agg.merge("new", ProfileKind.DYNAMIC, {"a.c:1": 3, "a.c:2": 4})
        assert agg.bundle("new").dynamic_total == 7
        assert agg.bundle("new").static_total == 0

    def test_merge_sums_on_collision(self):
        agg = ProfileAggregator()
        agg.register("r", _bundle({"a.c:1": 1}), include=True)
        agg.merge("r", ProfileKind.STATIC, {"a.c:1": 2, "b.c:9": 5})
        assert agg.bundle("r").static_by_location == {"a.c:1": 3, "b.c:9": 5}
        _assert_consistent(agg)


class TestReplace:
    def test_replace_moves_counters(self):
        agg = ProfileAggregator()
        agg.register("old", _bundle({"X": 2}, {"Y": 5}), include=True)
        agg.replace("old", "new")
        assert agg.snapshot() == ["new"]
        assert "old" not in agg
        assert agg.bundle("new").static_by_location == {"X": 2}
        assert agg.bundle("new").dynamic_by_location == {"Y": 5}

    def test_replace_accumulates_into_existing(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"X": 2}, {"Y": 1}), include=True)
        agg.register("b", _bundle({"X": 3, "Z": 1}, {"Y": 10}), include=True)
        before_a = agg.bundle("a").static_total
        before_b = agg.bundle("b").static_total
        agg.replace("a", "b")
        after = agg.bundle("b")
        assert after.static_total >= before_a
        assert after.static_total >= before_b
        assert after.static_total == 6
        assert after.static_by_location == {"X": 5, "Z": 1}
        assert after.dynamic_total == 11
        assert agg.snapshot() == ["b"]

    def test_replace_with_self_is_noop(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"X": 2}), include=True)
        agg.replace("a", "a")
        assert agg.snapshot() == ["a"]
        assert agg.bundle("a").static_total == 2

    def test_replace_with_empty_identity_raises(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"X": 2}), include=True)
        with pytest.raises(EmptyIdentityError):
            agg.replace("a", "")

    def test_replace_onto_excluded_identity_includes_it(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"X": 2}), include=True)
        agg.register("b", _bundle({"X": 1}), include=False)
        agg.replace("a", "b")
        assert agg.is_included("b")
        assert agg.bundle("b").static_total == 3


class TestRemove:
    def test_remove_erases_everything(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"X": 2}), include=True)
        agg.remove("a")
        assert len(agg) == 0
        assert "a" not in agg
        with pytest.raises(KeyError):
            agg.bundle("a")

    def test_remove_unknown_is_harmless(self):
        agg = ProfileAggregator()
        agg.remove("missing")
        assert len(agg) == 0


class TestInvariant:
    def test_mixed_sequence_keeps_totals_consistent(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"X": 2, "": 1}, {"Y": 5}), include=True)
        agg.register("b", _bundle({"X": 4}), include=True)
        agg.register("c", _bundle({"W": 7}, {"V": 1}), include=True)
        agg.merge("a", ProfileKind.STATIC, {"Q": 3})
        agg.replace("b", "a")
        agg.remove("c")
        agg.replace("a", "d")
        _assert_consistent(agg)
        assert agg.snapshot() == ["d"]
        assert agg.bundle("d").static_total == 10

    def test_snapshot_is_a_copy(self):
        agg = ProfileAggregator()
        agg.register("a", _bundle({"X": 1}), include=True)
        snap = agg.snapshot()
        agg.remove("a")
        assert snap == ["a"]
