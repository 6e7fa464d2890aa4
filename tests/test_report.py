"""Tests for report sorting and rendering."""
import pytest

from optcache.aggregator import ProfileAggregator
from optcache.config import REPORT_SEPARATOR, SortKey
from optcache.loader import load_records
from optcache.models import CounterBundle, ProfileKind
from optcache.report import render_raw, render_record, render_report, sort_identities
from optcache.store import MemoryRecordStore


def _agg(records):
    """records: {identity: (static_total, dynamic_total)}"""
    agg = ProfileAggregator()
    for identity, (s, d) in records.items():
        b = CounterBundle()
        b.add(ProfileKind.STATIC, "loc", s)
        b.add(ProfileKind.DYNAMIC, "loc", d)
        agg.register(identity, b, include=True)
    return agg


class TestSorting:
    RECORDS = {
        "medium": (5, 1),
        "a": (1, 50),
        "longest record": (9, 9),
        "bb": (5, 100),
    }

    def test_length_ascending_by_default(self):
        order = sort_identities(_agg(self.RECORDS))
        assert order == ["a", "bb", "medium", "longest record"]

    def test_sprofile_descending(self):
        agg = _agg(self.RECORDS)
        order = sort_identities(agg, SortKey.SPROFILE)
        totals = [agg.bundle(i).static_total for i in order]
        assert totals == sorted(totals, reverse=True)
        # equal totals fall back to text order
        assert order == ["longest record", "bb", "medium", "a"]

    def test_dprofile_descending(self):
        agg = _agg(self.RECORDS)
        order = sort_identities(agg, SortKey.DPROFILE)
        assert order == ["bb", "a", "longest record", "medium"]

    def test_unknown_sort_key(self):
        with pytest.raises(ValueError):
            sort_identities(_agg(self.RECORDS), "alphabetical")

    def test_excluded_identities_not_reported(self):
        agg = _agg({"kept": (1, 1)})
        agg.register("hidden", CounterBundle(), include=False)
        assert sort_identities(agg) == ["kept"]


class TestRenderRecord:
    def test_block_layout(self):
        b = CounterBundle()
        b.add(ProfileKind.STATIC, "x.c:1", 2)
        b.add(ProfileKind.STATIC, "x.c:2", 7)
        b.add(ProfileKind.DYNAMIC, "y.c:3", 5)
        text = render_record("%0 = var\ninfer %0\nresult 0\n", b)
        assert text.splitlines() == [
            "%0 = var",
            "infer %0",
            "result 0",
            "; static profile 9",
            '; sprofile 7 "x.c:2"',
            '; sprofile 2 "x.c:1"',
            "; dynamic profile 5",
            '; dprofile 5 "y.c:3"',
            REPORT_SEPARATOR,
        ]

    def test_empty_location_hidden_but_counted(self):
        b = CounterBundle()
        b.add(ProfileKind.DYNAMIC, "", 3)
        b.add(ProfileKind.DYNAMIC, "z.c:1", 1)
        lines = render_record("r", b).splitlines()
        assert "; dynamic profile 4" in lines
        assert '; dprofile 1 "z.c:1"' in lines
        assert not any(line.startswith('; dprofile 3') for line in lines)


class TestEndToEnd:
    def test_single_no_opt_gives_empty_report(self):
        store = MemoryRecordStore({"lhs": {"result": "", "sprofile L1": "3"}})
        agg = ProfileAggregator()
        summary = load_records(store, agg)
        assert render_report(agg) == ""
        assert summary.discarded == 1

    def test_single_optimization_block(self):
        store = MemoryRecordStore({
            "a": {"result": "b", "sprofile X": "2", "dprofile Y": "5"},
        })
        agg = ProfileAggregator()
        load_records(store, agg)
        assert render_report(agg) == (
            "ab\n"
            "; static profile 2\n"
            '; sprofile 2 "X"\n'
            "; dynamic profile 5\n"
            '; dprofile 5 "Y"\n'
            f"{REPORT_SEPARATOR}\n"
        )


class TestRenderRaw:
    def test_dumps_every_key_sorted(self, memory_store):
        text = render_raw(memory_store)
        assert text.count(REPORT_SEPARATOR) == 4
        assert text.index("%0:i32") < text.index("%0:i64") < text.index("stats")
        assert "; hits = '12'" in text
