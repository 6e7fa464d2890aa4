import stat
import sys
import textwrap

import pytest

from optcache.store import MemoryRecordStore
from optcache.tools.reducer import ReduceOutcome
from optcache.tools.triager import TriageVerdict


# Two records that differ only in the width of %0 and the added constant
ADD_I32 = "%0:i32 = var\n%1:i32 = add %0, 1:i32\ninfer %1\n"
ADD_I64 = "%0:i64 = var\n%1:i64 = add %0, 7:i64\ninfer %1\n"
RESULT_I32 = "result %0\n"
RESULT_I64 = "result %0\n"


@pytest.fixture
def sample_entries():
    """Store contents covering optimizations, a no-opt, and a non-record key."""
    return {
        ADD_I32: {
            "result": RESULT_I32,
            "sprofile foo.c:10": "4",
            "sprofile foo.c:20": "1",
            "dprofile foo.c:10": "100",
        },
        ADD_I64: {
            "result": RESULT_I64,
            "sprofile bar.c:3": "2",
            "dprofile bar.c:3": "7",
            "dprofile": "3",
        },
        "%0:i8 = var\ninfer %0\n": {
            "result": "",
            "sprofile baz.c:1": "9",
        },
        "stats": {"hits": "12"},
    }


@pytest.fixture
def memory_store(sample_entries):
    return MemoryRecordStore(sample_entries)


class FakeReducer:
    """Reducer stand-in answering from a lookup table.

    Identities absent from *outputs* fail with exit code 1.
    """

    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    def reduce(self, text):
        self.calls.append(text)
        if text not in self.outputs:
            return ReduceOutcome(success=False, returncode=1)
        return ReduceOutcome(success=True, output=self.outputs[text])


class FakeTriager:
    """Triager stand-in answering from a lookup table of verdicts."""

    def __init__(self, verdicts, default=None):
        self.verdicts = verdicts
        self.default = default or TriageVerdict(bogus=False, survived=True)
        self.calls = []

    def triage(self, text):
        self.calls.append(text)
        return self.verdicts.get(text, self.default)


@pytest.fixture
def make_tool(tmp_path):
    """Write an executable Python script and return its path."""

    def _make(name, body):
        path = tmp_path / name
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def fake_reducer():
    return FakeReducer


@pytest.fixture
def fake_triager():
    return FakeTriager
