"""Wrappers around the external tools optcache drives.

Each tool is an opaque subprocess: the verifier and the triage chain are
fed through stdin pipes, the reducer through scratch files.
"""
from optcache.tools.pipes import PipeResult, run_pipe_chain
from optcache.tools.reducer import ReduceOutcome, Reducer
from optcache.tools.triager import Triager, TriageVerdict
from optcache.tools.verifier import Verifier
