"""Global configuration constants for optcache."""

import os

# Record store (Redis hash per cached LHS)
REDIS_HOST = os.environ.get("OPTCACHE_REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("OPTCACHE_REDIS_PORT", "6379"))
REDIS_DB = int(os.environ.get("OPTCACHE_REDIS_DB", "0"))
REDIS_SCAN_COUNT = 1000

# Field layout of a cached record
RESULT_FIELD = "result"
STATIC_PROFILE_PREFIX = "sprofile"
DYNAMIC_PROFILE_PREFIX = "dprofile"

# External tools
VERIFIER_PATH = os.environ.get("OPTCACHE_VERIFIER", "souper-check")
VERIFIER_PARSE_ARGS = ["-parse-lhs-only"]
VERIFIER_INFER_ARGS = ["-infer-rhs"]
PARSE_SUCCESS_MARKER = "parsing successful"

REDUCER_PATH = os.environ.get("OPTCACHE_REDUCER", "souper-reduce")
REDUCER_INPUT_NAME = "input.opt"
REDUCER_OUTPUT_NAME = "output.opt"

TRIAGER_PATH = os.environ.get("OPTCACHE_TRIAGER", "souper2llvm")
LLVM_AS_PATH = os.environ.get("OPTCACHE_LLVM_AS", "llvm-as")
OPT_PATH = os.environ.get("OPTCACHE_OPT", "opt")
LLVM_DIS_PATH = os.environ.get("OPTCACHE_LLVM_DIS", "llvm-dis")
TRIAGE_OPT_LEVEL = "-O2"

# Triage markers scanned in the disassembled IR
BOGUS_MARKER = "bogus"
SURVIVAL_MARKER = "souper.rhs"

# Merge canonicalization
CONSTANT_PLACEHOLDER = "C"

# Report layout
REPORT_SEPARATOR = "-" * 62

# No timeout by default; a hung tool hangs the run
DEFAULT_TOOL_TIMEOUT_SECONDS = None


class SortKey:
    LENGTH = "length"
    SPROFILE = "sprofile"
    DPROFILE = "dprofile"


SORT_KEYS = [SortKey.LENGTH, SortKey.SPROFILE, SortKey.DPROFILE]
