"""
Environment-gated debug tracing shared by the Vela stages.

Set VELA_DEBUG to any non-empty value to get ``[DBG]`` lines on stderr.
"""
import os
import sys


def debug_enabled() -> bool:
    return bool(os.environ.get("VELA_DEBUG"))


def dbg(*parts):
    if debug_enabled():
        print("[DBG]", *parts, file=sys.stderr)
