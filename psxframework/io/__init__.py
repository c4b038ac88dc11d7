"""
Operating system I/O helpers for PSxFramework.

Public API:

verify_binary : function
    Confirm an external executable exists and is a regular file.
ProcessRunner, SubprocessRunner, ProcessResult : classes
    Injectable external process invocation.
set_hidden_system, clear_readonly_tree : functions
    File attribute management for the scratch workspace.
"""

from .attributes import clear_readonly_tree, set_hidden_system
from .binary import check_binary, verify_binary
from .process import (
    ProcessResult,
    ProcessRunner,
    SubprocessRunner,
    describe_failure,
    get_default_runner,
)

__all__ = [
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "check_binary",
    "clear_readonly_tree",
    "describe_failure",
    "get_default_runner",
    "set_hidden_system",
    "verify_binary",
]
