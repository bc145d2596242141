"""Process execution layer."""

from .process import (
    CommandRunner,
    DefaultCommandRunner,
    MockCommandRunner,
    ProcessError,
    last_lines,
    run,
    run_streaming,
)

__all__ = [
    "CommandRunner",
    "DefaultCommandRunner",
    "MockCommandRunner",
    "ProcessError",
    "last_lines",
    "run",
    "run_streaming",
]
