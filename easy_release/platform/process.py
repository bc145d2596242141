"""Subprocess execution with Result-based error handling.

Two ways to run a command:

- ``run`` waits for completion and captures output; used by every check and
  by the git wrapper.
- ``run_streaming`` forwards the child's output as it arrives while the child
  reads the caller's stdin; used by the publish step, which may stop to ask
  for registry credentials.

Services receive a ``CommandRunner`` rather than calling these directly so
tests can substitute canned responses.

Usage:
    result = run(["git", "status", "--porcelain"], cwd=Path("."))
    match result:
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.output}")
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Protocol

from easy_release.core.result import Err, Ok, Result

__all__ = [
    "CommandRunner",
    "DefaultCommandRunner",
    "MockCommandRunner",
    "ProcessError",
    "last_lines",
    "run",
    "run_streaming",
]

_CHUNK_SIZE = 4096
_TAIL_BYTES = 8192
_TERMINATE_GRACE_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, or -1 if the process could not be started.
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS error when the start failed.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Combined output, stripped."""
        return "\n".join(part.strip() for part in (self.stdout, self.stderr) if part.strip())

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def last_lines(text: str, n: int = 5) -> str:
    """Return the last n lines of text, for compact failure reasons."""
    return "\n".join(text.rstrip().splitlines()[-n:])


def run(
    cmd: Sequence[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[str, ProcessError]:
    """Execute a command to completion and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).

    Returns:
        Ok(stdout) on exit status 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.run(
            list(cmd),
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_streaming(
    cmd: Sequence[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    sink: BinaryIO | None = None,
) -> Result[None, ProcessError]:
    """Execute an interactive command, forwarding output as it is produced.

    The child inherits stdin so it can prompt the user. Its stdout and stderr
    are merged and copied to ``sink`` chunk by chunk, so prompts that do not
    end with a newline still appear immediately.

    A KeyboardInterrupt terminates the child before propagating.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        sink: Where to forward output (defaults to this process's stdout).

    Returns:
        Ok(None) on exit status 0, Err(ProcessError) with the output tail
        otherwise.
    """
    out = sink if sink is not None else sys.stdout.buffer
    try:
        proc = subprocess.Popen(
            list(cmd),
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    assert proc.stdout is not None
    tail = bytearray()
    try:
        fd = proc.stdout.fileno()
        while chunk := os.read(fd, _CHUNK_SIZE):
            out.write(chunk)
            out.flush()
            tail += chunk
            del tail[:-_TAIL_BYTES]
        returncode = proc.wait()
    except KeyboardInterrupt:
        _terminate(proc)
        raise
    finally:
        proc.stdout.close()

    if returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=returncode,
                stdout=tail.decode("utf-8", errors="replace"),
                stderr="",
            )
        )
    return Ok(None)


def _terminate(proc: subprocess.Popen[bytes]) -> None:
    """Stop a child process, escalating to kill if it ignores SIGTERM."""
    if proc.poll() is not None:
        return
    proc.terminate()
    try:
        proc.wait(timeout=_TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


class CommandRunner(Protocol):
    """Narrow interface to the external tools a release drives.

    This abstraction allows replacing subprocess calls in tests.
    """

    def run(self, cmd: Sequence[str], cwd: Path) -> Result[str, ProcessError]:
        """Run to completion and capture output."""
        ...

    def stream(self, cmd: Sequence[str], cwd: Path) -> Result[None, ProcessError]:
        """Run interactively, forwarding output live."""
        ...

    def which(self, name: str) -> str | None:
        """Locate an executable on PATH."""
        ...


class DefaultCommandRunner:
    """CommandRunner backed by real subprocesses."""

    def run(self, cmd: Sequence[str], cwd: Path) -> Result[str, ProcessError]:
        return run(cmd, cwd=cwd)

    def stream(self, cmd: Sequence[str], cwd: Path) -> Result[None, ProcessError]:
        return run_streaming(cmd, cwd=cwd)

    def which(self, name: str) -> str | None:
        return shutil.which(name)


type Effect = Callable[[tuple[str, ...]], None]


def _no_responses() -> dict[tuple[str, ...], tuple[int, str]]:
    return {}


def _no_effects() -> dict[tuple[str, ...], Effect]:
    return {}


def _no_calls() -> list[tuple[str, ...]]:
    return []


def _no_tools() -> set[str]:
    return set()


@dataclass
class MockCommandRunner:
    """CommandRunner answering from canned responses, for testing.

    Commands are matched by their longest registered prefix. ``git -C <path>``
    is reduced to ``git`` before matching so keys do not depend on paths.
    Unmatched commands succeed with empty output.

    Attributes:
        responses: Command prefix -> (returncode, output)
        effects: Command prefix -> callback run before answering (e.g. to
            create build artifacts)
        tools: Executables that ``which`` finds
        calls: Every command run or streamed, normalized, in order
    """

    responses: dict[tuple[str, ...], tuple[int, str]] = field(default_factory=_no_responses)
    effects: dict[tuple[str, ...], Effect] = field(default_factory=_no_effects)
    tools: set[str] = field(default_factory=_no_tools)
    calls: list[tuple[str, ...]] = field(default_factory=_no_calls)

    def run(self, cmd: Sequence[str], cwd: Path) -> Result[str, ProcessError]:
        return self._answer(cmd)

    def stream(self, cmd: Sequence[str], cwd: Path) -> Result[None, ProcessError]:
        return self._answer(cmd).map(lambda _: None)

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.tools else None

    def called(self, *prefix: str) -> bool:
        """True if a command starting with prefix was run."""
        return any(c[: len(prefix)] == prefix for c in self.calls)

    def _answer(self, cmd: Sequence[str]) -> Result[str, ProcessError]:
        key = _normalize(cmd)
        self.calls.append(key)

        effect = _longest_match(self.effects, key)
        if effect is not None:
            effect(tuple(cmd))

        returncode, output = _longest_match(self.responses, key) or (0, "")
        if returncode == 0:
            return Ok(output)
        if returncode == -1:
            return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=output))
        return Err(
            ProcessError(command=tuple(cmd), returncode=returncode, stdout=output, stderr="")
        )


def _normalize(cmd: Sequence[str]) -> tuple[str, ...]:
    if len(cmd) >= 3 and cmd[0] == "git" and cmd[1] == "-C":
        return ("git", *cmd[3:])
    return tuple(cmd)


def _longest_match[V](table: dict[tuple[str, ...], V], key: tuple[str, ...]) -> V | None:
    best: tuple[str, ...] | None = None
    for prefix in table:
        if key[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
            best = prefix
    return None if best is None else table[best]
