"""Git repository abstraction.

This module provides the Repository class for the git operations a release
needs. All operations return Result types for proper error handling.

Usage:
    repo = Repository(Path("."), runner=DefaultCommandRunner())

    match repo.status():
        case Ok(status):
            print(f"Branch: {status.branch}")
            if status.is_clean:
                print("Working tree clean")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from easy_release.core.result import Err, Ok, Result
from easy_release.platform.process import CommandRunner, DefaultCommandRunner

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error output from git
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path relative to the repository root
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1 -b`` output.

    Attributes:
        branch: Current branch name
        upstream: Upstream branch (e.g., "origin/main"), None if not set
        ahead: Number of commits ahead of upstream
        behind: Number of commits behind upstream
        entries: All status entries (staged, unstaged, untracked)
    """

    branch: str
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    @property
    def has_diverged(self) -> bool:
        """True if the branch both has unpushed and unpulled commits."""
        return self.ahead > 0 and self.behind > 0


class Repository:
    """Git repository at a given path.

    Attributes:
        path: Path to the repository working tree
    """

    def __init__(self, path: Path, runner: CommandRunner | None = None) -> None:
        self.path = path
        self._runner = runner or DefaultCommandRunner()

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status including upstream divergence."""
        result = self._git("status", ["status", "--porcelain=v1", "-b"])
        if isinstance(result, Err):
            return result
        return Ok(self._parse_status(result.value))

    def current_branch(self) -> Result[str, GitError]:
        """Get current branch name (empty string on a detached HEAD)."""
        return self._git("branch", ["branch", "--show-current"]).map(str.strip)

    def show_prefix(self) -> Result[str, GitError]:
        """Path of the working directory relative to the top level ("" at the top)."""
        return self._git("rev-parse", ["rev-parse", "--show-prefix"]).map(str.strip)

    def fetch(self, remote: str | None = None) -> Result[str, GitError]:
        args = ["fetch"] if remote is None else ["fetch", remote]
        return self._git("fetch", args)

    def add(self, paths: Sequence[str]) -> Result[str, GitError]:
        return self._git("add", ["add", "--", *paths])

    def commit(self, message: str) -> Result[str, GitError]:
        return self._git("commit", ["commit", "-m", message])

    def tag_annotated(self, tag: str, message: str) -> Result[str, GitError]:
        return self._git("tag", ["tag", "-a", tag, "-m", message])

    def push(self, remote: str | None = None) -> Result[str, GitError]:
        """Push the current branch to its upstream (or to remote)."""
        args = ["push"] if remote is None else ["push", remote, "HEAD"]
        return self._git("push", args)

    def push_tag(self, remote: str, tag: str) -> Result[str, GitError]:
        return self._git("push", ["push", remote, tag])

    def _git(self, command: str, args: list[str]) -> Result[str, GitError]:
        result = self._runner.run(["git", "-C", str(self.path), *args], cwd=self.path)
        match result:
            case Ok(stdout):
                return Ok(stdout)
            case Err(e):
                return Err(
                    GitError(
                        command=command,
                        message=e.output or f"git {command} failed",
                        returncode=e.returncode,
                    )
                )

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        # First line is branch info: ## branch...upstream [ahead N, behind M]
        branch_line = lines[0]
        branch, upstream = self._parse_branch_line(branch_line)
        ahead, behind = self._parse_ahead_behind(branch_line)

        entries = tuple(e for e in (self._parse_entry(ln) for ln in lines[1:]) if e)
        return GitStatus(
            branch=branch,
            upstream=upstream,
            ahead=ahead,
            behind=behind,
            entries=entries,
        )

    def _parse_branch_line(self, line: str) -> tuple[str, str | None]:
        s = line.strip()
        if s.startswith("##"):
            s = s[2:].lstrip()

        s = s.split(" [", 1)[0].strip()

        if "..." in s:
            left, right = s.split("...", 1)
            return (left.strip(), right.strip())
        return (s, None)

    def _parse_ahead_behind(self, line: str) -> tuple[int, int]:
        match = re.search(r"\[([^\]]+)\]", line)
        if not match:
            return (0, 0)

        inside = match.group(1)
        ahead_match = re.search(r"ahead\s+(\d+)", inside)
        behind_match = re.search(r"behind\s+(\d+)", inside)
        ahead = int(ahead_match.group(1)) if ahead_match else 0
        behind = int(behind_match.group(1)) if behind_match else 0
        return (ahead, behind)

    def _parse_entry(self, line: str) -> StatusEntry | None:
        if len(line) < 4:
            return None
        if line.startswith("?? "):
            return StatusEntry(xy="??", path=_unquote(line[3:]))

        path = line[3:]
        # Renames are reported as "old -> new"; the new path is what changed.
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        return StatusEntry(xy=line[:2], path=_unquote(path))


def _unquote(path: str) -> str:
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return path[1:-1]
    return path
