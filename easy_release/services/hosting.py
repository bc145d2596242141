"""GitHub release creation through the ``gh`` CLI.

Creating a hosted release is optional: when ``gh`` is not installed, or the
repository is not one ``gh`` recognizes, the step is skipped rather than
failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from easy_release.core.result import Err, Ok, Result
from easy_release.platform.process import CommandRunner

__all__ = ["HostingError", "HostingUnavailable", "create_github_release", "hosting_unavailable"]


@dataclass(frozen=True, slots=True)
class HostingUnavailable:
    reason: str


@dataclass(frozen=True, slots=True)
class HostingError:
    message: str


def hosting_unavailable(runner: CommandRunner, root: Path) -> HostingUnavailable | None:
    """Return why a GitHub release cannot be created, or None if it can."""
    if runner.which("gh") is None:
        return HostingUnavailable("gh CLI not installed")
    if isinstance(runner.run(["gh", "repo", "view", "--json", "name"], cwd=root), Err):
        return HostingUnavailable("not a GitHub repository")
    return None


def create_github_release(
    runner: CommandRunner, root: Path, tag: str
) -> Result[None, HostingError | HostingUnavailable]:
    unavailable = hosting_unavailable(runner, root)
    if unavailable is not None:
        return Err(unavailable)

    result = runner.run(
        ["gh", "release", "create", tag, "--title", f"Release {tag}", "--generate-notes"],
        cwd=root,
    )
    if isinstance(result, Err):
        return Err(HostingError(f"gh release failed: {result.error.output}"))
    return Ok(None)
