"""Tests for git/repository.py."""

from __future__ import annotations

from pathlib import Path

from easy_release.core.result import Err, Ok
from easy_release.git.repository import GitStatus, Repository, StatusEntry
from easy_release.platform.process import MockCommandRunner


# =============================================================================
# Data types
# =============================================================================


class TestStatusEntry:
    def test_untracked(self) -> None:
        assert StatusEntry(xy="??", path="new.py").is_untracked
        assert not StatusEntry(xy=" M", path="old.py").is_untracked


class TestGitStatus:
    def test_clean(self) -> None:
        assert GitStatus(branch="main").is_clean
        assert not GitStatus(branch="main", entries=(StatusEntry(" M", "a"),)).is_clean

    def test_diverged(self) -> None:
        assert GitStatus(branch="main", ahead=1, behind=2).has_diverged
        assert not GitStatus(branch="main", ahead=1).has_diverged


# =============================================================================
# Status parsing
# =============================================================================


class TestStatus:
    def _status(self, tmp_path: Path, output: str) -> GitStatus:
        runner = MockCommandRunner(responses={("git", "status"): (0, output)})
        result = Repository(tmp_path, runner=runner).status()
        assert isinstance(result, Ok)
        return result.value

    def test_clean_with_upstream(self, tmp_path: Path) -> None:
        status = self._status(tmp_path, "## main...origin/main\n")
        assert status.branch == "main"
        assert status.upstream == "origin/main"
        assert status.is_clean
        assert (status.ahead, status.behind) == (0, 0)

    def test_ahead_and_behind(self, tmp_path: Path) -> None:
        status = self._status(tmp_path, "## main...origin/main [ahead 2, behind 3]\n")
        assert status.ahead == 2
        assert status.behind == 3

    def test_no_upstream(self, tmp_path: Path) -> None:
        status = self._status(tmp_path, "## feature\n")
        assert status.branch == "feature"
        assert status.upstream is None

    def test_entries(self, tmp_path: Path) -> None:
        output = (
            "## main...origin/main\n"
            " M pyproject.toml\n"
            "?? notes.txt\n"
            "R  old.py -> new.py\n"
            '?? "with space.md"\n'
        )
        status = self._status(tmp_path, output)
        assert [(e.xy, e.path) for e in status.entries] == [
            (" M", "pyproject.toml"),
            ("??", "notes.txt"),
            ("R ", "new.py"),
            ("??", "with space.md"),
        ]

    def test_empty_output(self, tmp_path: Path) -> None:
        status = self._status(tmp_path, "")
        assert status.branch == ""
        assert status.is_clean


# =============================================================================
# Commands
# =============================================================================


class TestCommands:
    def test_runs_git_in_repository(self, tmp_path: Path) -> None:
        runner = MockCommandRunner()
        Repository(tmp_path, runner=runner).commit("Release v1.0.0")
        assert runner.calls == [("git", "commit", "-m", "Release v1.0.0")]

    def test_current_branch_stripped(self, tmp_path: Path) -> None:
        runner = MockCommandRunner(responses={("git", "branch"): (0, "main\n")})
        assert Repository(tmp_path, runner=runner).current_branch() == Ok("main")

    def test_show_prefix(self, tmp_path: Path) -> None:
        runner = MockCommandRunner(responses={("git", "rev-parse"): (0, "pkg/\n")})
        assert Repository(tmp_path, runner=runner).show_prefix() == Ok("pkg/")

    def test_add_separates_paths(self, tmp_path: Path) -> None:
        runner = MockCommandRunner()
        Repository(tmp_path, runner=runner).add(["pyproject.toml", "CHANGELOG.md"])
        assert runner.calls == [("git", "add", "--", "pyproject.toml", "CHANGELOG.md")]

    def test_tag_and_push(self, tmp_path: Path) -> None:
        runner = MockCommandRunner()
        repo = Repository(tmp_path, runner=runner)
        repo.tag_annotated("v1.0.0", "Release v1.0.0")
        repo.push()
        repo.push_tag("origin", "v1.0.0")
        assert runner.calls == [
            ("git", "tag", "-a", "v1.0.0", "-m", "Release v1.0.0"),
            ("git", "push"),
            ("git", "push", "origin", "v1.0.0"),
        ]

    def test_fetch_remote(self, tmp_path: Path) -> None:
        runner = MockCommandRunner()
        repo = Repository(tmp_path, runner=runner)
        repo.fetch()
        repo.fetch("upstream")
        assert runner.calls == [("git", "fetch"), ("git", "fetch", "upstream")]

    def test_failure_maps_to_git_error(self, tmp_path: Path) -> None:
        runner = MockCommandRunner(
            responses={("git", "push"): (1, "rejected: non-fast-forward")}
        )
        result = Repository(tmp_path, runner=runner).push()
        assert isinstance(result, Err)
        assert result.error.command == "push"
        assert result.error.message == "rejected: non-fast-forward"
        assert result.error.returncode == 1

    def test_failure_without_output(self, tmp_path: Path) -> None:
        runner = MockCommandRunner(responses={("git", "commit"): (1, "")})
        result = Repository(tmp_path, runner=runner).commit("x")
        assert isinstance(result, Err)
        assert result.error.message == "git commit failed"
