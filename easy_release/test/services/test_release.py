"""Tests for the release controller."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from easy_release.core.config import ReleaseConfig
from easy_release.core.errors import ErrorCode
from easy_release.output.console import MockConsole
from easy_release.platform.process import MockCommandRunner
from easy_release.services.release import ReleaseService

PYPROJECT = '[project]\nname = "demo"\nversion = "1.2.3"\n'
CHANGELOG = "# Changelog\n\n## Unreleased\n\n- Added a thing\n"
README = 'pip install "demo~=1.2"\n'


def fake_build(cmd: tuple[str, ...]) -> None:
    outdir = Path(cmd[-1])
    (outdir / "demo.tar.gz").write_text("", encoding="utf-8")
    (outdir / "demo-py3-none-any.whl").write_text("", encoding="utf-8")


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "pyproject.toml").write_text(PYPROJECT, encoding="utf-8")
    (tmp_path / "CHANGELOG.md").write_text(CHANGELOG, encoding="utf-8")
    (tmp_path / "README.md").write_text(README, encoding="utf-8")
    return tmp_path


def _runner(**responses: tuple[int, str]) -> MockCommandRunner:
    runner = MockCommandRunner(
        responses={
            ("git", "status"): (0, "## main...origin/main\n"),
            ("git", "branch"): (0, "main\n"),
        },
        effects={("python", "-m", "build"): fake_build},
    )
    for key, value in responses.items():
        runner.responses[tuple(key.split("_"))] = value
    return runner


def _run(
    root: Path,
    arg: str,
    runner: MockCommandRunner,
    config: ReleaseConfig | None = None,
) -> tuple[ErrorCode, MockConsole]:
    console = MockConsole()
    service = ReleaseService(
        root=root,
        config=config or ReleaseConfig(),
        console=console,
        runner=runner,
        today=date(2024, 3, 1),
    )
    return service.run(arg), console


class TestResolveVersion:
    def test_invalid_version_is_terminal(self, project: Path) -> None:
        runner = _runner()
        code, console = _run(project, "1.2", runner)

        assert code == ErrorCode.VERSION_ERROR
        assert "error: invalid version format '1.2', expected semver (e.g., 1.2.3)" in (
            console.messages
        )
        assert "VERSION can be:" in console.text
        assert runner.calls == []

    def test_not_greater_is_terminal(self, project: Path) -> None:
        code, console = _run(project, "1.0.0", _runner())
        assert code == ErrorCode.VERSION_ERROR
        assert "must be greater than current version 1.2.3" in console.text

    def test_missing_manifest(self, tmp_path: Path) -> None:
        code, console = _run(tmp_path, "patch", _runner())
        assert code == ErrorCode.FILE_ERROR
        assert "pyproject.toml not found" in console.text

    def test_header(self, project: Path) -> None:
        _, console = _run(project, "minor", _runner(), ReleaseConfig(dry_run=True))
        assert "Version: 1.2.3 → 1.3.0" in console.messages


class TestDryRun:
    def test_checks_only(self, project: Path) -> None:
        runner = _runner()
        code, console = _run(project, "minor", runner, ReleaseConfig(dry_run=True))

        assert code == ErrorCode.OK
        assert "✓ All checks passed!" in console.messages
        assert "Run without --dry-run to perform the release." in console.messages
        assert (project / "pyproject.toml").read_text(encoding="utf-8") == PYPROJECT
        assert (project / "README.md").read_text(encoding="utf-8") == README
        assert not runner.called("git", "commit")
        assert not runner.called("git", "tag")
        assert not runner.called("twine", "upload")

    def test_changelog_entry_not_written_and_check_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(PYPROJECT, encoding="utf-8")
        config = ReleaseConfig(dry_run=True, changelog_entry="Fixed things")

        code, console = _run(tmp_path, "patch", _runner(), config)

        assert code == ErrorCode.OK
        assert not (tmp_path / "CHANGELOG.md").exists()
        assert "○ Changelog has UNRELEASED section" in console.messages

    def test_failed_checks(self, project: Path) -> None:
        code, console = _run(
            project, "patch", _runner(pytest=(1, "1 failed")), ReleaseConfig(dry_run=True)
        )
        assert code == ErrorCode.CHECK_FAILED
        assert "All checks passed!" not in console.text


class TestChecksPhase:
    def test_all_checks_run_and_release_stops(self, project: Path) -> None:
        runner = _runner(pytest=(1, "1 failed"))
        code, console = _run(project, "patch", runner)

        assert code == ErrorCode.CHECK_FAILED
        assert runner.called("ruff", "format")
        assert runner.called("twine", "check")
        assert "Passed: 6  Skipped: 2  Failed: 1" in console.messages
        assert (
            "error: Pre-release checks failed. Fix the issues above before releasing."
            in console.messages
        )
        assert not runner.called("git", "commit")

    def test_own_version_update_does_not_dirty_tree(self, project: Path) -> None:
        runner = _runner()

        def files_rewritten(cmd: tuple[str, ...]) -> None:
            runner.responses[("git", "status")] = (
                0,
                "## main...origin/main\n M pyproject.toml\n M README.md\n",
            )

        # Clean before the rewrite, dirty with our own edits afterwards.
        runner.effects[("git", "rev-parse", "--show-prefix")] = files_rewritten
        code, console = _run(project, "minor", runner)

        assert code == ErrorCode.OK
        assert "✓ Git working directory is clean" in console.messages

    def test_manifest_dirty_before_run_is_reported(self, project: Path) -> None:
        runner = _runner()
        runner.responses[("git", "status")] = (0, "## main...origin/main\n M pyproject.toml\n")
        code, console = _run(project, "minor", runner)

        assert code == ErrorCode.CHECK_FAILED
        assert "uncommitted changes:\n M pyproject.toml" in console.text
        assert not runner.called("git", "commit")

    def test_dirty_snapshot_skipped_with_vcs_checks(self, project: Path) -> None:
        runner = _runner()
        code, _ = _run(project, "minor", runner, ReleaseConfig(skip_vcs=True))

        assert code == ErrorCode.OK
        assert not runner.called("git", "status")

    def test_readme_constraint_unchanged_is_dirty(self, project: Path) -> None:
        runner = _runner()
        runner.responses[("git", "status")] = (0, "## main...origin/main\n M README.md\n")
        code, _ = _run(project, "patch", runner)

        assert code == ErrorCode.CHECK_FAILED


class TestRelease:
    def test_full_release(self, project: Path) -> None:
        runner = _runner()
        code, console = _run(project, "minor", runner)

        assert code == ErrorCode.OK
        assert 'version = "1.3.0"' in (project / "pyproject.toml").read_text(encoding="utf-8")
        assert (project / "README.md").read_text(encoding="utf-8") == 'pip install "demo~=1.3"\n'
        assert "## 1.3.0 - 2024-03-01" in (project / "CHANGELOG.md").read_text(encoding="utf-8")
        assert "✓ Updated pyproject.toml" in console.messages
        assert "✓ Updated README.md" in console.messages
        assert "✓ Successfully released v1.3.0!" in console.messages

        order = [
            ("git", "commit", "-m", "Release v1.3.0"),
            ("git", "tag", "-a", "v1.3.0", "-m", "Release v1.3.0"),
            ("git", "push"),
            ("git", "push", "origin", "v1.3.0"),
        ]
        positions = [runner.calls.index(c) for c in order]
        assert positions == sorted(positions)
        assert runner.calls[-1][:2] == ("twine", "upload")

    def test_step_failure_halts(self, project: Path) -> None:
        runner = _runner(git_push=(1, "rejected"))
        code, console = _run(project, "patch", runner)

        assert code == ErrorCode.STEP_FAILED
        assert "  ✗ Failed: rejected" in console.messages
        assert "error: Release failed!" in console.messages
        assert runner.called("git", "tag")
        assert not runner.called("twine", "upload")

    def test_current_version_leaves_files(self, project: Path) -> None:
        code, console = _run(project, "current", _runner())

        assert code == ErrorCode.OK
        assert "Releasing current version (no file updates needed)" in console.messages
        assert (project / "pyproject.toml").read_text(encoding="utf-8") == PYPROJECT
        assert "✓ Successfully released v1.2.3!" in console.messages

    def test_readme_without_constraint(self, project: Path) -> None:
        (project / "README.md").write_text("# demo\n", encoding="utf-8")
        _, console = _run(project, "minor", _runner())
        assert "○ README.md - no dependency version to update (skipped)" in console.messages

    def test_manifest_pattern_missing(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            'project = { name = "demo", version = "1.2.3" }\n', encoding="utf-8"
        )
        runner = _runner()
        code, console = _run(tmp_path, "patch", runner)

        assert code == ErrorCode.FILE_ERROR
        assert 'could not find version = "1.2.3"' in console.text
        assert not runner.called("git", "commit")
        assert not runner.called("python", "-m", "build")

    def test_changelog_entry_added_then_released(self, project: Path) -> None:
        config = ReleaseConfig(changelog_entry="Fixed a crash")
        code, console = _run(project, "patch", _runner(), config)

        assert code == ErrorCode.OK
        content = (project / "CHANGELOG.md").read_text(encoding="utf-8")
        assert "## 1.2.4 - 2024-03-01\n\n- Fixed a crash\n- Added a thing\n" in content
        assert "✓ Added changelog entry to CHANGELOG.md" in console.messages
        assert "○ Changelog has UNRELEASED section" in console.messages

    def test_skipped_changelog_without_file(self, project: Path) -> None:
        (project / "CHANGELOG.md").unlink()
        config = ReleaseConfig(skip_changelog=True)
        code, console = _run(project, "patch", _runner(), config)

        assert code == ErrorCode.OK
        assert console.index_of("  ○ Skipped (CHANGELOG.md:") != -1
