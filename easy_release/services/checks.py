# SPDX-License-Identifier: MIT
"""Pre-release checks.

Validates that the project is ready to release:
- Git: working tree clean, on the release branch, in sync with the remote
- Tooling: tests, formatter, linter (optional), type-checker (optional)
- Content: changelog has an UNRELEASED section, package builds and validates

Checks never modify the project. The linter and type-checker are optional:
when their executable is not installed the check is skipped, not failed.
"""

from __future__ import annotations

import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from easy_release.core.config import ReleaseConfig
from easy_release.core.result import Err
from easy_release.git.repository import Repository
from easy_release.platform.process import CommandRunner, DefaultCommandRunner, last_lines
from easy_release.services.changelog import check_changelog
from easy_release.services.package import build_distributions
from easy_release.services.pipeline import CheckOutcome, CheckSpec, Failed, Passed, Skipped

__all__ = ["CHECK_IDS", "ReleaseChecker"]

CHECK_IDS = (
    "vcs-clean",
    "vcs-branch",
    "vcs-in-sync",
    "tests",
    "format",
    "lint",
    "typecheck",
    "changelog",
    "package-build",
)


def _empty_paths() -> frozenset[str]:
    return frozenset()


@dataclass(frozen=True, slots=True)
class ReleaseChecker:
    """Evaluate the pre-release checks for a project.

    Attributes:
        root: Project directory (holds the manifest)
        config: Merged release configuration
        runner: Command runner for external tools
        own_changes: Files this run already rewrote (relative to root);
            their modifications do not make the working tree dirty
    """

    root: Path
    config: ReleaseConfig
    runner: CommandRunner = field(default_factory=DefaultCommandRunner)
    own_changes: frozenset[str] = field(default_factory=_empty_paths)

    def checks(self) -> list[CheckSpec]:
        """The checks in execution order, with the configured skip flags."""
        cfg = self.config
        return [
            CheckSpec(
                "vcs-clean",
                "Git working directory is clean",
                cfg.skip_vcs,
                self.check_vcs_clean,
            ),
            CheckSpec("vcs-branch", f"On {cfg.branch} branch", cfg.skip_vcs, self.check_branch),
            CheckSpec(
                "vcs-in-sync",
                "Git is up to date with remote",
                cfg.skip_vcs,
                self.check_in_sync,
            ),
            CheckSpec("tests", "Tests pass", cfg.skip_tests, self.check_tests),
            CheckSpec("format", "Code is formatted", cfg.skip_format, self.check_format),
            CheckSpec("lint", "Linter passes", cfg.skip_lint, self.check_lint),
            CheckSpec("typecheck", "Type checker passes", cfg.skip_typecheck, self.check_typecheck),
            CheckSpec(
                "changelog",
                "Changelog has UNRELEASED section",
                cfg.skip_changelog,
                self.check_changelog,
            ),
            CheckSpec(
                "package-build",
                "Package builds successfully",
                cfg.skip_package_dry_run,
                self.check_package_build,
            ),
        ]

    @property
    def _repo(self) -> Repository:
        return Repository(self.root, runner=self.runner)

    # -- Git -----------------------------------------------------------------

    def check_vcs_clean(self) -> CheckOutcome:
        repo = self._repo
        status = repo.status()
        if isinstance(status, Err):
            return Failed(f"git error: {status.error.message}")

        prefix = repo.show_prefix()
        if isinstance(prefix, Err):
            return Failed(f"git error: {prefix.error.message}")

        own = {prefix.value + path for path in self.own_changes}
        dirty = [e for e in status.value.entries if e.path not in own]
        if dirty:
            listing = "\n".join(f"{e.xy} {e.path}" for e in dirty)
            return Failed(f"uncommitted changes:\n{listing}")
        return Passed()

    def check_branch(self) -> CheckOutcome:
        branch = self._repo.current_branch()
        if isinstance(branch, Err):
            return Failed(f"git error: {branch.error.message}")
        expected = self.config.branch
        if branch.value != expected:
            actual = branch.value or "detached HEAD"
            return Failed(f"on '{actual}', expected '{expected}'")
        return Passed()

    def check_in_sync(self) -> CheckOutcome:
        repo = self._repo
        fetched = repo.fetch()
        if isinstance(fetched, Err):
            return Failed(f"git error: {fetched.error.message}")

        status = repo.status()
        if isinstance(status, Err):
            return Failed(f"git error: {status.error.message}")

        st = status.value
        if st.upstream is None:
            return Failed("no upstream branch configured")
        if st.has_diverged:
            return Failed("branch has diverged from remote")
        if st.behind:
            return Failed("branch is behind remote")
        if st.ahead:
            return Failed("unpushed commits")
        return Passed()

    # -- Tooling -------------------------------------------------------------

    def check_tests(self) -> CheckOutcome:
        return self._run_tool(self.config.test_command, "tests failed")

    def check_format(self) -> CheckOutcome:
        command = self.config.format_command
        result = self.runner.run(command, cwd=self.root)
        if isinstance(result, Err):
            if result.error.returncode == -1:
                return Failed(result.error.output)
            fix = " ".join(arg for arg in command if arg != "--check")
            return Failed(f"code is not formatted, run: {fix}")
        return Passed()

    def check_lint(self) -> CheckOutcome:
        return self._run_optional_tool(self.config.lint_command, "linter issues found")

    def check_typecheck(self) -> CheckOutcome:
        return self._run_optional_tool(self.config.typecheck_command, "type checker errors")

    def _run_optional_tool(self, command: Sequence[str], failure: str) -> CheckOutcome:
        if self.runner.which(command[0]) is None:
            return Skipped(f"{command[0]} not installed")
        return self._run_tool(command, failure)

    def _run_tool(self, command: Sequence[str], failure: str) -> CheckOutcome:
        result = self.runner.run(command, cwd=self.root)
        if isinstance(result, Err):
            if result.error.returncode == -1:
                return Failed(result.error.output)
            return Failed(f"{failure}\n{last_lines(result.error.output)}")
        return Passed()

    # -- Content -------------------------------------------------------------

    def check_changelog(self) -> CheckOutcome:
        result = check_changelog(self.root, self.config.changelog_file)
        if isinstance(result, Err):
            return Failed(result.error.message)
        return Passed()

    def check_package_build(self) -> CheckOutcome:
        with tempfile.TemporaryDirectory(prefix="easy-release-") as tmp:
            built = build_distributions(
                self.runner, self.root, self.config.build_command, Path(tmp)
            )
            if isinstance(built, Err):
                return Failed(built.error.message)

            command = [*self.config.build_check_command, *(str(p) for p in built.value)]
            checked = self.runner.run(command, cwd=self.root)
            if isinstance(checked, Err):
                return Failed(f"package validation failed\n{last_lines(checked.error.output)}")
        return Passed()
