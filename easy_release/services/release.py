"""Release controller.

Sequences a release run:

1. Resolve the target version from the VERSION argument
2. Update version-bearing files (not in dry-run mode, not for ``current``)
3. Add the ``--changelog-entry`` text, if given
4. Run every pre-release check
5. Stop here in dry-run mode
6. Run the release steps, halting on the first failure

Each terminal condition returns its own ErrorCode; the CLI turns it into the
process exit status.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path

from easy_release.core.config import ReleaseConfig
from easy_release.core.errors import ErrorCode
from easy_release.core.project import load_project
from easy_release.core.result import Err
from easy_release.git.repository import Repository
from easy_release.output.console import ConsoleProtocol, Style
from easy_release.platform.process import CommandRunner, DefaultCommandRunner
from easy_release.services.changelog import add_changelog_entry
from easy_release.services.checks import ReleaseChecker
from easy_release.services.files import (
    ReadmeUpdate,
    update_manifest_version,
    update_readme_constraint,
)
from easy_release.services.pipeline import run_checks, run_steps
from easy_release.services.steps import ReleaseSteps, utc_today
from easy_release.services.version import resolve

__all__ = ["USAGE", "ReleaseService"]

USAGE = """\
Usage: easy-release VERSION [options]

VERSION can be:
  major   - Bump major version (1.2.3 -> 2.0.0)
  minor   - Bump minor version (1.2.3 -> 1.3.0)
  patch   - Bump patch version (1.2.3 -> 1.2.4)
  current - Release current version as-is (for initial release)
  X.Y.Z   - Explicit version (e.g., 2.0.0)"""


class ReleaseService:
    def __init__(
        self,
        *,
        root: Path,
        config: ReleaseConfig,
        console: ConsoleProtocol,
        runner: CommandRunner | None = None,
        today: date | None = None,
    ) -> None:
        self._root = root
        self._config = config
        self._console = console
        self._runner = runner or DefaultCommandRunner()
        self._today = today
        self._own_changes: set[str] = set()
        self._dirty_before: frozenset[str] = frozenset()

    def run(self, version_arg: str) -> ErrorCode:
        """Perform (or, in dry-run mode, validate) a release."""
        console = self._console

        project = load_project(self._root, self._config.manifest_file)
        if isinstance(project, Err):
            console.error(project.error.message)
            if project.error.hint:
                console.print(f"hint: {project.error.hint}", Style.DIM)
            return ErrorCode.FILE_ERROR
        current = project.value.version

        resolved = resolve(version_arg, current)
        if isinstance(resolved, Err):
            console.error(resolved.error.message)
            console.newline()
            console.print(USAGE)
            return ErrorCode.VERSION_ERROR
        version = resolved.value

        self._print_header(project.value.name, current, version)

        config = self._config
        if config.dry_run:
            console.print("DRY RUN - only running checks, no files will be modified", Style.WARNING)
            console.newline()
        else:
            if not config.skip_vcs:
                self._dirty_before = self._dirty_release_files()
            code = self._update_version_files(current, version)
            if code.is_error:
                return code

        if config.changelog_entry is not None:
            code = self._add_changelog_entry(config.changelog_entry)
            if code.is_error:
                return code
            config = replace(config, skip_changelog=True)

        console.header("Pre-release Checks")
        checker = ReleaseChecker(
            root=self._root,
            config=config,
            runner=self._runner,
            own_changes=frozenset(self._own_changes),
        )
        checks = run_checks(checker.checks(), console)
        if not checks.ok:
            console.error("Pre-release checks failed. Fix the issues above before releasing.")
            return ErrorCode.CHECK_FAILED

        if config.dry_run:
            console.success("All checks passed!")
            console.print("Run without --dry-run to perform the release.")
            return ErrorCode.OK

        console.header("Release")
        release = ReleaseSteps(
            root=self._root,
            config=config,
            version=version,
            runner=self._runner,
            today=self._today or utc_today(),
        )
        result = run_steps(release.steps(), console)
        console.newline()
        if not result.ok:
            console.error("Release failed!")
            return ErrorCode.STEP_FAILED

        console.success(f"Successfully released {release.tag}!")
        return ErrorCode.OK

    def _print_header(self, name: str, current: str, version: str) -> None:
        self._console.header(f"Releasing {name}")
        self._console.print(f"Version: {current} → {version}", Style.BOLD)
        self._console.newline()

    def _update_version_files(self, current: str, version: str) -> ErrorCode:
        console = self._console
        cfg = self._config
        if current == version:
            console.print("Releasing current version (no file updates needed)", Style.WARNING)
            return ErrorCode.OK

        console.header("Updating Version Files")
        manifest = update_manifest_version(self._root, cfg.manifest_file, current, version)
        if isinstance(manifest, Err):
            console.error(f"Failed to update version files: {manifest.error.message}")
            return ErrorCode.FILE_ERROR
        self._mark_own(cfg.manifest_file)
        console.print(f"✓ Updated {cfg.manifest_file}", Style.SUCCESS)

        readme = update_readme_constraint(self._root, cfg.readme_file, current, version)
        if isinstance(readme, Err):
            console.error(f"Failed to update version files: {readme.error.message}")
            return ErrorCode.FILE_ERROR

        match readme.value:
            case ReadmeUpdate.UPDATED:
                self._mark_own(cfg.readme_file)
                console.print(f"✓ Updated {cfg.readme_file}", Style.SUCCESS)
            case ReadmeUpdate.UNCHANGED:
                console.print(
                    f"○ {cfg.readme_file} - dependency version already current (skipped)",
                    Style.WARNING,
                )
            case ReadmeUpdate.NO_MATCH:
                console.print(
                    f"○ {cfg.readme_file} - no dependency version to update (skipped)",
                    Style.WARNING,
                )
            case ReadmeUpdate.MISSING:
                console.print(f"○ {cfg.readme_file} not found (skipped)", Style.WARNING)
        return ErrorCode.OK

    def _add_changelog_entry(self, entry: str) -> ErrorCode:
        console = self._console
        changelog = self._config.changelog_file
        if self._config.dry_run:
            console.print(f"○ Changelog entry will be added to {changelog}", Style.WARNING)
            return ErrorCode.OK

        result = add_changelog_entry(self._root, changelog, entry)
        if isinstance(result, Err):
            console.error(f"Failed to add changelog entry: {result.error.message}")
            return ErrorCode.FILE_ERROR
        self._mark_own(changelog)
        console.print(f"✓ Added changelog entry to {changelog}", Style.SUCCESS)
        return ErrorCode.OK

    def _dirty_release_files(self) -> frozenset[str]:
        """Release files that already had uncommitted changes before this run."""
        repo = Repository(self._root, runner=self._runner)
        status = repo.status()
        prefix = repo.show_prefix()
        if isinstance(status, Err) or isinstance(prefix, Err):
            return frozenset()
        base = prefix.value
        dirty = {e.path[len(base) :] for e in status.value.entries if e.path.startswith(base)}
        return frozenset(f for f in self._config.release_files if f in dirty)

    def _mark_own(self, path: str) -> None:
        # A file dirty before the run stays dirty for the clean-tree check.
        if path not in self._dirty_before:
            self._own_changes.add(path)
