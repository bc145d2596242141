"""Release steps.

Run in order after every check has passed:

1. Replace the changelog's UNRELEASED heading with the version and date
2. Commit the release files
3. Create the annotated ``v<version>`` tag
4. Push the branch and the tag
5. Create a GitHub release (optional, skipped when unavailable)
6. Build and upload the distributions

Steps are not rolled back: if the push fails, the commit and tag stay.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from pathlib import Path

from easy_release.core.config import ReleaseConfig
from easy_release.core.result import Err
from easy_release.git.repository import Repository
from easy_release.platform.process import CommandRunner, DefaultCommandRunner, last_lines
from easy_release.services.changelog import ChangelogError, update_changelog
from easy_release.services.hosting import HostingUnavailable, create_github_release
from easy_release.services.package import build_distributions
from easy_release.services.pipeline import Done, Failed, Skipped, StepOutcome, StepSpec

__all__ = ["ReleaseSteps", "utc_today"]


def utc_today() -> date:
    return datetime.now(UTC).date()


@dataclass(frozen=True, slots=True)
class ReleaseSteps:
    """The mutating half of a release.

    Attributes:
        root: Project directory
        config: Merged release configuration
        version: Version being released (without the ``v`` prefix)
        runner: Command runner for git, gh and the publish tools
        today: Date written into the changelog heading
    """

    root: Path
    config: ReleaseConfig
    version: str
    runner: CommandRunner = field(default_factory=DefaultCommandRunner)
    today: date = field(default_factory=utc_today)

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def _repo(self) -> Repository:
        return Repository(self.root, runner=self.runner)

    def steps(self) -> list[StepSpec]:
        return [
            StepSpec("Updating changelog", self.update_changelog),
            StepSpec(f"Committing release {self.tag}", self.commit_release),
            StepSpec(f"Creating git tag {self.tag}", self.create_tag),
            StepSpec("Pushing to remote", self.push_to_remote),
            StepSpec(
                "Creating GitHub release",
                self.create_hosted_release,
                skip=self.config.skip_hosted_release,
            ),
            StepSpec("Publishing package", self.publish),
        ]

    def update_changelog(self) -> StepOutcome:
        result = update_changelog(self.root, self.config.changelog_file, self.version, self.today)
        if isinstance(result, Err):
            # A project that opted out of the changelog check may have none.
            if self.config.skip_changelog:
                return Skipped(_changelog_reason(result.error))
            return Failed(result.error.message)
        return Done()

    def commit_release(self) -> StepOutcome:
        repo = self._repo
        files = [f for f in dict.fromkeys(self.config.release_files) if (self.root / f).exists()]
        added = repo.add(files)
        if isinstance(added, Err):
            return Failed(added.error.message)

        committed = repo.commit(f"Release {self.tag}")
        if isinstance(committed, Err):
            return Failed(committed.error.message)
        return Done()

    def create_tag(self) -> StepOutcome:
        result = self._repo.tag_annotated(self.tag, f"Release {self.tag}")
        if isinstance(result, Err):
            return Failed(result.error.message)
        return Done()

    def push_to_remote(self) -> StepOutcome:
        repo = self._repo
        pushed = repo.push()
        if isinstance(pushed, Err):
            return Failed(pushed.error.message)

        pushed = repo.push_tag(self.config.remote, self.tag)
        if isinstance(pushed, Err):
            return Failed(pushed.error.message)
        return Done()

    def create_hosted_release(self) -> StepOutcome:
        result = create_github_release(self.runner, self.root, self.tag)
        match result:
            case Err(HostingUnavailable(reason)):
                return Skipped(reason)
            case Err(error):
                return Failed(error.message)
            case _:
                return Done()

    def publish(self) -> StepOutcome:
        """Build fresh distributions and upload them interactively."""
        with tempfile.TemporaryDirectory(prefix="easy-release-") as tmp:
            built = build_distributions(
                self.runner, self.root, self.config.build_command, Path(tmp)
            )
            if isinstance(built, Err):
                return Failed(built.error.message)

            command = [*self.config.publish_command, *(str(p) for p in built.value)]
            uploaded = self.runner.stream(command, cwd=self.root)
            if isinstance(uploaded, Err):
                detail = last_lines(uploaded.error.output)
                return Failed(f"{uploaded.error}\n{detail}" if detail else str(uploaded.error))
        return Done()


def _changelog_reason(error: ChangelogError) -> str:
    return f"{error.path}: {error.message}"
