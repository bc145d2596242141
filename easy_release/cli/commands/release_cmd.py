from __future__ import annotations

from pathlib import Path

import typer

from easy_release import __version__
from easy_release.cli.context import build_context
from easy_release.core.errors import ErrorCode
from easy_release.services.release import USAGE, ReleaseService


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def release(
    version: str | None = typer.Argument(
        None,
        help="major, minor, patch, current, or an explicit X.Y.Z",
        show_default=False,
    ),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Only run the pre-release checks.", show_default=False
    ),
    skip_tests: bool | None = typer.Option(
        None, "--skip-tests/--no-skip-tests", help="Skip the test suite.", show_default=False
    ),
    skip_format: bool | None = typer.Option(
        None, "--skip-format/--no-skip-format", help="Skip the formatter check.", show_default=False
    ),
    skip_lint: bool | None = typer.Option(
        None, "--skip-lint/--no-skip-lint", help="Skip the linter.", show_default=False
    ),
    skip_typecheck: bool | None = typer.Option(
        None,
        "--skip-typecheck/--no-skip-typecheck",
        help="Skip the type checker.",
        show_default=False,
    ),
    skip_changelog: bool | None = typer.Option(
        None,
        "--skip-changelog/--no-skip-changelog",
        help="Skip the changelog check.",
        show_default=False,
    ),
    skip_vcs: bool | None = typer.Option(
        None, "--skip-vcs/--no-skip-vcs", help="Skip the git state checks.", show_default=False
    ),
    skip_package_dry_run: bool | None = typer.Option(
        None,
        "--skip-package-dry-run/--no-skip-package-dry-run",
        help="Skip the package build check.",
        show_default=False,
    ),
    skip_hosted_release: bool | None = typer.Option(
        None,
        "--skip-hosted-release/--no-skip-hosted-release",
        help="Do not create a GitHub release.",
        show_default=False,
    ),
    branch: str | None = typer.Option(
        None, "--branch", help="Branch releases must be made from.", show_default=False
    ),
    changelog_entry: str | None = typer.Option(
        None,
        "--changelog-entry",
        help="Add this entry to the UNRELEASED section before checking.",
        show_default=False,
    ),
    project_dir: Path = typer.Option(
        Path("."), "--project-dir", help="Project root (holds pyproject.toml)."
    ),
    show_version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    """Check, version, tag and publish a release.

    VERSION is [bold]major[/bold], [bold]minor[/bold], [bold]patch[/bold],
    [bold]current[/bold] or an explicit version such as 2.0.0.
    """
    if version is None:
        typer.echo("error: missing VERSION argument", err=True)
        typer.echo(USAGE, err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    ctx = build_context(
        project_dir,
        {
            "dry_run": dry_run,
            "skip_tests": skip_tests,
            "skip_format": skip_format,
            "skip_lint": skip_lint,
            "skip_typecheck": skip_typecheck,
            "skip_changelog": skip_changelog,
            "skip_vcs": skip_vcs,
            "skip_package_dry_run": skip_package_dry_run,
            "skip_hosted_release": skip_hosted_release,
            "branch": branch,
            "changelog_entry": changelog_entry,
        },
    )

    service = ReleaseService(root=ctx.root, config=ctx.config, console=ctx.console)
    code = service.run(version)
    if code.is_error:
        raise typer.Exit(code=int(code))
