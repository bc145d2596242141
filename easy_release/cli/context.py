from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from easy_release.core.config import ReleaseConfig, load_config
from easy_release.core.errors import ErrorCode
from easy_release.core.result import Err
from easy_release.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(project_dir: Path, overrides: Mapping[str, object | None]) -> CLIContext:
    """Resolve the project directory and merge persisted config with CLI flags."""
    try:
        root = project_dir.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --project-dir: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    if not root.is_dir():
        typer.echo(f"error: --project-dir '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    config_result = load_config(root)
    if isinstance(config_result, Err):
        error = config_result.error
        where = f" ({error.path})" if error.path else ""
        typer.echo(f"error: {error.message}{where}", err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    return CLIContext(
        root=root,
        config=config_result.value.merge(overrides),
        console=RichConsole(),
    )
