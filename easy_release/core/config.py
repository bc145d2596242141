"""Release configuration.

Settings come from three layers, later layers winning field by field:

1. Built-in defaults (the dataclass defaults below)
2. The ``[tool.easy-release]`` table of the project's ``pyproject.toml``
3. Command-line flags

Example persisted configuration:

    [tool.easy-release]
    branch = "main"
    skip-typecheck = true
    changelog-file = "CHANGES.md"
    test-command = ["pytest", "-q"]
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, WrongType, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "ConfigError",
    "ReleaseConfig",
    "TOOL_TABLE",
    "load_config",
    "parse_config_table",
]

TOOL_TABLE = "easy-release"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Configuration could not be read or has invalid values."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Immutable settings for one release run."""

    branch: str = "main"
    remote: str = "origin"
    dry_run: bool = False

    skip_tests: bool = False
    skip_format: bool = False
    skip_lint: bool = False
    skip_typecheck: bool = False
    skip_changelog: bool = False
    skip_vcs: bool = False
    skip_package_dry_run: bool = False
    skip_hosted_release: bool = False

    manifest_file: str = "pyproject.toml"
    readme_file: str = "README.md"
    changelog_file: str = "CHANGELOG.md"
    changelog_entry: str | None = None

    test_command: tuple[str, ...] = ("pytest",)
    format_command: tuple[str, ...] = ("ruff", "format", "--check")
    lint_command: tuple[str, ...] = ("ruff", "check")
    typecheck_command: tuple[str, ...] = ("mypy", ".")
    build_command: tuple[str, ...] = ("python", "-m", "build")
    build_check_command: tuple[str, ...] = ("twine", "check")
    publish_command: tuple[str, ...] = ("twine", "upload")

    def merge(self, overrides: Mapping[str, object | None]) -> ReleaseConfig:
        """Return a copy with every non-None override applied.

        None means "not given on the command line", so the persisted or
        default value is kept.
        """
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if v is not None and k in known}
        return replace(self, **changes)

    @property
    def release_files(self) -> tuple[str, ...]:
        """Files a release run may rewrite and commit."""
        return (self.manifest_file, self.readme_file, self.changelog_file)


_BOOL_KEYS = (
    "dry_run",
    "skip_tests",
    "skip_format",
    "skip_lint",
    "skip_typecheck",
    "skip_changelog",
    "skip_vcs",
    "skip_package_dry_run",
    "skip_hosted_release",
)
_STR_KEYS = (
    "branch",
    "remote",
    "manifest_file",
    "readme_file",
    "changelog_file",
    "changelog_entry",
)
_COMMAND_KEYS = (
    "test_command",
    "format_command",
    "lint_command",
    "typecheck_command",
    "build_command",
    "build_check_command",
    "publish_command",
)


def _normalize_keys(table: StrDict) -> StrDict:
    """Accept both ``skip-tests`` and ``skip_tests`` spellings."""
    return {key.replace("-", "_"): value for key, value in table.items()}


def parse_config_table(table: Mapping[str, object]) -> Result[ReleaseConfig, ConfigError]:
    """Build a ReleaseConfig from a ``[tool.easy-release]`` table.

    Unknown keys are ignored. Keys holding a value of the wrong type are
    reported as a ConfigError.
    """
    data = _normalize_keys(dict(table))
    values: dict[str, object] = {}
    try:
        for key in _BOOL_KEYS:
            values[key] = get_bool(data, key)
        for key in _STR_KEYS:
            values[key] = get_str(data, key)
        for key in _COMMAND_KEYS:
            command = get_str_list(data, key)
            if command is not None and not command:
                return Err(ConfigError(f"'{key}' must not be empty"))
            values[key] = command
    except WrongType as e:
        return Err(ConfigError(f"invalid [tool.{TOOL_TABLE}] value: {e}"))

    return Ok(ReleaseConfig().merge(values))


def load_config(project_dir: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load persisted defaults from ``pyproject.toml`` in project_dir.

    A missing file or a file without the tool table yields the built-in
    defaults; the manifest itself is validated later when the current
    version is read.
    """
    path = project_dir / "pyproject.toml"
    try:
        raw: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Ok(ReleaseConfig())
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(raw) or {}
    tool = get_table(data, "tool") or {}
    table = get_table(tool, TOOL_TABLE)
    if table is None:
        return Ok(ReleaseConfig())

    result = parse_config_table(table)
    if isinstance(result, Err):
        return Err(replace(result.error, path=path))
    return result
