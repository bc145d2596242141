"""Project metadata read from the manifest (``pyproject.toml``)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import WrongType, as_str_dict, get_str, get_table

__all__ = ["Project", "ProjectError", "load_project"]


@dataclass(frozen=True, slots=True)
class ProjectError:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """The package being released.

    Attributes:
        root: Directory holding the manifest; all commands run here.
        name: ``[project].name``
        version: ``[project].version`` as written in the manifest
    """

    root: Path
    name: str
    version: str


def load_project(
    root: Path, manifest_file: str = "pyproject.toml"
) -> Result[Project, ProjectError]:
    """Read the name and current version from the manifest."""
    path = root / manifest_file
    try:
        raw: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(
            ProjectError(
                f"{manifest_file} not found in {root}",
                hint="Run from the project root or pass --project-dir.",
            )
        )
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        return Err(ProjectError(f"cannot read {manifest_file}: {e}"))

    data = as_str_dict(raw) or {}
    project = get_table(data, "project")
    if project is None:
        return Err(ProjectError(f"no [project] table in {manifest_file}"))

    try:
        name = get_str(project, "name")
        version = get_str(project, "version")
    except WrongType as e:
        return Err(ProjectError(f"invalid [project] table in {manifest_file}: {e}"))

    if version is None:
        return Err(
            ProjectError(
                f"no static [project].version in {manifest_file}",
                hint="easy-release rewrites a literal version = \"X.Y.Z\" line; "
                "dynamic versions are not supported.",
            )
        )

    return Ok(Project(root=root, name=name or root.name, version=version))
