"""Rewriting version-bearing files.

- The manifest (``pyproject.toml``) holds a single ``version = "X.Y.Z"``
  line that must match the current version exactly; failing to find it
  stops the release.
- The README may show an install constraint such as
  ``pip install "easy-release~=1.2"``; it is rewritten on a best-effort
  basis and a missing match is only reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from easy_release.core.result import Err, Ok, Result
from easy_release.services.version import extract_major_minor

__all__ = [
    "FileUpdateError",
    "ReadmeUpdate",
    "update_manifest_version",
    "update_readme_constraint",
]


@dataclass(frozen=True, slots=True)
class FileUpdateError:
    path: str
    message: str


class ReadmeUpdate(Enum):
    UPDATED = auto()
    UNCHANGED = auto()
    NO_MATCH = auto()
    MISSING = auto()


def update_manifest_version(
    root: Path, manifest_file: str, current: str, new: str
) -> Result[None, FileUpdateError]:
    """Replace the first ``version = "<current>"`` line with the new version."""
    path = root / manifest_file
    pattern = re.compile(rf"^(\s*version\s*=\s*)([\"']){re.escape(current)}\2", re.MULTILINE)
    try:
        content = path.read_text(encoding="utf-8")
        updated, count = pattern.subn(rf"\g<1>\g<2>{new}\g<2>", content, count=1)
        if count == 0:
            return Err(
                FileUpdateError(
                    path=manifest_file,
                    message=f'could not find version = "{current}" in {manifest_file}',
                )
            )
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        return Err(FileUpdateError(path=manifest_file, message=f"{manifest_file}: {e}"))
    return Ok(None)


def _constraint_pattern(current: str) -> re.Pattern[str]:
    major, minor = extract_major_minor(current)
    # A name character (or the closing bracket of extras) must precede the
    # operator so prose like "~= 1.2" on its own is left alone.
    return re.compile(rf"([A-Za-z0-9_.\-\]]\s*~[=>]\s*){major}\.{minor}(?![0-9.])")


def update_readme_constraint(
    root: Path, readme_file: str, current: str, new: str
) -> Result[ReadmeUpdate, FileUpdateError]:
    """Rewrite ``~= MAJOR.MINOR`` constraints from the current to the new version."""
    path = root / readme_file
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(ReadmeUpdate.MISSING)
    except OSError as e:
        return Err(FileUpdateError(path=readme_file, message=f"{readme_file}: {e}"))

    new_major, new_minor = extract_major_minor(new)
    updated, count = _constraint_pattern(current).subn(rf"\g<1>{new_major}.{new_minor}", content)
    if count == 0:
        return Ok(ReadmeUpdate.NO_MATCH)
    if updated == content:
        return Ok(ReadmeUpdate.UNCHANGED)

    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        return Err(FileUpdateError(path=readme_file, message=f"{readme_file}: {e}"))
    return Ok(ReadmeUpdate.UPDATED)
