"""Changelog handling.

The changelog collects pending changes under an ``## UNRELEASED`` heading
(matched case-insensitively). At release time that heading becomes
``## <version> - <YYYY-MM-DD>``:

    # Changelog

    ## UNRELEASED

    - Added new feature

    ## 0.1.0 - 2024-01-15

    - Initial release
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from easy_release.core.result import Err, Ok, Result

__all__ = [
    "ChangelogError",
    "add_changelog_entry",
    "check_changelog",
    "has_unreleased",
    "inject_entry",
    "release_heading",
    "update_changelog",
]

_UNRELEASED_RE = re.compile(r"^##[ \t]*unreleased\b[^\n]*", re.IGNORECASE | re.MULTILINE)
_TITLE_RE = re.compile(r"^#[^#\n]*\n+", re.MULTILINE)
_BULLETS = ("- ", "* ")

NEW_CHANGELOG = "# Changelog\n\n"


@dataclass(frozen=True, slots=True)
class ChangelogError:
    path: str
    message: str


def has_unreleased(content: str) -> bool:
    return _UNRELEASED_RE.search(content) is not None


def inject_entry(content: str, entry: str) -> str:
    """Add ``- entry`` at the top of the UNRELEASED section.

    The section is created below the document title when missing, and a
    title is added when the document has none.
    """
    bullet = f"- {entry.strip()}\n"

    m = _UNRELEASED_RE.search(content)
    if m is not None:
        head = content[: m.end()] + "\n"
        rest = content[m.end() :].lstrip("\n")
        if rest.startswith(_BULLETS) or not rest:
            return f"{head}\n{bullet}{rest}"
        return f"{head}\n{bullet}\n{rest}"

    if content and not content.endswith("\n"):
        content += "\n"
    section = f"## UNRELEASED\n\n{bullet}\n"
    title = _TITLE_RE.search(content)
    if title is None:
        return NEW_CHANGELOG + section + content
    return content[: title.end()] + section + content[title.end() :]


def release_heading(content: str, version: str, today: date) -> str | None:
    """Replace the UNRELEASED heading; None if there is none."""
    updated, count = _UNRELEASED_RE.subn(
        f"## {version} - {today.isoformat()}", content, count=1
    )
    return updated if count else None


def check_changelog(root: Path, changelog_file: str) -> Result[None, ChangelogError]:
    """Verify the changelog exists and has an UNRELEASED section."""
    try:
        content = (root / changelog_file).read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ChangelogError(changelog_file, f"{changelog_file} not found"))
    except OSError as e:
        return Err(ChangelogError(changelog_file, str(e)))

    if not has_unreleased(content):
        return Err(ChangelogError(changelog_file, "no UNRELEASED section found"))
    return Ok(None)


def add_changelog_entry(
    root: Path, changelog_file: str, entry: str
) -> Result[None, ChangelogError]:
    """Write an entry into the UNRELEASED section, creating file and section as needed."""
    path = root / changelog_file
    try:
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            content = NEW_CHANGELOG
        path.write_text(inject_entry(content, entry), encoding="utf-8")
    except OSError as e:
        return Err(ChangelogError(changelog_file, str(e)))
    return Ok(None)


def update_changelog(
    root: Path, changelog_file: str, version: str, today: date
) -> Result[None, ChangelogError]:
    """Turn the UNRELEASED heading into the released version heading."""
    path = root / changelog_file
    try:
        content = path.read_text(encoding="utf-8")
        updated = release_heading(content, version, today)
        if updated is None:
            return Err(ChangelogError(changelog_file, "failed to update UNRELEASED section"))
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        return Err(ChangelogError(changelog_file, str(e)))
    return Ok(None)
