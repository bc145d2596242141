"""Version parsing and calculation.

Pure functions: nothing here touches the filesystem or runs commands.

    >>> resolve("minor", "1.9.9")
    Ok('1.10.0')
    >>> resolve("1.0.0", "1.0.0").error.message
    'new version 1.0.0 is the same as current version'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from easy_release.core.result import Err, Ok, Result

__all__ = [
    "BumpKind",
    "BumpPart",
    "Current",
    "Explicit",
    "Increment",
    "SemVer",
    "VersionError",
    "VersionFormatError",
    "VersionOrderError",
    "bump",
    "extract_major_minor",
    "parse_bump_kind",
    "parse_semver",
    "resolve",
    "validate_explicit",
]

_SEMVER_RE = re.compile(r"^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)$")

type BumpPart = Literal["major", "minor", "patch"]


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    """A major.minor.patch version; ordering is numeric per component."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, part: BumpPart) -> SemVer:
        match part:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)


@dataclass(frozen=True, slots=True)
class VersionFormatError:
    """A version string is not a major.minor.patch triple."""

    version: str
    message: str


@dataclass(frozen=True, slots=True)
class VersionOrderError:
    """An explicit version is not strictly greater than the current one."""

    version: str
    current: str
    message: str


type VersionError = VersionFormatError | VersionOrderError


@dataclass(frozen=True, slots=True)
class Increment:
    part: BumpPart


@dataclass(frozen=True, slots=True)
class Current:
    pass


@dataclass(frozen=True, slots=True)
class Explicit:
    version: str


type BumpKind = Increment | Current | Explicit


def parse_semver(text: str) -> Result[SemVer, VersionFormatError]:
    """Parse exactly three dot-separated decimal integers."""
    m = _SEMVER_RE.fullmatch(text)
    if m is None:
        return Err(
            VersionFormatError(
                version=text,
                message=f"invalid version format '{text}', expected semver (e.g., 1.2.3)",
            )
        )
    return Ok(SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def parse_bump_kind(arg: str) -> BumpKind:
    """Classify the VERSION argument given on the command line."""
    match arg:
        case "major" | "minor" | "patch":
            return Increment(arg)
        case "current":
            return Current()
        case _:
            return Explicit(arg)


def _current_error(current: str) -> VersionFormatError:
    return VersionFormatError(
        version=current,
        message=f"cannot parse current version '{current}' as semver",
    )


def bump(current: str, part: BumpPart) -> Result[str, VersionFormatError]:
    """Compute the next version for a major, minor or patch bump."""
    match parse_semver(current):
        case Ok(parsed):
            return Ok(str(parsed.bump(part)))
        case Err(_):
            return Err(_current_error(current))


def validate_explicit(version: str, current: str) -> Result[str, VersionError]:
    """Accept an explicit version only if it is strictly greater than current.

    The candidate is checked for format before the current version, so a
    typo on the command line is reported ahead of a broken manifest.
    """
    candidate = parse_semver(version)
    if isinstance(candidate, Err):
        return candidate
    cur = parse_semver(current)
    if isinstance(cur, Err):
        return Err(_current_error(current))
    new = candidate.value

    if new == cur.value:
        return Err(
            VersionOrderError(
                version=version,
                current=current,
                message=f"new version {version} is the same as current version",
            )
        )
    if new < cur.value:
        return Err(
            VersionOrderError(
                version=version,
                current=current,
                message=f"new version {version} must be greater than current version {current}",
            )
        )
    return Ok(version)


def resolve(arg: str, current: str) -> Result[str, VersionError]:
    """Turn the VERSION argument into the version to release."""
    match parse_bump_kind(arg):
        case Increment(part):
            return bump(current, part)
        case Current():
            return Ok(current)
        case Explicit(version):
            return validate_explicit(version, current)


def extract_major_minor(version: str) -> tuple[int, int]:
    """Return (major, minor), or (0, 0) if version does not parse.

    Lossy on purpose: only used to rewrite ``~= MAJOR.MINOR`` constraints in
    documentation, never to validate.
    """
    match parse_semver(version):
        case Ok(parsed):
            return (parsed.major, parsed.minor)
        case Err(_):
            return (0, 0)
