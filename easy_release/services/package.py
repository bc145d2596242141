"""Building distributions for validation and upload."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from easy_release.core.result import Err, Ok, Result
from easy_release.platform.process import CommandRunner, last_lines

__all__ = ["PackageError", "build_distributions"]

_ARTIFACT_PATTERNS = ("*.whl", "*.tar.gz")


@dataclass(frozen=True, slots=True)
class PackageError:
    message: str


def build_distributions(
    runner: CommandRunner, root: Path, command: Sequence[str], outdir: Path
) -> Result[list[Path], PackageError]:
    """Build sdist and wheel into outdir and return the artifacts.

    The build command is run with ``--outdir <outdir>`` appended so the
    project's own ``dist/`` directory is never touched.
    """
    result = runner.run([*command, "--outdir", str(outdir)], cwd=root)
    if isinstance(result, Err):
        return Err(PackageError(f"package build failed\n{last_lines(result.error.output)}"))

    artifacts = sorted(p for pattern in _ARTIFACT_PATTERNS for p in outdir.glob(pattern))
    if not artifacts:
        return Err(PackageError(f"package build produced no distributions in {outdir}"))
    return Ok(artifacts)
