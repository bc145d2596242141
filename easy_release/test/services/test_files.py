"""Tests for version-bearing file updates."""

from __future__ import annotations

from pathlib import Path

from easy_release.core.result import Err, Ok
from easy_release.services.files import (
    ReadmeUpdate,
    update_manifest_version,
    update_readme_constraint,
)

PYPROJECT = """\
[project]
name = "demo"
version = "1.2.3"
dependencies = ["other>=1.2.3"]

[tool.other]
version = "1.2.3"
"""


class TestUpdateManifestVersion:
    def test_replaces_first_version_line_only(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(PYPROJECT, encoding="utf-8")

        result = update_manifest_version(tmp_path, "pyproject.toml", "1.2.3", "1.3.0")

        assert result == Ok(None)
        content = (tmp_path / "pyproject.toml").read_text(encoding="utf-8")
        assert 'version = "1.3.0"' in content
        assert 'dependencies = ["other>=1.2.3"]' in content
        assert content.count('version = "1.2.3"') == 1

    def test_single_quotes(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[project]\nversion='0.1.0'\n", encoding="utf-8")

        assert update_manifest_version(tmp_path, "pyproject.toml", "0.1.0", "0.2.0") == Ok(None)
        assert "version='0.2.0'" in (tmp_path / "pyproject.toml").read_text(encoding="utf-8")

    def test_pattern_not_found(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(PYPROJECT, encoding="utf-8")

        result = update_manifest_version(tmp_path, "pyproject.toml", "9.9.9", "10.0.0")

        assert isinstance(result, Err)
        assert result.error.message == 'could not find version = "9.9.9" in pyproject.toml'
        assert (tmp_path / "pyproject.toml").read_text(encoding="utf-8") == PYPROJECT

    def test_version_is_not_a_regex(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('version = "1x2x3"\n', encoding="utf-8")

        result = update_manifest_version(tmp_path, "pyproject.toml", "1.2.3", "1.2.4")

        assert isinstance(result, Err)

    def test_missing_file(self, tmp_path: Path) -> None:
        result = update_manifest_version(tmp_path, "pyproject.toml", "1.0.0", "1.0.1")
        assert isinstance(result, Err)
        assert result.error.path == "pyproject.toml"


class TestUpdateReadmeConstraint:
    def test_rewrites_compatible_release_constraint(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text(
            'pip install "demo~=1.2"\n\ndemo[cli] ~= 1.2\n', encoding="utf-8"
        )

        result = update_readme_constraint(tmp_path, "README.md", "1.2.3", "2.0.0")

        assert result == Ok(ReadmeUpdate.UPDATED)
        assert (tmp_path / "README.md").read_text(encoding="utf-8") == (
            'pip install "demo~=2.0"\n\ndemo[cli] ~= 2.0\n'
        )

    def test_does_not_touch_longer_versions(self, tmp_path: Path) -> None:
        text = "demo~=1.20\nother~=1.2.5\n"
        (tmp_path / "README.md").write_text(text, encoding="utf-8")

        result = update_readme_constraint(tmp_path, "README.md", "1.2.3", "1.3.0")

        assert result == Ok(ReadmeUpdate.NO_MATCH)
        assert (tmp_path / "README.md").read_text(encoding="utf-8") == text

    def test_patch_release_leaves_constraint_unchanged(self, tmp_path: Path) -> None:
        text = "demo~=1.2\n"
        (tmp_path / "README.md").write_text(text, encoding="utf-8")

        result = update_readme_constraint(tmp_path, "README.md", "1.2.3", "1.2.4")

        assert result == Ok(ReadmeUpdate.UNCHANGED)
        assert (tmp_path / "README.md").read_text(encoding="utf-8") == text

    def test_missing_readme(self, tmp_path: Path) -> None:
        assert update_readme_constraint(tmp_path, "README.md", "1.2.3", "1.3.0") == Ok(
            ReadmeUpdate.MISSING
        )
