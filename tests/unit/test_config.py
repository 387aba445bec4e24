"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from vtl.config.loader import (
    extract_vtl_config,
    find_pyproject_toml,
    load_config,
    load_pyproject_toml,
)
from vtl.config.models import GitHubConfig, VtlConfig, parse_branch_mappings
from vtl.exceptions import ConfigNotFoundError, ConfigValidationError

PYPROJECT = """\
[project]
name = "test-project"
version = "1.0.0"

[tool.vtl]
base_version = "1.2.3"
prerelease_prefix = "prerelease"
releases_branch = "main"

[tool.vtl.branch_mappings]
main = "edge"
"Release/V2" = "stable"

[tool.vtl.github]
repository = "mapped/action-vtl"
"""


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    (tmp_path / "pyproject.toml").write_text(PYPROJECT)
    return tmp_path


class TestVtlConfig:
    """Tests for VtlConfig model."""

    def test_default_config(self):
        """Default configuration has sensible values."""
        config = VtlConfig(base_version="1.0.0")

        assert config.branch_mappings == {}
        assert config.prerelease_prefix == ""
        assert config.releases_branch == ""
        assert not config.tagging_enabled
        assert config.version_file == Path("VERSION")
        assert config.github.api_url == "https://api.github.com"

    def test_invalid_base_version(self):
        """The base version must be SemVer."""
        with pytest.raises(ValueError, match="not a valid SEMVER"):
            VtlConfig(base_version="1.2")

    def test_branch_mappings_normalized(self):
        """Branch mapping keys are normalized like build refs."""
        config = VtlConfig(base_version="1.0.0", branch_mappings={"Feature/X": "fx"})

        assert config.branch_mappings == {"feature-x": "fx"}

    def test_branch_mappings_from_text(self):
        """The newline-separated mapping text is accepted."""
        config = VtlConfig(base_version="1.0.0", branch_mappings="main:edge\n\n develop:beta \n")

        assert config.branch_mappings == {"main": "edge", "develop": "beta"}

    def test_effective_initial_release_tag(self):
        """The first release defaults to the base version numbers."""
        config = VtlConfig(base_version="2.1.0-alpha.3")
        assert config.effective_initial_release_tag == "v2.1.0"

        config = VtlConfig(base_version="2.1.0", initial_release_tag="v0.1.0")
        assert config.effective_initial_release_tag == "v0.1.0"

    def test_effective_initial_release_tag_unvalidated_base(self):
        """A base version that skipped validation raises instead of guessing."""
        config = VtlConfig.model_construct(base_version="1.2", initial_release_tag=None)

        with pytest.raises(ConfigValidationError, match="not a valid SEMVER"):
            config.effective_initial_release_tag

    def test_invalid_initial_release_tag(self):
        """The initial release tag must be a release tag."""
        with pytest.raises(ValueError, match="not a release tag"):
            VtlConfig(base_version="1.0.0", initial_release_tag="first")

    def test_unknown_field_rejected(self):
        """Unknown settings are errors."""
        with pytest.raises(ValueError):
            VtlConfig(base_version="1.0.0", changelog_path="CHANGELOG.md")


class TestGitHubConfig:
    """Tests for GitHubConfig model."""

    def test_defaults(self):
        """Default GitHub configuration."""
        config = GitHubConfig()

        assert config.token is None
        assert config.repository is None
        assert not config.can_create_tags

    def test_owner_and_repo(self):
        """Owner and repo are split from the repository."""
        config = GitHubConfig(token="t", repository="mapped/action-vtl")

        assert config.owner == "mapped"
        assert config.repo == "action-vtl"
        assert config.can_create_tags

    @pytest.mark.parametrize("repository", ["action-vtl", "/repo", "owner/", "a/b/c"])
    def test_invalid_repository(self, repository: str):
        """Repositories must be owner/name."""
        with pytest.raises(ValueError, match="owner/name"):
            GitHubConfig(repository=repository)

    def test_token_hidden_from_repr(self):
        """Tokens do not leak into reprs."""
        assert "secret" not in repr(GitHubConfig(token="secret"))


class TestParseBranchMappings:
    """Tests for parse_branch_mappings()."""

    def test_parse(self):
        """Channels may contain colons after the first one."""
        assert parse_branch_mappings("main:edge\nops:reg:latest") == {
            "main": "edge",
            "ops": "reg:latest",
        }

    @pytest.mark.parametrize("text", ["main", "main:", ":edge"])
    def test_invalid(self, text: str):
        """Lines must have a branch and a channel."""
        with pytest.raises(ValueError, match="Invalid branch mapping"):
            parse_branch_mappings(text)


class TestLoadPyprojectToml:
    """Tests for load_pyproject_toml()."""

    def test_load_valid_toml(self, project_dir: Path):
        """Load a valid pyproject.toml."""
        data = load_pyproject_toml(project_dir / "pyproject.toml")

        assert data["project"]["name"] == "test-project"

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Loading nonexistent file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_pyproject_toml(tmp_path / "nonexistent.toml")

    def test_load_invalid_toml_raises(self, tmp_path: Path):
        """Invalid TOML raises ConfigValidationError."""
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\n")

        with pytest.raises(ConfigValidationError):
            load_pyproject_toml(path)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml()."""

    def test_find_in_parent_dir(self, project_dir: Path):
        """Find pyproject.toml in a parent directory."""
        subdir = project_dir / "src" / "package"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == (project_dir / "pyproject.toml").resolve()


class TestExtractVtlConfig:
    """Tests for extract_vtl_config()."""

    def test_extract_missing_config(self):
        """Extract returns empty dict when config missing."""
        assert extract_vtl_config({"project": {"name": "test"}}) == {}


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_from_pyproject(self, project_dir: Path):
        """Load configuration from [tool.vtl]."""
        config = load_config(project_dir)

        assert config.base_version == "1.2.3"
        assert config.branch_mappings == {"main": "edge", "release-v2": "stable"}
        assert config.releases_branch == "main"
        assert config.github.repository == "mapped/action-vtl"

    def test_overrides_take_precedence(self, project_dir: Path):
        """Explicit values override the file, None values do not."""
        config = load_config(
            project_dir / "pyproject.toml",
            {
                "base_version": "2.0.0",
                "prerelease_prefix": None,
                "github": {"token": "t", "repository": None},
            },
        )

        assert config.base_version == "2.0.0"
        assert config.prerelease_prefix == "prerelease"
        assert config.github.token == "t"
        assert config.github.repository == "mapped/action-vtl"

    def test_unset_nested_overrides_keep_defaults(self, tmp_path: Path):
        """Unset nested values fall back to defaults when the file has no such table."""
        (tmp_path / "pyproject.toml").write_text("[tool.vtl]\nbase_version = '1.0.0'\n")

        config = load_config(
            tmp_path,
            {
                "base_version": "1.2.3",
                "github": {"token": None, "repository": None, "api_url": None},
            },
        )

        assert config.base_version == "1.2.3"
        assert config.github.api_url == "https://api.github.com"
        assert config.github.token is None
        assert config.github.repository is None

    def test_overrides_without_pyproject(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """A project without pyproject.toml relies on overrides."""

        def not_found(start: Path | None = None) -> Path:
            raise ConfigNotFoundError("No pyproject.toml found")

        monkeypatch.setattr("vtl.config.loader.find_pyproject_toml", not_found)

        config = load_config(tmp_path, {"base_version": "0.1.0"})

        assert config.base_version == "0.1.0"

    def test_missing_base_version(self, tmp_path: Path):
        """A missing base version is a validation error."""
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")

        with pytest.raises(ConfigValidationError, match="base_version"):
            load_config(tmp_path)
