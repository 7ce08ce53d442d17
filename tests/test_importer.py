"""Tests for the remote importer (URL parsing, cloning, classification)."""

import subprocess
from pathlib import Path

import pytest

from libtoggle.errors import AssetNotFoundError, ImportSourceError
from libtoggle.importer import (
    CONTENT_ROOT_FILE,
    TMP_PREFIX,
    GitHubSource,
    analyze,
    cleanup,
    clone_repo,
    locate,
    parse_github_url,
    read_content_root,
    suggest_group,
)
from libtoggle.kinds import AssetKind

from conftest import write_command, write_skill


class TestParseGitHubUrl:

    def test_plain_repo(self):
        assert parse_github_url("https://github.com/acme/tools") == GitHubSource(repo="acme/tools")

    def test_trailing_slash_and_git_suffix(self):
        assert parse_github_url("https://github.com/acme/tools.git").repo == "acme/tools"
        assert parse_github_url("https://github.com/acme/tools/").repo == "acme/tools"

    def test_tree_with_subpath(self):
        source = parse_github_url("https://github.com/acme/tools/tree/main/skills/marketing")

        assert source == GitHubSource(repo="acme/tools", branch="main", subpath="skills/marketing")
        assert source.clone_url == "https://github.com/acme/tools.git"

    def test_tree_without_subpath(self):
        source = parse_github_url("https://github.com/acme/tools/tree/dev")
        assert (source.branch, source.subpath) == ("dev", None)

    @pytest.mark.parametrize("url", [
        "https://gitlab.com/acme/tools",
        "git@github.com:acme/tools.git",
        "https://github.com/acme",
        "not a url",
    ])
    def test_rejects_other_urls(self, url):
        with pytest.raises(ImportSourceError, match="Could not parse GitHub URL"):
            parse_github_url(url)


class TestSuggestGroup:

    def test_uses_repo_name(self):
        assert suggest_group("https://github.com/acme/tools") == "tools"

    def test_uses_last_path_component(self):
        assert suggest_group("https://github.com/acme/tools/tree/main/skills/marketing") == "marketing"


class TestCloneRepo:

    @pytest.fixture
    def fake_git(self, mocker):
        """Pretend git clone succeeded by populating the target directory."""
        def run(cmd, **kwargs):
            repo_dir = Path(cmd[-1])
            write_skill(repo_dir / "skills", "seo")
            write_command(repo_dir / "commands", "review.md")
            return subprocess.CompletedProcess(cmd, 0, "", "")

        return mocker.patch("libtoggle.importer.subprocess.run", side_effect=run)

    @pytest.fixture
    def clone_root(self, tmp_path):
        root = tmp_path / "tmp"
        root.mkdir()
        return root

    def test_clone_records_content_root(self, fake_git, clone_root):
        cloned = clone_repo("https://github.com/acme/tools", tmp_root=clone_root)

        assert cloned.tmp_dir.name.startswith(TMP_PREFIX)
        assert cloned.content_dir == cloned.tmp_dir / "repo"
        assert read_content_root(cloned.tmp_dir) == cloned.content_dir
        cmd = fake_git.call_args[0][0]
        assert cmd[:4] == ["git", "clone", "--depth", "1"]
        assert "--branch" not in cmd

    def test_clone_with_branch_and_subpath(self, fake_git, clone_root):
        cloned = clone_repo("https://github.com/acme/tools/tree/main/skills", tmp_root=clone_root)

        assert cloned.content_dir == cloned.tmp_dir / "repo" / "skills"
        cmd = fake_git.call_args[0][0]
        assert cmd[cmd.index("--branch") + 1] == "main"

    def test_missing_subpath_cleans_up(self, fake_git, clone_root):
        with pytest.raises(ImportSourceError, match="Subpath not found"):
            clone_repo("https://github.com/acme/tools/tree/main/agents", tmp_root=clone_root)

        assert list(clone_root.iterdir()) == []

    def test_failed_clone_cleans_up(self, mocker, clone_root):
        mocker.patch(
            "libtoggle.importer.subprocess.run",
            side_effect=subprocess.CalledProcessError(128, ["git"], stderr="fatal: repository not found\n"),
        )

        with pytest.raises(ImportSourceError, match="repository not found"):
            clone_repo("https://github.com/acme/missing", tmp_root=clone_root)

        assert list(clone_root.iterdir()) == []

    def test_read_content_root_without_clone(self, tmp_path):
        with pytest.raises(ImportSourceError, match="No content root"):
            read_content_root(tmp_path)


class TestAnalyze:

    def test_single_skill_repository(self, tmp_path):
        skill = write_skill(tmp_path, "seo")

        [candidate] = analyze(skill)

        assert (candidate.name, candidate.kind) == ("seo", AssetKind.SKILL)

    def test_classifies_conventional_layout(self, tmp_path):
        tmp_path = tmp_path / "content"
        write_skill(tmp_path / "skills", "seo")
        (tmp_path / "skills" / "drafts").mkdir()
        write_command(tmp_path / "commands", "review.md")
        (tmp_path / "commands" / "notes.md").write_text("# Notes\n")
        write_command(tmp_path, "top.md")
        (tmp_path / "README.md").write_text("# Readme\n")
        (tmp_path / ".git").mkdir()

        result = {(c.name, c.kind) for c in analyze(tmp_path)}

        assert result == {
            ("seo", AssetKind.SKILL),
            ("drafts", None),
            ("review.md", AssetKind.COMMAND),
            ("notes.md", None),
            ("top.md", AssetKind.COMMAND),
        }

    def test_unknown_items_carry_reason(self, tmp_path):
        (tmp_path / "content" / "scripts").mkdir(parents=True)

        [candidate] = analyze(tmp_path / "content")

        assert candidate.kind is None
        assert "SKILL.md" in candidate.reason


class TestLocate:

    def test_finds_skill_in_skills_dir(self, tmp_path):
        skill = write_skill(tmp_path / "skills", "seo")
        assert locate(tmp_path, AssetKind.SKILL, "seo") == skill

    def test_content_dir_is_the_skill(self, tmp_path):
        skill = write_skill(tmp_path, "seo")
        assert locate(skill, AssetKind.SKILL, "seo") == skill

    def test_finds_root_level_command(self, tmp_path):
        command = write_command(tmp_path, "review.md")
        assert locate(tmp_path, AssetKind.COMMAND, "review.md") == command

    def test_missing_item(self, tmp_path):
        with pytest.raises(AssetNotFoundError):
            locate(tmp_path, AssetKind.COMMAND, "ghost.md")


class TestCleanup:

    def test_removes_temp_clone(self, tmp_path):
        tmp_dir = tmp_path / f"{TMP_PREFIX}abc123"
        (tmp_dir / "repo").mkdir(parents=True)
        (tmp_dir / CONTENT_ROOT_FILE).write_text(str(tmp_dir / "repo"))

        assert cleanup(tmp_dir) is True
        assert not tmp_dir.exists()

    def test_missing_directory(self, tmp_path):
        assert cleanup(tmp_path / f"{TMP_PREFIX}gone") is False

    def test_refuses_unrelated_directory(self, tmp_path):
        precious = tmp_path / "precious"
        precious.mkdir()

        with pytest.raises(ImportSourceError, match="Refusing"):
            cleanup(precious)

        assert precious.exists()
