"""
Shared pytest fixtures for libtoggle tests.

Every test gets its own project root under tmp_path and a HOME pointing
into tmp_path, so logs, error telemetry and user config never leak out.
"""

import pytest
from pathlib import Path
from click.testing import CliRunner

from libtoggle import config
from libtoggle.config import LibraryPaths
from libtoggle.error_logging import reset_default_logger
from libtoggle.kinds import AssetKind
from libtoggle.library import Library
from libtoggle.logging import LibraryLogger


COMMAND_TEMPLATE = """---
description: {description}
---

Run the {name} workflow.
"""

SKILL_TEMPLATE = """---
name: {name}
description: {description}
---

# {name}
"""


# =============================================================================
# ISOLATION
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point HOME at a scratch directory and reset module-level caches."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("LIBTOGGLE_ROOT", raising=False)
    config._CONFIG_CACHE = None
    reset_default_logger()
    yield home
    config._CONFIG_CACHE = None
    reset_default_logger()


# =============================================================================
# ASSET HELPERS
# =============================================================================

def write_command(directory: Path, name: str, description: str = "A command") -> Path:
    """Write a command markdown file with frontmatter."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(COMMAND_TEMPLATE.format(name=name, description=description))
    return path


def write_skill(directory: Path, name: str, description: str = "A skill", references: bool = False) -> Path:
    """Write a skill directory with its SKILL.md marker."""
    skill_dir = directory / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    (skill_dir / "SKILL.md").write_text(SKILL_TEMPLATE.format(name=name, description=description))
    if references:
        (skill_dir / "references").mkdir()
        (skill_dir / "references" / "guide.md").write_text("# Guide\n")
    return skill_dir


# =============================================================================
# LIBRARY FIXTURES
# =============================================================================

@pytest.fixture
def project_root(tmp_path):
    """Empty project root with .library/commands and .library/skills."""
    root = tmp_path / "project"
    (root / ".library" / "commands").mkdir(parents=True)
    (root / ".library" / "skills").mkdir(parents=True)
    return root


@pytest.fixture
def paths(project_root):
    return LibraryPaths.for_root(project_root)


@pytest.fixture
def event_log(tmp_path):
    return LibraryLogger(log_dir=tmp_path / "logs")


@pytest.fixture
def library(paths, event_log):
    """Library with the directory registry and default collision policy."""
    return Library(paths, event_log=event_log)


@pytest.fixture
def demo_commands(paths):
    """Command group 'demo' holding a.md and b.md."""
    group_dir = paths.canonical_root(AssetKind.COMMAND) / "demo"
    write_command(group_dir, "a.md", "First demo command")
    write_command(group_dir, "b.md", "Second demo command")
    return group_dir


@pytest.fixture
def marketing_skills(paths):
    """Skill group 'marketing' holding seo and copywriting."""
    group_dir = paths.canonical_root(AssetKind.SKILL) / "marketing"
    write_skill(group_dir, "seo", "Search engine optimization", references=True)
    write_skill(group_dir, "copywriting", "Landing page copy")
    return group_dir


# =============================================================================
# CLI FIXTURES
# =============================================================================

@pytest.fixture
def cli_runner():
    """
    Provide Click CLI test runner.

    Usage:
        def test_my_command(cli_runner, project_root):
            from libtoggle.cli import cli
            result = cli_runner.invoke(cli, ['--root', str(project_root), 'list'])
            assert result.exit_code == 0
    """
    return CliRunner()
