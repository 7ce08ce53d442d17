"""
Remote importer - clone a GitHub repository and classify its contents.

Detection heuristics:
  skill   - directory containing SKILL.md
  command - .md file with YAML frontmatter holding a description field
  unknown - anything else (the user decides)

The temporary clone lives in $TMPDIR/import-repo-XXXXXX/repo; the chosen
content root is written to .content-root so later steps can find it.
"""

import logging
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from libtoggle.errors import AssetNotFoundError, ImportSourceError
from libtoggle.kinds import (
    AssetKind,
    COMMAND_SUFFIX,
    RESOURCE_FORK_PREFIX,
    SKILL_MARKER,
    has_command_frontmatter,
    is_skill_dir,
)

logger = logging.getLogger(__name__)

TMP_PREFIX = "import-repo-"
CONTENT_ROOT_FILE = ".content-root"

# Repository metadata that is never importable
SKIP_NAMES = {
    ".git", ".github", ".claude", ".claude-plugin", "node_modules", ".specstory", ".vscode", "__pycache__",
    "README.md", "CONTRIBUTING.md", "LICENSE", "LICENSE.md", "CHANGELOG.md", "VERSIONS.md",
    "AGENTS.md", "CLAUDE.md", ".gitignore", "package.json", "package-lock.json", "yarn.lock", "tsconfig.json",
}

_TREE_URL = re.compile(r'^https://github\.com/([^/]+/[^/]+)/tree/([^/]+)(/(.+))?$')
_REPO_URL = re.compile(r'^https://github\.com/([^/]+/[^/]+)$')


@dataclass
class GitHubSource:
    """A GitHub repository, optionally narrowed to a branch and subdirectory."""
    repo: str
    branch: Optional[str] = None
    subpath: Optional[str] = None

    @property
    def clone_url(self) -> str:
        return f"https://github.com/{self.repo}.git"


@dataclass
class ClonedRepo:
    tmp_dir: Path
    content_dir: Path


@dataclass
class Candidate:
    """One top-level item of the content directory and what it looks like."""
    name: str
    kind: Optional[AssetKind]
    path: Path
    reason: str = ""


def parse_github_url(url: str) -> GitHubSource:
    """
    Parse https://github.com/<user>/<repo> or .../tree/<branch>[/<path>].

    Raises:
        ImportSourceError: For any other URL shape
    """
    url = url.strip()
    if url.endswith("/"):
        url = url[:-1]
    if url.endswith(".git"):
        url = url[:-4]

    match = _TREE_URL.match(url)
    if match:
        return GitHubSource(repo=match.group(1), branch=match.group(2), subpath=match.group(4) or None)

    match = _REPO_URL.match(url)
    if match:
        return GitHubSource(repo=match.group(1))

    raise ImportSourceError(
        f"Could not parse GitHub URL: {url}\n"
        "Expected: https://github.com/<user>/<repo> or https://github.com/<user>/<repo>/tree/<branch>/<path>"
    )


def suggest_group(url: str) -> str:
    """Suggest a group name: the subdirectory name if present, otherwise the repo name."""
    source = parse_github_url(url)
    if source.subpath:
        return Path(source.subpath).name
    return source.repo.split("/")[1]


def should_skip(name: str) -> bool:
    return name in SKIP_NAMES or name.startswith(RESOURCE_FORK_PREFIX)


def clone_repo(url: str, tmp_root: Optional[Path] = None) -> ClonedRepo:
    """
    Shallow-clone a GitHub repository into a fresh temp directory.

    Raises:
        ImportSourceError: If the URL is invalid, the clone fails, or the
            subpath does not exist (the temp directory is removed first)
    """
    source = parse_github_url(url)
    tmp_dir = Path(tempfile.mkdtemp(prefix=TMP_PREFIX, dir=tmp_root))
    repo_dir = tmp_dir / "repo"

    cmd = ['git', 'clone', '--depth', '1']
    if source.branch:
        cmd += ['--branch', source.branch]
    cmd += ['--quiet', source.clone_url, str(repo_dir)]

    logger.info(f"Cloning {source.repo}...")
    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        raise ImportSourceError(f"Failed to clone {source.repo}: {e.stderr.strip()}") from e
    except FileNotFoundError as e:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        raise ImportSourceError("git is not installed") from e

    content_dir = repo_dir
    if source.subpath:
        content_dir = repo_dir / source.subpath
        if not content_dir.is_dir():
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise ImportSourceError(f"Subpath not found in repo: {source.subpath}")

    (tmp_dir / CONTENT_ROOT_FILE).write_text(str(content_dir))
    return ClonedRepo(tmp_dir=tmp_dir, content_dir=content_dir)


def read_content_root(tmp_dir: Path) -> Path:
    """Content directory recorded by clone_repo."""
    marker = Path(tmp_dir) / CONTENT_ROOT_FILE
    if not marker.is_file():
        raise ImportSourceError(f"No content root found in {tmp_dir}. Run 'clone' first.")
    return Path(marker.read_text().strip())


def _classify_dir(path: Path) -> Candidate:
    if is_skill_dir(path):
        return Candidate(name=path.name, kind=AssetKind.SKILL, path=path)
    return Candidate(name=path.name, kind=None, path=path, reason=f"directory, no {SKILL_MARKER}")


def _classify_file(path: Path) -> Candidate:
    if has_command_frontmatter(path):
        return Candidate(name=path.name, kind=AssetKind.COMMAND, path=path)
    return Candidate(name=path.name, kind=None, path=path, reason="no description frontmatter")


def _sorted_children(directory: Path) -> List[Path]:
    return sorted(directory.iterdir(), key=lambda p: p.name)


def analyze(content_dir: Path) -> List[Candidate]:
    """
    Classify the importable items of a content directory.

    Looks at, in order: the content directory itself (a single skill),
    skills/*/, commands/*.md, root-level directories and root-level .md files.
    """
    content_dir = Path(content_dir)

    if is_skill_dir(content_dir):
        return [Candidate(name=content_dir.name, kind=AssetKind.SKILL, path=content_dir)]

    candidates = []

    skills_dir = content_dir / "skills"
    if skills_dir.is_dir():
        for item in _sorted_children(skills_dir):
            if item.is_dir() and not should_skip(item.name):
                candidates.append(_classify_dir(item))

    commands_dir = content_dir / "commands"
    if commands_dir.is_dir():
        for item in _sorted_children(commands_dir):
            if item.is_file() and item.name.endswith(COMMAND_SUFFIX) and not should_skip(item.name):
                candidates.append(_classify_file(item))

    for item in _sorted_children(content_dir):
        if should_skip(item.name) or item.name.startswith("."):
            continue
        if item.is_dir():
            if item.name in ("skills", "commands"):
                continue
            candidates.append(_classify_dir(item))
        elif item.is_file() and item.name.endswith(COMMAND_SUFFIX):
            candidates.append(_classify_file(item))

    return candidates


def locate(content_dir: Path, kind: AssetKind, name: str) -> Path:
    """
    Find a named item inside a content directory.

    Raises:
        AssetNotFoundError: If no candidate location holds the item
    """
    content_dir = Path(content_dir)

    if kind is AssetKind.SKILL:
        if content_dir.name == name and is_skill_dir(content_dir):
            return content_dir
        for candidate in (content_dir / "skills" / name, content_dir / name):
            if candidate.is_dir():
                return candidate
        raise AssetNotFoundError(f"Skill not found: {name}")

    for candidate in (content_dir / "commands" / name, content_dir / name):
        if candidate.is_file():
            return candidate
    raise AssetNotFoundError(f"Command not found: {name}")


def cleanup(tmp_dir: Path) -> bool:
    """
    Remove a temporary clone.

    Returns:
        False if the directory was already gone

    Raises:
        ImportSourceError: If the path does not look like one of our temp dirs
    """
    tmp_dir = Path(tmp_dir)
    if not tmp_dir.is_dir():
        return False
    if not tmp_dir.name.startswith(TMP_PREFIX):
        raise ImportSourceError(
            f"Refusing to delete directory that doesn't match {TMP_PREFIX}* pattern: {tmp_dir}"
        )
    shutil.rmtree(tmp_dir)
    return True
