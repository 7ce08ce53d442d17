"""
Asset kinds and the naming rules shared by every component.

Two kinds of asset live in the library:

  command - a single markdown file with YAML frontmatter:
      ---
      description: Review the current diff
      ---
      Body text...

  skill - a directory holding a SKILL.md marker file and optional
      reference documents:
      my-skill/
        SKILL.md
        references/
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List

import frontmatter
import yaml

from libtoggle.errors import InvalidNameError

logger = logging.getLogger(__name__)

SKILL_MARKER = "SKILL.md"
COMMAND_SUFFIX = ".md"

# Names starting with this are hidden: dotfiles, .git, and the ._* resource
# fork files macOS drops on ExFAT volumes.
HIDDEN_PREFIX = "."
RESOURCE_FORK_PREFIX = "._"


class AssetKind(Enum):
    """The two asset kinds, each with its own canonical and runtime subtree."""

    COMMAND = "command"
    SKILL = "skill"

    @property
    def dirname(self) -> str:
        """Subdirectory name under both the library and runtime roots."""
        return f"{self.value}s"

    @property
    def is_directory(self) -> bool:
        return self is AssetKind.SKILL

    def matches(self, path: Path) -> bool:
        """Check whether a real (non-symlink) path has this kind's shape."""
        if self is AssetKind.SKILL:
            return path.is_dir()
        return path.is_file() and path.name.endswith(COMMAND_SUFFIX)


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def validate_name(name: str, what: str = "group") -> str:
    """Reject names that are empty, hidden, or could escape their directory.

    Args:
        name: Group name or asset identity
        what: Label used in the error message

    Returns:
        The name, unchanged

    Raises:
        InvalidNameError: If the name is unusable as a single path component
    """
    if not name or not name.strip():
        raise InvalidNameError(f"Empty {what} name")
    if "/" in name or "\\" in name or "\0" in name:
        raise InvalidNameError(f"Invalid {what} name '{name}': path separators are not allowed")
    if name in (".", ".."):
        raise InvalidNameError(f"Invalid {what} name '{name}': path traversal is not allowed")
    if is_hidden(name):
        raise InvalidNameError(f"Invalid {what} name '{name}': names may not start with '{HIDDEN_PREFIX}'")
    return name


def list_canonical_entries(kind: AssetKind, group_dir: Path) -> List[Path]:
    """
    Enumerate the assets of one group, sorted by name.

    Commands are the *.md regular files; skills are the immediate
    subdirectories. Hidden entries (including ._* artifacts) are skipped.
    A missing group directory has no entries.
    """
    if not group_dir.is_dir():
        return []

    entries = []
    for entry in group_dir.iterdir():
        if is_hidden(entry.name):
            continue
        if kind.matches(entry):
            entries.append(entry)
    return sorted(entries, key=lambda p: p.name)


def has_command_frontmatter(path: Path) -> bool:
    """Check if a markdown file opens with frontmatter holding a description field."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return False

    lines = content.split("\n")
    if not lines or lines[0].strip() != "---":
        return False

    try:
        post = frontmatter.loads(content)
    except (yaml.YAMLError, ValueError) as e:
        logger.warning(f"Invalid frontmatter in {path}: {e}")
        return False

    return "description" in post.metadata


def is_skill_dir(path: Path) -> bool:
    """A directory is a skill when its top level holds the marker file."""
    return path.is_dir() and (path / SKILL_MARKER).is_file()
