"""
Link Materializer - turns groups on and off by managing symlinks.

Source of truth: .library/<kind>s/<group>/<asset>
Symlinks:        .claude/<kind>s/<asset> -> ../../.library/<kind>s/<group>/<asset>

A link belongs to a group when the directory its target lives in IS the
group's canonical directory. Names are never matched as substrings, so
links into `bmad-extra` are not mistaken for links into `bmad`.
"""

import logging
import os
import shutil
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional

from libtoggle.config import LibraryPaths
from libtoggle.kinds import (
    AssetKind,
    RESOURCE_FORK_PREFIX,
    is_hidden,
    list_canonical_entries,
)
from libtoggle.logging import LibraryLogger
from libtoggle.registry import GroupRegistry

logger = logging.getLogger(__name__)


class CollisionPolicy(Enum):
    """What enable does when an asset's runtime name is already a symlink.

    KEEP_EXISTING: leave the existing link alone, whatever it points at.
        Enabling A then B keeps A's copy of a shared asset name.
    LAST_ENABLED_WINS: repoint links that belong to another group (or to
        no group). Enabling A then B ends with B's copy.

    A real file or directory in the way is replaced under either policy.
    """

    KEEP_EXISTING = "keep-existing"
    LAST_ENABLED_WINS = "last-enabled-wins"


# =============================================================================
# Link inspection helpers
# =============================================================================

def iter_links(runtime_dir: Path) -> Iterator[Path]:
    """Yield the non-hidden symlinks directly inside a runtime directory, sorted."""
    if not runtime_dir.is_dir():
        return
    for entry in sorted(runtime_dir.iterdir(), key=lambda p: p.name):
        if entry.is_symlink() and not is_hidden(entry.name):
            yield entry


def link_group_dir(link: Path) -> Path:
    """Real path of the directory holding a link's target."""
    target = os.readlink(link)
    return Path(os.path.realpath(os.path.join(link.parent, os.path.dirname(target))))


def link_belongs_to(link: Path, group_dir: Path) -> bool:
    """Check whether a symlink points at an entry directly inside group_dir."""
    try:
        return link_group_dir(link) == Path(os.path.realpath(group_dir))
    except OSError:
        return False


# =============================================================================
# Runtime directory housekeeping
# =============================================================================

def ensure_ignored(paths: LibraryPaths) -> List[str]:
    """
    Make sure both runtime directories are listed in the ignore file.

    Appends only the missing lines, never duplicates.

    Returns:
        The entries that were appended
    """
    wanted = [paths.ignore_entry(kind) for kind in AssetKind]

    content = paths.ignore_file.read_text() if paths.ignore_file.exists() else ""
    present = {line.strip().rstrip("/") for line in content.splitlines()}
    missing = [entry for entry in wanted if entry.rstrip("/") not in present]
    if not missing:
        return []

    if content and not content.endswith("\n"):
        content += "\n"
    content += "\n".join(missing) + "\n"
    paths.ignore_file.write_text(content)
    return missing


def purge_resource_forks(directory: Path) -> int:
    """
    Delete ._* files (macOS resource forks on ExFAT) under a runtime directory.

    Symlinked directories are not descended into, so canonical storage is
    never touched.

    Returns:
        Number of files removed
    """
    if not directory.is_dir():
        return 0

    removed = 0
    for dirpath, dirnames, filenames in os.walk(directory):
        candidates = filenames + [d for d in dirnames if os.path.islink(os.path.join(dirpath, d))]
        for name in candidates:
            if not name.startswith(RESOURCE_FORK_PREFIX):
                continue
            try:
                os.unlink(os.path.join(dirpath, name))
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove {os.path.join(dirpath, name)}: {e}")
    return removed


# =============================================================================
# Materializer
# =============================================================================

class LinkMaterializer:
    """Creates and removes the runtime links for the groups of one asset kind."""

    def __init__(
        self,
        paths: LibraryPaths,
        registry: GroupRegistry,
        policy: CollisionPolicy = CollisionPolicy.KEEP_EXISTING,
        event_log: Optional[LibraryLogger] = None,
    ):
        self.paths = paths
        self.registry = registry
        self.kind = registry.kind
        self.policy = policy
        self.event_log = event_log

    @property
    def runtime_dir(self) -> Path:
        return self.paths.runtime_root(self.kind)

    def link_target(self, canonical_entry: Path) -> str:
        """Relative symlink target from the runtime directory to a canonical entry."""
        return os.path.relpath(canonical_entry, self.runtime_dir)

    def create_link(self, identity: str, canonical_entry: Path) -> Path:
        """Create a single link; raises OSError (FileExistsError) if the name is taken."""
        link = self.runtime_dir / identity
        link.symlink_to(self.link_target(canonical_entry), target_is_directory=self.kind.is_directory)
        return link

    def enable(self, group: str) -> int:
        """
        Link every asset of a group into the runtime directory.

        Existing links are skipped (or repointed under LAST_ENABLED_WINS when
        they belong elsewhere). Real files and directories in the way are
        removed and replaced by the link. Per-asset filesystem errors are
        logged and skipped.

        Returns:
            Number of links created or replaced

        Raises:
            UnknownGroupError: If the group cannot be resolved
            InvalidNameError: If the group name is unusable
        """
        group_dir = self.registry.require(group)
        self._prepare()

        count = 0
        for entry in list_canonical_entries(self.kind, group_dir):
            link = self.runtime_dir / entry.name
            try:
                if link.is_symlink():
                    if not self._should_replace(link, group_dir):
                        continue
                    self._replace_link(link, self.link_target(entry))
                else:
                    if link.exists():
                        self._remove_real(link)
                    self.create_link(entry.name, entry)
            except OSError as e:
                logger.warning(f"Could not link {link} -> {entry}: {e}")
                continue
            count += 1

        self._finish()
        self._log("enable", f"Enabled {count} {group} {self.kind.dirname}", group, count)
        return count

    def disable(self, group: str) -> int:
        """
        Remove every runtime link that points into a group.

        Real files are never touched, and neither is canonical storage.

        Returns:
            Number of links removed
        """
        group_dir = self.registry.require(group)
        self._prepare()

        count = 0
        for link in list(iter_links(self.runtime_dir)):
            if not link_belongs_to(link, group_dir):
                continue
            try:
                link.unlink()
            except OSError as e:
                logger.warning(f"Could not remove link {link}: {e}")
                continue
            count += 1

        self._finish()
        self._log("disable", f"Disabled {count} {group} {self.kind.dirname}", group, count)
        return count

    def _should_replace(self, link: Path, group_dir: Path) -> bool:
        if self.policy is CollisionPolicy.KEEP_EXISTING:
            return False
        return not link_belongs_to(link, group_dir)

    def _replace_link(self, link: Path, target: str) -> None:
        """Swap a symlink's target in one rename so the name never disappears."""
        tmp_link = link.with_name(f".{link.name}.libtoggle-tmp")
        if tmp_link.is_symlink() or tmp_link.exists():
            tmp_link.unlink()
        tmp_link.symlink_to(target, target_is_directory=self.kind.is_directory)
        os.replace(tmp_link, link)

    def _remove_real(self, path: Path) -> None:
        logger.warning(f"Replacing real {'directory' if path.is_dir() else 'file'} {path} with a link")
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink()

    def _prepare(self) -> None:
        self.runtime_dir.mkdir(parents=True, exist_ok=True)
        added = ensure_ignored(self.paths)
        if added:
            logger.info(f"Added {', '.join(added)} to {self.paths.ignore_file.name}")

    def _finish(self) -> None:
        purge_resource_forks(self.runtime_dir)

    def _log(self, operation: str, message: str, group: str, count: int) -> None:
        if self.event_log is None:
            return
        self.event_log.log_event(operation, message, {
            "kind": self.kind.value,
            "group": group,
            "count": count,
            "root": str(self.paths.root),
        })
