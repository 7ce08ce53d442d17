"""
State Inspector - reports how much of each group is linked, and drift.

Drift is anything that breaks the "runtime directory holds only links into
the library" rule:
  - stray: a real file or directory dropped into the runtime directory
  - broken: a link whose target no longer exists
  - orphan: a link pointing outside every known group
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from libtoggle.config import LibraryPaths
from libtoggle.kinds import AssetKind, is_hidden, list_canonical_entries
from libtoggle.links import iter_links, link_belongs_to
from libtoggle.registry import GroupRegistry

logger = logging.getLogger(__name__)


@dataclass
class GroupStatus:
    """Linked vs available assets for one group.

    active > 0 with active < total is a normal partial state: some assets
    were unlinked by hand or never linked.
    """
    name: str
    active: int
    total: int

    @property
    def enabled(self) -> bool:
        return self.active > 0


@dataclass
class DriftReport:
    """Runtime entries that are not healthy links into a known group."""
    kind: AssetKind
    stray: List[str] = field(default_factory=list)
    broken: List[str] = field(default_factory=list)
    orphan: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.stray or self.broken or self.orphan)


class StateInspector:
    """Read-only view of link state for one asset kind."""

    def __init__(self, paths: LibraryPaths, registry: GroupRegistry):
        self.paths = paths
        self.registry = registry
        self.kind = registry.kind

    @property
    def runtime_dir(self) -> Path:
        return self.paths.runtime_root(self.kind)

    def count_active(self, group: str) -> int:
        """Links into the group whose targets still exist."""
        group_dir = self.registry.resolve(group)
        return sum(
            1 for link in iter_links(self.runtime_dir)
            if link.exists() and link_belongs_to(link, group_dir)
        )

    def count_total(self, group: str) -> int:
        """Assets stored in the group."""
        return len(list_canonical_entries(self.kind, self.registry.resolve(group)))

    def status(self) -> List[GroupStatus]:
        """Active/total counts for every known group, in registry order."""
        return [
            GroupStatus(name=group, active=self.count_active(group), total=self.count_total(group))
            for group in self.registry.groups()
        ]

    def stray_entries(self) -> List[Path]:
        """Real (non-symlink) runtime entries that have this kind's shape."""
        if not self.runtime_dir.is_dir():
            return []
        return sorted(
            (entry for entry in self.runtime_dir.iterdir()
             if not entry.is_symlink() and not is_hidden(entry.name) and self.kind.matches(entry)),
            key=lambda p: p.name,
        )

    def drift(self) -> DriftReport:
        report = DriftReport(kind=self.kind)
        report.stray = [entry.name for entry in self.stray_entries()]

        group_dirs = [self.registry.resolve(group) for group in self.registry.groups()]
        for link in iter_links(self.runtime_dir):
            if not link.exists():
                report.broken.append(link.name)
            elif not any(link_belongs_to(link, group_dir) for group_dir in group_dirs):
                report.orphan.append(link.name)

        return report

    def prune_broken(self) -> List[str]:
        """Remove links whose targets are gone. Returns the removed names."""
        removed = []
        for link in list(iter_links(self.runtime_dir)):
            if link.exists():
                continue
            try:
                link.unlink()
            except OSError as e:
                logger.warning(f"Could not remove broken link {link}: {e}")
                continue
            removed.append(link.name)
        return removed
