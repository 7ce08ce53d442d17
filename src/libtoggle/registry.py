"""
Group Registry - maps group names to canonical storage directories.

Two strategies:

  DirectoryRegistry - a group exists when its directory exists under
      .library/<kind>s/. Registering a group is just mkdir.

  StaticRegistry - groups are listed in .library/registry.yaml:
      commands:
        - bmad
        - speckit
      skills:
        - marketing
      The list order is also the order `status` reports groups in.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import yaml

from libtoggle.config import LibraryPaths
from libtoggle.errors import InvalidNameError, UnknownGroupError
from libtoggle.kinds import AssetKind, is_hidden, validate_name

logger = logging.getLogger(__name__)


def usable_names(names: Iterable[str], source: Path) -> List[str]:
    """Drop names that cannot be used as a group directory, warning about each."""
    usable = []
    for name in names:
        try:
            validate_name(name)
        except InvalidNameError as e:
            logger.warning(f"Skipping group from {source}: {e}")
            continue
        usable.append(name)
    return usable


class GroupRegistry(ABC):
    """Resolves group names of one asset kind to canonical directories."""

    def __init__(self, paths: LibraryPaths, kind: AssetKind):
        self.paths = paths
        self.kind = kind

    @property
    def canonical_root(self) -> Path:
        return self.paths.canonical_root(self.kind)

    @abstractmethod
    def groups(self) -> List[str]:
        """Known group names, in reporting order."""

    @abstractmethod
    def resolve(self, group: str) -> Path:
        """Map a group name to its canonical directory.

        Raises:
            InvalidNameError: For empty, hidden or traversing names
            UnknownGroupError: If the registry has no entry for the name
        """

    def require(self, group: str) -> Path:
        """Resolve a group and insist its directory exists."""
        group_dir = self.resolve(group)
        if not group_dir.is_dir():
            raise UnknownGroupError(self.kind, group)
        return group_dir

    def register(self, group: str) -> Tuple[Path, bool]:
        """Create the group's directory if needed and record the group.

        Returns:
            (group directory, True if the directory was created)
        """
        validate_name(group)
        group_dir = self.canonical_root / group
        created = not group_dir.is_dir()
        group_dir.mkdir(parents=True, exist_ok=True)
        self._record(group)
        return group_dir, created

    def _record(self, group: str) -> None:
        """Persist a newly registered group. Directory presence is enough by default."""
        pass


class DirectoryRegistry(GroupRegistry):
    """Registry discovered from the subdirectories of the canonical root."""

    def groups(self) -> List[str]:
        root = self.canonical_root
        if not root.is_dir():
            return []
        names = [
            entry.name for entry in root.iterdir()
            if entry.is_dir() and not is_hidden(entry.name)
        ]
        return sorted(usable_names(names, root))

    def resolve(self, group: str) -> Path:
        validate_name(group)
        return self.canonical_root / group


class StaticRegistry(GroupRegistry):
    """Registry backed by an ordered list of group names in a YAML data file."""

    def __init__(self, paths: LibraryPaths, kind: AssetKind):
        super().__init__(paths, kind)
        self.registry_file = paths.registry_file
        self._groups: List[str] = usable_names(self._load().get(kind.dirname, []), self.registry_file)

    def _load(self) -> Dict[str, List[str]]:
        if not self.registry_file.exists():
            return {}
        try:
            data = yaml.safe_load(self.registry_file.read_text())
        except yaml.YAMLError as e:
            logger.warning(f"Invalid registry file {self.registry_file}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}

        result = {}
        for key, names in data.items():
            if isinstance(names, list):
                result[str(key)] = [str(n) for n in names]
        return result

    def groups(self) -> List[str]:
        return list(self._groups)

    def resolve(self, group: str) -> Path:
        validate_name(group)
        if group not in self._groups:
            raise UnknownGroupError(self.kind, group)
        return self.canonical_root / group

    def _record(self, group: str) -> None:
        if group in self._groups:
            return
        self._groups.append(group)

        # Re-read so the other kind's list written by another instance survives
        data = self._load()
        data[self.kind.dirname] = list(self._groups)
        self.registry_file.parent.mkdir(parents=True, exist_ok=True)
        self.registry_file.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=True))


REGISTRY_TYPES = {
    'directory': DirectoryRegistry,
    'static': StaticRegistry,
}


def create_registry(paths: LibraryPaths, kind: AssetKind, strategy: str = 'directory') -> GroupRegistry:
    """Build the registry for a kind from its strategy name."""
    try:
        registry_cls = REGISTRY_TYPES[strategy]
    except KeyError:
        raise ValueError(
            f"Unknown registry strategy '{strategy}' (use {', '.join(sorted(REGISTRY_TYPES))})"
        ) from None
    return registry_cls(paths, kind)
