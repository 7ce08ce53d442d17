"""
Library facade - one object per project root that wires the registry,
materializer, inspector and reconciler for both asset kinds.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from libtoggle.config import LibraryPaths, get_project_config
from libtoggle.inspector import DriftReport, GroupStatus, StateInspector
from libtoggle.kinds import AssetKind
from libtoggle.links import CollisionPolicy, LinkMaterializer
from libtoggle.logging import LibraryLogger
from libtoggle.organize import Reconciler
from libtoggle.registry import GroupRegistry, create_registry


class Library:
    """Canonical storage plus runtime links for one project."""

    def __init__(
        self,
        paths: LibraryPaths,
        registry: str = 'directory',
        collision_policy: CollisionPolicy = CollisionPolicy.KEEP_EXISTING,
        event_log: Optional[LibraryLogger] = None,
    ):
        self.paths = paths
        self.collision_policy = collision_policy
        self.event_log = event_log

        self.registries: Dict[AssetKind, GroupRegistry] = {
            kind: create_registry(paths, kind, registry) for kind in AssetKind
        }
        self.materializers = {
            kind: LinkMaterializer(paths, self.registries[kind], collision_policy, event_log)
            for kind in AssetKind
        }
        self.inspectors = {
            kind: StateInspector(paths, self.registries[kind]) for kind in AssetKind
        }
        self.reconciler = Reconciler(self.materializers, self.inspectors, event_log)

    @classmethod
    def from_config(cls, root: Path, cfg: Optional[Dict[str, Any]] = None) -> 'Library':
        """Build a Library from ~/.libtoggle/config.yaml plus the project's .libtoggle.yaml."""
        if cfg is None:
            cfg = get_project_config(root)
        try:
            policy = CollisionPolicy(cfg.get('collision_policy', CollisionPolicy.KEEP_EXISTING.value))
        except ValueError:
            raise ValueError(
                f"Unknown collision_policy '{cfg.get('collision_policy')}' "
                f"(use {', '.join(p.value for p in CollisionPolicy)})"
            ) from None

        log_dir = cfg.get('log_dir')
        return cls(
            LibraryPaths.from_config(root, cfg),
            registry=str(cfg.get('registry', 'directory')),
            collision_policy=policy,
            event_log=LibraryLogger(Path(log_dir).expanduser() if log_dir else None),
        )

    def resolve(self, kind: AssetKind, group: str) -> Path:
        return self.registries[kind].resolve(group)

    def enable(self, kind: AssetKind, group: str) -> int:
        return self.materializers[kind].enable(group)

    def disable(self, kind: AssetKind, group: str) -> int:
        return self.materializers[kind].disable(group)

    def status(self, kind: AssetKind) -> List[GroupStatus]:
        return self.inspectors[kind].status()

    def drift(self, kind: AssetKind) -> DriftReport:
        return self.inspectors[kind].drift()

    def scan(self):
        return self.reconciler.scan()

    def move(self, kind: AssetKind, identity: str, group: str):
        return self.reconciler.move(kind, identity, group)

    def register_group(self, kind: AssetKind, name: str):
        return self.reconciler.register_group(kind, name)

    def import_asset(self, kind: AssetKind, source: Path, identity: str, group: str) -> Path:
        return self.reconciler.import_asset(kind, source, identity, group)
