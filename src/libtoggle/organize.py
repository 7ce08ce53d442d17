"""
Reconciler - moves real files dropped into the runtime tree into the library.

    .claude/commands/stray.md          (real file)
        -> .library/commands/demo/stray.md
    .claude/commands/stray.md -> ../../.library/commands/demo/stray.md

Also registers new groups (auto-enabling them) and copies imported assets
into canonical storage.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from libtoggle.errors import (
    AssetNotFoundError,
    CollisionError,
    NotAssetError,
)
from libtoggle.inspector import StateInspector
from libtoggle.kinds import AssetKind, validate_name
from libtoggle.links import LinkMaterializer
from libtoggle.logging import LibraryLogger

logger = logging.getLogger(__name__)


@dataclass
class StrayItem:
    """A real file or directory sitting in a runtime directory."""
    kind: AssetKind
    identity: str
    is_dir: bool


@dataclass
class ScanReport:
    items: List[StrayItem]
    groups: Dict[AssetKind, List[str]]


@dataclass
class MoveResult:
    kind: AssetKind
    identity: str
    group: str
    destination: Path
    link: Path
    link_target: str


@dataclass
class RegisterResult:
    kind: AssetKind
    name: str
    path: Path
    created: bool
    linked: int


class Reconciler:
    """Brings stray runtime entries and new groups under library management."""

    def __init__(
        self,
        materializers: Dict[AssetKind, LinkMaterializer],
        inspectors: Dict[AssetKind, StateInspector],
        event_log: Optional[LibraryLogger] = None,
    ):
        self.materializers = materializers
        self.inspectors = inspectors
        self.event_log = event_log

    def scan(self) -> ScanReport:
        """List unorganized runtime entries of both kinds, plus the groups they could go to."""
        items = []
        groups = {}
        for kind in AssetKind:
            for entry in self.inspectors[kind].stray_entries():
                items.append(StrayItem(kind=kind, identity=entry.name, is_dir=entry.is_dir()))
            groups[kind] = self.materializers[kind].registry.groups()
        return ScanReport(items=items, groups=groups)

    def move(self, kind: AssetKind, identity: str, group: str) -> MoveResult:
        """
        Relocate a real runtime entry into a group and link it back in place.

        Raises:
            InvalidNameError: Unusable identity or group name
            AssetNotFoundError: Nothing of this kind at the runtime location
            NotAssetError: The runtime entry is already a symlink
            UnknownGroupError: The group has not been registered
            CollisionError: The group already holds an asset with this name
        """
        validate_name(identity, what=kind.value)
        validate_name(group)

        materializer = self.materializers[kind]
        source = materializer.runtime_dir / identity

        if not source.exists() and not source.is_symlink():
            raise AssetNotFoundError(f"{kind.value.capitalize()} not found: {source}")
        if source.is_symlink():
            raise NotAssetError(f"{identity} is already a symlink - nothing to move")
        if not kind.matches(source):
            shape = "directory" if kind.is_directory else "markdown file"
            raise AssetNotFoundError(f"{source} is not a {kind.value} {shape}")

        group_dir = materializer.registry.require(group)
        destination = group_dir / identity
        if destination.exists() or destination.is_symlink():
            raise CollisionError(f"{identity} already exists in {group}")

        shutil.move(str(source), str(destination))
        try:
            link = materializer.create_link(identity, destination)
        except OSError as e:
            # The asset is safe in the library; `enable` will link it later
            logger.error(f"Moved {identity} to {destination} but could not link it back: {e}")
            if self.event_log is not None:
                self.event_log.log_error("move", f"Moved {identity} into {group} but could not link it", {
                    "kind": kind.value,
                    "identity": identity,
                    "group": group,
                    "destination": str(destination),
                    "reason": str(e),
                })
            raise

        result = MoveResult(
            kind=kind,
            identity=identity,
            group=group,
            destination=destination,
            link=link,
            link_target=materializer.link_target(destination),
        )
        self._log("move", f"Moved {identity} into {group}", {
            "kind": kind.value,
            "identity": identity,
            "group": group,
            "destination": str(destination),
        })
        return result

    def register_group(self, kind: AssetKind, name: str) -> RegisterResult:
        """Create a group (no-op if it exists), record it, and enable it."""
        materializer = self.materializers[kind]
        path, created = materializer.registry.register(name)
        linked = materializer.enable(name)

        self._log("register", f"Registered {kind.value} group {name}", {
            "kind": kind.value,
            "group": name,
            "created": created,
            "linked": linked,
        })
        return RegisterResult(kind=kind, name=name, path=path, created=created, linked=linked)

    def import_asset(self, kind: AssetKind, source: Path, identity: str, group: str) -> Path:
        """
        Copy an external asset into a group's canonical directory.

        Nothing is linked; enable the group afterwards to activate it.

        Returns:
            Path of the new canonical entry
        """
        validate_name(identity, what=kind.value)
        validate_name(group)

        source = Path(source)
        if kind.is_directory and not source.is_dir():
            raise AssetNotFoundError(f"Skill directory not found: {source}")
        if not kind.is_directory and not source.is_file():
            raise AssetNotFoundError(f"Command file not found: {source}")

        group_dir, _ = self.materializers[kind].registry.register(group)
        destination = group_dir / identity
        if destination.exists() or destination.is_symlink():
            raise CollisionError(f"{identity} already exists in {group}")

        if kind.is_directory:
            shutil.copytree(source, destination, symlinks=True)
        else:
            shutil.copy2(source, destination)

        self._log("import", f"Imported {identity} into {group}", {
            "kind": kind.value,
            "identity": identity,
            "group": group,
            "source": str(source),
        })
        return destination

    def _log(self, operation: str, message: str, data: dict) -> None:
        if self.event_log is not None:
            self.event_log.log_event(operation, message, data)
