"""Lightweight configuration loader for libtoggle.

Reads optional settings from ~/.libtoggle/config.yaml with safe defaults.
A project can override any key with a .libtoggle.yaml file at its root.

Supported keys:
- library_dir: canonical storage directory, relative to the project root (default: '.library')
- runtime_dir: directory Claude Code reads from, relative to the project root (default: '.claude')
- ignore_file: ignore file the runtime directories are added to (default: '.gitignore')
- registry: group registry strategy - 'directory' or 'static' (default: 'directory')
- collision_policy: 'keep-existing' or 'last-enabled-wins' (default: 'keep-existing')
- log_dir: directory for operation logs (default: ~/.libtoggle/logs)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from libtoggle.kinds import AssetKind

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = '.libtoggle.yaml'

_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def _defaults() -> Dict[str, Any]:
    home = Path.home()
    return {
        'library_dir': '.library',
        'runtime_dir': '.claude',
        'ignore_file': '.gitignore',
        'registry': 'directory',
        'collision_policy': 'keep-existing',
        'log_dir': str(home / '.libtoggle' / 'logs'),
    }


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping, treating missing, malformed or non-dict files as empty."""
    if not path.exists():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text())
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return {}
    if isinstance(loaded, dict):
        return loaded
    return {}


def get_config() -> Dict[str, Any]:
    """Load the user config.yaml once and cache the result."""
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    data = _load_yaml(Path.home() / '.libtoggle' / 'config.yaml')

    # Merge defaults where missing
    merged = {**_defaults(), **data}
    _CONFIG_CACHE = merged
    return merged


def get_project_config(root: Path) -> Dict[str, Any]:
    """User config with the project's .libtoggle.yaml layered on top."""
    return {**get_config(), **_load_yaml(Path(root) / PROJECT_CONFIG_NAME)}


@dataclass(frozen=True)
class LibraryPaths:
    """
    Filesystem layout of one project.

    All components take their roots from here instead of assuming the
    current directory, so tests can point everything at a tmp_path.
    """
    root: Path
    library_dir: Path
    runtime_dir: Path
    ignore_file: Path

    @classmethod
    def for_root(
        cls,
        root: Path,
        library_dir: str = '.library',
        runtime_dir: str = '.claude',
        ignore_file: str = '.gitignore',
    ) -> 'LibraryPaths':
        root = Path(root).expanduser().absolute()
        return cls(
            root=root,
            library_dir=root / library_dir,
            runtime_dir=root / runtime_dir,
            ignore_file=root / ignore_file,
        )

    @classmethod
    def from_config(cls, root: Path, cfg: Optional[Dict[str, Any]] = None) -> 'LibraryPaths':
        if cfg is None:
            cfg = get_project_config(root)
        return cls.for_root(
            root,
            library_dir=str(cfg.get('library_dir', '.library')),
            runtime_dir=str(cfg.get('runtime_dir', '.claude')),
            ignore_file=str(cfg.get('ignore_file', '.gitignore')),
        )

    def canonical_root(self, kind: AssetKind) -> Path:
        """Library subtree holding one directory per group, e.g. .library/commands."""
        return self.library_dir / kind.dirname

    def runtime_root(self, kind: AssetKind) -> Path:
        """Flat runtime directory holding the links, e.g. .claude/commands."""
        return self.runtime_dir / kind.dirname

    def ignore_entry(self, kind: AssetKind) -> str:
        """Ignore-file pattern for a runtime directory, relative to the root."""
        try:
            rel = self.runtime_root(kind).relative_to(self.root)
        except ValueError:
            rel = self.runtime_root(kind)
        return rel.as_posix()

    @property
    def registry_file(self) -> Path:
        """Data file backing the static registry."""
        return self.library_dir / 'registry.yaml'
