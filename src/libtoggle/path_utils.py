"""
Path utilities for the libtoggle CLI.

Finds the project root that holds the library so commands work from any
subdirectory of a project.
"""

import os
import subprocess
from pathlib import Path
from typing import Optional


def get_git_root(start_path: Optional[str] = None) -> Optional[str]:
    """Find git repository root from start_path (or cwd).

    Args:
        start_path: Directory to start search from (default: cwd)

    Returns:
        Git root path as string, or None if not in a git repository
    """
    if start_path is None:
        start_path = os.getcwd()

    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--show-toplevel'],
            cwd=start_path,
            capture_output=True,
            text=True,
            check=True
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def find_library_root(start_path: Optional[str] = None, library_dir: str = '.library') -> Optional[str]:
    """Find the directory holding the library by walking up from start_path (or cwd).

    Stops at the git root so a library in a parent checkout (or ~/.library)
    is never picked up for an unrelated repository.

    Args:
        start_path: Directory to start search from (default: cwd)
        library_dir: Name of the canonical storage directory

    Returns:
        Path to directory containing the library, or None if not found
    """
    if start_path is None:
        start_path = os.getcwd()

    current = Path(start_path).resolve()

    git_root = get_git_root(start_path)
    git_root_path = Path(git_root).resolve() if git_root else None

    while current != current.parent:
        if (current / library_dir).is_dir():
            return str(current)

        if git_root_path and current == git_root_path:
            return None

        current = current.parent

    return None


def resolve_project_root(explicit: Optional[str] = None, library_dir: str = '.library') -> Path:
    """Pick the project root: explicit path, then the nearest library, then git root, then cwd."""
    if explicit:
        return Path(explicit).expanduser().absolute()

    found = find_library_root(library_dir=library_dir)
    if found:
        return Path(found)

    git_root = get_git_root()
    if git_root:
        return Path(git_root)

    return Path.cwd()
