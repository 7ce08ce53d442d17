"""
Exceptions raised by the library core.

Every precondition failure is a LibraryError subclass so the CLI can report
it, log it and exit non-zero in one place.
"""


class LibraryError(Exception):
    """Base exception for library operations."""
    pass


class UnknownGroupError(LibraryError):
    """Raised when a group name has no canonical directory or registry entry."""

    def __init__(self, kind, group: str):
        self.kind = kind
        self.group = group
        super().__init__(f"Unknown {kind.value} group: {group}")


class AssetNotFoundError(LibraryError):
    """Raised when the asset to organize does not exist."""
    pass


class NotAssetError(LibraryError):
    """Raised when the source is already a symlink - nothing to organize."""
    pass


class CollisionError(LibraryError):
    """Raised when the destination identity is already occupied."""
    pass


class InvalidNameError(LibraryError):
    """Raised for empty, hidden or path-traversing group and asset names."""
    pass


class ImportSourceError(LibraryError):
    """Raised when a remote source cannot be parsed, cloned or located."""
    pass
