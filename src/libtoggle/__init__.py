"""libtoggle - switch groups of Claude commands and skills on and off with symlinks."""

__version__ = "0.3.0"
