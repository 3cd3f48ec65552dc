"""patchkit: unified-diff parsing and hunk application."""

__version__ = "0.1.0"
