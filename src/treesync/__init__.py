"""treesync - mirror a source directory tree onto a destination tree."""

__version__ = "0.1.0"
