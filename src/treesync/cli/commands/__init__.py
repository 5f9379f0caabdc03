"""CLI commands for treesync."""

from . import sync

__all__ = ["sync"]
