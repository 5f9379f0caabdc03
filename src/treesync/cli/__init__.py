"""Command line interface for treesync."""
