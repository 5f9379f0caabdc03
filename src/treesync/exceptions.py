"""Errors raised by treesync."""


class SyncError(Exception):
    """Base class for sync failures"""

    pass


class InvalidArgumentError(SyncError, ValueError):
    """Raised when an operation is called with arguments it cannot work with"""

    pass


class ConfigError(SyncError):
    """Raised when configuration values cannot be loaded or parsed"""

    pass


class AlreadyExistsError(SyncError, FileExistsError):
    """Raised when an ADD finds its destination already present"""

    pass


class CopyIncompleteError(SyncError, OSError):
    """Raised when a copied file's size differs from its source"""

    pass
