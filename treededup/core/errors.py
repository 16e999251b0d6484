"""Exceptions raised by the scanning, addressing and deletion phases"""

from typing import Optional


class TreeDedupError(Exception):
    """Base class for all TreeDedup errors"""


class ConfigError(TreeDedupError):
    """Invalid configuration"""


class _PathError(TreeDedupError):
    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message or path)


class ScanError(_PathError):
    """Metadata, listing or readlink failure; fatal to the whole run"""


class ContentReadError(_PathError):
    """A file's content could not be read, so its content id is unknown"""


class DeletionError(_PathError):
    """A path recorded in the snapshot could not be removed"""
