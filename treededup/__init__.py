"""
TreeDedup - Duplicate file and directory tree finder

Scans filesystem trees, gives every node a content identifier, reports
duplicates at the coarsest granularity and lets the operator reclaim space.
"""

__version__ = "1.0.0"
__author__ = "TreeDedup Team"
__license__ = "MIT"

from .core import addressing, content_reader, grouping, scanner

__all__ = [
    "addressing",
    "content_reader",
    "grouping",
    "scanner",
]
