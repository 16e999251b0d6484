"""
TreeDedup Core Modules

Snapshot model, tree scanning, batched content reading, content addressing
and duplicate grouping.
"""

from . import paths
from . import scanner
from . import content_reader
from . import addressing
from . import grouping

__all__ = [
    "paths",
    "scanner",
    "content_reader",
    "addressing",
    "grouping",
]
