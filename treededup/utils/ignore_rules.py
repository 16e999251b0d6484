"""
Ignore rules for directory content descriptors

An ignored entry is still scanned and can still be reported as a duplicate
on its own; it is only left out when its parent directory's content is
described, so e.g. a stray .DS_Store does not make two folders differ.
"""

import fnmatch
import os
from typing import Iterable, Optional, Set

from ..core.paths import Node

DEFAULT_IGNORE_PATTERNS: Set[str] = {
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
}


class IgnoreRules:
    """Match entry names against fnmatch-style patterns"""

    def __init__(self, patterns: Optional[Iterable[str]] = None, use_defaults: bool = True):
        self.patterns: Set[str] = set(DEFAULT_IGNORE_PATTERNS) if use_defaults else set()
        if patterns:
            self.patterns.update(patterns)

    def is_ignored_name(self, name: str) -> bool:
        name = os.path.normcase(name)
        return any(fnmatch.fnmatch(name, os.path.normcase(p)) for p in self.patterns)

    def is_ignored(self, node: Node) -> bool:
        return self.is_ignored_name(node.name)
