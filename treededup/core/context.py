"""
Content id allocation and interning
"""

import itertools
from typing import Dict

from .paths import NodeType


class InternTable:
    """Maps a content descriptor to the cid first assigned to it"""

    def __init__(self, context: "CidContext"):
        self._context = context
        self._cids: Dict[str, int] = {}

    def get(self, descriptor: str) -> int:
        cid = self._cids.get(descriptor)
        if cid is None:
            cid = self._context.new_cid()
            self._cids[descriptor] = cid
        return cid

    def __len__(self) -> int:
        return len(self._cids)


class CidContext:
    """
    Owns the cid counter and one interning table per kind of content.

    All tables draw from the same counter, so a cid never means two
    different things within one context. Every trivial node type (devices,
    pipes, sockets, unknown) gets one fixed cid when the context is made.
    Cids are only meaningful within the context that issued them.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self.type_cids: Dict[NodeType, int] = {
            node_type: self.new_cid() for node_type in NodeType if node_type.is_trivial
        }
        self.files = InternTable(self)
        self.directories = InternTable(self)
        self.symlinks = InternTable(self)

    def new_cid(self) -> int:
        return next(self._counter)

    def type_cid(self, node_type: NodeType) -> int:
        try:
            return self.type_cids[node_type]
        except KeyError:
            raise ValueError(f"{node_type.name} content is not identified by type") from None

    def intern_file(self, descriptor: str) -> int:
        return self.files.get(descriptor)

    def intern_directory(self, descriptor: str) -> int:
        return self.directories.get(descriptor)

    def intern_symlink(self, target: str) -> int:
        return self.symlinks.get(target)
