#!/usr/bin/env python3
"""
Node model - In-memory snapshot of scanned filesystem trees

Nodes are created once by the scanner and given a content identifier once
by the addressing engine. After that the whole forest is read-only, and
deletion works against it rather than against the live filesystem.
"""

import os
import stat
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterator, Optional, Tuple


class NodePath:
    """
    To save memory on large trees, a path with a parent only stores its
    basename. The full path is rebuilt by following the parents. A path
    without a parent holds a full path string.
    """

    __slots__ = ("name", "parent")

    def __init__(self, name: str, parent: Optional["NodePath"] = None):
        self.name = name
        self.parent = parent

    def get(self) -> str:
        segments = []
        path: Optional[NodePath] = self
        while path is not None:
            segments.append(path.name)
            path = path.parent
        segments.reverse()
        return os.path.join(*segments)

    def join(self, name: str) -> str:
        return os.path.join(self.get(), name)

    def child(self, name: str) -> "NodePath":
        return NodePath(name, self)

    def __str__(self) -> str:
        return self.get()

    def __repr__(self) -> str:
        return f"NodePath({self.get()!r})"


class NodeType(Enum):
    """Closed set of filesystem entry kinds"""
    FILE = "file"
    DIRECTORY = "dir"
    SYMLINK = "link"
    BLOCK_DEVICE = "block"
    CHAR_DEVICE = "char"
    FIFO = "pipe"
    SOCKET = "socket"
    UNKNOWN = "unknown"

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "NodeType":
        """Classify an lstat() result"""
        mode = st.st_mode
        if stat.S_ISREG(mode):
            return cls.FILE
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISBLK(mode):
            return cls.BLOCK_DEVICE
        if stat.S_ISCHR(mode):
            return cls.CHAR_DEVICE
        if stat.S_ISFIFO(mode):
            return cls.FIFO
        if stat.S_ISSOCK(mode):
            return cls.SOCKET
        return cls.UNKNOWN

    @property
    def is_trivial(self) -> bool:
        """Types whose content is identified by the type alone"""
        return self not in (NodeType.FILE, NodeType.DIRECTORY, NodeType.SYMLINK)


@dataclass(frozen=True)
class Node:
    """One filesystem entry in the snapshot"""
    path: NodePath
    type: NodeType
    size: int = 0
    children: Tuple["Node", ...] = ()
    cid: Optional[int] = None

    @property
    def name(self) -> str:
        return self.path.name

    def with_cid(self, cid: int, children: Tuple["Node", ...]) -> "Node":
        """Return the addressed copy of this node"""
        if self.cid is not None:
            raise ValueError(f"Node already has a content id: {self.path}")
        return replace(self, cid=cid, children=children)


def traverse(node: Node) -> Iterator[Node]:
    """Yield a node and all of its descendants, parents before children"""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def deep_size(node: Node) -> int:
    """Total byte size of a node and all its descendants"""
    return sum(n.size for n in traverse(node))
