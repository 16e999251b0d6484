#!/usr/bin/env python3
"""
Tree Scanner - Build an in-memory snapshot of one or more filesystem trees

Symlinks are classified with lstat() and never followed. Directory entries
are sorted by name so that directory content descriptors are reproducible
across platforms. Any metadata or listing error aborts the whole scan.
"""

import logging
import os
from typing import Iterable, List, Optional, Union

from ..utils.formatting import format_bytes, format_number
from .errors import ScanError
from .paths import Node, NodePath, NodeType, traverse
from .stats import RunStats

logger = logging.getLogger(__name__)


def create_node(path: NodePath) -> Node:
    """Scan one path and, for directories, everything below it"""
    full_path = path.get()
    try:
        st = os.lstat(full_path)
    except OSError as e:
        raise ScanError(full_path, f"Cannot stat {full_path}: {e}") from e

    node_type = NodeType.from_stat(st)
    size = st.st_size if node_type is NodeType.FILE else 0

    children = ()
    if node_type is NodeType.DIRECTORY:
        try:
            names = sorted(os.listdir(full_path))
        except OSError as e:
            raise ScanError(full_path, f"Cannot list {full_path}: {e}") from e
        children = tuple(create_node(path.child(name)) for name in names)

    return Node(path=path, type=node_type, size=size, children=children)


def _physical_path(path: str) -> str:
    """Resolve the parent directories of path but not path itself"""
    path = os.path.abspath(path)
    head, tail = os.path.split(path)
    return os.path.join(os.path.realpath(head), tail)


def check_roots(paths: List[NodePath]) -> None:
    """Reject roots that repeat or contain one another

    The same entry reached through two roots would be reported as its own
    duplicate, and keeping one copy would delete it.
    """
    resolved = [(path.get(), _physical_path(path.get())) for path in paths]
    for i, (path, physical) in enumerate(resolved):
        for other_path, other in resolved[:i]:
            if physical == other:
                raise ScanError(path, f"{path} is listed more than once (same as {other_path})")
            try:
                common = os.path.commonpath([physical, other])
            except ValueError:  # different drives
                continue
            if common in (physical, other):
                raise ScanError(path, f"{path} and {other_path} overlap; scan roots must be disjoint")


def scan(paths: Iterable[Union[str, NodePath]], stats: Optional[RunStats] = None) -> List[Node]:
    """Scan each root path and return one node tree per root"""
    stats = stats if stats is not None else RunStats()
    paths = [path if isinstance(path, NodePath) else NodePath(os.path.normpath(str(path)))
             for path in paths]
    check_roots(paths)

    roots = []
    count = 0
    size = 0

    for path in paths:
        logger.info(f"Scanning {path.get()}")
        root = create_node(path)

        for node in traverse(root):
            count += 1
            size += node.size
            if node.type is NodeType.FILE:
                stats.files_discovered += 1
        roots.append(root)

    stats.nodes_discovered += count
    stats.bytes_discovered += size
    logger.info(f"Found {format_number(count)} files, {format_bytes(size)}")
    return roots
