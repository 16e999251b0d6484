#!/usr/bin/env python3
"""
Duplicate Detector - Find maximal duplicate subtrees

Groups are reported at the coarsest granularity: once a node's cid is known
to occur more than once, the node is claimed as a whole and its children are
not looked at. A duplicated directory therefore shows up once per copy,
never once per duplicated file inside it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from .paths import Node, NodeType, deep_size, traverse

logger = logging.getLogger(__name__)


@dataclass
class DuplicateGroup:
    """Two or more nodes sharing one cid, none inside another"""
    cid: int
    nodes: List[Node] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.nodes)

    @property
    def representative(self) -> Node:
        return self.nodes[0]

    @property
    def type(self) -> NodeType:
        return self.representative.type

    @property
    def deep_size(self) -> int:
        if not self.nodes:
            return 0
        return deep_size(self.representative)

    @property
    def wasted_space(self) -> int:
        """Space recovered by keeping exactly one copy"""
        if not self.nodes:
            return 0
        return self.deep_size * (self.count - 1)

    @property
    def paths(self) -> List[str]:
        return [node.path.get() for node in self.nodes]


def find_duplicate_cids(roots: Iterable[Node]) -> Set[int]:
    """Cids that occur on more than one node anywhere in the forest"""
    once: Set[int] = set()
    many: Set[int] = set()
    for root in roots:
        for node in traverse(root):
            if node.cid is None:
                raise ValueError(f"Node has no content id: {node.path}")
            if node.cid in once:
                many.add(node.cid)
            else:
                once.add(node.cid)
    return many


def gather_duplicates(roots: List[Node]) -> List[DuplicateGroup]:
    """Claim duplicate nodes top-down, never descending into a claimed node"""
    dups = find_duplicate_cids(roots)
    groups: Dict[int, DuplicateGroup] = {}

    for root in roots:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.cid in dups:
                groups.setdefault(node.cid, DuplicateGroup(node.cid)).nodes.append(node)
            else:
                stack.extend(reversed(node.children))

    return [group for group in groups.values() if group.count > 1]


def find_duplicates(roots: List[Node]) -> List[DuplicateGroup]:
    """Maximal duplicate groups, largest reclaimable size first"""
    groups = gather_duplicates(roots)
    groups.sort(key=lambda g: g.wasted_space, reverse=True)
    logger.debug(f"Found {len(groups)} duplicate groups")
    return groups


def summarize(groups: Iterable[DuplicateGroup]) -> Tuple[int, int]:
    """(number of groups, total reclaimable bytes)"""
    count = 0
    wasted = 0
    for group in groups:
        count += 1
        wasted += group.wasted_space
    return count, wasted
