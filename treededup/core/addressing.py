#!/usr/bin/env python3
"""
Content-Addressing Engine - Give every node a content id

Two nodes end up with the same cid exactly when they are recursively
content-equivalent:

- regular files: same bytes (via the content reader)
- directories: same (cid, name) listing of non-ignored children, in order
- symlinks: same link target
- everything else: same node type

The work is split in three steps. Planning walks the whole forest and
registers every regular file with the content reader without waiting on
anything. The reader then runs once over the complete workload. Finally the
plans are evaluated bottom-up, now that every file cid is known.
"""

import logging
import os
from concurrent.futures import Future
from typing import Iterable, List, Optional, Tuple

from ..utils.ignore_rules import IgnoreRules
from .content_reader import ContentReader
from .context import CidContext
from .errors import ContentReadError, ScanError
from .paths import Node, NodeType

logger = logging.getLogger(__name__)

DIR_CID_WIDTH = 20


def directory_descriptor(children: Iterable[Node], ignore_rules: Optional[IgnoreRules] = None) -> str:
    """One '<cid> <name>' line per non-ignored child, in scan order"""
    lines = []
    for child in children:
        if ignore_rules is not None and ignore_rules.is_ignored(child):
            continue
        lines.append(f"{str(child.cid):<{DIR_CID_WIDTH}} {child.name}\n")
    return "".join(lines)


class _Plan:
    """A node whose cid is not computed yet"""

    __slots__ = ("node", "children", "pending", "cid")

    def __init__(self, node: Node, children: Tuple["_Plan", ...] = (),
                 pending: Optional[Future] = None, cid: Optional[int] = None):
        self.node = node
        self.children = children
        self.pending = pending
        self.cid = cid


class ContentAddresser:
    """Assigns content ids to scanned forests"""

    def __init__(self, context: Optional[CidContext] = None,
                 reader: Optional[ContentReader] = None,
                 ignore_rules: Optional[IgnoreRules] = None):
        self.context = context or CidContext()
        self.reader = reader or ContentReader(self.context)
        self.ignore_rules = ignore_rules or IgnoreRules()
        if self.reader.context is not self.context:
            raise ValueError("Content reader must share the addressing context")

    def address(self, roots: List[Node]) -> List[Node]:
        """Return the forest with every node's cid populated"""
        plans = [self._plan(root) for root in roots]
        logger.debug(f"Registered {len(self.reader.pending):,} files for reading")

        self.reader.run()

        return [self._evaluate(plan) for plan in plans]

    def _plan(self, node: Node) -> _Plan:
        if node.type is NodeType.FILE:
            return _Plan(node, pending=self.reader.register(node))

        if node.type is NodeType.DIRECTORY:
            return _Plan(node, children=tuple(self._plan(child) for child in node.children))

        if node.type is NodeType.SYMLINK:
            full_path = node.path.get()
            try:
                target = os.readlink(full_path)
            except OSError as e:
                raise ScanError(full_path, f"Cannot read link {full_path}: {e}") from e
            return _Plan(node, cid=self.context.intern_symlink(target))

        return _Plan(node, cid=self.context.type_cid(node.type))

    def _evaluate(self, plan: _Plan) -> Node:
        node = plan.node

        if plan.pending is not None:
            if not plan.pending.done():
                raise RuntimeError(f"Content of {node.path} was never read")
            exc = plan.pending.exception()
            if exc is not None:
                if isinstance(exc, ContentReadError):
                    raise exc
                raise ContentReadError(node.path.get(), f"Cannot read {node.path}: {exc}") from exc
            return node.with_cid(plan.pending.result(), ())

        if node.type is NodeType.DIRECTORY:
            children = tuple(self._evaluate(child) for child in plan.children)
            cid = self.context.intern_directory(directory_descriptor(children, self.ignore_rules))
            return node.with_cid(cid, children)

        return node.with_cid(plan.cid, node.children)


def address(roots: List[Node], context: Optional[CidContext] = None,
            reader: Optional[ContentReader] = None,
            ignore_rules: Optional[IgnoreRules] = None) -> List[Node]:
    """Convenience wrapper around ContentAddresser"""
    return ContentAddresser(context, reader, ignore_rules).address(roots)
