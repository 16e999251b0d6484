#!/usr/bin/env python3
"""
Interactive Duplicate Cleaner - Human-in-the-loop removal of duplicate subtrees

The operator walks through duplicate groups one at a time and either keeps
one copy, deletes every copy, or moves on. Deletion only ever touches paths
recorded in the scan snapshot: children are removed first, then the node
itself, and directories are removed with a plain rmdir. If a directory has
gained entries since the scan, the rmdir fails instead of taking the new
content with it.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..core.errors import DeletionError
from ..core.grouping import DuplicateGroup, summarize
from ..core.paths import Node, NodeType
from .formatting import format_bytes, format_number

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], str]
OutputFunc = Callable[[str], None]


def remove_recursive(node: Node, output_func: OutputFunc = print, dry_run: bool = False) -> int:
    """Delete a snapshot subtree bottom-up; returns the number of paths removed"""
    removed = 0
    for child in node.children:
        removed += remove_recursive(child, output_func, dry_run)

    path = node.path.get()
    action = "rmdir" if node.type is NodeType.DIRECTORY else "unlink"
    if dry_run:
        output_func(f"[DRY RUN] {action} {path}")
        return removed + 1

    output_func(f"{action} {path}")
    try:
        if node.type is NodeType.DIRECTORY:
            os.rmdir(path)
        else:
            os.unlink(path)
    except OSError as e:
        raise DeletionError(path, f"Failed to {action} {path}: {e}") from e
    return removed + 1


class Intent(Enum):
    """What the driving loop should do after an action"""
    REMOVE_CURRENT = "remove_current"
    ADVANCE = "advance"
    RETREAT = "retreat"
    STOP = "stop"
    STAY = "stay"


@dataclass
class ResolverState:
    groups: List[DuplicateGroup] = field(default_factory=list)
    index: int = 0
    terminated: bool = False
    quit: bool = False

    def apply(self, intent: Intent) -> None:
        if intent is Intent.REMOVE_CURRENT:
            # The index now points at the group that followed
            del self.groups[self.index]
        elif intent is Intent.ADVANCE:
            self.index += 1
        elif intent is Intent.RETREAT:
            self.index -= 1
        elif intent is Intent.STOP:
            self.quit = True
        if self.quit or not self.groups:
            self.terminated = True
        else:
            self.index %= len(self.groups)


Option = Tuple[str, Callable[[], Intent]]


class InteractiveCleaner:
    """Present duplicate groups and apply the operator's choices"""

    def __init__(self, groups: List[DuplicateGroup], input_func: Optional[InputFunc] = None,
                 output_func: Optional[OutputFunc] = None, dry_run: bool = False):
        self.state = ResolverState(groups=groups)
        self.input_func = input_func or input
        self.output_func = output_func or print
        self.dry_run = dry_run
        self.removed_paths = 0

    def display_summary(self) -> None:
        count, wasted = summarize(self.state.groups)
        self.output_func("")
        self.output_func(f"Found {format_number(count)} duplicate sets, {format_bytes(wasted)} duplicated")
        if self.dry_run:
            self.output_func("Mode: DRY RUN (nothing will be deleted)")

    def display_group(self, group: DuplicateGroup) -> None:
        state = self.state
        info = f"{group.type.value} {group.cid}"
        self.output_func("")
        self.output_func(
            f"{state.index + 1}/{len(state.groups)}: {info} "
            f"({group.count} copies, {format_bytes(group.wasted_space)} duplicated)"
        )

    def build_options(self, group: DuplicateGroup) -> Dict[str, Option]:
        options: Dict[str, Option] = {}
        for i, node in enumerate(group.nodes):
            options[str(i + 1)] = (
                f'Keep only "{node.path.get()}"',
                lambda keep=i: self.keep_only(group, keep),
            )
        options["D"] = ("Delete ALL", lambda: self.delete_all(group))
        options["n"] = ("Next duplicate", lambda: Intent.ADVANCE)
        options["p"] = ("Previous duplicate", lambda: Intent.RETREAT)
        options["q"] = ("Quit", lambda: Intent.STOP)
        return options

    def choose(self, options: Dict[str, Option]) -> Intent:
        """Prompt until a valid option is picked; end of input quits"""
        lines = ["Please select an option:"]
        lines.extend(f"  {key}: {name}" for key, (name, _) in options.items())
        question = "\n".join(lines) + "\n> "

        while True:
            try:
                response = self.input_func(question)
            except EOFError:
                return Intent.STOP
            option = options.get(response.strip())
            if option is not None:
                return option[1]()

    def keep_only(self, group: DuplicateGroup, keep: int) -> Intent:
        return self._remove(node for i, node in enumerate(group.nodes) if i != keep)

    def delete_all(self, group: DuplicateGroup) -> Intent:
        return self._remove(group.nodes)

    def _remove(self, nodes) -> Intent:
        try:
            for node in nodes:
                self.removed_paths += remove_recursive(node, self.output_func, self.dry_run)
        except DeletionError as e:
            logger.error(str(e))
            self.output_func(f"ERROR: {e}")
            self.output_func("Action incomplete; the group was kept.")
            return Intent.STAY
        return Intent.REMOVE_CURRENT

    def run(self) -> bool:
        """Run the loop; returns True if every group was resolved"""
        state = self.state
        self.display_summary()
        state.terminated = not state.groups

        while not state.terminated:
            group = state.groups[state.index]
            self.display_group(group)
            state.apply(self.choose(self.build_options(group)))

        self.output_func("")
        self.output_func("Quit" if state.quit else "DONE")
        return not state.quit
