from pathlib import Path
from typing import Dict, List, Union

import pytest

from treededup.core.addressing import ContentAddresser
from treededup.core.context import CidContext
from treededup.core.content_reader import ContentReader
from treededup.core.paths import Node
from treededup.core.scanner import scan
from treededup.utils.ignore_rules import IgnoreRules

Tree = Dict[str, Union[bytes, str, "Tree"]]


def write_tree(root: Path, tree: Tree) -> Path:
    """Create files (bytes/str values) and directories (dict values) under root"""
    root.mkdir(parents=True, exist_ok=True)
    for name, value in tree.items():
        path = root / name
        if isinstance(value, dict):
            write_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value)
    return root


def scan_and_address(*paths: Path, ignore_rules: IgnoreRules = None) -> List[Node]:
    context = CidContext()
    reader = ContentReader(context, workers=2, quiet=True)
    roots = scan([str(p) for p in paths])
    return ContentAddresser(context, reader, ignore_rules).address(roots)


def find_node(roots: List[Node], full_path: Union[str, Path]) -> Node:
    from treededup.core.paths import traverse
    for root in roots:
        for node in traverse(root):
            if node.path.get() == str(full_path):
                return node
    raise KeyError(str(full_path))


@pytest.fixture
def duplicate_tree(tmp_path: Path) -> Path:
    """Two identical photo folders, one identical file pair, one unique file"""
    album = {
        "a.jpg": b"A" * 4000,
        "b.jpg": b"B" * 6000,
        "raw": {"a.cr2": b"RAW" * 1000},
    }
    write_tree(tmp_path, {
        "photos": dict(album),
        "backup": {"photos-copy": dict(album)},
        "notes.txt": "meeting notes",
        "docs": {"notes-again.txt": "meeting notes", "unique.txt": "only here"},
    })
    return tmp_path
