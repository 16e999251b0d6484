#!/usr/bin/env python3
"""
Tests for duplicate detection and maximal grouping
"""

import itertools

import pytest

from conftest import scan_and_address, write_tree
from treededup.core.grouping import (
    DuplicateGroup,
    find_duplicate_cids,
    find_duplicates,
    gather_duplicates,
    summarize,
)
from treededup.core.paths import Node, NodePath, NodeType, traverse


def file_node(parent, name, cid, size):
    return Node(parent.child(name), NodeType.FILE, size, cid=cid)


def dir_node(path, cid, *children):
    return Node(path, NodeType.DIRECTORY, 0, tuple(children), cid=cid)


def is_ancestor(a, b):
    return a is not b and any(n is b for n in traverse(a))


def test_duplicate_cids_need_two_occurrences():
    root = NodePath("/r")
    tree = dir_node(root, 1,
                    file_node(root, "a", 2, 10),
                    file_node(root, "b", 2, 10),
                    file_node(root, "c", 3, 10))

    assert find_duplicate_cids([tree]) == {2}


def test_unaddressed_nodes_are_rejected():
    with pytest.raises(ValueError):
        find_duplicate_cids([Node(NodePath("/x"), NodeType.FILE, 1)])


def test_identical_files_form_one_group(tmp_path):
    write_tree(tmp_path, {"one": {"f.bin": b"z" * 1234}, "two": {"g.bin": b"z" * 1234}, "u": "unique"})

    groups = find_duplicates(scan_and_address(tmp_path))

    assert len(groups) == 1
    assert groups[0].count == 2
    assert sorted(groups[0].paths) == [str(tmp_path / "one" / "f.bin"), str(tmp_path / "two" / "g.bin")]
    assert groups[0].wasted_space == 1234


def test_identical_directories_form_one_group_without_child_groups(tmp_path):
    content = {"a.txt": "alpha", "b.txt": "beta", "nested": {"c.txt": "gamma"}}
    write_tree(tmp_path, {"music": content, "music (copy)": content})

    groups = find_duplicates(scan_and_address(tmp_path))

    assert len(groups) == 1
    assert groups[0].type is NodeType.DIRECTORY
    assert sorted(groups[0].paths) == [str(tmp_path / "music"), str(tmp_path / "music (copy)")]
    assert groups[0].wasted_space == len("alpha") + len("beta") + len("gamma")


def test_nested_duplicate_file_is_covered_by_directory_group(tmp_path):
    write_tree(tmp_path, {
        "left": {"dup.txt": "same", "other.txt": "o"},
        "right": {"dup.txt": "same", "other.txt": "o"},
    })

    groups = find_duplicates(scan_and_address(tmp_path))

    assert len(groups) == 1
    assert all(node.type is NodeType.DIRECTORY for node in groups[0].nodes)


def test_fixture_tree_groups(duplicate_tree):
    groups = find_duplicates(scan_and_address(duplicate_tree))

    assert [g.type for g in groups] == [NodeType.DIRECTORY, NodeType.FILE]
    assert sorted(groups[0].paths) == [
        str(duplicate_tree / "backup" / "photos-copy"),
        str(duplicate_tree / "photos"),
    ]
    assert groups[0].wasted_space == 13000
    assert groups[1].wasted_space == len("meeting notes")
    assert summarize(groups) == (2, 13000 + len("meeting notes"))


def test_children_of_claimed_nodes_are_not_grouped():
    r = NodePath("/r")
    d1 = r.child("d1")
    d2 = r.child("d2")
    tree = dir_node(r, 1,
                    dir_node(d1, 9, file_node(d1, "x", 5, 3)),
                    dir_node(d2, 9, file_node(d2, "x", 5, 3)))

    groups = gather_duplicates([tree])

    assert len(groups) == 1
    assert groups[0].cid == 9


def test_groups_are_maximal_and_sorted():
    r = NodePath("/r")
    a, b, c = r.child("a"), r.child("b"), r.child("c")
    tree = dir_node(
        r, 1,
        dir_node(a, 10, file_node(a, "big", 20, 1000), file_node(a, "s", 21, 1)),
        dir_node(b, 10, file_node(b, "big", 20, 1000), file_node(b, "s", 21, 1)),
        dir_node(c, 11,
                 file_node(c, "big", 20, 1000),
                 file_node(c, "t1", 30, 5),
                 file_node(c, "t2", 30, 5),
                 file_node(c, "t3", 30, 5)),
    )

    groups = find_duplicates([tree])

    # c/big shares cid 20 with files inside the claimed copies a and b, so
    # it is the only node collected for 20 and forms no group
    assert [g.cid for g in groups] == [10, 30]
    assert [g.wasted_space for g in groups] == [1001, 10]

    members = [n for g in groups for n in g.nodes]
    for x, y in itertools.permutations(members, 2):
        assert not is_ancestor(x, y)

    # Every represented cid only appears on members or inside members
    represented = {g.cid for g in groups}
    for node in traverse(tree):
        if node.cid in represented:
            assert any(node is m or is_ancestor(m, node) for m in members)


def test_wasted_space_uses_deep_size():
    r = NodePath("/r")
    group = DuplicateGroup(4, [
        dir_node(r.child("x"), 4, file_node(r.child("x"), "f", 8, 7)),
        dir_node(r.child("y"), 4, file_node(r.child("y"), "f", 8, 7)),
        dir_node(r.child("z"), 4, file_node(r.child("z"), "f", 8, 7)),
    ])

    assert group.deep_size == 7
    assert group.wasted_space == 14
    assert DuplicateGroup(1).wasted_space == 0
