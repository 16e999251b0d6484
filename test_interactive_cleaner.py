#!/usr/bin/env python3
"""
Tests for the interactive cleaner state machine and snapshot-based deletion
"""

import os

import pytest

from conftest import scan_and_address, write_tree
from treededup.core.errors import DeletionError
from treededup.core.grouping import DuplicateGroup, find_duplicates
from treededup.core.paths import Node, NodePath, NodeType
from treededup.utils.interactive_cleaner import (
    InteractiveCleaner,
    Intent,
    ResolverState,
    remove_recursive,
)


class Script:
    """Feeds canned answers to the cleaner and records prompts"""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


def make_cleaner(groups, *answers, dry_run=False):
    output = []
    script = Script(*answers)
    cleaner = InteractiveCleaner(groups, input_func=script, output_func=output.append, dry_run=dry_run)
    return cleaner, script, output


def fake_group(cid, *names):
    root = NodePath("/nowhere")
    return DuplicateGroup(cid, [Node(root.child(n), NodeType.FILE, 10, cid=cid) for n in names])


def test_state_wraps_and_removes():
    state = ResolverState(groups=[fake_group(1, "a", "b"), fake_group(2, "c", "d"), fake_group(3, "e", "f")])

    state.apply(Intent.RETREAT)
    assert state.index == 2
    state.apply(Intent.ADVANCE)
    assert state.index == 0
    state.apply(Intent.ADVANCE)
    state.apply(Intent.REMOVE_CURRENT)
    assert [g.cid for g in state.groups] == [1, 3]
    assert state.index == 1
    state.apply(Intent.REMOVE_CURRENT)
    assert state.index == 0
    state.apply(Intent.STAY)
    assert not state.terminated
    state.apply(Intent.REMOVE_CURRENT)
    assert state.terminated and not state.quit


def test_navigation_and_quit_do_not_touch_groups():
    groups = [fake_group(1, "a", "b"), fake_group(2, "c", "d")]
    cleaner, script, output = make_cleaner(groups, "n", "n", "p", "bogus", "q")

    assert cleaner.run() is False

    assert len(groups) == 2
    headers = [line for line in output if "copies" in line]
    assert [h.split(":")[0] for h in headers] == ["1/2", "2/2", "1/2", "2/2"]
    # Invalid input re-prompts on the same group
    assert len(script.prompts) == 5
    assert output[-1] == "Quit"


def test_prompt_lists_every_choice():
    cleaner, script, output = make_cleaner([fake_group(7, "a", "b")], "q")

    cleaner.run()

    prompt = script.prompts[0]
    assert prompt.startswith("Please select an option:\n")
    assert f'  1: Keep only "{os.path.join("/nowhere", "a")}"' in prompt
    assert f'  2: Keep only "{os.path.join("/nowhere", "b")}"' in prompt
    for line in ("  D: Delete ALL", "  n: Next duplicate", "  p: Previous duplicate", "  q: Quit"):
        assert line in prompt
    assert prompt.endswith("> ")
    assert "1/1: file 7 (2 copies, 10 B duplicated)" in output


def test_end_of_input_quits():
    cleaner, _, output = make_cleaner([fake_group(1, "a", "b")])

    assert cleaner.run() is False
    assert output[-1] == "Quit"


def test_empty_group_list_is_done_immediately():
    cleaner, script, output = make_cleaner([])

    assert cleaner.run() is True
    assert script.prompts == []
    assert "Found 0 duplicate sets, 0 B duplicated" in output
    assert output[-1] == "DONE"


def test_keep_only_removes_other_copies(duplicate_tree):
    groups = find_duplicates(scan_and_address(duplicate_tree))
    photos = groups[0]
    keep = next(i for i, p in enumerate(photos.paths) if p == str(duplicate_tree / "photos"))
    cleaner, _, output = make_cleaner(groups, str(keep + 1), "1")

    assert cleaner.run() is True

    assert (duplicate_tree / "photos" / "raw" / "a.cr2").exists()
    assert not (duplicate_tree / "backup" / "photos-copy").exists()
    assert (duplicate_tree / "backup").is_dir()
    assert groups == []
    assert output[-1] == "DONE"
    # Children go before their directory
    copy = str(duplicate_tree / "backup" / "photos-copy")
    removed = [line for line in output if line.startswith(("rmdir ", "unlink ")) and copy in line]
    assert len(removed) == 5
    assert removed[-1] == f"rmdir {copy}"
    assert removed.index(f"unlink {os.path.join(copy, 'raw', 'a.cr2')}") < \
        removed.index(f"rmdir {os.path.join(copy, 'raw')}")


def test_delete_all_removes_every_member(tmp_path):
    content = {"f.txt": "data", "sub": {"g.txt": "more"}}
    write_tree(tmp_path, {"x": content, "y": content, "keep.txt": "unrelated"})
    groups = find_duplicates(scan_and_address(tmp_path))
    cleaner, _, output = make_cleaner(groups, "D")

    assert cleaner.run() is True

    assert not (tmp_path / "x").exists()
    assert not (tmp_path / "y").exists()
    assert (tmp_path / "keep.txt").read_text() == "unrelated"
    assert cleaner.removed_paths == 8


def test_delete_all_fails_loudly_on_new_entries(tmp_path):
    content = {"f.txt": "data", "sub": {"g.txt": "more"}}
    write_tree(tmp_path, {"x": content, "y": content})
    groups = find_duplicates(scan_and_address(tmp_path))
    # Drift after the scan
    (tmp_path / "x" / "sub" / "new.txt").write_text("arrived later")
    cleaner, _, output = make_cleaner(groups, "D", "q")

    assert cleaner.run() is False

    assert (tmp_path / "x" / "sub" / "new.txt").read_text() == "arrived later"
    assert not (tmp_path / "x" / "sub" / "g.txt").exists()
    assert len(groups) == 1
    assert any(line.startswith("ERROR: Failed to rmdir") for line in output)
    assert "Action incomplete; the group was kept." in output


def test_keep_only_never_touches_unrecorded_paths(tmp_path):
    write_tree(tmp_path, {"a": {"f": "1"}, "b": {"f": "1"}})
    groups = find_duplicates(scan_and_address(tmp_path))
    keep_b = groups[0].paths.index(str(tmp_path / "b")) + 1
    (tmp_path / "a" / "late.txt").write_text("late")
    cleaner, _, _ = make_cleaner(groups, str(keep_b), "q")

    cleaner.run()

    assert (tmp_path / "a" / "late.txt").exists()
    assert (tmp_path / "b" / "f").exists()
    assert groups and groups[0].count == 2


def test_dry_run_touches_nothing(tmp_path):
    write_tree(tmp_path, {"a": "same", "b": "same"})
    groups = find_duplicates(scan_and_address(tmp_path))
    cleaner, _, output = make_cleaner(groups, "D", dry_run=True)

    cleaner.run()

    assert (tmp_path / "a").exists() and (tmp_path / "b").exists()
    assert f"[DRY RUN] unlink {tmp_path / 'a'}" in output


def test_remove_recursive_reports_missing_path(tmp_path):
    node = Node(NodePath(str(tmp_path / "gone")), NodeType.FILE, 1, cid=1)

    with pytest.raises(DeletionError) as excinfo:
        remove_recursive(node, output_func=lambda line: None)

    assert excinfo.value.path == str(tmp_path / "gone")
