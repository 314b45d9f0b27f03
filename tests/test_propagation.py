from __future__ import annotations

from file_locks.propagation import on_copy, on_create, on_delete, on_move
from file_locks.state import LockState, rebuild_index


def _assert_index_consistent(state: LockState) -> None:
    assert state.folders_with_locked_content == rebuild_index(state.locked_files)


def test_move_re_roots_nested_locks():
    state = on_move(LockState(["a/b/c.txt"]), "a/b", "x/y")
    assert state.is_locked("x/y/c.txt")
    assert not state.is_directly_locked("a/b/c.txt")
    assert not state.is_locked("a/b")
    _assert_index_consistent(state)


def test_move_relabels_direct_lock_and_subtree_together():
    state = on_move(LockState(["a/b", "a/b/inner/file", "other"]), "a\\b", "z")
    assert state.locked_files == ("other", "z", "z/inner/file")
    _assert_index_consistent(state)


def test_move_does_not_touch_sibling_with_shared_prefix():
    before = LockState(["ab/file"])
    assert on_move(before, "a", "q") is before


def test_move_into_existing_lock_deduplicates():
    state = on_move(LockState(["src", "dst"]), "src", "dst")
    assert state.locked_files == ("dst",)


def test_delete_uses_separator_bounded_prefix():
    state = on_delete(LockState(["a", "a/b", "a/b/c", "ab"]), "a")
    assert state.locked_files == ("ab",)
    _assert_index_consistent(state)


def test_delete_without_match_returns_same_state():
    before = LockState(["a/b"])
    assert on_delete(before, "a/bc") is before


def test_copy_locks_only_the_copied_root():
    state = on_copy(LockState(["a/b", "a/b/x"]), "a/b", "a/c")
    assert state.is_directly_locked("a/b")
    assert state.is_directly_locked("a/c")
    assert not state.is_directly_locked("a/c/x")
    _assert_index_consistent(state)


def test_copy_of_unlocked_or_inherited_path_changes_nothing():
    before = LockState(["a"])
    assert on_copy(before, "a/b", "c") is before
    assert on_copy(before, "z", "c") is before


def test_copy_is_idempotent():
    state = on_copy(LockState(["a", "b"]), "a", "b")
    assert state.locked_files == ("a", "b")


def test_create_file_clears_only_its_own_stale_lock():
    state = on_create(LockState(["f", "f/stale", "g"]), "f", folder=False)
    assert state.locked_files == ("f/stale", "g")


def test_create_folder_clears_nested_stale_locks():
    state = on_create(LockState(["d", "d/x/y", "dz"]), "d/", folder=True)
    assert state.locked_files == ("dz",)
    _assert_index_consistent(state)
