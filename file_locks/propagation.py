"""
How lock state follows paths that are created, deleted, copied or moved.

Each rule takes the current ``LockState`` and returns the next one. A rule
that changes nothing returns the very same object, which is how callers tell
whether anything needs to be persisted.
"""

from __future__ import annotations

from .paths import is_strictly_under, normalize_path
from .state import LockState


def on_create(state: LockState, path: str, *, folder: bool) -> LockState:
    """
    A fresh file or folder must not inherit a lock left behind at its path.

    For a folder, locks that used to sit beneath the old folder go too.
    """
    target = normalize_path(path)
    if folder:
        return on_delete(state, target)
    return state.without_lock(target)


def on_delete(state: LockState, path: str) -> LockState:
    target = normalize_path(path)
    remaining = [
        locked
        for locked in state.locked_files
        if locked != target and not is_strictly_under(locked, target)
    ]
    if len(remaining) == len(state):
        return state
    return LockState(remaining)


def on_copy(state: LockState, source: str, destination: str) -> LockState:
    """
    The copy of a directly locked path is locked as well.

    Only the copied root is locked; locks nested below the source stay where
    they are and are not repeated under the destination.
    """
    if not state.is_directly_locked(source):
        return state
    return state.with_lock(destination)


def on_move(state: LockState, source: str, destination: str) -> LockState:
    """Re-root the moved path's own lock and every lock beneath it."""
    src = normalize_path(source)
    dst = normalize_path(destination)
    src_prefix = src + "/"

    relocated: list[str] = []
    for locked in state.locked_files:
        if locked == src:
            relocated.append(dst)
        elif locked.startswith(src_prefix):
            relocated.append(dst + "/" + locked[len(src_prefix):])
        else:
            relocated.append(locked)
    return state.replace(relocated)
