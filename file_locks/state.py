from __future__ import annotations

from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .paths import normalize_path, parent_folders


class LockQueryResult(BaseModel):
    """Outcome of a batch lock check; ``locked_paths`` follows input order."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    has_locked: bool = Field(alias="hasLocked")
    locked_paths: list[str] = Field(default_factory=list, alias="lockedPaths")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def rebuild_index(locked_files: Iterable[str]) -> frozenset[str]:
    """
    Every folder that has at least one locked path somewhere beneath it.

    Always a full rebuild: lock counts are small next to tree sizes, so the
    cost stays proportional to the total length of the locked paths.
    """
    folders: set[str] = set()
    for locked in locked_files:
        folders.update(parent_folders(locked))
    return frozenset(folders)


class LockState:
    """
    The locked paths of one instance together with their ancestor index.

    Immutable. Every way of obtaining a different registry goes through the
    constructor, which rebuilds the index, so the two can never disagree.
    """

    __slots__ = ("_locked", "_ordered", "_index")

    def __init__(self, locked_files: Iterable[str] = ()) -> None:
        normalized = {normalize_path(p) for p in locked_files}
        normalized.discard("")
        self._locked = frozenset(normalized)
        self._ordered = tuple(sorted(self._locked))
        self._index = rebuild_index(self._ordered)

    @classmethod
    def empty(cls) -> "LockState":
        return cls()

    @property
    def locked_files(self) -> tuple[str, ...]:
        return self._ordered

    @property
    def folders_with_locked_content(self) -> frozenset[str]:
        return self._index

    def __len__(self) -> int:
        return len(self._locked)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LockState):
            return NotImplemented
        return self._locked == other._locked

    def __hash__(self) -> int:
        return hash(self._locked)

    def __repr__(self) -> str:
        return f"LockState({list(self._ordered)!r})"

    # -- queries ---------------------------------------------------------

    def is_directly_locked(self, path: str) -> bool:
        """Exact membership; what a listing shows next to each entry."""
        return normalize_path(path) in self._locked

    def is_locked(self, path: str) -> bool:
        """True if ``path`` or one of its ancestors is locked."""
        if not self._locked:
            return False
        target = normalize_path(path)
        if target in self._locked:
            return True
        return any(folder in self._locked for folder in parent_folders(target))

    def contains_locked_descendant(self, path: str) -> str | None:
        """
        Return one locked path strictly beneath ``path``, or None.

        The ancestor index is consulted first; a folder that is not in it,
        and is not above anything in it, cannot contain a lock, so the
        registry is only scanned for folders that passed that test.
        """
        if not self._locked:
            return None
        target = normalize_path(path)
        if not target:
            # The instance root holds every lock.
            return self._ordered[0]
        prefix = target + "/"

        if not any(folder == target or folder.startswith(prefix) for folder in self._index):
            return None

        for locked in self._ordered:
            if locked.startswith(prefix):
                return locked
        return None

    def is_locked_or_contains(self, path: str) -> str | None:
        if self.is_locked(path):
            return path
        return self.contains_locked_descendant(path)

    def check_many(self, paths: Sequence[str], check_contents: bool = True) -> LockQueryResult:
        offending: list[str] = []
        for path in paths:
            if check_contents:
                hit = self.is_locked_or_contains(path) is not None
            else:
                hit = self.is_locked(path)
            if hit:
                offending.append(path)
        return LockQueryResult(has_locked=bool(offending), locked_paths=offending)

    # -- registry edits --------------------------------------------------

    def replace(self, locked_files: Iterable[str]) -> "LockState":
        """New state for ``locked_files``; returns ``self`` when nothing differs."""
        candidate = LockState(locked_files)
        return self if candidate == self else candidate

    def with_lock(self, path: str) -> "LockState":
        target = normalize_path(path)
        if not target or target in self._locked:
            return self
        return LockState(self._locked | {target})

    def without_lock(self, path: str) -> "LockState":
        target = normalize_path(path)
        if target not in self._locked:
            return self
        return LockState(self._locked - {target})
