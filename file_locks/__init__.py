from __future__ import annotations

from .enforcement import FILE_LOCK_RULES, Caller, LockCheckRule, enforce_file_locks
from .errors import FileLockError, InstanceNotFound, LockViolation, PersistenceFailure
from .paths import normalize_path, parent_folders
from .service import AsyncFileLockService, FileLockService
from .state import LockQueryResult, LockState, rebuild_index

__all__ = [
    "FILE_LOCK_RULES",
    "Caller",
    "LockCheckRule",
    "enforce_file_locks",
    "FileLockError",
    "InstanceNotFound",
    "LockViolation",
    "PersistenceFailure",
    "normalize_path",
    "parent_folders",
    "AsyncFileLockService",
    "FileLockService",
    "LockQueryResult",
    "LockState",
    "rebuild_index",
]
