from __future__ import annotations


class FileLockError(Exception):
    """Base class for lock subsystem failures."""


class InstanceNotFound(FileLockError):
    def __init__(self, instance_uuid: str) -> None:
        super().__init__(f"Instance {instance_uuid} does not exist")
        self.instance_uuid = instance_uuid


class LockViolation(FileLockError):
    """A non-admin request touched a locked path; nothing was executed."""

    def __init__(self, operation: str, path: str, message: str) -> None:
        super().__init__(message)
        self.operation = operation
        self.path = path
        self.message = message


class PersistenceFailure(FileLockError):
    """
    The lock state changed in memory but the snapshot could not be stored.

    Memory stays ahead of the durable record until the next successful write.
    """

    def __init__(self, instance_uuid: str, cause: BaseException) -> None:
        super().__init__(f"Failed to store lock state for instance {instance_uuid}: {cause}")
        self.instance_uuid = instance_uuid
