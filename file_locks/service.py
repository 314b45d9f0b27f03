from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Sequence

from persistence.instance_config import InstanceConfigRecord, InstanceConfigRepository
from persistence.locks import KeyedLockRegistry

from . import propagation
from .errors import InstanceNotFound, PersistenceFailure
from .state import LockQueryResult, LockState

logger = logging.getLogger(__name__)

LockRule = Callable[[LockState], LockState]


@dataclass
class _LoadedInstance:
    record: InstanceConfigRecord
    state: LockState


class FileLockService:
    """
    Owns the lock state of every instance served by this worker.

    Mutations for one instance run one at a time under that instance's lock:
    apply the rule, swap the new state in, then store the config snapshot.
    Queries read whichever state was swapped in last and never block.
    """

    def __init__(
        self,
        repository: InstanceConfigRepository | None = None,
        *,
        instance_locks: KeyedLockRegistry | None = None,
    ) -> None:
        self._repo = repository if repository is not None else InstanceConfigRepository()
        self._instance_locks = instance_locks if instance_locks is not None else KeyedLockRegistry()
        self._guard = threading.Lock()
        self._instances: dict[str, _LoadedInstance] = {}

    # -- instances -------------------------------------------------------

    def _loaded(self, instance_uuid: str) -> _LoadedInstance:
        with self._guard:
            loaded = self._instances.get(instance_uuid)
        if loaded is not None:
            return loaded

        with self._instance_locks.lock_for(instance_uuid):
            return self._load_locked(instance_uuid)

    def _load_locked(self, instance_uuid: str) -> _LoadedInstance:
        # Caller holds the instance lock.
        with self._guard:
            loaded = self._instances.get(instance_uuid)
        if loaded is not None:
            return loaded
        record = self._repo.get(instance_uuid)
        if record is None:
            raise InstanceNotFound(instance_uuid)
        # The stored index is derived data; rebuild it from the registry.
        loaded = _LoadedInstance(record=record, state=LockState(record.locked_files))
        with self._guard:
            self._instances[instance_uuid] = loaded
        return loaded

    def register_instance(self, record: InstanceConfigRecord) -> None:
        with self._instance_locks.lock_for(record.instance_uuid):
            state = LockState(record.locked_files)
            record = record.model_copy(update=_lock_fields(state))
            self._repo.put(record)
            with self._guard:
                self._instances[record.instance_uuid] = _LoadedInstance(record=record, state=state)
        logger.info("Registered instance %s (%s)", record.instance_uuid, record.nickname or "unnamed")

    def get_config(self, instance_uuid: str) -> InstanceConfigRecord:
        return self._loaded(instance_uuid).record

    def state(self, instance_uuid: str) -> LockState:
        return self._loaded(instance_uuid).state

    # -- queries ---------------------------------------------------------

    def locked_files(self, instance_uuid: str) -> list[str]:
        return list(self.state(instance_uuid).locked_files)

    def is_directly_locked(self, instance_uuid: str, path: str) -> bool:
        return self.state(instance_uuid).is_directly_locked(path)

    def is_locked(self, instance_uuid: str, path: str) -> bool:
        return self.state(instance_uuid).is_locked(path)

    def contains_locked_descendant(self, instance_uuid: str, path: str) -> str | None:
        return self.state(instance_uuid).contains_locked_descendant(path)

    def is_locked_or_contains(self, instance_uuid: str, path: str) -> str | None:
        return self.state(instance_uuid).is_locked_or_contains(path)

    def check_many(self, instance_uuid: str, paths: Sequence[str], check_contents: bool = True) -> LockQueryResult:
        return self.state(instance_uuid).check_many(paths, check_contents)

    # -- mutations -------------------------------------------------------

    def _mutate(self, instance_uuid: str, rule: LockRule, description: str) -> bool:
        with self._instance_locks.lock_for(instance_uuid):
            loaded = self._load_locked(instance_uuid)
            current = loaded.state
            updated = rule(current)
            if updated is current:
                return False

            record = loaded.record.model_copy(update=_lock_fields(updated))
            with self._guard:
                self._instances[instance_uuid] = _LoadedInstance(record=record, state=updated)
            logger.debug("Lock state of %s after %s: %s", instance_uuid, description, updated.locked_files)

            try:
                self._repo.put(record)
            except Exception as exc:
                logger.warning("Storing lock state of %s after %s failed: %r", instance_uuid, description, exc)
                raise PersistenceFailure(instance_uuid, exc) from exc
            return True

    def add_lock(self, instance_uuid: str, path: str) -> bool:
        return self._mutate(instance_uuid, lambda s: s.with_lock(path), f"lock {path!r}")

    def remove_lock(self, instance_uuid: str, path: str) -> bool:
        return self._mutate(instance_uuid, lambda s: s.without_lock(path), f"unlock {path!r}")

    def on_create(self, instance_uuid: str, path: str, *, folder: bool) -> bool:
        return self._mutate(
            instance_uuid,
            lambda s: propagation.on_create(s, path, folder=folder),
            f"create {path!r}",
        )

    def on_delete(self, instance_uuid: str, path: str) -> bool:
        return self._mutate(instance_uuid, lambda s: propagation.on_delete(s, path), f"delete {path!r}")

    def on_copy(self, instance_uuid: str, source: str, destination: str) -> bool:
        return self._mutate(
            instance_uuid,
            lambda s: propagation.on_copy(s, source, destination),
            f"copy {source!r} -> {destination!r}",
        )

    def on_move(self, instance_uuid: str, source: str, destination: str) -> bool:
        return self._mutate(
            instance_uuid,
            lambda s: propagation.on_move(s, source, destination),
            f"move {source!r} -> {destination!r}",
        )


def _lock_fields(state: LockState) -> dict[str, list[str]]:
    return {
        "locked_files": list(state.locked_files),
        "folders_with_locked_content": sorted(state.folders_with_locked_content),
    }


class AsyncFileLockService:
    """
    Async facade over FileLockService.
    Uses asyncio.to_thread so config writes never block the event loop.
    """

    def __init__(self, service: FileLockService | None = None) -> None:
        self._service = service if service is not None else FileLockService()

    @property
    def sync(self) -> FileLockService:
        return self._service

    async def get_config(self, instance_uuid: str) -> InstanceConfigRecord:
        return await asyncio.to_thread(self._service.get_config, instance_uuid)

    async def state(self, instance_uuid: str) -> LockState:
        return await asyncio.to_thread(self._service.state, instance_uuid)

    async def check_many(self, instance_uuid: str, paths: Sequence[str], check_contents: bool = True) -> LockQueryResult:
        return await asyncio.to_thread(self._service.check_many, instance_uuid, paths, check_contents)

    async def add_lock(self, instance_uuid: str, path: str) -> bool:
        return await asyncio.to_thread(self._service.add_lock, instance_uuid, path)

    async def remove_lock(self, instance_uuid: str, path: str) -> bool:
        return await asyncio.to_thread(self._service.remove_lock, instance_uuid, path)

    async def on_create(self, instance_uuid: str, path: str, *, folder: bool) -> bool:
        return await asyncio.to_thread(self._service.on_create, instance_uuid, path, folder=folder)

    async def on_delete(self, instance_uuid: str, path: str) -> bool:
        return await asyncio.to_thread(self._service.on_delete, instance_uuid, path)

    async def on_copy(self, instance_uuid: str, source: str, destination: str) -> bool:
        return await asyncio.to_thread(self._service.on_copy, instance_uuid, source, destination)

    async def on_move(self, instance_uuid: str, source: str, destination: str) -> bool:
        return await asyncio.to_thread(self._service.on_move, instance_uuid, source, destination)
