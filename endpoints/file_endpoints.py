from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from endpoints.auth import get_caller
from file_locks.enforcement import Caller, enforce_file_locks
from file_locks.paths import instance_relative, join_path
from file_locks.service import AsyncFileLockService
from files.manager import LocalFileManager
from persistence.paths import data_dir, instance_files_dir
from settings import get_settings

router = APIRouter(prefix="/instances/{instance_uuid}/file", tags=["files"])
logger = logging.getLogger(__name__)

SETTINGS = get_settings()
DEBUG_LOG_REQUESTS = SETTINGS.debug_log_requests

LOCK_SERVICE = AsyncFileLockService()

T = TypeVar("T")


# -------------------------------------------------------------------
# Request payloads
# -------------------------------------------------------------------
class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ListRequest(_Payload):
    target: str = ""
    page: int = 0
    page_size: int = Field(default=100, alias="pageSize", ge=1, le=1000)
    file_name: str | None = Field(default=None, alias="fileName")


class TargetRequest(_Payload):
    target: str


class EditRequest(_Payload):
    target: str
    text: str | None = None


class ChmodRequest(_Payload):
    target: str
    # Octal digits as typed by users, e.g. 755.
    chmod: int
    deep: bool = False


class PairsRequest(_Payload):
    targets: list[tuple[str, str]]


class TargetsRequest(_Payload):
    targets: list[str]


class CompressRequest(_Payload):
    source: str
    targets: list[str]
    type: int


class CheckLockRequest(_Payload):
    targets: list[str]
    check_contents: bool = Field(default=True, alias="checkContents")


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def lock_guard(operation: str) -> Callable[..., Any]:
    """Dependency that applies the file-lock rule of ``operation`` before the handler runs."""

    async def _guard(instance_uuid: str, request: Request, caller: Caller = Depends(get_caller)) -> None:
        try:
            data = await request.json()
        except ValueError:
            data = None
        if DEBUG_LOG_REQUESTS:
            logger.debug("FILE %s instance=%s caller=%s data=%s", operation, instance_uuid, caller.subject, data)
        await asyncio.to_thread(
            enforce_file_locks,
            operation,
            instance_uuid,
            data,
            caller,
            LOCK_SERVICE.sync,
            message=SETTINGS.lock_violation_message,
        )

    return _guard


def _require_admin(caller: Caller) -> None:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="admin role required")


async def _file_manager(instance_uuid: str) -> LocalFileManager:
    config = await LOCK_SERVICE.get_config(instance_uuid)
    root = Path(config.cwd) if config.cwd else instance_files_dir(data_dir(), instance_uuid)
    return LocalFileManager(root)


def _relative_pairs(pairs: list[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(instance_relative(src), instance_relative(dst)) for src, dst in pairs]


async def _run_file_op(fn: Callable[..., T], *args: Any) -> T:
    try:
        return await asyncio.to_thread(fn, *args)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except FileExistsError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    except OSError as e:
        logger.warning("File operation %s failed: %r", getattr(fn, "__name__", fn), e)
        raise HTTPException(status_code=500, detail=str(e)) from e


# -------------------------------------------------------------------
# Operations
# -------------------------------------------------------------------
@router.post("/list", dependencies=[Depends(lock_guard("list"))])
async def list_files(instance_uuid: str, body: ListRequest) -> dict[str, Any]:
    target = instance_relative(body.target)
    fm = await _file_manager(instance_uuid)
    overview = await _run_file_op(fm.list_dir, target, body.page, body.page_size, body.file_name)

    # Items show their own lock only; inherited locks are not displayed.
    state = await LOCK_SERVICE.state(instance_uuid)
    overview["items"] = [
        {**item, "locked": state.is_directly_locked(join_path(target, item["name"]))}
        for item in overview["items"]
    ]
    overview["lockedFiles"] = list(state.locked_files)
    return overview


@router.post("/touch", dependencies=[Depends(get_caller)])
async def touch_file(instance_uuid: str, body: TargetRequest) -> bool:
    target = instance_relative(body.target)
    fm = await _file_manager(instance_uuid)
    await _run_file_op(fm.touch, target)
    await LOCK_SERVICE.on_create(instance_uuid, target, folder=False)
    return True


@router.post("/mkdir", dependencies=[Depends(get_caller)])
async def make_directory(instance_uuid: str, body: TargetRequest) -> bool:
    target = instance_relative(body.target)
    fm = await _file_manager(instance_uuid)
    await _run_file_op(fm.mkdir, target)
    await LOCK_SERVICE.on_create(instance_uuid, target, folder=True)
    return True


@router.post("/edit", dependencies=[Depends(lock_guard("edit"))])
async def edit_file(instance_uuid: str, body: EditRequest) -> Any:
    fm = await _file_manager(instance_uuid)
    result = await _run_file_op(fm.edit, instance_relative(body.target), body.text)
    return result if result is not None else True


@router.post("/chmod", dependencies=[Depends(lock_guard("chmod"))])
async def chmod_file(instance_uuid: str, body: ChmodRequest) -> bool:
    try:
        mode = int(str(body.chmod), 8)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid mode: {body.chmod}") from e
    fm = await _file_manager(instance_uuid)
    await _run_file_op(fm.chmod, instance_relative(body.target), mode, body.deep)
    return True


@router.post("/copy", dependencies=[Depends(lock_guard("copy"))])
async def copy_files(instance_uuid: str, body: PairsRequest) -> bool:
    fm = await _file_manager(instance_uuid)
    for source, destination in _relative_pairs(body.targets):
        await _run_file_op(fm.copy, source, destination)
        await LOCK_SERVICE.on_copy(instance_uuid, source, destination)
    return True


@router.post("/move", dependencies=[Depends(lock_guard("move"))])
async def move_files(instance_uuid: str, body: PairsRequest) -> bool:
    fm = await _file_manager(instance_uuid)
    for source, destination in _relative_pairs(body.targets):
        await _run_file_op(fm.move, source, destination)
        await LOCK_SERVICE.on_move(instance_uuid, source, destination)
    return True


@router.post("/delete", dependencies=[Depends(lock_guard("delete"))])
async def delete_files(instance_uuid: str, body: TargetsRequest) -> bool:
    fm = await _file_manager(instance_uuid)
    for target in map(instance_relative, body.targets):
        await _run_file_op(fm.delete, target)
        await LOCK_SERVICE.on_delete(instance_uuid, target)
    return True


@router.post("/compress", dependencies=[Depends(lock_guard("compress"))])
async def compress_files(instance_uuid: str, body: CompressRequest) -> bool:
    fm = await _file_manager(instance_uuid)
    targets = [instance_relative(t) for t in body.targets]
    await _run_file_op(fm.compress, instance_relative(body.source), targets, body.type)
    return True


@router.post("/lock")
async def lock_path(instance_uuid: str, body: TargetRequest, caller: Caller = Depends(get_caller)) -> dict[str, Any]:
    _require_admin(caller)
    target = instance_relative(body.target)
    changed = await LOCK_SERVICE.add_lock(instance_uuid, target)
    state = await LOCK_SERVICE.state(instance_uuid)
    logger.info("instance_file_lock instance=%s target=%s by=%s changed=%s", instance_uuid, target, caller.subject, changed)
    return {"locked": True, "lockedFiles": list(state.locked_files)}


@router.post("/unlock")
async def unlock_path(instance_uuid: str, body: TargetRequest, caller: Caller = Depends(get_caller)) -> dict[str, Any]:
    _require_admin(caller)
    target = instance_relative(body.target)
    changed = await LOCK_SERVICE.remove_lock(instance_uuid, target)
    state = await LOCK_SERVICE.state(instance_uuid)
    logger.info("instance_file_unlock instance=%s target=%s by=%s changed=%s", instance_uuid, target, caller.subject, changed)
    return {"locked": False, "lockedFiles": list(state.locked_files)}


@router.post("/check_lock", dependencies=[Depends(get_caller)])
async def check_lock(instance_uuid: str, body: CheckLockRequest) -> dict[str, Any]:
    result = await LOCK_SERVICE.check_many(
        instance_uuid, [instance_relative(t) for t in body.targets], body.check_contents
    )
    return result.to_wire()
