"""
Lock checks that run in front of the mutating file operations.

Each governed operation has a rule saying where its target paths live in the
request payload and whether a folder target must also be free of locked
content. Malformed or missing target fields yield no targets, and a request
without targets is let through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from .errors import LockViolation
from .paths import instance_relative
from .service import FileLockService
from .state import LockState

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

TargetExtractor = Callable[[Mapping[str, Any]], list[str]]


@dataclass(frozen=True)
class Caller:
    """Who is asking, as established by the control plane's signed token."""

    subject: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


@dataclass(frozen=True)
class LockCheckRule:
    operation: str
    get_targets: TargetExtractor
    # Folder-affecting operations must not touch anything locked inside the folder.
    check_contents: bool = True


def _directory_target(data: Mapping[str, Any]) -> list[str]:
    target = data.get("target")
    if not isinstance(target, str):
        return []
    relative = instance_relative(target)
    return [relative] if relative else []


def _single_target(data: Mapping[str, Any]) -> list[str]:
    target = data.get("target")
    return [instance_relative(target)] if isinstance(target, str) and target else []


def _pair_sources(data: Mapping[str, Any]) -> list[str]:
    pairs = data.get("targets")
    if not isinstance(pairs, list):
        return []
    sources: list[str] = []
    for pair in pairs:
        if isinstance(pair, (list, tuple)) and pair and isinstance(pair[0], str):
            sources.append(instance_relative(pair[0]))
    return sources


def _target_list(data: Mapping[str, Any]) -> list[str]:
    targets = data.get("targets")
    if not isinstance(targets, list):
        return []
    return [instance_relative(t) for t in targets if isinstance(t, str)]


FILE_LOCK_RULES: dict[str, LockCheckRule] = {
    rule.operation: rule
    for rule in (
        # Listing only cares about the directory itself, not what is inside it.
        LockCheckRule("list", _directory_target, check_contents=False),
        LockCheckRule("edit", _single_target),
        LockCheckRule("chmod", _single_target),
        LockCheckRule("copy", _pair_sources),
        LockCheckRule("move", _pair_sources),
        LockCheckRule("delete", _target_list),
        LockCheckRule("compress", _target_list),
    )
}


def find_rule(operation: str) -> LockCheckRule | None:
    return FILE_LOCK_RULES.get(operation)


def extract_targets(operation: str, data: Any) -> list[str]:
    rule = find_rule(operation)
    if rule is None or not isinstance(data, Mapping):
        return []
    return rule.get_targets(data)


def first_locked_target(state: LockState, targets: Iterable[str], check_contents: bool) -> str | None:
    for target in targets:
        if check_contents:
            locked = state.is_locked_or_contains(target)
            if locked is not None:
                return locked
        elif state.is_locked(target):
            return target
    return None


def enforce_file_locks(
    operation: str,
    instance_uuid: str,
    data: Any,
    caller: Caller,
    service: FileLockService,
    *,
    message: str,
) -> None:
    """
    Raise LockViolation when a non-admin request touches a locked path.

    One locked target rejects the whole request.
    """
    rule = find_rule(operation)
    if rule is None or caller.is_admin:
        return

    targets = extract_targets(operation, data)
    if not targets:
        return

    locked = first_locked_target(service.state(instance_uuid), targets, rule.check_contents)
    if locked is None:
        return

    logger.info(
        "Rejected %s on instance %s by %s: %r is locked",
        operation,
        instance_uuid,
        caller.subject,
        locked,
    )
    raise LockViolation(operation, locked, message)
