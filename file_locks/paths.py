"""Canonical path form shared by every lock comparison."""

from __future__ import annotations

import posixpath
import re

_REPEATED_SLASHES = re.compile(r"/+")

# Spellings of the instance root in request payloads.
ROOT_TARGETS = ("", "/", ".")


def normalize_path(path: str) -> str:
    """
    Convert backslashes to forward slashes, collapse repeated slashes and
    strip one trailing slash.

    ``normalize_path("a\\b/") == normalize_path("a//b") == "a/b"``
    """
    unified = _REPEATED_SLASHES.sub("/", path.replace("\\", "/"))
    if unified.endswith("/"):
        unified = unified[:-1]
    return unified


def instance_relative(path: str) -> str:
    """
    The path as the file manager resolves it against the instance root.

    Leading slashes are dropped and ``.``/``..`` segments collapsed, so
    ``/a``, ``./a`` and ``b/../a`` all come out as ``a``; the root itself is
    ``""``. A path that climbs above the root keeps its leading ``..``.
    """
    relative = path.replace("\\", "/").lstrip("/")
    if not relative:
        return ""
    collapsed = posixpath.normpath(relative)
    return "" if collapsed == "." else normalize_path(collapsed)


def parent_folders(path: str) -> list[str]:
    """
    Every proper ancestor of ``path``, shortest first.

    ``parent_folders("a/b/c/file.txt") == ["a", "a/b", "a/b/c"]``
    """
    parts = normalize_path(path).split("/")
    return ["/".join(parts[:i]) for i in range(1, len(parts))]


def is_strictly_under(path: str, folder: str) -> bool:
    return path.startswith(folder + "/")


def join_path(folder: str, name: str) -> str:
    if folder in ROOT_TARGETS:
        return normalize_path(name)
    return normalize_path(folder + "/" + name)
