from __future__ import annotations

import pytest

from file_locks.paths import instance_relative, join_path, normalize_path, parent_folders


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("a/b", "a/b"),
        ("a\\b/", "a/b"),
        ("a//b///c", "a/b/c"),
        ("world\\region\\\\r.0.0.mca", "world/region/r.0.0.mca"),
        ("/plugins/", "/plugins"),
        ("/", ""),
        ("", ""),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


@pytest.mark.parametrize("raw", ["a\\b/", "//x//y//", "c:\\server\\world\\", "plain"])
def test_normalize_path_is_idempotent(raw):
    once = normalize_path(raw)
    assert normalize_path(once) == once


def test_normalize_path_ignores_slash_direction():
    assert normalize_path("a\\b/") == normalize_path("a/b") == "a/b"


def test_parent_folders_excludes_the_path_itself():
    assert parent_folders("a/b/c/file.txt") == ["a", "a/b", "a/b/c"]
    assert parent_folders("top") == []
    assert parent_folders("a\\b\\") == ["a"]


def test_join_path():
    assert join_path("world", "level.dat") == "world/level.dat"
    assert join_path("world/", "region") == "world/region"
    assert join_path("", "server.properties") == "server.properties"
    assert join_path("/", "plugins") == "plugins"
    assert join_path(".", "plugins") == "plugins"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("server.properties", "server.properties"),
        ("/server.properties", "server.properties"),
        ("./server.properties", "server.properties"),
        ("plugins/../server.properties", "server.properties"),
        ("//world\\.\\region//", "world/region"),
        ("/", ""),
        (".", ""),
        ("plugins/..", ""),
        ("../outside", "../outside"),
    ],
)
def test_instance_relative(raw, expected):
    assert instance_relative(raw) == expected
