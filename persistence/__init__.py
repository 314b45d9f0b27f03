from __future__ import annotations

from .disk_store import DiskJsonDocumentStore
from .instance_config import (
    INSTANCE_CONFIG_KIND,
    DiskConfigStorage,
    InstanceConfigRecord,
    InstanceConfigRepository,
)
from .interfaces import ConfigStorage, KeyValueDocumentStore
from .locks import GLOBAL_PATH_LOCKS, KeyedLockRegistry

__all__ = [
    "DiskJsonDocumentStore",
    "INSTANCE_CONFIG_KIND",
    "DiskConfigStorage",
    "InstanceConfigRecord",
    "InstanceConfigRepository",
    "ConfigStorage",
    "KeyValueDocumentStore",
    "GLOBAL_PATH_LOCKS",
    "KeyedLockRegistry",
]
