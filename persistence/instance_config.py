from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .disk_store import DiskJsonDocumentStore
from .interfaces import ConfigStorage
from .paths import data_dir, kind_dir, safe_segment

INSTANCE_CONFIG_KIND = "InstanceConfig"


class InstanceConfigRecord(BaseModel):
    """
    Mirrors the on-disk data/InstanceConfig/<instance_uuid>.json schema:
      {
        "instanceUuid": "...",
        "nickname": "...",
        "cwd": "/srv/instances/...",
        "lockedFiles": ["world/region", "server.properties"],
        "foldersWithLockedContent": ["world"]
      }
    Unknown keys written by other components are preserved.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    instance_uuid: str = Field(alias="instanceUuid")
    nickname: str = ""
    cwd: str = ""
    locked_files: list[str] = Field(default_factory=list, alias="lockedFiles")
    folders_with_locked_content: list[str] = Field(default_factory=list, alias="foldersWithLockedContent")

    @classmethod
    def from_disk_doc(cls, instance_uuid: str, doc: Mapping[str, Any]) -> "InstanceConfigRecord":
        data = dict(doc)
        data.setdefault("instanceUuid", instance_uuid)
        # Older configs may carry explicit nulls for the lock fields.
        for key in ("lockedFiles", "foldersWithLockedContent"):
            if data.get(key) is None:
                data[key] = []
        return cls.model_validate(data)

    def to_disk_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DiskConfigStorage(ConfigStorage):
    """
    One JSON document per (kind, id) under <data_dir>/<kind>/<id>.json.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir

    def _path(self, kind: str, instance_id: str) -> Path:
        base = self._base_dir if self._base_dir is not None else data_dir()
        return kind_dir(base, kind) / f"{safe_segment(instance_id)}.json"

    def store(self, kind: str, instance_id: str, snapshot: dict[str, Any]) -> None:
        DiskJsonDocumentStore(self._path(kind, instance_id)).save(snapshot)

    def load(self, kind: str, instance_id: str) -> dict[str, Any] | None:
        return DiskJsonDocumentStore(self._path(kind, instance_id)).load()


class InstanceConfigRepository:
    def __init__(self, storage: ConfigStorage | None = None) -> None:
        self._storage = storage if storage is not None else DiskConfigStorage()

    def get(self, instance_uuid: str) -> InstanceConfigRecord | None:
        doc = self._storage.load(INSTANCE_CONFIG_KIND, instance_uuid)
        if doc is None:
            return None
        return InstanceConfigRecord.from_disk_doc(instance_uuid, doc)

    def put(self, record: InstanceConfigRecord) -> None:
        self._storage.store(INSTANCE_CONFIG_KIND, record.instance_uuid, record.to_disk_doc())
