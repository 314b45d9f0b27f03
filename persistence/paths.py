from __future__ import annotations

from pathlib import Path

from settings import get_settings


def data_dir() -> Path:
    return ensure_dir(get_settings().data_dir)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def kind_dir(data_dir: Path, kind: str) -> Path:
    return ensure_dir(data_dir / safe_segment(kind))


def safe_segment(value: str) -> str:
    # Keys become file names; keep them inside their parent directory.
    cleaned = value.strip().replace("/", "_").replace("\\", "_")
    if cleaned in ("", ".", ".."):
        raise ValueError(f"Invalid storage key: {value!r}")
    return cleaned


def instance_files_dir(data_dir: Path, instance_uuid: str) -> Path:
    return ensure_dir(data_dir / "instances" / safe_segment(instance_uuid))
