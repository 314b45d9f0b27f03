from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any | None:
    """
    Read a JSON document from disk.

    Missing and blank files read as None. Unparseable content also reads as None
    so a corrupt snapshot falls back to an empty instance config instead of
    taking the worker down.
    """
    if not path.exists():
        return None
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return None


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2) -> None:
    """
    Write JSON to a sibling temp file, then replace the target in one step.

    OSError is left to the caller; a failed write must not look like a success.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent, ensure_ascii=False)
        f.write("\n")
    tmp_path.replace(path)
