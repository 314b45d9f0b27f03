from __future__ import annotations

import logging
import os
import shutil
import zipfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ZIP = 1


def validate_path(requested_path: str, root: Path) -> Path:
    candidate = (root / requested_path.replace("\\", "/").lstrip("/")).resolve(strict=False)
    if root != candidate and root not in candidate.parents:
        raise PermissionError(f"Path escapes the instance directory: {requested_path}")
    return candidate


class LocalFileManager:
    """
    Executes file operations inside one instance's working directory.

    Every path is taken relative to the instance root; anything resolving
    outside of it is refused.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def safe_path(self, rel: str) -> Path:
        return validate_path(rel, self.root)

    def list_dir(self, target: str, page: int = 0, page_size: int = 100, file_name: str | None = None) -> dict[str, Any]:
        folder = self.safe_path(target or "")
        if not folder.is_dir():
            raise FileNotFoundError(f"Directory not found: {target}")

        entries = sorted(folder.iterdir(), key=lambda e: (not e.is_dir(), e.name))
        if file_name:
            needle = file_name.lower()
            entries = [e for e in entries if needle in e.name.lower()]

        start = max(page, 0) * page_size
        items: list[dict[str, Any]] = []
        for entry in entries[start : start + page_size]:
            stat = entry.stat()
            items.append(
                {
                    "name": entry.name,
                    "type": 0 if entry.is_dir() else 1,
                    "size": stat.st_size,
                    "time": int(stat.st_mtime),
                    "mode": stat.st_mode & 0o777,
                }
            )
        return {"items": items, "page": page, "pageSize": page_size, "total": len(entries)}

    def touch(self, target: str) -> None:
        path = self.safe_path(target)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=False)

    def mkdir(self, target: str) -> None:
        self.safe_path(target).mkdir(parents=True, exist_ok=False)

    def edit(self, target: str, text: str | None) -> str | None:
        """Return the file's text when ``text`` is None, otherwise overwrite it."""
        path = self.safe_path(target)
        if text is None:
            return path.read_text(encoding="utf-8")
        path.write_text(text, encoding="utf-8")
        return None

    def chmod(self, target: str, mode: int, deep: bool = False) -> None:
        path = self.safe_path(target)
        os.chmod(path, mode)
        if deep and path.is_dir():
            for dirpath, dirnames, filenames in os.walk(path):
                for name in dirnames + filenames:
                    os.chmod(os.path.join(dirpath, name), mode)

    def copy(self, source: str, destination: str) -> None:
        src = self.safe_path(source)
        dst = self.safe_path(destination)
        if src.is_dir():
            shutil.copytree(src, dst)
        else:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src, dst)

    def move(self, source: str, destination: str) -> None:
        src = self.safe_path(source)
        dst = self.safe_path(destination)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))

    def delete(self, target: str) -> None:
        path = self.safe_path(target)
        if path == self.root:
            raise PermissionError("Refusing to delete the instance directory")
        if path.is_dir():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=False)

    def compress(self, source: str, targets: list[str], archive_type: int) -> None:
        """
        ``archive_type == ZIP`` packs ``targets`` into the archive ``source``;
        any other value unpacks ``source`` into the first of ``targets``.
        """
        archive = self.safe_path(source)
        if archive_type == ZIP:
            logger.debug("Packing %d target(s) into %s", len(targets), archive)
            archive.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive, "w", zipfile.ZIP_DEFLATED) as zf:
                for target in targets:
                    path = self.safe_path(target)
                    self._add_to_zip(zf, path)
            return

        destination = self.safe_path(targets[0] if targets else "")
        logger.debug("Unpacking %s into %s", archive, destination)
        with zipfile.ZipFile(archive) as zf:
            for member in zf.namelist():
                # Same containment rule for archive members as for requests.
                validate_path(str(destination.relative_to(self.root) / member), self.root)
            zf.extractall(destination)

    def _add_to_zip(self, zf: zipfile.ZipFile, path: Path) -> None:
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                zf.write(child, child.relative_to(path.parent).as_posix())
        else:
            zf.write(path, path.name)
