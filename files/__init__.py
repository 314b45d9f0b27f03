from __future__ import annotations

from .manager import LocalFileManager, validate_path

__all__ = ["LocalFileManager", "validate_path"]
