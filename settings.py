from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Storage
    data_dir: Path

    # Control-plane tokens
    jwt_secret: str
    jwt_alg: str
    jwt_issuer: str

    # Debug
    debug_log_requests: bool

    # Text returned to callers rejected by a file lock
    lock_violation_message: str


def get_settings() -> Settings:
    default_data_dir = Path(__file__).resolve().parent / "data"
    data_dir = Path(os.getenv("DATA_DIR", str(default_data_dir))).expanduser()

    # NOTE: default is insecure; set JWT_SECRET in production
    jwt_secret = os.getenv("JWT_SECRET", "dev-only-super-secret")
    jwt_alg = os.getenv("JWT_ALG", "HS256")
    jwt_issuer = os.getenv("JWT_ISSUER", "control-plane")

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", False)

    lock_violation_message = os.getenv(
        "LOCK_VIOLATION_MESSAGE",
        "The file or folder is locked and cannot be modified.",
    )

    return Settings(
        data_dir=data_dir,
        jwt_secret=jwt_secret,
        jwt_alg=jwt_alg,
        jwt_issuer=jwt_issuer,
        debug_log_requests=debug_log_requests,
        lock_violation_message=lock_violation_message,
    )
