from __future__ import annotations

import logging
import time
from typing import Any

import jwt
from fastapi import Header, HTTPException

from file_locks.enforcement import ADMIN_ROLE, Caller
from settings import get_settings

logger = logging.getLogger(__name__)

ROLES = (ADMIN_ROLE, "user")


def issue_caller_token(*, subject: str, role: str, ttl_seconds: int = 60) -> str:
    """
    Sign the caller capability the way the control plane does.

    Tokens are short-lived: one is minted per forwarded request.
    """
    if role not in ROLES:
        raise ValueError(f"unknown role: {role}")
    settings = get_settings()
    now = int(time.time())
    payload = {
        "iss": settings.jwt_issuer,
        "sub": subject,
        "iat": now,
        "exp": now + ttl_seconds,
        "role": role,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)


def verify_caller_token(token: str) -> Caller | None:
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_alg],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "sub", "iss"]},
        )
    except jwt.PyJWTError as e:
        logger.info("CALLER VERIFY: jwt decode failed: %r", e)
        return None

    sub = payload.get("sub")
    role = payload.get("role")
    if not isinstance(sub, str) or not sub:
        logger.info("CALLER VERIFY: bad sub")
        return None
    if role not in ROLES:
        logger.info("CALLER VERIFY: bad role %r", role)
        return None
    return Caller(subject=sub, role=role)


async def get_caller(authorization: str | None = Header(default=None)) -> Caller:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="missing bearer token")
    caller = verify_caller_token(authorization.split(" ", 1)[1].strip())
    if caller is None:
        raise HTTPException(status_code=401, detail="invalid bearer token")
    return caller
