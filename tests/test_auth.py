from __future__ import annotations

import time

import jwt
import pytest

from endpoints.auth import issue_caller_token, verify_caller_token


def test_issued_token_yields_caller(sandbox_project):
    caller = verify_caller_token(issue_caller_token(subject="root", role="admin"))
    assert caller is not None
    assert caller.subject == "root"
    assert caller.is_admin is True

    caller = verify_caller_token(issue_caller_token(subject="alice", role="user"))
    assert caller is not None
    assert caller.is_admin is False


def test_unknown_role_cannot_be_issued(sandbox_project):
    with pytest.raises(ValueError):
        issue_caller_token(subject="x", role="owner")


def _forge(**overrides):
    now = int(time.time())
    payload = {"iss": "test-control-plane", "sub": "mallory", "iat": now, "exp": now + 60, "role": "admin"}
    payload.update(overrides)
    secret = payload.pop("secret", "test-secret")
    return jwt.encode(payload, secret, algorithm="HS256")


def test_rejects_tokens_not_signed_by_the_control_plane(sandbox_project):
    assert verify_caller_token(_forge()) is not None
    assert verify_caller_token(_forge(secret="guessed")) is None
    assert verify_caller_token(_forge(iss="elsewhere")) is None
    assert verify_caller_token(_forge(exp=int(time.time()) - 10)) is None
    assert verify_caller_token(_forge(role="superuser")) is None
    assert verify_caller_token("not-a-jwt") is None
