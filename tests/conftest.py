from __future__ import annotations

import importlib
from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def sandbox_project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Point DATA_DIR at a temp directory so tests never touch real ./data.
    """
    data = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(data))
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("JWT_ISSUER", "test-control-plane")
    return tmp_path


@pytest.fixture
def reload_endpoints(sandbox_project: Path) -> None:
    """
    Endpoints create the lock service singleton at import time; reload after sandboxing.
    """
    import endpoints.file_endpoints as file_endpoints

    importlib.reload(file_endpoints)


@pytest.fixture
def instance_dir(sandbox_project: Path) -> Path:
    root = sandbox_project / "servers" / "survival"
    (root / "world" / "region").mkdir(parents=True)
    (root / "world" / "region" / "r.0.0.mca").write_text("region", encoding="utf-8")
    (root / "world" / "level.dat").write_text("level", encoding="utf-8")
    (root / "plugins").mkdir()
    (root / "server.properties").write_text("motd=hello\n", encoding="utf-8")
    return root


@pytest.fixture
def client(reload_endpoints, instance_dir: Path):
    from fastapi.testclient import TestClient

    import app as app_module
    from endpoints.file_endpoints import LOCK_SERVICE
    from persistence.instance_config import InstanceConfigRecord

    LOCK_SERVICE.sync.register_instance(
        InstanceConfigRecord(instance_uuid="inst-1", nickname="survival", cwd=str(instance_dir))
    )
    return TestClient(app_module.create_app())


@pytest.fixture
def admin_headers(sandbox_project: Path) -> dict[str, str]:
    from endpoints.auth import issue_caller_token

    return {"Authorization": f"Bearer {issue_caller_token(subject='root', role='admin')}"}


@pytest.fixture
def user_headers(sandbox_project: Path) -> dict[str, str]:
    from endpoints.auth import issue_caller_token

    return {"Authorization": f"Bearer {issue_caller_token(subject='alice', role='user')}"}
