from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    load_dotenv("local.env")

    from endpoints.file_endpoints import router as file_router
    from file_locks.errors import InstanceNotFound, LockViolation, PersistenceFailure

    app = FastAPI(title="Instance file worker")

    @app.exception_handler(LockViolation)
    async def lock_violation_handler(request: Request, exc: LockViolation) -> JSONResponse:
        return JSONResponse({"err": exc.message, "operation": exc.operation}, status_code=423)

    @app.exception_handler(InstanceNotFound)
    async def instance_not_found_handler(request: Request, exc: InstanceNotFound) -> JSONResponse:
        return JSONResponse({"err": str(exc), "instanceUuid": exc.instance_uuid}, status_code=404)

    @app.exception_handler(PersistenceFailure)
    async def persistence_failure_handler(request: Request, exc: PersistenceFailure) -> JSONResponse:
        logger.error("%s", exc)
        return JSONResponse({"err": str(exc), "instanceUuid": exc.instance_uuid}, status_code=500)

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    app.include_router(file_router)

    return app


app = create_app()
