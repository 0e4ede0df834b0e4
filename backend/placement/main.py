from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from placement.api import auth, representatives, staff, students
from placement.bootstrap import run_bootstrap
from placement.config import settings
from placement.database import get_store
from placement.errors import BusinessRuleViolation, PlacementError
from placement.schemas.common import ApiResponse, failure, ok


logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

API_VERSION = "0.1.0"

app = FastAPI(title=settings.app_name, version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _envelope(status_code: int, message: str, data=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=failure(message, data).model_dump(mode="json"))


@app.exception_handler(PlacementError)
async def placement_error_handler(request: Request, exc: PlacementError) -> JSONResponse:
    data = {"error": exc.kind}
    if isinstance(exc, BusinessRuleViolation):
        data["rule"] = exc.rule.name
        log.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    elif exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _envelope(exc.status_code, exc.message, data)


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]} for error in exc.errors()
    ]
    return _envelope(422, "Invalid request", {"errors": errors})


@app.on_event("startup")
def on_startup() -> None:
    settings.ensure_directories()
    run_bootstrap(get_store())


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/health", response_model=ApiResponse[dict[str, str]])
def api_health() -> ApiResponse:
    return ok({"status": "UP", "application": settings.app_name, "version": API_VERSION}, "Service is running")


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(students.router, prefix="/api/students", tags=["students"])
app.include_router(representatives.router, prefix="/api/representatives", tags=["representatives"])
app.include_router(staff.router, prefix="/api/staff", tags=["staff"])
