# ---------------------------------------------------------
# property_api/main.py
# Property Listing API
#
# Run: uvicorn property_api.main:app --reload (from repo root)
#  or: python -m property_api.main
#
# - /api/auth/register, /api/auth/login : accounts + bearer tokens
# - /api/properties                      : list (filters + pagination), create
# - /api/properties/{id}                 : get, update, delete (owner agent)
# - /api/properties/admin/{id}           : delete any listing (admin)
# - /health                              : liveness
# - /                                    : redirect to /docs
# ---------------------------------------------------------

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from property_api.config import CORS_ORIGINS, ENV, IS_DEV, IS_PROD, PORT, check_environment
from property_api.db import dispose_engine, init_db, init_engine
from property_api.errors import ApiError
from property_api.logging_config import setup_logging
from property_api.routes_auth import router as auth_router
from property_api.routes_properties import router as properties_router
from property_api.schemas import HealthResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Uniform error body used by every handler."""
    return JSONResponse(status_code=status_code, content={"error": message, "status": status_code})


def validation_message(errors: List[Dict[str, Any]]) -> str:
    """Summarize pydantic request errors as one readable sentence."""
    missing = [
        str(err["loc"][-1])
        for err in errors
        if err.get("type") == "missing" and len(err.get("loc", ())) > 1
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    if not errors:
        return "Invalid request"

    first = errors[0]
    loc = tuple(first.get("loc", ()))
    if loc == ("body",):
        return "Request body is required" if first.get("type") == "missing" else first["msg"]

    field = ".".join(str(part) for part in loc if part not in ("body", "query", "path"))
    return f"{field}: {first['msg']}" if field else first["msg"]


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # No route for this method + path (404 or 405); service 404s arrive as ApiError
    if exc.status_code in (404, 405):
        return error_response(404, "Route not found")
    return error_response(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = validation_message(list(exc.errors()))
    logger.debug("[VALIDATION] %s %s -> %s", request.method, request.url.path, message)
    return error_response(400, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[ERROR] Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = check_environment()
    if missing:
        if not IS_DEV:
            raise RuntimeError(f"Missing environment variables: {', '.join(missing)}")
        logger.warning("[CONFIG] Missing environment variables (dev defaults used): %s", ", ".join(missing))

    # Connection setup is idempotent; an already configured engine is reused
    init_engine()
    init_db()
    logger.info("[STARTUP] Property Listing API ready (env=%s)", ENV)
    try:
        yield
    finally:
        dispose_engine()


def create_app() -> FastAPI:
    """Build the ASGI application."""
    setup_logging()

    app = FastAPI(
        title="Property Listing API",
        version="1.0.0",
        description="REST API for property listing with agent and admin roles",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
        allow_credentials=IS_PROD,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse(url=app.docs_url)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="OK")

    app.include_router(auth_router)
    app.include_router(properties_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("property_api.main:app", host="0.0.0.0", port=PORT)
