"""FastAPI application entry point for the DM dashboard backend."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from server.config import settings
from server.db import close_db, get_db, init_db
from server.errors import NotFoundError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting DM dashboard server")
    await init_db(settings.db_path)
    logger.info("Server ready (database: %s)", settings.db_path)
    yield
    logger.info("Shutting down server")
    await close_db()
    logger.info("Server stopped")


app = FastAPI(
    title="DM Dashboard",
    description="Combat encounter and initiative tracking for tabletop RPG sessions",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        loc = " → ".join(str(l) for l in error["loc"])
        errors.append({"field": loc, "message": error["msg"]})
    return JSONResponse(status_code=422, content={"detail": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    duration_ms = (time.monotonic() - start) * 1000
    logger.info(
        "%s %s → %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

# Include routes
from server.routes.auth import router as auth_router  # noqa: E402
from server.routes.combatants import router as combatants_router  # noqa: E402
from server.routes.encounters import router as encounters_router  # noqa: E402

app.include_router(auth_router, tags=["auth"])
app.include_router(combatants_router, tags=["combatants"])
app.include_router(encounters_router, tags=["encounters"])


@app.get("/health", tags=["ops"])
async def health_check():
    """Health check endpoint for load balancer probes."""
    try:
        db = await get_db()
        await db.execute("SELECT 1")
        return {"status": "ok", "version": app.version}
    except Exception:
        return JSONResponse(status_code=503, content={"status": "unavailable"})
