# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS middleware (``x-reveal-key`` must be an allowed header).
* Mount the feature routers (auth, inventory, settings, reveal).
* Map merge-rule rejections to ``400 {"detail": <code>}``.
* Expose a /health endpoint for container liveness checks.

Run with:  uvicorn main:app --app-dir backend
"""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from auth.router import router as auth_router
from inventory.router import router as inventory_router
from preferences.router import router as settings_router
from reveal.router import router as reveal_router
from core.config import settings
from core.logger import logger
from core.merge import SecretMergeError
from core.security import get_client_ip

app = FastAPI(title="Serdo", version="1.0.0")

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "X-Reveal-Key"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Method, path, client IP, status and latency only.  Headers are never
# logged: they carry the bearer token and the reveal key.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """
    One line per request: method, path, client, status, latency.  Health
    probes are not logged.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/health":
            return await call_next(request)

        started = time.perf_counter()
        response: Response = await call_next(request)
        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            get_client_ip(request),
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response


app.add_middleware(_RequestLogMiddleware)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@app.exception_handler(SecretMergeError)
async def _secret_merge_error(request: Request, exc: SecretMergeError):
    logger.info("rejected secret update | path=%s field=%s code=%s", request.url.path, exc.field, exc.code)
    return JSONResponse(status_code=400, content={"detail": exc.code, "field": exc.field})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_router)
app.include_router(inventory_router)
app.include_router(settings_router)
app.include_router(reveal_router)


@app.on_event("startup")
async def _on_startup():
    logger.info("Serdo service starting up (redact_mode=%s)", settings.redact_mode)


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("Serdo service shutting down")


@app.get("/health")
def health():
    return {"status": "ok"}
