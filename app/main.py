from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.routers.auth import router as auth_router
from app.api.routers.health import router as health_router
from app.shared.config import get_settings, validate_settings
from app.shared.logging import setup_logging


logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    validate_settings(settings)
    setup_logging(settings.log_level, json_output=settings.is_production)
    logger.info("api: started environment=%s mail_mode=%s", settings.environment, settings.mail_mode)
    yield


app = FastAPI(title="Every.music API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.portal_origin],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    logger.info(
        "api: request_completed method=%s path=%s status=%s duration_ms=%s",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


register_exception_handlers(app, expose_internal_errors=not settings.is_production)

app.include_router(health_router)
app.include_router(auth_router)
