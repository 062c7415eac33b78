from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.api.deps import get_db_engine
from app.infrastructure.db.engine import ping
from app.shared.config import get_settings


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health():
    settings = get_settings()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        ping(get_db_engine())
    except Exception as exc:  # noqa: BLE001
        logger.warning("health: database_unreachable error=%s", exc)
        return JSONResponse(
            status_code=503,
            content={
                "status": "degraded",
                "database": "disconnected",
                "timestamp": timestamp,
            },
        )
    return {
        "status": "alive",
        "database": "connected",
        "timestamp": timestamp,
        "environment": settings.environment,
    }
