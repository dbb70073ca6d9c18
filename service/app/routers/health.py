"""Health and index endpoints."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Request
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "data-chatter"
API_VERSION = "1.0.0"

_START = time.monotonic()


@router.get("/health")
def health(request: Request) -> dict:
    database = getattr(request.app.state, "database", None)
    database_status = "unconfigured"
    if database is not None:
        try:
            database.health()
            database_status = "ok"
        except SQLAlchemyError:
            logger.exception("Database health check failed")
            database_status = "unavailable"

    uptime = timedelta(seconds=int(time.monotonic() - _START))
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": str(uptime),
        "database": database_status,
    }


@router.get("/")
def home() -> dict:
    return {
        "message": "Welcome to Data Chatter API",
        "data": {
            "version": API_VERSION,
            "endpoints": {
                "health": "/health",
                "llm": "/llm/message",
                "query": "/db/query",
                "schema": "/db/schema",
                "tools": "/tools",
                "execute": "/tools/execute",
                "single": "/tools/single",
            },
        },
    }
