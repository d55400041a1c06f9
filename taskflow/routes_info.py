# -*- coding: utf-8 -*-

"""
Service info and health routes.

- /api: service banner
- /api/health: health check including a store round-trip
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from loguru import logger

from taskflow.config import APP_ENV, APP_TITLE, APP_VERSION
from taskflow.predicates import all_of

router = APIRouter(prefix="/api")


@router.get("")
async def root():
    """Service banner with environment and version."""
    return {
        "message": f"{APP_TITLE} Backend API is running!",
        "environment": APP_ENV,
        "version": APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health")
async def health(request: Request):
    """
    Detailed health check.

    Returns:
        Status, store state and timestamp
    """
    try:
        request.app.state.task_store.count(all_of())
        store_state = "connected"
    except Exception as e:
        logger.error(f"Health check store query failed: {e}")
        store_state = "disconnected"

    return {
        "status": "OK" if store_state == "connected" else "DEGRADED",
        "store": store_state,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": APP_VERSION,
    }
