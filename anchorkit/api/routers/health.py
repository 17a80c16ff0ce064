"""
Health check API endpoints.

Routes: GET /health, GET /health/db

Dependencies: anchorkit.application.services.record_store
System role: Health check HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from anchorkit.api.deps import get_record_store
from anchorkit.application.services.record_store import RecordStore
from anchorkit.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/db", response_model=HealthResponse)
async def health_check_db(store: RecordStore = Depends(get_record_store)) -> HealthResponse:
    """
    Database health check.

    Raises:
        HTTPException(503): Store not initialized or unreachable
    """
    try:
        await store.ping()
    except Exception as e:
        log_exception_with_context(logger, "Database health check failed", e)
        raise HTTPException(status_code=503, detail=f"Database unavailable: {e}")
    return HealthResponse(status="healthy", message="Database connection OK")
