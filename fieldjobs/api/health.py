"""
Health and metrics endpoints - no authentication required
"""

import logging

from fastapi import APIRouter, Request, Response

from fieldjobs.config import API_VERSION
from fieldjobs.services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health", include_in_schema=False)
async def health(request: Request):
    scheduler = getattr(request.app.state, "scheduler", None)
    return {
        "status": "ok",
        "service": "fieldjobs-api",
        "version": API_VERSION,
        "last_reevaluation": scheduler.last_result if scheduler else None,
    }

@router.get("/metrics/prometheus", tags=["Metrics"], summary="Prometheus metrics")
async def prometheus_exposition() -> Response:
    """Metrics in Prometheus exposition format; a failure is a 500 so the scrape is marked down"""
    try:
        body = prometheus_metrics.get_metrics()
    except Exception:
        logger.exception("Failed to render Prometheus metrics")
        raise
    return Response(content=body, media_type=prometheus_metrics.get_content_type())
