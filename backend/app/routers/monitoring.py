"""Prometheus scrape endpoint."""

from fastapi import APIRouter, HTTPException, Response

from ..config import settings
from ..utils.metrics import metrics_response

router = APIRouter(tags=["monitoring"])


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Expose Prometheus metrics in text exposition format."""
    if not settings.METRICS_ENABLED:
        raise HTTPException(status_code=404, detail="Not Found")
    payload, content_type = metrics_response()
    return Response(content=payload, media_type=content_type)
