"""
Liveness probe.

``GET /healthz`` answers ``{"ok": true}`` as long as the process can serve
HTTP. It never touches PostgreSQL, so a database outage shows up as 500s on
``/songs`` rather than as a failed probe that restarts the container.

    curl http://localhost:8080/healthz
"""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=dict[str, bool])
def healthz() -> dict[str, bool]:
    """Report that the API process is up."""
    return {"ok": True}
