"""
Blogdesk Backend: Health Check Route
======================================

What:  GET /_health for container probes and load balancers.
How:   Pings the database handle; 200 when connected, 503 otherwise (or when
       building the report itself fails).
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from blogdesk import __version__
from blogdesk.database import Database
from blogdesk.schemas.common import ErrorResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/_health",
    response_model=HealthResponse,
    responses={503: {"description": "Database not connected", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    uptime = round(time.time() - getattr(request.app.state, "started_at", time.time()), 2)
    try:
        database: Database = request.app.state.database
        db_state = await database.ping()
    except Exception as e:
        logger.warning("Health check failed: %s", str(e))
        db_state = Database.DISCONNECTED

    healthy = db_state == Database.CONNECTED
    if not healthy:
        response.status_code = 503

    return HealthResponse(
        status="ok" if healthy else "unavailable",
        uptime=uptime,
        database=db_state,
        version=__version__,
    )
