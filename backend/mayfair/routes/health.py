"""
Mayfair Backend — Health Check Route
======================================

What:  Liveness endpoint for the hosting platform and uptime monitors.
How:   Answers 200 as long as the process can serve requests. Feature
       module state is deliberately not probed: a failed bookings router
       degrades one path, it does not make the instance unhealthy.
"""

from fastapi import APIRouter, Request

from mayfair.schemas.envelope import HealthData, HealthResponse, utc_timestamp

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    return HealthResponse(
        data=HealthData(
            status="OK",
            timestamp=utc_timestamp(),
            environment=settings.environment,
            version=settings.app_version,
        )
    )
