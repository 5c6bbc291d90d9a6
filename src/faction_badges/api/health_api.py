from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
import logging

from faction_badges.core.config import Settings
from faction_badges.core.dependencies import get_identity_store, get_settings_from_app
from faction_badges.repositories import IdentityStore
from faction_badges.schemas.common import ConfigResponse, ErrorResponse, HealthCheckResponse
from faction_badges.schemas.user import StatsPayload, StatsResponse

logger = logging.getLogger("HEALTH_API_LOGGER")

health_api_router = APIRouter(prefix="/api", tags=["health"])


@health_api_router.get("/config", response_model=ConfigResponse)
def get_config(settings: Settings = Depends(get_settings_from_app)):
    """Public configuration the front-end needs to render the login button."""
    return ConfigResponse(
        github_configured=settings.github_configured,
        base_url=settings.get_base_url(),
    )


@health_api_router.get(
    "/stats",
    response_model=StatsResponse,
    responses={500: {"model": ErrorResponse}},
)
def get_stats(store: IdentityStore = Depends(get_identity_store)):
    try:
        stats = store.get_stats()
    except Exception as e:
        logger.error(f"Failed to get stats: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "Failed to get stats"},
        )
    return StatsResponse(stats=StatsPayload.from_stats(stats))


@health_api_router.get("/health", response_model=HealthCheckResponse)
def health_status(store: IdentityStore = Depends(get_identity_store)):
    """
    Identity store reachability.

    Always answers 200; the status field carries "healthy" or "degraded".
    """
    store_health = store.get_health_status()
    overall_status = "healthy" if store_health.get("status") == "healthy" else "degraded"
    return HealthCheckResponse(
        status=overall_status,
        backend=store.backend_name,
        store=store_health,
    )
