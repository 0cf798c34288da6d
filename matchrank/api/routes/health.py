"""Health check endpoints."""

from fastapi import APIRouter, Depends

from matchrank.api.dependencies import get_selector
from matchrank.api.models import HealthResponse, SystemHealthResponse
from matchrank.config import VERSION
from matchrank.services.selector import MatchSelector

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness check."""
    return HealthResponse(status="healthy", version=VERSION)


@router.get("/system-health", response_model=SystemHealthResponse)
def system_health(selector: MatchSelector = Depends(get_selector)) -> SystemHealthResponse:
    """Provider health: working vs configured providers.

    is_healthy is false when no provider is usable right now.
    """
    return SystemHealthResponse.model_validate(selector.get_system_health().to_dict())
