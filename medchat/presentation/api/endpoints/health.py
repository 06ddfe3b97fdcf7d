"""
Health API Endpoints

"""
from fastapi import APIRouter, Query
import logging

from ..schemas.common_schemas import HealthResponse
from ....infrastructure.di.dependencies import ContainerDep
from ....infrastructure.adapters.rate_limit import RedisRateLimitStore
from medchat import __version__
from medchat.shared.exceptions import ConfigurationError


router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health",
    description="Database connectivity, inference provider and rate-limit backend"
)
async def health_check(
    container: ContainerDep,
    check_provider: bool = Query(False, description="Also call the inference provider")
) -> HealthResponse:
    settings = container.get_settings()
    components = {}

    db_ok = await container.get_database_manager().health_check()
    components["database"] = "healthy" if db_ok else "unhealthy"

    provider_name = settings.ai_service.llm_provider
    try:
        chat_service = container.get_chat_service()
        provider_name = chat_service.provider_name
        if check_provider:
            provider_ok = await chat_service.health_check()
            components["llm_provider"] = "healthy" if provider_ok else "unhealthy"
        else:
            components["llm_provider"] = "configured"
    except ConfigurationError as e:
        logger.warning(f"Inference provider not configured: {e}")
        components["llm_provider"] = "unconfigured"

    store = container.get_rate_limit_store()
    if isinstance(store, RedisRateLimitStore):
        components["rate_limit"] = "healthy" if await store.ping() else "unhealthy"
    else:
        components["rate_limit"] = "healthy"

    degraded = any(value in ("unhealthy", "unconfigured") for value in components.values())

    return HealthResponse(
        status="degraded" if degraded else "healthy",
        version=__version__,
        environment=settings.environment,
        components=components,
        llm_provider=provider_name,
        rate_limit_backend=store.backend_name
    )
