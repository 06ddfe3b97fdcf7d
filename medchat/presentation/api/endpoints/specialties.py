"""
Specialty and Quota API Endpoints

"""
from fastapi import APIRouter, HTTPException, status
import logging

from ..schemas.chat_schemas import RateLimitStatusResponse
from ..schemas.common_schemas import SpecialtyListResponse, SpecialtyResponse
from ....infrastructure.di.dependencies import CurrentUserDep, RateLimiterDep, SpecialtyCatalogDep
from ...middleware.error_handler import http_exception_for
from medchat.shared.exceptions import DomainException


router = APIRouter(tags=["specialties"])
logger = logging.getLogger(__name__)


@router.get(
    "/specialties",
    response_model=SpecialtyListResponse,
    summary="List selectable specialties",
    description="Specialties in display order; system prompts are not exposed"
)
async def list_specialties(catalog: SpecialtyCatalogDep) -> SpecialtyListResponse:
    return SpecialtyListResponse(
        default=catalog.default.key,
        specialties=[SpecialtyResponse.from_profile(p) for p in catalog.list_specialties()]
    )


@router.get(
    "/specialties/{key}",
    response_model=SpecialtyResponse,
    summary="Get a specialty"
)
async def get_specialty(key: str, catalog: SpecialtyCatalogDep) -> SpecialtyResponse:
    try:
        return SpecialtyResponse.from_profile(catalog.get_specialty(key))
    except DomainException as e:
        raise http_exception_for(e)


@router.get(
    "/rate-limit",
    response_model=RateLimitStatusResponse,
    tags=["rate-limit"],
    summary="Get the caller's request quota",
    description="Reports the current window without consuming a request"
)
async def get_rate_limit_status(
    current_user: CurrentUserDep,
    rate_limiter: RateLimiterDep
) -> RateLimitStatusResponse:
    try:
        decision = await rate_limiter.status(current_user.user_id)
        return RateLimitStatusResponse.from_decision(
            decision,
            window_seconds=rate_limiter.window_seconds,
            backend=rate_limiter.backend_name
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error reading rate limit status: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error reading rate limit status"
        )
