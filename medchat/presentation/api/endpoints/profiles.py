"""
Profile API Endpoints

"""
from fastapi import APIRouter, HTTPException, status
import logging

from ..schemas.profile_schemas import (
    CreateProfileRequest,
    UpdateProfileRequest,
    ProfileResponse,
)
from ....core.application.use_cases import (
    CreateProfileRequest as UseCaseCreateProfileRequest,
    UpdateProfileRequest as UseCaseUpdateProfileRequest,
)
from ....infrastructure.di.dependencies import CurrentUserDep, ProfileUseCaseDep
from ...middleware.error_handler import http_exception_for
from medchat.shared.exceptions import DomainException


router = APIRouter(prefix="/profiles", tags=["profiles"])
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a profile",
    description="Create a profile; its ID identifies the caller on every other endpoint"
)
async def create_profile(
    request: CreateProfileRequest,
    profile_use_case: ProfileUseCaseDep
) -> ProfileResponse:
    try:
        profile = await profile_use_case.create_profile(UseCaseCreateProfileRequest(
            email=request.email,
            display_name=request.display_name,
            preferred_specialty=request.preferred_specialty
        ))
        return ProfileResponse.from_entity(profile)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error creating profile: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error creating profile"
        )


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get the caller's profile"
)
async def get_my_profile(current_user: CurrentUserDep) -> ProfileResponse:
    return ProfileResponse.from_entity(current_user)


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update the caller's profile"
)
async def update_my_profile(
    request: UpdateProfileRequest,
    current_user: CurrentUserDep,
    profile_use_case: ProfileUseCaseDep
) -> ProfileResponse:
    try:
        profile = await profile_use_case.update_profile(UseCaseUpdateProfileRequest(
            user_id=current_user.user_id,
            display_name=request.display_name,
            preferred_specialty=request.preferred_specialty
        ))
        return ProfileResponse.from_entity(profile)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error updating profile {current_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error updating profile"
        )
