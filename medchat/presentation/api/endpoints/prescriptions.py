"""
Prescription API Endpoints

"""
from typing import Optional
from fastapi import APIRouter, HTTPException, Response, status
import logging

from ..schemas.chat_schemas import RateLimitStatusResponse
from ..schemas.prescription_schemas import (
    GeneratePrescriptionRequest,
    GeneratePrescriptionResponse,
    PrescriptionResponse,
    PrescriptionListResponse,
)
from ....core.application.use_cases import GeneratePrescriptionRequest as UseCaseGeneratePrescriptionRequest
from ....infrastructure.di.dependencies import CurrentUserDep, PrescriptionUseCaseDep
from ...middleware.error_handler import http_exception_for
from medchat.shared.exceptions import DomainException


router = APIRouter(tags=["prescriptions"])
logger = logging.getLogger(__name__)


@router.post(
    "/chat/sessions/{session_id}/prescriptions",
    response_model=GeneratePrescriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Draft a prescription from a conversation",
    description="Ask the model for a structured prescription draft based on the session so far"
)
async def generate_prescription(
    session_id: str,
    response: Response,
    current_user: CurrentUserDep,
    prescription_use_case: PrescriptionUseCaseDep,
    request: Optional[GeneratePrescriptionRequest] = None
) -> GeneratePrescriptionResponse:
    try:
        logger.info(f"Generating prescription for session {session_id}")

        result = await prescription_use_case.generate_prescription(UseCaseGeneratePrescriptionRequest(
            user_id=current_user.user_id,
            session_id=session_id,
            model=request.model if request else None
        ))

        response.headers.update(result.rate_limit.headers())

        return GeneratePrescriptionResponse(
            prescription=PrescriptionResponse.from_entity(result.prescription),
            rate_limit=RateLimitStatusResponse.from_decision(result.rate_limit)
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error generating prescription: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error generating prescription"
        )


@router.get(
    "/prescriptions",
    response_model=PrescriptionListResponse,
    summary="List the caller's prescriptions"
)
async def list_prescriptions(
    current_user: CurrentUserDep,
    prescription_use_case: PrescriptionUseCaseDep
) -> PrescriptionListResponse:
    try:
        prescriptions = await prescription_use_case.list_prescriptions(current_user.user_id)
        return PrescriptionListResponse(
            prescriptions=[PrescriptionResponse.from_entity(p) for p in prescriptions],
            total=len(prescriptions)
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error listing prescriptions: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error listing prescriptions"
        )


@router.get(
    "/prescriptions/{prescription_id}",
    response_model=PrescriptionResponse,
    summary="Get a prescription"
)
async def get_prescription(
    prescription_id: str,
    current_user: CurrentUserDep,
    prescription_use_case: PrescriptionUseCaseDep
) -> PrescriptionResponse:
    try:
        prescription = await prescription_use_case.get_prescription(current_user.user_id, prescription_id)
        return PrescriptionResponse.from_entity(prescription)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error getting prescription {prescription_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error getting prescription"
        )
