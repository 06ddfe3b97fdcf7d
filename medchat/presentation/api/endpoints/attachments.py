"""
Attachment API Endpoints

"""
from typing import List
from fastapi import APIRouter, File, HTTPException, Response, UploadFile, status
import logging

from ..schemas.attachment_schemas import (
    AttachmentResponse,
    AttachmentListResponse,
    UploadAttachmentsResponse,
)
from ....core.application.use_cases import UploadedFile, UploadAttachmentsRequest
from ....infrastructure.di.dependencies import AttachmentUseCaseDep, CurrentUserDep
from ...middleware.error_handler import http_exception_for
from medchat.shared.constants import FileConstants
from medchat.shared.exceptions import DomainException


router = APIRouter(tags=["attachments"])
logger = logging.getLogger(__name__)


async def _read_upload(upload: UploadFile) -> UploadedFile:
    # One byte past the ceiling is enough for the size rule to reject the file
    content = await upload.read(FileConstants.MAX_FILE_SIZE_BYTES + 1)
    await upload.close()
    return UploadedFile(
        filename=upload.filename or "",
        content=content,
        content_type=upload.content_type
    )


@router.post(
    "/chat/sessions/{session_id}/attachments",
    response_model=UploadAttachmentsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload attachments to a chat session",
    description=(
        f"Upload up to {FileConstants.MAX_ATTACHMENTS} files of at most "
        f"{FileConstants.MAX_FILE_SIZE_MB} MB each. One invalid file rejects the whole batch."
    )
)
async def upload_attachments(
    session_id: str,
    current_user: CurrentUserDep,
    attachment_use_case: AttachmentUseCaseDep,
    files: List[UploadFile] = File(..., description="Files to attach")
) -> UploadAttachmentsResponse:
    try:
        logger.info(f"Uploading {len(files)} file(s) to session {session_id}")

        uploaded = [await _read_upload(f) for f in files]
        result = await attachment_use_case.upload_attachments(UploadAttachmentsRequest(
            user_id=current_user.user_id,
            session_id=session_id,
            files=uploaded
        ))

        return UploadAttachmentsResponse(
            session_id=result.session_id,
            attachments=[AttachmentResponse.from_entity(a) for a in result.attachments],
            total_size_bytes=result.total_size_bytes
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error uploading attachments: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error uploading attachments"
        )


@router.get(
    "/chat/sessions/{session_id}/attachments",
    response_model=AttachmentListResponse,
    summary="List a session's attachments"
)
async def list_attachments(
    session_id: str,
    current_user: CurrentUserDep,
    attachment_use_case: AttachmentUseCaseDep
) -> AttachmentListResponse:
    try:
        attachments = await attachment_use_case.list_attachments(current_user.user_id, session_id)
        return AttachmentListResponse(
            session_id=session_id,
            attachments=[AttachmentResponse.from_entity(a) for a in attachments],
            total=len(attachments)
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error listing attachments: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error listing attachments"
        )


@router.get(
    "/attachments/{attachment_id}",
    response_model=AttachmentResponse,
    summary="Get attachment metadata"
)
async def get_attachment(
    attachment_id: str,
    current_user: CurrentUserDep,
    attachment_use_case: AttachmentUseCaseDep
) -> AttachmentResponse:
    try:
        attachment = await attachment_use_case.get_attachment(current_user.user_id, attachment_id)
        return AttachmentResponse.from_entity(attachment)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error getting attachment {attachment_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error getting attachment"
        )


@router.delete(
    "/attachments/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an attachment"
)
async def delete_attachment(
    attachment_id: str,
    current_user: CurrentUserDep,
    attachment_use_case: AttachmentUseCaseDep
) -> Response:
    try:
        await attachment_use_case.delete_attachment(current_user.user_id, attachment_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        logger.error(f"Error deleting attachment {attachment_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error deleting attachment"
        )
