"""
Chat API Endpoints

"""
from typing import AsyncIterator
from fastapi import APIRouter, HTTPException, Query, Response, status
from fastapi.responses import StreamingResponse
import logging

from ..schemas.chat_schemas import (
    StartSessionRequest,
    RenameSessionRequest,
    SessionResponse,
    SessionListResponse,
    SendMessageRequest,
    SendMessageResponse,
    MessageResponse,
    ChatHistoryResponse,
    SessionSummaryResponse,
    RateLimitStatusResponse,
    StreamingMessageChunk,
    StreamingErrorEvent,
)
from ....core.application.use_cases import (
    PreparedMessage,
    StartSessionRequest as UseCaseStartSessionRequest,
    SendMessageRequest as UseCaseSendMessageRequest,
    ChatHistoryRequest as UseCaseChatHistoryRequest,
)
from ....infrastructure.di.container import DIContainer
from ....infrastructure.di.dependencies import ChatUseCaseDep, ContainerDep, CurrentUserDep
from ...middleware.error_handler import http_exception_for, public_message, error_status
from medchat.shared.constants import ChatConstants
from medchat.shared.exceptions import DomainException


router = APIRouter(prefix="/chat", tags=["chat"])
logger = logging.getLogger(__name__)


def _internal_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Error {action}: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal server error {action}"
    )


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a new chat session",
    description="Create a chat session for a specialty; defaults to the profile's preferred specialty"
)
async def start_chat_session(
    request: StartSessionRequest,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> SessionResponse:
    try:
        session = await chat_use_case.start_session(UseCaseStartSessionRequest(
            user_id=current_user.user_id,
            specialty=request.specialty,
            title=request.title
        ))
        return SessionResponse.from_entity(session)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("starting chat session", e)


@router.get(
    "/sessions",
    response_model=SessionListResponse,
    summary="List the caller's chat sessions"
)
async def list_chat_sessions(
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep,
    include_archived: bool = Query(False, description="Include archived sessions")
) -> SessionListResponse:
    try:
        sessions = await chat_use_case.list_sessions(current_user.user_id, include_archived)
        return SessionListResponse(
            sessions=[SessionResponse.from_entity(s) for s in sessions],
            total=len(sessions)
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("listing chat sessions", e)


@router.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    summary="Get a chat session"
)
async def get_chat_session(
    session_id: str,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> SessionResponse:
    try:
        session = await chat_use_case.get_session(current_user.user_id, session_id)
        return SessionResponse.from_entity(session)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("getting chat session", e)


@router.patch(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    summary="Rename a chat session"
)
async def rename_chat_session(
    session_id: str,
    request: RenameSessionRequest,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> SessionResponse:
    try:
        session = await chat_use_case.rename_session(current_user.user_id, session_id, request.title)
        return SessionResponse.from_entity(session)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("renaming chat session", e)


@router.post(
    "/sessions/{session_id}/archive",
    response_model=SessionResponse,
    summary="Archive a chat session",
    description="Archived sessions keep their history but accept no new messages"
)
async def archive_chat_session(
    session_id: str,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> SessionResponse:
    try:
        session = await chat_use_case.archive_session(current_user.user_id, session_id)
        return SessionResponse.from_entity(session)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("archiving chat session", e)


@router.post(
    "/sessions/{session_id}/restore",
    response_model=SessionResponse,
    summary="Reactivate an archived chat session"
)
async def restore_chat_session(
    session_id: str,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> SessionResponse:
    try:
        session = await chat_use_case.restore_session(current_user.user_id, session_id)
        return SessionResponse.from_entity(session)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("restoring chat session", e)


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a chat session",
    description="Delete a session with its messages, attachments and stored files"
)
async def delete_chat_session(
    session_id: str,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> Response:
    try:
        await chat_use_case.delete_session(current_user.user_id, session_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("deleting chat session", e)


@router.post(
    "/sessions/{session_id}/messages",
    response_model=SendMessageResponse,
    summary="Send a message to chat session",
    description="Send a message and wait for the assistant's reply"
)
async def send_message(
    session_id: str,
    request: SendMessageRequest,
    response: Response,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> SendMessageResponse:
    """
    Send a message to a chat session.

    Rate-limit headers describe the caller's remaining quota.
    """
    try:
        logger.info(f"Sending message to session {session_id}")

        result = await chat_use_case.send_message(UseCaseSendMessageRequest(
            user_id=current_user.user_id,
            session_id=session_id,
            content=request.content,
            attachment_ids=request.attachment_ids,
            model=request.model,
            temperature=request.temperature
        ))

        response.headers.update(result.rate_limit.headers())

        return SendMessageResponse(
            session_id=result.session_id,
            user_message=MessageResponse.from_entity(result.user_message),
            assistant_message=MessageResponse.from_entity(result.assistant_message),
            usage=result.usage,
            rate_limit=RateLimitStatusResponse.from_decision(result.rate_limit)
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("sending message", e)


@router.post(
    "/sessions/{session_id}/messages/stream",
    summary="Send a message with streaming response",
    description="Send a message and receive the reply as Server-Sent Events"
)
async def send_streaming_message(
    session_id: str,
    request: SendMessageRequest,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep,
    container: ContainerDep
) -> StreamingResponse:
    """
    Send a message and stream the reply.

    Validation, quota and the stored user message are settled before the
    stream opens, so those failures still produce a normal error status.
    Provider failures during the stream end it with an error event.
    """
    try:
        prepared = await chat_use_case.prepare_message(UseCaseSendMessageRequest(
            user_id=current_user.user_id,
            session_id=session_id,
            content=request.content,
            attachment_ids=request.attachment_ids,
            model=request.model,
            temperature=request.temperature
        ))

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("starting message stream", e)

    headers = prepared.rate_limit.headers()
    headers.update({"Cache-Control": "no-cache", "X-Accel-Buffering": "no"})

    return StreamingResponse(
        _stream_reply(container, prepared),
        media_type="text/event-stream",
        headers=headers
    )


async def _stream_reply(container: DIContainer, prepared: PreparedMessage) -> AsyncIterator[str]:
    # The request's own database session may already be closed once streaming starts
    async with container.chat_use_case_scope() as chat_use_case:
        try:
            async for chunk in chat_use_case.complete_stream(prepared):
                event = StreamingMessageChunk(
                    content=chunk.content,
                    is_complete=chunk.is_complete,
                    chunk_index=chunk.chunk_index,
                    metadata=chunk.metadata
                )
                yield f"data: {event.model_dump_json()}\n\n"

        except DomainException as e:
            status_code, _ = error_status(e)
            logger.error(f"Streaming reply failed for session {prepared.session_id}: {e}")
            event = StreamingErrorEvent(error=public_message(e, status_code), error_code=e.error_code)
            yield f"data: {event.model_dump_json()}\n\n"


@router.get(
    "/sessions/{session_id}/history",
    response_model=ChatHistoryResponse,
    summary="Get chat history",
    description="Get a page of a session's messages in conversation order"
)
async def get_chat_history(
    session_id: str,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep,
    limit: int = Query(ChatConstants.DEFAULT_HISTORY_LIMIT, description="Maximum messages to return"),
    offset: int = Query(0, description="Messages to skip")
) -> ChatHistoryResponse:
    try:
        history = await chat_use_case.get_history(UseCaseChatHistoryRequest(
            user_id=current_user.user_id,
            session_id=session_id,
            limit=limit,
            offset=offset
        ))
        return ChatHistoryResponse(
            session=SessionResponse.from_entity(history.session),
            messages=[MessageResponse.from_entity(m) for m in history.messages],
            total_messages=history.total_messages,
            has_more=history.has_more
        )

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("getting chat history", e)


@router.get(
    "/sessions/{session_id}/summary",
    response_model=SessionSummaryResponse,
    summary="Get chat session summary"
)
async def get_session_summary(
    session_id: str,
    current_user: CurrentUserDep,
    chat_use_case: ChatUseCaseDep
) -> SessionSummaryResponse:
    try:
        summary = await chat_use_case.get_session_summary(current_user.user_id, session_id)
        return SessionSummaryResponse(**summary)

    except DomainException as e:
        raise http_exception_for(e)
    except Exception as e:
        raise _internal_error("getting session summary", e)
