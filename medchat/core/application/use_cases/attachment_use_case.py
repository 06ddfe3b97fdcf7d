"""
Attachment Use Cases

"""
from dataclasses import dataclass, field
from io import BytesIO
from typing import Dict, List, Optional, Sequence, Union
import logging

from ...domain.entities import Attachment
from ...domain.repositories import AttachmentRepository, ChatRepository
from ...domain.services import AttachmentPolicy, IncomingFile
from ...domain.value_objects import SessionId, UserId
from ....infrastructure.adapters.storage.file_storage import FileStorage, generate_attachment_path
from medchat.shared.constants import FileConstants
from medchat.shared.exceptions import (
    AttachmentNotFoundError,
    FileStorageError,
)
from .session_access import load_owned_session


@dataclass
class UploadedFile:
    """A file received from the client, held in memory."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass
class UploadAttachmentsRequest:
    """Request object for uploading files into a session."""
    user_id: UserId
    session_id: Union[SessionId, str]
    files: List[UploadedFile] = field(default_factory=list)


@dataclass
class UploadAttachmentsResponse:
    """Response object for an upload batch."""
    session_id: str
    attachments: List[Attachment]

    @property
    def total_size_bytes(self) -> int:
        return sum(a.metadata.size_bytes for a in self.attachments)


async def read_text_attachments(
    file_storage: FileStorage,
    attachments: Sequence[Attachment],
    max_chars: int = FileConstants.MAX_ATTACHMENT_TEXT_CHARS
) -> Dict[str, str]:
    """
    Read and decode the text-like attachments among ``attachments``.

    Unreadable files are skipped; the prompt then only names them.

    Returns:
        Decoded text keyed by attachment ID
    """
    logger = logging.getLogger(__name__)
    contents: Dict[str, str] = {}

    for attachment in attachments:
        if not attachment.metadata.is_text:
            continue
        try:
            handle = await file_storage.get_file(attachment.storage_path)
            with handle:
                # One extra character tells the policy the text was truncated.
                raw = handle.read((max_chars + 1) * 4)
        except FileStorageError as e:
            logger.warning(f"Could not read attachment {attachment.attachment_id}: {e}")
            continue

        contents[attachment.attachment_id] = raw.decode("utf-8", errors="replace")[:max_chars + 1]

    return contents


class AttachmentUseCase:
    """
    Use case for attachment uploads.

    A batch is validated as a whole before any file reaches storage.
    """

    def __init__(
        self,
        chat_repository: ChatRepository,
        attachment_repository: AttachmentRepository,
        file_storage: FileStorage,
        attachment_policy: AttachmentPolicy
    ):
        self._chat_repository = chat_repository
        self._attachment_repository = attachment_repository
        self._file_storage = file_storage
        self._attachment_policy = attachment_policy
        self._logger = logging.getLogger(__name__)

    async def upload_attachments(self, request: UploadAttachmentsRequest) -> UploadAttachmentsResponse:
        """
        Upload files into a session.

        Args:
            request: Upload request

        Returns:
            Stored attachments, in upload order

        Raises:
            ChatSessionNotFoundError: If the session doesn't exist for this user
            InvalidSessionStateError: If the session is archived
            AttachmentValidationError: If any file breaks an upload rule
            FileStorageError: If storing a file fails
        """
        session = await load_owned_session(
            self._chat_repository, request.user_id, request.session_id, require_active=True
        )

        metadata = self._attachment_policy.validate_batch([
            IncomingFile(filename=f.filename, size_bytes=f.size_bytes, content_type=f.content_type)
            for f in request.files
        ])

        stored_paths: List[str] = []
        attachments: List[Attachment] = []
        try:
            for uploaded, file_metadata in zip(request.files, metadata):
                attachment_id = Attachment.new_id()
                path = generate_attachment_path(
                    session.session_id.value, attachment_id, file_metadata.filename
                )
                saved_path = await self._file_storage.save_file(
                    BytesIO(uploaded.content), path, file_metadata.content_type
                )
                stored_paths.append(saved_path)

                attachment = Attachment.create(
                    attachment_id=attachment_id,
                    session_id=session.session_id,
                    user_id=request.user_id,
                    metadata=file_metadata,
                    storage_path=saved_path
                )
                attachments.append(await self._attachment_repository.save(attachment))

        except Exception as e:
            self._logger.error(f"Attachment upload failed for session {session.session_id}: {e}")
            await self._remove_files(stored_paths)
            if isinstance(e, FileStorageError):
                raise
            raise FileStorageError(f"Failed to store attachments: {str(e)}", operation="upload")

        self._logger.info(
            f"Stored {len(attachments)} attachment(s) in session {session.session_id}"
        )
        return UploadAttachmentsResponse(session_id=session.session_id.value, attachments=attachments)

    async def list_attachments(self, user_id: UserId, session_id: Union[SessionId, str]) -> List[Attachment]:
        """
        List the attachments of a session.

        Raises:
            ChatSessionNotFoundError: If the session doesn't exist for this user
        """
        session = await load_owned_session(self._chat_repository, user_id, session_id)
        return await self._attachment_repository.find_by_session(session.session_id)

    async def get_attachment(self, user_id: UserId, attachment_id: str) -> Attachment:
        """
        Get one attachment owned by the user.

        Raises:
            AttachmentNotFoundError: If missing or owned by someone else
        """
        attachment = await self._attachment_repository.find_by_id(attachment_id)
        if attachment is None or attachment.user_id != user_id:
            raise AttachmentNotFoundError(attachment_id)
        return attachment

    async def delete_attachment(self, user_id: UserId, attachment_id: str) -> bool:
        """
        Delete an attachment record and its stored file.

        Raises:
            AttachmentNotFoundError: If missing or owned by someone else
        """
        attachment = await self.get_attachment(user_id, attachment_id)

        deleted = await self._attachment_repository.delete(attachment.attachment_id)
        await self._remove_files([attachment.storage_path])

        self._logger.info(f"Deleted attachment {attachment.attachment_id}")
        return deleted

    async def _remove_files(self, paths: List[str]) -> None:
        for path in paths:
            try:
                await self._file_storage.delete_file(path)
            except FileStorageError as e:
                self._logger.warning(f"Could not remove stored file {path}: {e}")
