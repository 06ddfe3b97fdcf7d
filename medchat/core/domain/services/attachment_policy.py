"""
Attachment Policy

Upload constraints checked before any file reaches storage, and the
rendering of attachments into prompt context.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..entities import Attachment
from ..value_objects import AttachmentMetadata, AttachmentRuleViolation
from medchat.shared.constants import FileConstants
from medchat.shared.exceptions import AttachmentValidationError


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded file as received from the client."""
    filename: str
    size_bytes: int
    content_type: Optional[str] = None


class AttachmentPolicy:
    """
    Validates uploads against the extension allow-list, the per-file size
    ceiling and the attachment count ceiling.
    """

    def __init__(
        self,
        max_attachments: int = FileConstants.MAX_ATTACHMENTS,
        max_text_chars: int = FileConstants.MAX_ATTACHMENT_TEXT_CHARS
    ):
        self._max_attachments = max_attachments
        self._max_text_chars = max_text_chars

    @property
    def max_attachments(self) -> int:
        return self._max_attachments

    def validate_batch(self, files: Sequence[IncomingFile]) -> List[AttachmentMetadata]:
        """
        Validate a whole upload batch.

        Args:
            files: Files of one upload request

        Returns:
            Metadata for every file, in upload order

        Raises:
            AttachmentValidationError: On the first file that breaks a rule;
                no file of the batch is accepted in that case
        """
        if not files:
            raise AttachmentValidationError("No files were provided", rule="count")

        self.validate_count(len(files))

        metadata: List[AttachmentMetadata] = []
        for incoming in files:
            try:
                metadata.append(AttachmentMetadata.create(
                    filename=incoming.filename,
                    size_bytes=incoming.size_bytes,
                    declared_content_type=incoming.content_type
                ))
            except AttachmentRuleViolation as e:
                raise AttachmentValidationError(
                    f"{incoming.filename or '(unnamed)'}: {str(e)}",
                    filename=incoming.filename,
                    rule=e.rule
                ) from e
        return metadata

    def validate_count(self, count: int) -> None:
        if count > self._max_attachments:
            raise AttachmentValidationError(
                f"Too many attachments: {count} (max {self._max_attachments})",
                rule="count"
            )

    def build_context(
        self,
        attachments: Sequence[Attachment],
        text_contents: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Render attachments as prompt context.

        Text files contribute their content, truncated; other files
        contribute a line naming the file and its type.

        Args:
            attachments: Attachments referenced by the message
            text_contents: Decoded text keyed by attachment ID

        Returns:
            Context block, or an empty string when there are no attachments
        """
        if not attachments:
            return ""

        text_contents = text_contents or {}
        sections = ["The user attached the following files:"]
        for attachment in attachments:
            text = text_contents.get(attachment.attachment_id)
            if attachment.metadata.is_text and text is not None:
                if len(text) > self._max_text_chars:
                    text = text[:self._max_text_chars] + "\n[truncated]"
                sections.append(f"--- {attachment.filename} ---\n{text}")
            else:
                sections.append(
                    f"- {attachment.filename} ({attachment.metadata.content_type}, "
                    f"{attachment.metadata.size_mb:.2f}MB); content not shown"
                )
        return "\n".join(sections)
