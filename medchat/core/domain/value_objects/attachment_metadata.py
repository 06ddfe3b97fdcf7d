"""
Attachment Metadata Value Object

"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from medchat.shared.constants import FileConstants
from medchat.shared.utils import validate_filename, is_allowed_extension, guess_content_type


class AttachmentRuleViolation(ValueError):
    """An upload breaks one named rule: ``filename``, ``extension`` or ``size``."""

    def __init__(self, message: str, rule: str):
        super().__init__(message)
        self.rule = rule


@dataclass(frozen=True)
class AttachmentMetadata:
    """
    Value object describing an uploaded file before it is stored.

    Construction enforces the upload rules: allow-listed extension,
    non-empty content and the per-file size ceiling.
    """
    filename: str
    size_bytes: int
    content_type: str

    def __post_init__(self) -> None:
        """Validate attachment metadata."""
        self._validate_filename()
        self._validate_size()

    def _validate_filename(self) -> None:
        """Validate filename format and extension."""
        problem = validate_filename(self.filename)
        if problem:
            raise AttachmentRuleViolation(problem, "filename")

        if not is_allowed_extension(self.filename):
            allowed = ", ".join(sorted(FileConstants.ALLOWED_EXTENSIONS))
            raise AttachmentRuleViolation(
                f"File type {self.extension or '(none)'} is not allowed. Allowed: {allowed}", "extension"
            )

    def _validate_size(self) -> None:
        """Validate file size constraints."""
        if not isinstance(self.size_bytes, int):
            raise AttachmentRuleViolation("File size must be an integer", "size")

        if self.size_bytes <= 0:
            raise AttachmentRuleViolation("File is empty", "size")

        if self.size_bytes > FileConstants.MAX_FILE_SIZE_BYTES:
            raise AttachmentRuleViolation(
                f"File exceeds the {FileConstants.MAX_FILE_SIZE_MB}MB size limit", "size"
            )

    @classmethod
    def create(cls, filename: str, size_bytes: int, declared_content_type: Optional[str] = None) -> AttachmentMetadata:
        """Create metadata, resolving the content type from the extension."""
        return cls(
            filename=filename.strip() if filename else filename,
            size_bytes=size_bytes,
            content_type=guess_content_type(filename or "", declared_content_type)
        )

    @property
    def extension(self) -> str:
        """Get file extension."""
        return Path(self.filename).suffix.lower()

    @property
    def size_mb(self) -> float:
        """Get file size in megabytes."""
        return self.size_bytes / (1024 * 1024)

    @property
    def is_text(self) -> bool:
        """Whether the file's decoded text can be forwarded to the model."""
        return self.extension in FileConstants.TEXT_EXTENSIONS

    def __str__(self) -> str:
        return f"{self.filename} ({self.size_mb:.2f}MB, {self.content_type})"
