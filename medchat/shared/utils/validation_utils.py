"""
Validation Utilities

Stateless predicates shared by entities, use cases and API schemas.
"""
import re
from pathlib import Path
from typing import Optional

from ..constants import FileConstants, ChatConstants


_EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if email is valid
    """
    if not email or not isinstance(email, str):
        return False

    return bool(_EMAIL_PATTERN.match(email))


def get_file_extension(filename: str) -> str:
    """Return the lower-cased extension of a filename, including the dot."""
    return Path(filename).suffix.lower()


def validate_filename(filename: str) -> Optional[str]:
    """
    Check a filename against the attachment naming rules.

    Args:
        filename: Filename to validate

    Returns:
        None when the name is acceptable, otherwise a reason string
    """
    if not filename or not isinstance(filename, str) or not filename.strip():
        return "Filename cannot be empty"

    if len(filename) > FileConstants.MAX_FILENAME_LENGTH:
        return f"Filename too long (max {FileConstants.MAX_FILENAME_LENGTH} characters)"

    if any(char in filename for char in FileConstants.INVALID_FILENAME_CHARS):
        return "Filename contains invalid characters"

    if filename.strip() in {".", ".."}:
        return "Filename cannot be a relative path"

    return None


def is_allowed_extension(filename: str) -> bool:
    """Check the filename extension against the attachment allow-list."""
    return get_file_extension(filename) in FileConstants.ALLOWED_EXTENSIONS


def validate_text_content(
    content: str,
    min_length: int = 1,
    max_length: int = ChatConstants.MAX_MESSAGE_LENGTH
) -> bool:
    """
    Validate text content length.

    Args:
        content: Text content to validate
        min_length: Minimum allowed length after stripping
        max_length: Maximum allowed length

    Returns:
        True if content is valid
    """
    if not isinstance(content, str):
        return False

    return min_length <= len(content.strip()) and len(content) <= max_length


def guess_content_type(filename: str, declared: Optional[str] = None) -> str:
    """Resolve a content type, preferring the allow-list mapping over the client's claim."""
    mapped = FileConstants.CONTENT_TYPES.get(get_file_extension(filename))
    if mapped:
        return mapped
    return declared or "application/octet-stream"
