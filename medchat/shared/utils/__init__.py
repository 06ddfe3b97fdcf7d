"""
Shared Utilities

Common utility functions used across the application.
"""
from .validation_utils import (
    validate_email,
    validate_filename,
    validate_text_content,
    get_file_extension,
    is_allowed_extension,
    guess_content_type,
)
from .time_utils import utc_now, ensure_utc

__all__ = [
    "validate_email",
    "validate_filename",
    "validate_text_content",
    "get_file_extension",
    "is_allowed_extension",
    "guess_content_type",
    "utc_now",
    "ensure_utc",
]
