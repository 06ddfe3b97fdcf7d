"""
Dependency Injection Module

"""
from .container import (
    DIContainer,
    get_container,
    initialize_container,
    cleanup_container,
)
from .dependencies import (
    get_current_user,
    get_profile_use_case,
    get_chat_use_case,
    get_attachment_use_case,
    get_prescription_use_case,
    get_rate_limiter,
    get_specialty_catalog,
)

__all__ = [
    "DIContainer",
    "get_container",
    "initialize_container",
    "cleanup_container",
    "get_current_user",
    "get_profile_use_case",
    "get_chat_use_case",
    "get_attachment_use_case",
    "get_prescription_use_case",
    "get_rate_limiter",
    "get_specialty_catalog",
]
