"""
Authentication Adapters

"""
from .header_identity_provider import HeaderIdentityProvider, USER_ID_HEADER

__all__ = [
    "HeaderIdentityProvider",
    "USER_ID_HEADER",
]
