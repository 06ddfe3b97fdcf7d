"""
Profile Entity

"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..value_objects import UserId
from medchat.shared.constants import SpecialtyConstants
from medchat.shared.utils import validate_email


@dataclass
class Profile:
    """
    A registered user of the chat application.

    Owns chat sessions, attachments, prescriptions and a rate-limit window.
    """
    user_id: UserId
    email: str
    display_name: str
    preferred_specialty: str = SpecialtyConstants.DEFAULT_SPECIALTY
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Validate profile state."""
        if not validate_email(self.email):
            raise ValueError(f"Invalid email address: {self.email}")

        if not self.display_name or not self.display_name.strip():
            raise ValueError("Display name cannot be empty")

        if len(self.display_name) > 100:
            raise ValueError("Display name too long (max 100 characters)")

        if self.updated_at < self.created_at:
            raise ValueError("Updated timestamp cannot be before created timestamp")

    @classmethod
    def create(
        cls,
        email: str,
        display_name: str,
        preferred_specialty: Optional[str] = None
    ) -> Profile:
        """Create a new profile with a fresh identifier."""
        return cls(
            user_id=UserId.generate(),
            email=email.strip().lower(),
            display_name=display_name.strip(),
            preferred_specialty=preferred_specialty or SpecialtyConstants.DEFAULT_SPECIALTY
        )

    def rename(self, display_name: str) -> None:
        """Change the display name."""
        if not display_name or not display_name.strip():
            raise ValueError("Display name cannot be empty")
        if len(display_name) > 100:
            raise ValueError("Display name too long (max 100 characters)")

        self.display_name = display_name.strip()
        self.updated_at = datetime.now(timezone.utc)

    def set_preferred_specialty(self, specialty: str) -> None:
        """Change the specialty new sessions default to."""
        self.preferred_specialty = specialty
        self.updated_at = datetime.now(timezone.utc)

    def __str__(self) -> str:
        return f"Profile({self.user_id}, {self.email})"
