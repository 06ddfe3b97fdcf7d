"""
Profile API Schemas

"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from medchat.core.domain.entities import Profile


class CreateProfileRequest(BaseModel):
    """Request schema for registering a profile."""

    email: str = Field(
        ...,
        description="Email address, unique per profile",
        max_length=320,
        examples=["jane.doe@example.com"]
    )

    display_name: str = Field(
        ...,
        description="Name shown in the chat UI",
        min_length=1,
        max_length=100,
        examples=["Jane"]
    )

    preferred_specialty: Optional[str] = Field(
        None,
        description="Specialty new sessions start with; defaults to general",
        examples=["cardiology"]
    )

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Display name cannot be empty")
        return v.strip()


class UpdateProfileRequest(BaseModel):
    """Request schema for updating the caller's profile."""

    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    preferred_specialty: Optional[str] = Field(None, examples=["dermatology"])


class ProfileResponse(BaseModel):
    """Response schema for a profile."""

    user_id: str = Field(..., description="Profile ID, sent back as the X-User-Id header")
    email: str
    display_name: str
    preferred_specialty: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            user_id=profile.user_id.value,
            email=profile.email,
            display_name=profile.display_name,
            preferred_specialty=profile.preferred_specialty,
            created_at=profile.created_at,
            updated_at=profile.updated_at
        )
