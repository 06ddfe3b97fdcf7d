"""
Common API Schemas

"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from medchat.core.domain.services import SpecialtyProfile


class SpecialtyResponse(BaseModel):
    """A selectable specialty, without its system prompt."""

    key: str = Field(..., examples=["cardiology"])
    name: str = Field(..., examples=["Cardiology"])
    color: str = Field(..., description="UI accent color", examples=["#DC2626"])
    description: str

    @classmethod
    def from_profile(cls, profile: SpecialtyProfile) -> "SpecialtyResponse":
        return cls(
            key=profile.key,
            name=profile.display_name,
            color=profile.color,
            description=profile.description
        )


class SpecialtyListResponse(BaseModel):
    default: str
    specialties: List[SpecialtyResponse]


class HealthResponse(BaseModel):
    """Service health report."""

    status: str = Field(..., examples=["healthy"])
    version: str
    environment: str
    components: Dict[str, str] = Field(default_factory=dict)
    llm_provider: Optional[str] = None
    rate_limit_backend: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error body produced by the error middleware."""

    error: str
    message: str
    type: str
    error_code: Optional[str] = None
