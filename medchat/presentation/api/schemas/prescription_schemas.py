"""
Prescription API Schemas

"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from medchat.core.domain.entities import Medication, Prescription
from .chat_schemas import RateLimitStatusResponse


class GeneratePrescriptionRequest(BaseModel):
    """Request schema for drafting a prescription from a session."""

    model: Optional[str] = Field(None, description="Optional model override")


class MedicationSchema(BaseModel):
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None
    instructions: Optional[str] = None

    @classmethod
    def from_entity(cls, medication: Medication) -> "MedicationSchema":
        return cls(**medication.to_dict())


class PrescriptionResponse(BaseModel):
    """Response schema for a prescription draft."""

    prescription_id: str
    session_id: Optional[str] = None
    diagnosis: Optional[str] = None
    medications: List[MedicationSchema] = Field(default_factory=list)
    notes: str
    is_structured: bool = Field(..., description="False when the reply could not be parsed as JSON")
    model: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, prescription: Prescription) -> "PrescriptionResponse":
        return cls(
            prescription_id=prescription.prescription_id,
            session_id=prescription.session_id.value if prescription.session_id else None,
            diagnosis=prescription.diagnosis,
            medications=[MedicationSchema.from_entity(m) for m in prescription.medications],
            notes=prescription.notes,
            is_structured=prescription.is_structured,
            model=prescription.model,
            created_at=prescription.created_at
        )


class GeneratePrescriptionResponse(BaseModel):
    prescription: PrescriptionResponse
    rate_limit: RateLimitStatusResponse


class PrescriptionListResponse(BaseModel):
    prescriptions: List[PrescriptionResponse]
    total: int = Field(..., ge=0)
