"""
Prescription Entity
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import uuid

from ..value_objects import SessionId, UserId


@dataclass(frozen=True)
class Medication:
    """One medication line of a prescription."""
    name: str
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None
    instructions: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Medication name cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Medication:
        return cls(
            name=data["name"],
            dosage=data.get("dosage"),
            frequency=data.get("frequency"),
            duration=data.get("duration"),
            instructions=data.get("instructions"),
        )


@dataclass
class Prescription:
    """
    A model-drafted prescription restated into a fixed record shape.

    ``is_structured`` records whether the model's reply could be parsed
    into medications, or was kept as free-text notes.
    """
    prescription_id: str
    user_id: UserId
    session_id: Optional[SessionId]
    notes: str
    medications: List[Medication] = field(default_factory=list)
    diagnosis: Optional[str] = None
    raw_output: str = ""
    is_structured: bool = False
    model: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.notes or not self.notes.strip():
            raise ValueError("Prescription notes cannot be empty")

        if self.is_structured and not self.medications and not self.diagnosis:
            raise ValueError("Structured prescriptions need a diagnosis or medications")

    @classmethod
    def create(
        cls,
        user_id: UserId,
        session_id: Optional[SessionId],
        notes: str,
        medications: Optional[List[Medication]] = None,
        diagnosis: Optional[str] = None,
        raw_output: str = "",
        is_structured: bool = False,
        model: Optional[str] = None
    ) -> Prescription:
        return cls(
            prescription_id=str(uuid.uuid4()),
            user_id=user_id,
            session_id=session_id,
            notes=notes,
            medications=list(medications or []),
            diagnosis=diagnosis,
            raw_output=raw_output,
            is_structured=is_structured,
            model=model
        )

    @property
    def medication_count(self) -> int:
        return len(self.medications)

    def __str__(self) -> str:
        return f"Prescription({self.prescription_id[:8]}, {self.medication_count} medications)"
