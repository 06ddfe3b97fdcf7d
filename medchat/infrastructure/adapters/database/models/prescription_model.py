"""
Prescription Database Model

"""
from typing import List, Optional
from sqlalchemy import Boolean, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base import BaseModel


class PrescriptionModel(BaseModel):
    """
    SQLAlchemy model for Prescription entity.

    Medications are stored as a JSON list of objects.
    """
    __tablename__ = "prescriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    session_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("chat_sessions.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    diagnosis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    medications: Mapped[List[dict]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    raw_output: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_structured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<PrescriptionModel(id={self.id}, user_id={self.user_id})>"
