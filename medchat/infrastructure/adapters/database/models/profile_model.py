"""
Profile Database Model

"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ..base import BaseModel
from medchat.shared.constants import SpecialtyConstants


class ProfileModel(BaseModel):
    """
    SQLAlchemy model for Profile entity.
    """
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    preferred_specialty: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=SpecialtyConstants.DEFAULT_SPECIALTY
    )

    def __repr__(self) -> str:
        return f"<ProfileModel(id={self.id}, email={self.email})>"
