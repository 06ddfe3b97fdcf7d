"""
Rate Limit Database Model

"""
from datetime import datetime
from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..base import BaseModel


class RateLimitModel(BaseModel):
    """
    One fixed-window counter per user.
    """
    __tablename__ = "rate_limits"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True
    )
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reset_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<RateLimitModel(user_id={self.user_id}, count={self.request_count})>"
