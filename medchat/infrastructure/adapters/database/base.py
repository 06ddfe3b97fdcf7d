"""
Database Base Configuration

"""
from datetime import datetime
from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from medchat.shared.utils import utc_now


class TimestampMixin:
    """
    Mixin for adding timestamp fields to models.

    Values are set from Python so SQLite and PostgreSQL store the same
    UTC instants.
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False
    )


# Base class for all database models
Base = declarative_base()


class BaseModel(Base, TimestampMixin):
    """
    Abstract base model for all database entities.
    """
    __abstract__ = True

    def to_dict(self) -> dict:
        """Convert model to dictionary representation."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        """String representation of the model."""
        class_name = self.__class__.__name__
        return f"<{class_name}({self.to_dict()})>"
