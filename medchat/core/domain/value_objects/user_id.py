"""
User ID Value Object

"""
from __future__ import annotations
import uuid
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class UserId:
    """
    Identifier of a profile, shared by every record a user owns.
    """
    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("User ID cannot be empty")

        try:
            uuid.UUID(self.value)
        except ValueError as e:
            raise ValueError(f"Invalid user ID format: {self.value}") from e

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new unique user ID."""
        return cls(str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: Union[UserId, str]) -> bool:
        if isinstance(other, UserId):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other
        return False

    def __hash__(self) -> int:
        return hash(self.value)
