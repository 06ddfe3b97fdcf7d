"""
Session ID Value Object

"""
from __future__ import annotations
import uuid
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class SessionId:
    """
    Identifier of a chat session. Messages, attachments and prescriptions
    all point back at one.
    """
    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Session ID cannot be empty")

        try:
            uuid.UUID(self.value)
        except ValueError as e:
            raise ValueError(f"Invalid session ID format: {self.value}") from e

    @classmethod
    def generate(cls) -> SessionId:
        return cls(str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value

    def __eq__(self, other: Union[SessionId, str]) -> bool:
        if isinstance(other, SessionId):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other
        return False

    def __hash__(self) -> int:
        return hash(self.value)
