"""
Prescription Repository Interface

"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities import Prescription
from ..value_objects import UserId


class PrescriptionRepository(ABC):
    """Persistence contract for generated prescriptions."""

    @abstractmethod
    async def save(self, prescription: Prescription) -> Prescription:
        pass

    @abstractmethod
    async def find_by_id(self, prescription_id: str) -> Optional[Prescription]:
        pass

    @abstractmethod
    async def find_by_user(self, user_id: UserId) -> List[Prescription]:
        """Newest first."""
        pass
