"""
Prescription Repository Implementation

"""
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medchat.core.domain.entities import Medication, Prescription
from medchat.core.domain.repositories import PrescriptionRepository
from medchat.core.domain.value_objects import SessionId, UserId
from medchat.shared.exceptions import RepositoryError
from medchat.shared.utils import ensure_utc
from ..models import PrescriptionModel


class PrescriptionRepositoryImpl(PrescriptionRepository):
    """
    SQLAlchemy implementation of PrescriptionRepository.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, prescription: Prescription) -> Prescription:
        try:
            self._session.add(self._domain_to_model(prescription))
            await self._session.flush()
            return prescription

        except Exception as e:
            raise RepositoryError(f"Failed to save prescription: {str(e)}")

    async def find_by_id(self, prescription_id: str) -> Optional[Prescription]:
        try:
            model = await self._session.get(PrescriptionModel, prescription_id)
            return self._model_to_domain(model) if model else None

        except Exception as e:
            raise RepositoryError(f"Failed to find prescription by ID: {str(e)}")

    async def find_by_user(self, user_id: UserId) -> List[Prescription]:
        try:
            stmt = (
                select(PrescriptionModel)
                .where(PrescriptionModel.user_id == user_id.value)
                .order_by(PrescriptionModel.created_at.desc())
            )
            result = await self._session.execute(stmt)
            return [self._model_to_domain(model) for model in result.scalars().all()]

        except Exception as e:
            raise RepositoryError(f"Failed to find prescriptions for user: {str(e)}")

    def _domain_to_model(self, prescription: Prescription) -> PrescriptionModel:
        return PrescriptionModel(
            id=prescription.prescription_id,
            user_id=prescription.user_id.value,
            session_id=prescription.session_id.value if prescription.session_id else None,
            diagnosis=prescription.diagnosis,
            medications=[m.to_dict() for m in prescription.medications],
            notes=prescription.notes,
            raw_output=prescription.raw_output,
            is_structured=prescription.is_structured,
            model=prescription.model,
            created_at=prescription.created_at,
            updated_at=prescription.updated_at
        )

    def _model_to_domain(self, model: PrescriptionModel) -> Prescription:
        return Prescription(
            prescription_id=model.id,
            user_id=UserId(model.user_id),
            session_id=SessionId(model.session_id) if model.session_id else None,
            notes=model.notes,
            medications=[Medication.from_dict(m) for m in (model.medications or [])],
            diagnosis=model.diagnosis,
            raw_output=model.raw_output or "",
            is_structured=model.is_structured,
            model=model.model,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at)
        )
