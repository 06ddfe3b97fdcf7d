"""
Specialty Catalog

Static lookup from a medical specialty to the system prompt that frames
the assistant and the color the front end shows for it.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from medchat.shared.constants import SpecialtyConstants
from medchat.shared.exceptions import UnknownSpecialtyError


@dataclass(frozen=True)
class SpecialtyProfile:
    """One entry of the specialty selector."""
    key: str
    display_name: str
    system_prompt: str
    color: str
    description: str


def _prompt(role: str, focus: str) -> str:
    return (
        f"You are {role}. {focus} "
        "Ask clarifying questions when symptoms are ambiguous, flag warning signs "
        "that need urgent care, and keep answers clear for a non-specialist. "
        f"{SpecialtyConstants.SAFETY_DISCLAIMER}"
    )


_PROFILES: List[SpecialtyProfile] = [
    SpecialtyProfile(
        key="general",
        display_name="General Medicine",
        system_prompt=_prompt(
            "a careful general practitioner assistant",
            "Help the user understand common symptoms, everyday conditions and when to see a doctor."
        ),
        color="#2563EB",
        description="Everyday health questions and triage guidance."
    ),
    SpecialtyProfile(
        key="cardiology",
        display_name="Cardiology",
        system_prompt=_prompt(
            "a cardiology assistant",
            "Focus on heart and circulation: chest pain, blood pressure, palpitations and cardiac risk factors."
        ),
        color="#DC2626",
        description="Heart, blood pressure and circulation."
    ),
    SpecialtyProfile(
        key="dermatology",
        display_name="Dermatology",
        system_prompt=_prompt(
            "a dermatology assistant",
            "Focus on skin, hair and nail conditions, and describe what details or photos help assessment."
        ),
        color="#D97706",
        description="Skin, hair and nail conditions."
    ),
    SpecialtyProfile(
        key="pediatrics",
        display_name="Pediatrics",
        system_prompt=_prompt(
            "a pediatrics assistant",
            "Focus on infants, children and adolescents, and always account for the child's age and weight."
        ),
        color="#16A34A",
        description="Health of infants, children and adolescents."
    ),
    SpecialtyProfile(
        key="neurology",
        display_name="Neurology",
        system_prompt=_prompt(
            "a neurology assistant",
            "Focus on headaches, seizures, numbness, dizziness and other nervous system symptoms."
        ),
        color="#7C3AED",
        description="Brain, nerves and the nervous system."
    ),
    SpecialtyProfile(
        key="psychiatry",
        display_name="Psychiatry",
        system_prompt=_prompt(
            "a supportive mental health assistant",
            "Focus on mood, anxiety, sleep and stress; respond with empathy and point to crisis lines when there is risk of harm."
        ),
        color="#0D9488",
        description="Mental health, mood and sleep."
    ),
    SpecialtyProfile(
        key="pharmacology",
        display_name="Pharmacology",
        system_prompt=_prompt(
            "a clinical pharmacology assistant",
            "Focus on medicines: typical dosing, side effects and how to take them safely."
        ),
        color="#DB2777",
        description="Medicines, dosing and side effects."
    ),
]


class SpecialtyCatalog:
    """
    Read-only catalog of specialty profiles.

    Keys are matched case-insensitively after trimming whitespace.
    """

    def __init__(self, profiles: Optional[List[SpecialtyProfile]] = None):
        self._profiles: Dict[str, SpecialtyProfile] = {
            profile.key: profile for profile in (profiles or _PROFILES)
        }

    @staticmethod
    def normalize_key(key: str) -> str:
        return (key or "").strip().lower()

    def get_specialty(self, key: Optional[str]) -> SpecialtyProfile:
        """
        Look up a specialty.

        Args:
            key: Specialty key; None or blank selects the default

        Returns:
            The matching specialty profile

        Raises:
            UnknownSpecialtyError: If the key is not in the catalog
        """
        normalized = self.normalize_key(key) if key is not None else ""
        if not normalized:
            normalized = SpecialtyConstants.DEFAULT_SPECIALTY

        profile = self._profiles.get(normalized)
        if profile is None:
            raise UnknownSpecialtyError(key, available=self.keys())
        return profile

    def list_specialties(self) -> List[SpecialtyProfile]:
        return list(self._profiles.values())

    def keys(self) -> List[str]:
        return list(self._profiles.keys())

    def is_known(self, key: Optional[str]) -> bool:
        return self.normalize_key(key) in self._profiles

    @property
    def default(self) -> SpecialtyProfile:
        return self._profiles[SpecialtyConstants.DEFAULT_SPECIALTY]
