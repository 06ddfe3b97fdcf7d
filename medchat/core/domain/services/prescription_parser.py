"""
Prescription Parser

Turns a model reply into a fixed prescription record shape.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..entities import Medication
from medchat.shared.constants import SpecialtyConstants


PRESCRIPTION_INSTRUCTION = (
    "Based on the conversation so far, draft a prescription suggestion. "
    "Reply with a single JSON object and nothing else, using exactly this shape: "
    '{"diagnosis": string, "medications": [{"name": string, "dosage": string, '
    '"frequency": string, "duration": string, "instructions": string}], "notes": string}. '
    "Use an empty medications list when no medication is appropriate."
)

_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
_MEDICATION_FIELDS = ("dosage", "frequency", "duration", "instructions")


@dataclass
class ParsedPrescription:
    """Result of parsing a model reply."""
    notes: str
    medications: List[Medication] = field(default_factory=list)
    diagnosis: Optional[str] = None
    is_structured: bool = False


class PrescriptionParser:
    """
    Parser for prescription drafts.

    Accepts a bare JSON object, one wrapped in a Markdown code fence, or a
    reply with prose around the first ``{...}`` block. Anything else is
    kept as free-text notes.
    """

    def __init__(self, disclaimer: str = SpecialtyConstants.SAFETY_DISCLAIMER):
        self._disclaimer = disclaimer
        self._logger = logging.getLogger(__name__)

    def parse(self, text: str) -> ParsedPrescription:
        text = (text or "").strip()
        data = self._extract_json(text)

        if data is None:
            self._logger.info("Prescription reply is not structured, keeping it as notes")
            return ParsedPrescription(
                notes=self._with_disclaimer(text),
                is_structured=False
            )

        medications = self._parse_medications(data.get("medications"))
        diagnosis = self._clean_text(data.get("diagnosis"))
        notes = self._clean_text(data.get("notes")) or ""

        if not medications and not diagnosis:
            # Valid JSON without any prescription content.
            return ParsedPrescription(
                notes=self._with_disclaimer(notes or text),
                is_structured=False
            )

        return ParsedPrescription(
            notes=self._with_disclaimer(notes),
            medications=medications,
            diagnosis=diagnosis,
            is_structured=True
        )

    def _extract_json(self, text: str) -> Optional[Dict[str, Any]]:
        if not text:
            return None

        fenced = _FENCE_PATTERN.match(text)
        if fenced:
            text = fenced.group(1).strip()

        candidates = [text]
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            candidates.append(text[start:end + 1])
        first_block = self._first_object_block(text)
        if first_block:
            candidates.append(first_block)

        for candidate in candidates:
            try:
                data = json.loads(candidate)
            except (json.JSONDecodeError, ValueError):
                continue
            if isinstance(data, dict):
                return data
        return None

    @staticmethod
    def _first_object_block(text: str) -> Optional[str]:
        """Return the first balanced ``{...}`` block, ignoring braces inside strings."""
        start = text.find("{")
        if start == -1:
            return None

        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        return None

    def _parse_medications(self, raw: Any) -> List[Medication]:
        if not isinstance(raw, list):
            return []

        medications: List[Medication] = []
        seen = set()
        for entry in raw:
            if not isinstance(entry, dict):
                continue

            name = self._clean_text(entry.get("name"))
            if not name:
                continue

            key = name.lower()
            if key in seen:
                continue
            seen.add(key)

            medications.append(Medication(
                name=name,
                **{attr: self._clean_text(entry.get(attr)) for attr in _MEDICATION_FIELDS}
            ))
        return medications

    @staticmethod
    def _clean_text(value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            value = str(value)
        value = value.strip()
        return value or None

    def _with_disclaimer(self, notes: str) -> str:
        notes = (notes or "").strip()
        if self._disclaimer in notes:
            return notes
        if not notes:
            return self._disclaimer
        return f"{notes}\n\n{self._disclaimer}"
