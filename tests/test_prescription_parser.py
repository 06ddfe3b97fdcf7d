"""Tests for turning model replies into prescription records."""

import pytest

from medchat.core.domain.services import PrescriptionParser
from medchat.shared.constants import SpecialtyConstants


DISCLAIMER = SpecialtyConstants.SAFETY_DISCLAIMER

STRUCTURED_REPLY = """{
  "diagnosis": "Tension headache",
  "medications": [
    {"name": "Ibuprofen", "dosage": "400 mg", "frequency": "every 8 hours", "duration": "3 days",
     "instructions": "Take with food"}
  ],
  "notes": "Stay hydrated."
}"""


@pytest.fixture
def parser():
    return PrescriptionParser()


class TestStructuredReplies:
    def test_bare_json_is_parsed(self, parser):
        parsed = parser.parse(STRUCTURED_REPLY)

        assert parsed.is_structured
        assert parsed.diagnosis == "Tension headache"
        assert parsed.medications[0].name == "Ibuprofen"
        assert parsed.medications[0].instructions == "Take with food"
        assert parsed.notes == f"Stay hydrated.\n\n{DISCLAIMER}"

    def test_fenced_json_is_parsed(self, parser):
        parsed = parser.parse(f"```json\n{STRUCTURED_REPLY}\n```")
        assert parsed.is_structured
        assert len(parsed.medications) == 1

    def test_json_inside_prose_is_parsed(self, parser):
        parsed = parser.parse(f"Here is the draft you asked for:\n{STRUCTURED_REPLY}\nLet me know.")
        assert parsed.diagnosis == "Tension headache"

    def test_braces_inside_strings_do_not_end_the_object(self, parser):
        reply = 'Draft: {"diagnosis": "Rash {mild}", "medications": []} trailing } brace'
        parsed = parser.parse(reply)
        assert parsed.is_structured
        assert parsed.diagnosis == "Rash {mild}"

    def test_medications_without_names_and_duplicates_are_dropped(self, parser):
        reply = (
            '{"diagnosis": "Cold", "medications": ['
            '{"name": "Paracetamol", "dosage": 500}, {"name": "paracetamol"}, {"dosage": "1"}, "junk"]}'
        )
        parsed = parser.parse(reply)
        assert [m.name for m in parsed.medications] == ["Paracetamol"]
        assert parsed.medications[0].dosage == "500"
        assert parsed.notes == DISCLAIMER


class TestFreeTextReplies:
    def test_prose_is_kept_as_notes(self, parser):
        parsed = parser.parse("Please see a doctor in person.")
        assert not parsed.is_structured
        assert parsed.medications == []
        assert parsed.notes == f"Please see a doctor in person.\n\n{DISCLAIMER}"

    def test_json_without_prescription_content_is_free_text(self, parser):
        parsed = parser.parse('{"notes": "Nothing to prescribe."}')
        assert not parsed.is_structured
        assert parsed.notes.startswith("Nothing to prescribe.")

    def test_empty_reply_still_has_notes(self, parser):
        assert parser.parse("").notes == DISCLAIMER

    def test_disclaimer_is_not_repeated(self, parser):
        parsed = parser.parse(f"Rest well.\n\n{DISCLAIMER}")
        assert parsed.notes.count(DISCLAIMER) == 1
