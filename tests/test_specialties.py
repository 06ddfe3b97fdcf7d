"""Tests for the specialty prompt selector."""

import pytest

from medchat.core.domain.services import SpecialtyCatalog
from medchat.shared.constants import SpecialtyConstants
from medchat.shared.exceptions import UnknownSpecialtyError


@pytest.fixture
def catalog():
    return SpecialtyCatalog()


class TestLookup:
    def test_known_specialty_returns_its_prompt(self, catalog):
        profile = catalog.get_specialty("cardiology")
        assert profile.display_name == "Cardiology"
        assert "cardiology assistant" in profile.system_prompt

    @pytest.mark.parametrize("key", ["  Dermatology ", "DERMATOLOGY", "dermatology"])
    def test_keys_are_case_and_whitespace_insensitive(self, catalog, key):
        assert catalog.get_specialty(key).key == "dermatology"

    @pytest.mark.parametrize("key", [None, "", "   "])
    def test_missing_key_selects_default(self, catalog, key):
        assert catalog.get_specialty(key).key == SpecialtyConstants.DEFAULT_SPECIALTY

    def test_unknown_key_lists_available_specialties(self, catalog):
        with pytest.raises(UnknownSpecialtyError) as exc_info:
            catalog.get_specialty("astrology")
        assert "cardiology" in exc_info.value.details["available"]


class TestCatalogContents:
    def test_every_prompt_carries_the_safety_disclaimer(self, catalog):
        for profile in catalog.list_specialties():
            assert SpecialtyConstants.SAFETY_DISCLAIMER in profile.system_prompt

    def test_colors_are_hex_codes(self, catalog):
        for profile in catalog.list_specialties():
            assert profile.color.startswith("#") and len(profile.color) == 7

    def test_default_comes_first(self, catalog):
        assert catalog.keys()[0] == catalog.default.key == "general"
        assert catalog.is_known("Pediatrics")
        assert not catalog.is_known("astrology")
