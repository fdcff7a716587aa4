"""Unit tests for the Profile entity and its table model."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from user_accounts.entities.core.profile import Profile, ProfileTable


class TestProfileEntity:
    def test_all_fields_optional(self):
        profile = Profile()

        assert profile.id
        assert profile.national_code is None
        assert profile.photo_file_id is None

    def test_id_is_immutable(self):
        profile = Profile()

        with pytest.raises(PydanticValidationError):
            profile.id = "another-id"

    def test_profile_has_no_owner_reference(self):
        assert "user" not in Profile.model_fields
        assert "user_id" not in Profile.model_fields

    def test_profile_equality(self):
        profile1 = Profile(id="p1", mobile_number="+100")
        profile2 = Profile(id="p1", mobile_number="+100")

        assert profile1 == profile2
        assert profile1 != Profile(id="p1", mobile_number="+200")


class TestProfileTable:
    def test_table_name(self):
        assert ProfileTable.__tablename__ == "UM_PROFILE"

    def test_no_foreign_key_on_inverse_side(self):
        assert not ProfileTable.__table__.foreign_keys

    def test_round_trip_through_table(self):
        profile = Profile(national_code="0012345678", birth_place="Shiraz")

        row = ProfileTable.model_validate(profile, from_attributes=True)
        restored = Profile.model_validate(row, from_attributes=True)

        assert restored == profile
