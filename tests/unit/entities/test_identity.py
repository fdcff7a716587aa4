"""Tests for identifier generation and generator injection."""

import itertools
import uuid

from user_accounts.core.services.user.user_management import UserAccountService
from user_accounts.entities.core._base import generate_id, new_id, use_id_generator
from user_accounts.entities.core.profile import Profile, ProfileTable
from user_accounts.entities.core.user import User, UserTable


def _counter(prefix: str):
    numbers = itertools.count(1)
    return lambda: f"{prefix}-{next(numbers)}"


class TestIdGeneration:
    def test_default_generator_is_uuid4(self):
        value = generate_id()
        assert uuid.UUID(value).version == 4
        assert new_id() != value

    def test_injected_generator_assigns_entity_ids(self):
        with use_id_generator(_counter("user")):
            first = User(username="first")
            second = User(username="second")

        assert first.id == "user-1"
        assert second.id == "user-2"

    def test_injected_generator_assigns_table_ids(self):
        with use_id_generator(lambda: "profile-row"):
            row = ProfileTable(birth_place="Tehran")

        assert row.id == "profile-row"

    def test_generator_restored_after_context(self):
        with use_id_generator(lambda: "fixed"):
            assert generate_id() == "fixed"

        assert generate_id() != "fixed"
        assert uuid.UUID(User(username="jdoe").id)

    def test_explicit_id_bypasses_generator(self):
        with use_id_generator(lambda: "generated"):
            user = User(id="chosen", username="jdoe")

        assert user.id == "chosen"

    def test_deterministic_ids_are_persisted(self, session):
        service = UserAccountService(session)

        with use_id_generator(_counter("acct")):
            user = User(username="jdoe", email="john.doe@example.com")
            profile = Profile(birth_place="Tehran")
            service.create_user(user, profile)

        assert session.get(UserTable, "acct-1").username == "jdoe"
        assert session.get(ProfileTable, "acct-2").birth_place == "Tehran"
        assert service.require_user("acct-1").profile_id == "acct-2"
