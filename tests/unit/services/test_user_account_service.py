"""Tests for user account lifecycle operations on an in-memory database."""

import pytest
from sqlmodel import Session, select

from tests.fixtures.core import selects
from user_accounts.core.exceptions import (
    ConflictError,
    NotFoundError,
    OwnershipViolationError,
    ValidationError,
)
from user_accounts.core.services.user.user_management import UserAccountService
from user_accounts.entities.core.profile import Profile, ProfileTable
from user_accounts.entities.core.user import User, UserTable


def _count(session: Session, table) -> int:
    return len(session.exec(select(table)).all())


class TestCreateUser:
    """Test user creation with and without a profile."""

    def test_create_user_without_profile(self, service, session, user):
        created = service.create_user(user)

        assert created.id == user.id
        assert created.profile_id is None
        assert service.get_user(user.id) == created
        assert _count(session, ProfileTable) == 0

    def test_create_user_with_profile(self, service, user, profile):
        created = service.create_user(user, profile)

        assert created.profile_id == profile.id
        assert service.require_profile(profile.id) == profile
        assert service.get_profile_owner(profile.id).id == user.id

    def test_invalid_user_is_not_persisted(self, service, session, user):
        user.password = "short"

        with pytest.raises(ValidationError) as exc_info:
            service.create_user(user)

        assert exc_info.value.fields() == {"password"}
        assert _count(session, UserTable) == 0

    def test_duplicate_username_conflicts(self, service, session, user, profile):
        service.create_user(user)
        duplicate = User(username=user.username, password="another-pass")

        with pytest.raises(ConflictError) as exc_info:
            service.create_user(duplicate, profile)

        assert exc_info.value.field == "username"
        assert _count(session, UserTable) == 1
        assert _count(session, ProfileTable) == 0

    def test_storage_constraint_conflict_rolls_back(
        self, service, session, user, profile, monkeypatch
    ):
        """A username race past the pre-check is caught by the unique constraint."""
        service.create_user(user)
        monkeypatch.setattr(
            service._user_repo, "exists_by_username", lambda *args, **kwargs: False
        )
        duplicate = User(username=user.username)

        with pytest.raises(ConflictError) as exc_info:
            service.create_user(duplicate, profile)

        assert exc_info.value.field == "username"
        assert _count(session, UserTable) == 1
        assert _count(session, ProfileTable) == 0

    def test_duplicate_id_conflicts(self, service, session, user):
        service.create_user(user)
        session.expunge_all()
        same_id = User(id=user.id, username="someone-else")

        with pytest.raises(ConflictError) as exc_info:
            service.create_user(same_id)

        assert exc_info.value.field == "id"
        assert service.get_user(user.id).username == user.username

    def test_duplicate_profile_id_conflicts_on_profile(
        self, service, session, user, profile, monkeypatch
    ):
        service.create_user(user, profile)
        session.expunge_all()
        monkeypatch.setattr(service._profile_repo, "get_owner", lambda profile_id: None)
        other = User(username="other")

        with pytest.raises(ConflictError) as exc_info:
            service.create_user(other, Profile(id=profile.id, birth_place="Shiraz"))

        assert exc_info.value.entity == "Profile"
        assert exc_info.value.field == "id"
        assert exc_info.value.value == profile.id
        assert service.get_user(other.id) is None
        assert service.require_profile(profile.id).birth_place == "Tehran"

    def test_profile_owned_by_another_user_is_rejected(self, service, user, profile):
        service.create_user(user, profile)
        other = User(username="other")

        with pytest.raises(OwnershipViolationError):
            service.create_user(other, profile)

        assert service.get_by_username("other") is None


class TestUpdateUser:
    """Test updates cascading from the user to its profile."""

    def test_update_user_fields(self, service, user):
        service.create_user(user)
        user.first_name = "Jane"
        user.online = True
        user.wrong_tries = 3

        updated = service.update_user(user)

        assert updated.first_name == "Jane"
        stored = service.require_user(user.id)
        assert stored.online is True
        assert stored.wrong_tries == 3

    def test_update_profile_in_place(self, service, session, user, profile):
        service.create_user(user, profile)
        profile.mobile_number = "+989350000000"

        service.update_user(user, profile)

        assert service.require_profile(profile.id).mobile_number == "+989350000000"
        assert _count(session, ProfileTable) == 1

    def test_replacing_profile_deletes_previous(self, service, session, user, profile):
        service.create_user(user, profile)
        replacement = Profile(national_code="9999999999")

        updated = service.update_user(user, replacement)

        assert updated.profile_id == replacement.id
        assert service.get_profile(profile.id) is None
        assert _count(session, ProfileTable) == 1

    def test_attach_profile(self, service, user, profile):
        service.create_user(user)

        updated = service.attach_profile(user.id, profile)

        assert updated.profile_id == profile.id
        assert service.load_profile(user.id) == profile

    def test_update_to_taken_username_conflicts(self, service, user):
        service.create_user(user)
        other = service.create_user(User(username="other"))
        other.username = user.username

        with pytest.raises(ConflictError):
            service.update_user(other)

        assert service.require_user(other.id).username == "other"

    def test_keeping_own_username_is_allowed(self, service, user):
        service.create_user(user)
        user.last_name = "Smith"

        assert service.update_user(user).last_name == "Smith"

    def test_update_missing_user(self, service, user):
        with pytest.raises(NotFoundError):
            service.update_user(user)

    def test_invalid_update_is_not_applied(self, service, user):
        service.create_user(user)
        user.email = "not-an-email"

        with pytest.raises(ValidationError):
            service.update_user(user)

        assert service.require_user(user.id).email == "john.doe@example.com"


class TestDeleteUser:
    def test_delete_cascades_to_profile(self, service, session, user, profile):
        service.create_user(user, profile)

        service.delete_user(user.id)

        assert service.get_user(user.id) is None
        with pytest.raises(NotFoundError):
            service.require_profile(profile.id)
        assert _count(session, ProfileTable) == 0

    def test_delete_user_without_profile(self, service, user):
        service.create_user(user)
        service.delete_user(user.id)
        assert service.get_by_username(user.username) is None

    def test_delete_missing_user(self, service):
        with pytest.raises(NotFoundError):
            service.delete_user("missing")


class TestProfileOwnership:
    """Direct writes on a profile are ownership violations."""

    def test_create_profile_directly(self, service, session, profile):
        with pytest.raises(OwnershipViolationError):
            service.create_profile(profile)
        assert _count(session, ProfileTable) == 0

    def test_update_profile_directly(self, service, user, profile):
        service.create_user(user, profile)
        profile.birth_place = "Elsewhere"

        with pytest.raises(OwnershipViolationError):
            service.update_profile(profile)

        assert service.require_profile(profile.id).birth_place == "Tehran"

    def test_delete_profile_directly(self, service, user, profile):
        service.create_user(user, profile)

        with pytest.raises(OwnershipViolationError) as exc_info:
            service.delete_profile(profile.id)

        assert "owned by User" in str(exc_info.value)
        assert service.require_profile(profile.id) == profile


class TestStorageOwnershipGuard:
    """The session refuses profile deletes that bypass the owning user."""

    def test_direct_row_delete_is_rejected(self, service, session, user, profile):
        service.create_user(user, profile)
        session.delete(session.get(ProfileTable, profile.id))

        with pytest.raises(OwnershipViolationError) as exc_info:
            session.commit()
        session.rollback()

        assert exc_info.value.operation == "delete"
        assert session.get(ProfileTable, profile.id) is not None
        assert session.get(UserTable, user.id).profile_id == profile.id

    def test_delete_with_owner_is_allowed(self, session, user, profile):
        UserAccountService(session).create_user(user, profile)
        session.delete(session.get(UserTable, user.id))
        session.delete(session.get(ProfileTable, profile.id))

        session.commit()

        assert _count(session, UserTable) == 0
        assert _count(session, ProfileTable) == 0

    def test_delete_after_owner_releases_it(self, service, session, user, profile):
        service.create_user(user, profile)
        row = session.get(UserTable, user.id)
        released = row.profile
        row.profile = None
        session.delete(released)

        session.commit()

        assert session.get(UserTable, user.id).profile_id is None
        assert _count(session, ProfileTable) == 0

    def test_cascaded_delete_through_service(self, service, session, user, profile):
        service.create_user(user, profile)

        service.delete_user(user.id)

        assert _count(session, ProfileTable) == 0


class TestLazyProfileLoading:
    """The profile is fetched only when explicitly resolved."""

    def test_get_user_does_not_load_profile(
        self, service, session, statement_log, user, profile
    ):
        service.create_user(user, profile)
        session.expunge_all()
        statement_log.clear()

        loaded = service.get_user(user.id)

        assert loaded.profile_id == profile.id
        statements = selects(statement_log)
        assert len(statements) == 1
        assert "UM_PROFILE" not in statements[0]

    def test_load_profile_issues_one_query(
        self, service, session, statement_log, user, profile
    ):
        service.create_user(user, profile)
        session.expunge_all()
        owner = service.get_user(user.id)
        statement_log.clear()

        loaded = service.load_profile(owner)

        assert loaded == profile
        statements = selects(statement_log)
        assert len(statements) == 1
        assert "UM_PROFILE" in statements[0]
        assert "um_user" not in statements[0]

    def test_load_profile_by_id_loads_the_user_first(
        self, service, session, statement_log, user, profile
    ):
        service.create_user(user, profile)
        session.expunge_all()
        statement_log.clear()

        assert service.load_profile(user.id) == profile

        statements = selects(statement_log)
        assert len(statements) == 2
        assert "um_user" in statements[0]
        assert "UM_PROFILE" in statements[1]

    def test_load_profile_when_absent(self, service, user):
        service.create_user(user)
        assert service.load_profile(user.id) is None
        assert service.load_profile(service.get_user(user.id)) is None

    def test_load_profile_for_missing_user(self, service):
        with pytest.raises(NotFoundError):
            service.load_profile("missing")


class TestReads:
    def test_require_user_missing(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.require_user("missing")
        assert exc_info.value.entity == "User"

    def test_get_by_username(self, service, user):
        service.create_user(user)
        assert service.get_by_username("jdoe").id == user.id
        assert service.get_by_username("nobody") is None

    def test_service_shares_one_session(self, session, user):
        writer = UserAccountService(session)
        reader = UserAccountService(session)

        writer.create_user(user)

        assert reader.get_user(user.id) == user
