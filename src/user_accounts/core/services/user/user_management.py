from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from user_accounts.core.exceptions import (
    ConflictError,
    NotFoundError,
    OwnershipViolationError,
)
from user_accounts.core.relationships import USER_PROFILE
from user_accounts.entities.core.profile.entity import Profile
from user_accounts.entities.core.profile.repository import ProfileRepository
from user_accounts.entities.core.user.entity import User
from user_accounts.entities.core.user.repository import UserRepository


class UserAccountService:
    """Lifecycle operations for users and the profiles they own.

    Every write validates the candidate state first, then runs in a single
    transaction on the session: a user and its cascaded profile either
    both commit or neither does. Profiles are reachable for writes only
    through their owning user.
    """

    def __init__(self, db_session: Session):
        self._db_session = db_session
        self._user_repo = UserRepository(db_session)
        self._profile_repo = ProfileRepository(db_session)

    # Reads

    def get_user(self, user_id: str) -> User | None:
        """Load a user without touching its profile."""
        return self._user_repo.get(user_id)

    def require_user(self, user_id: str) -> User:
        user = self._user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def get_by_username(self, username: str) -> User | None:
        return self._user_repo.get_by_username(username)

    def load_profile(self, user: User | str) -> Profile | None:
        """Resolve the profile owned by a user.

        The association is lazy: this is the point where profile data is
        retrieved. Given a user already returned by ``get_user``, the
        profile is found from its foreign key with one query on the
        profile table, or none when it is already in the session. Given
        an id, the user is loaded first.

        Raises:
            NotFoundError: If ``user`` is an id with no stored user.
        """
        if isinstance(user, str):
            user = self.require_user(user)
        if user.profile_id is None:
            return None
        return self._profile_repo.get(user.profile_id)

    def get_profile(self, profile_id: str) -> Profile | None:
        return self._profile_repo.get(profile_id)

    def require_profile(self, profile_id: str) -> Profile:
        profile = self._profile_repo.get(profile_id)
        if profile is None:
            raise NotFoundError("Profile", profile_id)
        return profile

    def get_profile_owner(self, profile_id: str) -> User | None:
        return self._profile_repo.get_owner(profile_id)

    # Writes through the owning side

    def create_user(self, user: User, profile: Profile | None = None) -> User:
        """Create a user, and optionally its profile, in one transaction.

        Raises:
            ValidationError: If the user or profile breaks a field rule.
            ConflictError: If the username or an id is already taken.
            OwnershipViolationError: If the profile already belongs to a user.
        """
        User.rules.validate(user)
        if profile is not None:
            Profile.rules.validate(profile)
            self._ensure_profile_free(profile, owner_id=None)

        if self._user_repo.exists_by_username(user.username):
            logger.warning("Rejected user creation: username {!r} is taken", user.username)
            raise ConflictError("User", "username", user.username)

        with self._transaction(user, profile):
            created = self._user_repo.create(user, profile)

        logger.info(
            "Created user {} (profile: {})", created.id, created.profile_id or "none"
        )
        return created

    def update_user(self, user: User, profile: Profile | None = None) -> User:
        """Update a user and cascade to its profile.

        Passing a profile with the same id as the current one updates it in
        place; a different profile replaces it and the old one is deleted.
        """
        User.rules.validate(user)
        if profile is not None:
            Profile.rules.validate(profile)

        if self._user_repo.get_row(user.id) is None:
            raise NotFoundError("User", user.id)
        if self._user_repo.exists_by_username(user.username, exclude_id=user.id):
            logger.warning("Rejected user update: username {!r} is taken", user.username)
            raise ConflictError("User", "username", user.username)
        if profile is not None:
            self._ensure_profile_free(profile, owner_id=user.id)

        with self._transaction(user, profile):
            updated = self._user_repo.update(user, profile)

        logger.info("Updated user {}", user.id)
        return updated

    def attach_profile(self, user_id: str, profile: Profile) -> User:
        """Attach ``profile`` to an existing user, replacing any current profile."""
        user = self.require_user(user_id)
        return self.update_user(user, profile)

    def delete_user(self, user_id: str) -> None:
        """Delete a user and, by cascade, its profile in the same transaction."""
        user = self.require_user(user_id)
        with self._transaction(user):
            self._user_repo.delete(user_id)
        logger.info("Deleted user {} (profile: {})", user_id, user.profile_id or "none")

    # Direct writes on the inverse side are ownership violations

    def create_profile(self, profile: Profile) -> None:
        """Always raises ``OwnershipViolationError``; create through ``create_user``."""
        self._reject_inverse_operation("create", profile.id)

    def update_profile(self, profile: Profile) -> None:
        """Always raises ``OwnershipViolationError``; update through ``update_user``."""
        self._reject_inverse_operation("update", profile.id)

    def delete_profile(self, profile_id: str) -> None:
        """Always raises ``OwnershipViolationError``; a profile dies with its user."""
        self._reject_inverse_operation("delete", profile_id)

    def _reject_inverse_operation(self, operation: str, profile_id: str) -> None:
        try:
            USER_PROFILE.ensure_owner_operation(Profile, operation)
        except OwnershipViolationError:
            logger.warning(
                "Rejected direct {} of profile {}; use the owning user", operation, profile_id
            )
            raise

    def _ensure_profile_free(self, profile: Profile, owner_id: str | None) -> None:
        """Reject attaching a profile that already belongs to another user."""
        owner = self._profile_repo.get_owner(profile.id)
        if owner is not None and owner.id != owner_id:
            logger.warning(
                "Rejected profile {}: already owned by user {}", profile.id, owner.id
            )
            raise OwnershipViolationError("Profile", "update", "User")

    @contextmanager
    def _transaction(
        self, user: User, profile: Profile | None = None
    ) -> Iterator[None]:
        try:
            yield
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            logger.warning("Integrity error on user {}: {}", user.id, e.orig)
            raise self._conflict_for(e, user, profile) from e
        except Exception as e:
            self._db_session.rollback()
            logger.error("Error during user transaction: {}", e)
            raise

    @staticmethod
    def _conflict_for(
        error: IntegrityError, user: User, profile: Profile | None
    ) -> ConflictError:
        """Name the entity and unique field that a failed write collided on."""
        message = str(error.orig).lower()
        if (
            USER_PROFILE.inverse_table.lower() in message
            or USER_PROFILE.join_column in message
        ):
            profile_id = profile.id if profile is not None else user.profile_id
            return ConflictError(USER_PROFILE.inverse, "id", profile_id)
        for field in User.rules.unique_fields():
            if field in message:
                return ConflictError("User", field, getattr(user, field, None))
        return ConflictError("User", "id", user.id)
