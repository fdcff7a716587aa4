"""User data access."""

from datetime import UTC, datetime

from sqlmodel import Session, select

from user_accounts.core.relationships import USER_PROFILE
from user_accounts.entities.core.profile.entity import Profile
from user_accounts.entities.core.profile.table import ProfileTable
from user_accounts.entities.core.user.entity import User
from user_accounts.entities.core.user.table import UserTable

# identity, timestamps and the foreign key are never copied from a domain entity
_SYSTEM_FIELDS = {"id", "created_at", "updated_at", USER_PROFILE.join_column}
USER_MUTABLE_FIELDS = tuple(f for f in User.model_fields if f not in _SYSTEM_FIELDS)
PROFILE_MUTABLE_FIELDS = tuple(
    f for f in Profile.model_fields if f not in _SYSTEM_FIELDS
)


class UserRepository:
    """Data-access layer for users and the profile each one owns.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self.get_row(user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_row(self, user_id: str) -> UserTable | None:
        return self._session.get(UserTable, user_id)

    def get_by_username(self, username: str) -> User | None:
        statement = select(UserTable).where(UserTable.username == username)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def exists_by_username(self, username: str, exclude_id: str | None = None) -> bool:
        statement = select(UserTable.id).where(UserTable.username == username)
        if exclude_id is not None:
            statement = statement.where(UserTable.id != exclude_id)
        return self._session.exec(statement).first() is not None

    def create(self, user: User, profile: Profile | None = None) -> User:
        """Stage a new user, and its profile when given, in one flush."""
        row = UserTable.model_validate(
            user.model_dump(exclude={USER_PROFILE.join_column})
        )
        if profile is not None:
            row.profile = ProfileTable.model_validate(profile, from_attributes=True)

        self._session.add(row)
        self._session.flush()
        return User.model_validate(row, from_attributes=True)

    def update(self, user: User, profile: Profile | None = None) -> User | None:
        """Copy mutable fields onto the stored row and cascade to the profile.

        Returns:
            The updated user, or ``None`` if no row exists for ``user.id``.
        """
        row = self.get_row(user.id)
        if row is None:
            return None

        for field in USER_MUTABLE_FIELDS:
            setattr(row, field, getattr(user, field))
        row.updated_at = datetime.now(UTC)

        if profile is not None:
            self._attach_profile(row, profile)

        self._session.add(row)
        self._session.flush()
        return User.model_validate(row, from_attributes=True)

    def delete(self, user_id: str) -> bool:
        """Delete a user; the owned profile is removed by cascade in the same flush."""
        row = self.get_row(user_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def _attach_profile(self, row: UserTable, profile: Profile) -> None:
        current = row.profile
        if current is not None and current.id == profile.id:
            for field in PROFILE_MUTABLE_FIELDS:
                setattr(current, field, getattr(profile, field))
            current.updated_at = datetime.now(UTC)
            return

        # a replaced profile becomes an orphan and is deleted on flush
        row.profile = ProfileTable.model_validate(profile, from_attributes=True)
