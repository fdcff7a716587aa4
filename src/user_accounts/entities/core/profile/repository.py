"""Profile data access.

Profiles are read-only from this side. Rows are written and removed only
through ``UserRepository`` because the owning user drives every
lifecycle operation.
"""

from sqlmodel import Session, select

from user_accounts.core.relationships import USER_PROFILE
from user_accounts.entities.core.profile.entity import Profile
from user_accounts.entities.core.profile.table import ProfileTable
from user_accounts.entities.core.user.entity import User
from user_accounts.entities.core.user.table import UserTable


class ProfileRepository:
    """Read access for profiles and navigation back to their owner."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, profile_id: str) -> Profile | None:
        row = self._session.get(ProfileTable, profile_id)
        if row is None:
            return None
        return Profile.model_validate(row, from_attributes=True)

    def exists(self, profile_id: str) -> bool:
        return self._session.get(ProfileTable, profile_id) is not None

    def get_owner(self, profile_id: str) -> User | None:
        """Return the user whose foreign key points at ``profile_id``."""
        statement = select(UserTable).where(
            getattr(UserTable, USER_PROFILE.join_column) == profile_id
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)
