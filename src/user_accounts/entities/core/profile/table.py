"""Profile database table model."""

from typing import Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session
from sqlmodel import Relationship

from user_accounts.core.exceptions import OwnershipViolationError
from user_accounts.core.relationships import USER_PROFILE
from user_accounts.entities.core._base import EntityTable


class ProfileTable(EntityTable, table=True):
    """Database persistence model for profiles.

    Holds no foreign key: ``user`` is navigation derived from
    ``UserTable.profile_id`` and is never written from this side.
    """

    __tablename__ = "UM_PROFILE"

    national_code: str | None = None
    birth_place: str | None = None
    birthday: str | None = None
    father_name: str | None = None
    mobile_number: str | None = None
    personnel_code: str | None = None
    photo_file_id: str | None = None

    user: Optional["UserTable"] = Relationship(
        back_populates=USER_PROFILE.owner_attr,
        sa_relationship_kwargs=USER_PROFILE.inverse_relationship_kwargs(),
    )


@event.listens_for(Session, "before_flush")
def reject_unowned_profile_delete(session, flush_context, instances):
    """Refuse a profile delete unless its owning user releases it in the same flush.

    A user releases its profile by being deleted or by dropping the
    association; orphan removal then deletes the profile.
    """
    profiles = [obj for obj in session.deleted if isinstance(obj, ProfileTable)]
    if not profiles:
        return

    from user_accounts.entities.core.user.table import UserTable

    released = set()
    for obj in session.deleted:
        if isinstance(obj, UserTable):
            released.add(getattr(obj, USER_PROFILE.join_column))
    for obj in session.dirty:
        if isinstance(obj, UserTable):
            history = inspect(obj).attrs[USER_PROFILE.owner_attr].history
            released.update(p.id for p in history.deleted if p is not None)

    for profile in profiles:
        if profile.id not in released:
            raise OwnershipViolationError(USER_PROFILE.inverse, "delete", USER_PROFILE.owner)
