"""User database table model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Column, UniqueConstraint
from sqlmodel import Field, Relationship

from user_accounts.core.relationships import USER_PROFILE
from user_accounts.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Owns the one-to-one association with ``ProfileTable`` through the
    ``profile_id`` foreign key. The profile is loaded lazily and every
    lifecycle operation cascades to it, including orphan removal.
    """

    __tablename__ = "um_user"
    __table_args__ = (UniqueConstraint("username", name="UM_USERNAME_UK"),)

    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    username: str = Field(max_length=50, nullable=False)
    password: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=254)
    online: bool = Field(
        default=False, sa_column=Column("is_online", Boolean, nullable=False)
    )
    activated: bool = Field(
        default=False,
        sa_column=Column("is_activated", Boolean, nullable=False, default=False),
    )
    last_login: datetime | None = None
    wrong_tries: int | None = None
    force_to_change_password: bool = Field(default=False, nullable=False)
    profile_id: str | None = Field(
        default=None, foreign_key=USER_PROFILE.foreign_key, unique=True
    )

    profile: Optional["ProfileTable"] = Relationship(
        back_populates=USER_PROFILE.inverse_attr,
        sa_relationship_kwargs=USER_PROFILE.owner_relationship_kwargs(),
    )
