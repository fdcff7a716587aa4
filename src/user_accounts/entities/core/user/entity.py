"""User domain entity."""

from datetime import datetime
from typing import Any, ClassVar

from pydantic import Field

from user_accounts.catalog.marker import catalog_field, data_agent
from user_accounts.core.validation import (
    EmailFormat,
    Length,
    Required,
    RuleSet,
    Unique,
    rule,
)
from user_accounts.entities.core._base import Entity

USER_RULES = RuleSet(
    "User",
    [
        rule("first_name", Length(max=50)),
        rule("last_name", Length(max=50)),
        rule("username", Required(), Length(min=1, max=50), Unique()),
        rule("password", Length(min=8, max=100)),
        rule("email", EmailFormat(), Length(min=5, max=254)),
        rule("online", Required()),
        rule("activated", Required()),
        rule("force_to_change_password", Required()),
    ],
)


@data_agent(
    description="User account with login state and an optional profile",
    discoverable=True,
)
class User(Entity):
    """User account entity.

    This is the owning side of the User/Profile association: it holds
    ``profile_id`` and every lifecycle operation on the profile goes
    through the user. Profile data itself is never embedded here; it is
    resolved lazily by the account service.
    """

    rules: ClassVar[RuleSet] = USER_RULES

    first_name: str | None = Field(default=None, description="User's first name")
    last_name: str | None = Field(default=None, description="User's last name")
    username: str = Field(
        description="Unique login name",
        json_schema_extra=catalog_field(category="identity", examples="jdoe"),
    )
    password: str | None = Field(
        default=None,
        description="Password",
        json_schema_extra=catalog_field(
            category="security",
            sensitive=True,
            data_quality="Must be at least 8 characters",
        ),
    )
    email: str | None = Field(
        default=None,
        description="User's email address",
        json_schema_extra=catalog_field(
            category="contact", sensitive=True, examples="user@example.com"
        ),
    )
    online: bool = Field(default=False, description="Whether the user is online")
    activated: bool = Field(default=False, description="Whether the account is activated")
    last_login: datetime | None = Field(default=None, description="Last login time")
    wrong_tries: int | None = Field(
        default=None, description="Consecutive failed login attempts"
    )
    force_to_change_password: bool = Field(
        default=False, description="Whether the user must change password on next login"
    )
    profile_id: str | None = Field(
        default=None, description="Identifier of the owned profile"
    )

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return self._business_key() == other._business_key()

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash(self._business_key())

    def _business_key(self) -> tuple:
        return (
            self.id,
            self.first_name,
            self.last_name,
            self.username,
            self.email,
            self.online,
            self.activated,
            self.force_to_change_password,
            self.profile_id,
        )
