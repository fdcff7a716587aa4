"""Profile domain entity."""

from typing import Any, ClassVar

from pydantic import Field

from user_accounts.catalog.marker import catalog_field, data_agent
from user_accounts.core.validation import RuleSet
from user_accounts.entities.core._base import Entity

# every profile field is optional free text
PROFILE_RULES = RuleSet("Profile")


@data_agent(
    description="Personal profile details owned by a user account",
    discoverable=True,
)
class Profile(Entity):
    """Profile entity.

    The inverse side of the User/Profile association. A profile has no
    reference to its user; navigation back to the owner is answered by
    storage from the owner's foreign key.
    """

    rules: ClassVar[RuleSet] = PROFILE_RULES

    national_code: str | None = Field(
        default=None,
        description="National identification code",
        json_schema_extra=catalog_field(category="identity", sensitive=True),
    )
    birth_place: str | None = Field(default=None, description="Place of birth")
    birthday: str | None = Field(default=None, description="Date of birth")
    father_name: str | None = Field(default=None, description="Father's name")
    mobile_number: str | None = Field(
        default=None,
        description="Mobile phone number",
        json_schema_extra=catalog_field(category="contact", sensitive=True),
    )
    personnel_code: str | None = Field(default=None, description="Personnel code")
    photo_file_id: str | None = Field(
        default=None, description="Identifier of the stored profile photo"
    )

    def __eq__(self, other: Any) -> bool:
        """Compare profiles by business attributes, ignoring timestamps."""
        if not isinstance(other, Profile):
            return False

        return self._business_key() == other._business_key()

    def __hash__(self) -> int:
        return hash(self._business_key())

    def _business_key(self) -> tuple:
        return (
            self.id,
            self.national_code,
            self.birth_place,
            self.birthday,
            self.father_name,
            self.mobile_number,
            self.personnel_code,
            self.photo_file_id,
        )
