"""One-to-one ownership bindings between entities.

The owning side holds the foreign key and drives every lifecycle
operation; the inverse side only offers read navigation derived from
that key.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from user_accounts.core.exceptions import OwnershipViolationError

LIFECYCLE_OPERATIONS = ("create", "update", "delete")

_CASCADES = {
    "all": "all, delete-orphan",
    "none": "",
}
_FETCH = {"lazy": "select", "eager": "joined"}


@dataclass(frozen=True)
class OneToOne:
    """A one-to-one association with a single owning side."""

    owner: str
    owner_attr: str
    inverse: str
    inverse_attr: str
    join_column: str
    inverse_table: str
    cascade: Literal["all", "none"] = "all"
    fetch: Literal["lazy", "eager"] = "lazy"

    def owner_relationship_kwargs(self) -> dict[str, Any]:
        """SQLAlchemy ``relationship()`` arguments for the owning attribute."""
        kwargs: dict[str, Any] = {"lazy": _FETCH[self.fetch], "uselist": False}
        cascade = _CASCADES[self.cascade]
        if cascade:
            kwargs["cascade"] = cascade
        if "delete-orphan" in cascade:
            # the foreign key lives on the owner, so orphan tracking needs a single parent
            kwargs["single_parent"] = True
        return kwargs

    def inverse_relationship_kwargs(self) -> dict[str, Any]:
        """SQLAlchemy ``relationship()`` arguments for the inverse attribute."""
        return {"lazy": "select", "uselist": False}

    @property
    def foreign_key(self) -> str:
        """Target of the owner's join column, as ``table.column``."""
        return f"{self.inverse_table}.id"

    def is_inverse(self, entity: str | type) -> bool:
        return entity_name(entity) == self.inverse

    def ensure_owner_operation(self, entity: str | type, operation: str) -> None:
        """Reject a lifecycle operation aimed directly at the inverse side.

        Raises:
            OwnershipViolationError: If ``entity`` is the inverse side.
        """
        if operation not in LIFECYCLE_OPERATIONS:
            raise ValueError(f"Unknown lifecycle operation: {operation}")
        if self.is_inverse(entity):
            raise OwnershipViolationError(self.inverse, operation, self.owner)


def entity_name(entity: str | type) -> str:
    """Entity name for a domain class, a table class or a plain name."""
    if isinstance(entity, str):
        return entity
    return entity.__name__.removesuffix("Table")


USER_PROFILE = OneToOne(
    owner="User",
    owner_attr="profile",
    inverse="Profile",
    inverse_attr="user",
    join_column="profile_id",
    inverse_table="UM_PROFILE",
)
