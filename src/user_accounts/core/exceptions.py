"""Error taxonomy for account operations.

Every error here is recoverable by the caller: correct the input and
retry. None of them is raised for normal control flow.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from user_accounts.core.validation import Violation


class UserAccountsError(Exception):
    """Base class for all user account errors."""


class ValidationError(UserAccountsError):
    """Raised when candidate entity state violates one or more field constraints."""

    def __init__(self, entity: str, violations: Sequence[Violation]) -> None:
        self.entity = entity
        self.violations = list(violations)
        details = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(f"{entity} failed validation: {details}")

    def fields(self) -> set[str]:
        """Names of the fields that have at least one violation."""
        return {v.field for v in self.violations}

    def codes_for(self, field: str) -> list[str]:
        return [v.code for v in self.violations if v.field == field]


class ConflictError(UserAccountsError):
    """Raised when a write would break a uniqueness constraint."""

    def __init__(self, entity: str, field: str, value: Any) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field}={value!r} already exists")


class OwnershipViolationError(UserAccountsError):
    """Raised when the inverse side of a relationship is mutated on its own."""

    def __init__(self, entity: str, operation: str, owner: str) -> None:
        self.entity = entity
        self.operation = operation
        self.owner = owner
        super().__init__(
            f"Cannot {operation} {entity} directly; it is owned by {owner}"
        )


class NotFoundError(UserAccountsError):
    """Raised when a required record does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id!r} not found")


class ConfigurationError(UserAccountsError):
    """Raised when the configuration file cannot be loaded or validated."""
