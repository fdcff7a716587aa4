"""Declarative field constraints evaluated before any write.

A ``RuleSet`` is an ordered list of per-field constraints. Checking is a
pure function of the candidate state: no I/O and no mutation. Uniqueness
is declared here but only the storage layer can enforce it, so ``Unique``
never reports a violation locally.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from user_accounts.core.exceptions import ValidationError

_EMAIL = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class Violation:
    """A single failed constraint on one field."""

    field: str
    code: str
    message: str


class Constraint:
    """Base class for a single field check."""

    code = "invalid"

    def check(self, field: str, value: Any) -> Violation | None:
        raise NotImplementedError


class Required(Constraint):
    code = "required"

    def check(self, field: str, value: Any) -> Violation | None:
        if value is None:
            return Violation(field, self.code, "is required")
        return None


@dataclass(frozen=True)
class Length(Constraint):
    """Inclusive length bounds: ``min <= len(value) <= max``."""

    min: int = 0
    max: int | None = None

    code = "length"

    def check(self, field: str, value: Any) -> Violation | None:
        if value is None:
            return None
        size = len(value)
        if size < self.min or (self.max is not None and size > self.max):
            if self.max is None:
                bounds = f"at least {self.min}"
            else:
                bounds = f"between {self.min} and {self.max}"
            return Violation(
                field, self.code, f"length must be {bounds} (got {size})"
            )
        return None


class EmailFormat(Constraint):
    code = "format"

    def check(self, field: str, value: Any) -> Violation | None:
        if value is None:
            return None
        try:
            _EMAIL.validate_python(value)
        except PydanticValidationError:
            return Violation(field, self.code, "must be a valid email address")
        return None


class Unique(Constraint):
    """Marks a field as unique across its collection; enforced by storage."""

    code = "unique"

    def check(self, field: str, value: Any) -> Violation | None:
        return None


@dataclass(frozen=True)
class FieldRule:
    field: str
    constraints: tuple[Constraint, ...]


def rule(field: str, *constraints: Constraint) -> FieldRule:
    """Declare the ordered constraints for one field."""
    return FieldRule(field=field, constraints=constraints)


class RuleSet:
    """Ordered field rules for one entity type."""

    def __init__(self, entity: str, rules: Iterable[FieldRule] = ()) -> None:
        self.entity = entity
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[FieldRule, ...]:
        return self._rules

    def check(self, candidate: Any) -> list[Violation]:
        """Evaluate every rule and return all violations found.

        Args:
            candidate: An entity instance or a mapping of field values.

        Returns:
            The violations in rule order; empty when the candidate is valid.
        """
        violations: list[Violation] = []
        for field_rule in self._rules:
            value = _read(candidate, field_rule.field)
            for constraint in field_rule.constraints:
                violation = constraint.check(field_rule.field, value)
                if violation is not None:
                    violations.append(violation)
                    if violation.code == Required.code:
                        # nothing else to check on an absent value
                        break
        return violations

    def validate(self, candidate: Any) -> None:
        """Raise ``ValidationError`` with every violation if the candidate is invalid."""
        violations = self.check(candidate)
        if violations:
            raise ValidationError(self.entity, violations)

    def is_valid(self, candidate: Any) -> bool:
        return not self.check(candidate)

    def unique_fields(self) -> list[str]:
        return [
            r.field
            for r in self._rules
            if any(isinstance(c, Unique) for c in r.constraints)
        ]

    def constraints_for(self, field: str) -> tuple[Constraint, ...]:
        for field_rule in self._rules:
            if field_rule.field == field:
                return field_rule.constraints
        return ()


def _read(candidate: Any, field: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(field)
    return getattr(candidate, field, None)
