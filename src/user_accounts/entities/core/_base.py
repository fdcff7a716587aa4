import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Protocol

import sqlalchemy as sa
from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


class IdGenerator(Protocol):
    """Produces a new opaque identifier on every call."""

    def __call__(self) -> str: ...


def new_id() -> str:
    """Return a random UUID4 string.

    Generation keeps no shared state, so independent callers never need
    to coordinate.
    """
    return str(uuid.uuid4())


_id_generator: ContextVar[IdGenerator] = ContextVar("id_generator", default=new_id)


def generate_id() -> str:
    """Return an identifier from the generator active in this context."""
    return _id_generator.get()()


@contextmanager
def use_id_generator(generator: IdGenerator) -> Iterator[IdGenerator]:
    """Swap the identifier generator for the duration of the context.

    Example:
        with use_id_generator(lambda: "fixed-id"):
            assert User(username="jdoe").id == "fixed-id"
    """
    token = _id_generator.set(generator)
    try:
        yield generator
    finally:
        _id_generator.reset(token)


class Entity(BaseModel):
    """Base entity class with an auto-generated, immutable identifier."""

    id: str = PydanticField(
        default_factory=generate_id,
        frozen=True,
        description="Unique identifier for the entity",
    )

    created_at: datetime = PydanticField(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = PydanticField(default_factory=lambda: datetime.now(UTC))


class EntityTable(SQLModel, table=False):
    """Base table class with an auto-generated primary key."""

    id: str = Field(
        primary_key=True,
        default_factory=generate_id,
        max_length=36,
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_column_kwargs={
            "server_default": sa.func.now(),
            "onupdate": sa.func.now(),
        },
    )
