"""Entity schema descriptions built from registered definitions.

A schema is assembled from three explicit inputs: the domain model
(field descriptions and catalog metadata), its table model (columns and
relationships as mapped) and the discovery marker.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import UniqueConstraint
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import RelationshipDirection, RelationshipProperty
from sqlmodel import SQLModel

from user_accounts.catalog.marker import DiscoveryMarker, get_marker


class FieldSchema(BaseModel):
    """A mapped column of an entity."""

    field_name: str
    column_name: str
    field_type: str
    column_type: str
    nullable: bool
    unique: bool
    is_primary_key: bool
    length: int | None = None
    description: str = ""
    category: str = ""
    sensitive: bool = False
    examples: str = ""
    data_quality: str = ""


class RelationshipSchema(BaseModel):
    """An association from one entity to another."""

    field_name: str
    target_entity: str
    relationship_type: str
    mapped_by: str | None = None
    join_column: str | None = None
    cascade_types: list[str] = Field(default_factory=list)
    fetch_type: str = "LAZY"


class EntitySchema(BaseModel):
    """Catalog description of one entity definition."""

    entity_name: str
    table_name: str
    description: str
    discoverable: bool
    fields: list[FieldSchema]
    relationships: list[RelationshipSchema]
    discovered_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def field(self, name: str) -> FieldSchema | None:
        return next((f for f in self.fields if f.field_name == name), None)

    def relationship(self, name: str) -> RelationshipSchema | None:
        return next((r for r in self.relationships if r.field_name == name), None)


def describe_entity(
    entity_cls: type[BaseModel],
    table_cls: type[SQLModel],
    marker: DiscoveryMarker | None = None,
) -> EntitySchema:
    """Build the ``EntitySchema`` for one registered entity definition.

    The table name comes from the marker's ``table_name`` when set, then
    the mapped table, then the upper-cased entity name.
    """
    marker = marker or get_marker(entity_cls) or DiscoveryMarker()
    mapper = sa_inspect(table_cls)
    table = getattr(table_cls, "__table__", None)

    if marker.table_name:
        table_name = marker.table_name
    elif table is not None:
        table_name = table.name
    else:
        table_name = entity_cls.__name__.upper()

    unique_columns = _single_column_unique_names(table)
    fields = []
    for attr in mapper.column_attrs:
        column = attr.columns[0]
        fields.append(
            _field_schema(entity_cls, attr.key, column, column.name in unique_columns)
        )

    relationships = [_relationship_schema(rel) for rel in mapper.relationships]

    return EntitySchema(
        entity_name=entity_cls.__name__,
        table_name=table_name,
        description=marker.description,
        discoverable=marker.discoverable,
        fields=fields,
        relationships=relationships,
    )


def _single_column_unique_names(table: Any) -> set[str]:
    if table is None:
        return set()
    names = set()
    for constraint in table.constraints:
        if isinstance(constraint, UniqueConstraint) and len(constraint.columns) == 1:
            names.update(c.name for c in constraint.columns)
    return names


def _field_schema(
    entity_cls: type[BaseModel], key: str, column: Any, unique: bool
) -> FieldSchema:
    info = entity_cls.model_fields.get(key)
    extra: dict[str, Any] = {}
    description = ""
    field_type = "str"
    if info is not None:
        description = info.description or ""
        if isinstance(info.json_schema_extra, dict):
            extra = info.json_schema_extra.get("catalog", {})
        field_type = _type_name(info.annotation)

    return FieldSchema(
        field_name=key,
        column_name=column.name,
        field_type=field_type,
        column_type=_column_type(column),
        nullable=bool(column.nullable),
        unique=bool(column.unique) or unique,
        is_primary_key=bool(column.primary_key),
        length=getattr(column.type, "length", None),
        description=extra.get("description") or description,
        category=extra.get("category", ""),
        sensitive=extra.get("sensitive", False),
        examples=extra.get("examples", ""),
        data_quality=extra.get("data_quality", ""),
    )


def _column_type(column: Any) -> str:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return "VARCHAR"
    return {
        str: "VARCHAR",
        int: "INTEGER",
        float: "FLOAT",
        bool: "BOOLEAN",
        datetime: "TIMESTAMP",
    }.get(python_type, "VARCHAR")


def _type_name(annotation: Any) -> str:
    args = [a for a in getattr(annotation, "__args__", ()) if a is not type(None)]
    if args:
        annotation = args[0]
    return getattr(annotation, "__name__", str(annotation))


def _relationship_schema(rel: RelationshipProperty) -> RelationshipSchema:
    reverse_uselist = (
        rel.mapper.relationships[rel.back_populates].uselist
        if rel.back_populates
        else True
    )
    if not rel.uselist and not reverse_uselist:
        relationship_type = "OneToOne"
    elif rel.direction is RelationshipDirection.MANYTOONE:
        relationship_type = "ManyToOne"
    elif rel.direction is RelationshipDirection.ONETOMANY:
        relationship_type = "OneToMany"
    else:
        relationship_type = "ManyToMany"

    owns_key = rel.direction is RelationshipDirection.MANYTOONE
    join_column = next(iter(rel.local_columns)).name if owns_key else None
    mapped_by = None if owns_key else rel.back_populates

    return RelationshipSchema(
        field_name=rel.key,
        target_entity=rel.mapper.class_.__name__.removesuffix("Table"),
        relationship_type=relationship_type,
        mapped_by=mapped_by,
        join_column=join_column,
        cascade_types=sorted(rel.cascade),
        fetch_type="LAZY" if rel.lazy in ("select", True) else "EAGER",
    )
