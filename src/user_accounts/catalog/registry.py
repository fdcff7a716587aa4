"""Catalog registration and lookup.

Entity definitions are registered explicitly with a ``CatalogBuilder``;
nothing is discovered by scanning modules. ``build()`` describes every
registration, keeps all schemas in a ``SchemaRegistry`` and indexes the
discoverable ones by description.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from loguru import logger
from pydantic import BaseModel
from sqlmodel import SQLModel

from user_accounts.catalog.marker import DiscoveryMarker, get_marker
from user_accounts.catalog.schema import EntitySchema, describe_entity
from user_accounts.core.relationships import entity_name


class SchemaRegistry:
    """Stores entity schemas by entity name and by table name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_entity: dict[str, EntitySchema] = {}
        self._by_table: dict[str, EntitySchema] = {}

    def register(self, schema: EntitySchema) -> None:
        logger.info("Registering schema for entity: {}", schema.entity_name)
        with self._lock:
            self._by_entity[schema.entity_name] = schema
            self._by_table[schema.table_name] = schema
        logger.debug("Schema registered. Total schemas: {}", self.count())

    def register_all(self, schemas: list[EntitySchema]) -> None:
        logger.info("Registering {} schemas", len(schemas))
        for schema in schemas:
            self.register(schema)

    def get_by_entity_name(self, entity_name: str) -> EntitySchema | None:
        return self._by_entity.get(entity_name)

    def get_by_table_name(self, table_name: str) -> EntitySchema | None:
        return self._by_table.get(table_name)

    def get_all(self) -> list[EntitySchema]:
        return list(self._by_entity.values())

    def has_schema(self, entity_name: str) -> bool:
        return entity_name in self._by_entity

    def has_table(self, table_name: str) -> bool:
        return table_name in self._by_table

    def count(self) -> int:
        return len(self._by_entity)

    def remove(self, entity_name: str) -> EntitySchema | None:
        with self._lock:
            schema = self._by_entity.pop(entity_name, None)
            if schema is not None:
                self._by_table.pop(schema.table_name, None)
        if schema is not None:
            logger.info("Removed schema for entity: {}", entity_name)
        return schema

    def clear(self) -> None:
        logger.info("Clearing all registered schemas")
        with self._lock:
            self._by_entity.clear()
            self._by_table.clear()

    def summary(self) -> dict[str, str]:
        return {
            s.entity_name: (
                f"{s.table_name} ({len(s.fields)} fields, "
                f"{len(s.relationships)} relationships)"
            )
            for s in self._by_entity.values()
        }


@dataclass(frozen=True)
class Registration:
    entity_cls: type[BaseModel]
    table_cls: type[SQLModel]
    marker: DiscoveryMarker


class CatalogIndex:
    """Discoverable entity schemas keyed by description."""

    def __init__(self, schemas: dict[str, EntitySchema], registry: SchemaRegistry):
        self._by_description = schemas
        self.registry = registry

    def lookup(self, description: str) -> EntitySchema | None:
        return self._by_description.get(description)

    def descriptions(self) -> list[str]:
        return list(self._by_description)

    def entity_names(self) -> list[str]:
        return [s.entity_name for s in self._by_description.values()]

    def __contains__(self, entity: object) -> bool:
        if not isinstance(entity, (str, type)):
            return False
        return entity_name(entity) in self.entity_names()

    def __len__(self) -> int:
        return len(self._by_description)


class CatalogBuilder:
    """Collects explicit entity registrations and builds the catalog index."""

    def __init__(self, max_entities: int = 1000) -> None:
        self._registrations: list[Registration] = []
        self._max_entities = max_entities

    def register(
        self,
        entity_cls: type[BaseModel],
        table_cls: type[SQLModel],
        marker: DiscoveryMarker | None = None,
    ) -> CatalogBuilder:
        """Register an entity definition with its table model.

        ``marker`` defaults to the one attached by ``@data_agent``; an
        entity with neither is registered as discoverable with no
        description.
        """
        marker = marker or get_marker(entity_cls) or DiscoveryMarker()
        self._registrations.append(Registration(entity_cls, table_cls, marker))
        return self

    @property
    def registrations(self) -> list[Registration]:
        return list(self._registrations)

    def build(self) -> CatalogIndex:
        """Describe every registration and index the discoverable ones."""
        registry = SchemaRegistry()
        indexed: dict[str, EntitySchema] = {}

        registrations = self._registrations
        if len(registrations) > self._max_entities:
            logger.warning(
                "Catalog limited to {} of {} registered entities",
                self._max_entities,
                len(registrations),
            )
            registrations = registrations[: self._max_entities]

        for registration in registrations:
            name = registration.entity_cls.__name__
            try:
                schema = describe_entity(
                    registration.entity_cls, registration.table_cls, registration.marker
                )
            except Exception as e:
                logger.error("Failed to describe entity {}: {}", name, e)
                continue

            registry.register(schema)
            if not registration.marker.discoverable:
                logger.info("Entity {} is not discoverable; not indexed", name)
                continue
            if schema.description in indexed:
                logger.warning(
                    "Description {!r} already indexed for {}; replaced by {}",
                    schema.description,
                    indexed[schema.description].entity_name,
                    name,
                )
            indexed[schema.description] = schema

        logger.info("Catalog built: {} indexed of {} described", len(indexed), registry.count())
        return CatalogIndex(indexed, registry)
