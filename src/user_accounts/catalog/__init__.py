"""Entity catalog: discovery markers, schema descriptions and the index.

``discovery`` is not re-exported here because it imports the entity
packages, which themselves import ``catalog.marker``.
"""

from .marker import DiscoveryMarker, catalog_field, data_agent, get_marker
from .registry import CatalogBuilder, CatalogIndex, SchemaRegistry
from .schema import EntitySchema, FieldSchema, RelationshipSchema, describe_entity

__all__ = [
    "CatalogBuilder",
    "CatalogIndex",
    "DiscoveryMarker",
    "EntitySchema",
    "FieldSchema",
    "RelationshipSchema",
    "SchemaRegistry",
    "catalog_field",
    "data_agent",
    "describe_entity",
    "get_marker",
]
