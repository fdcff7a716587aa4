"""Static discovery metadata attached to entity definitions.

The marker has no runtime behavior. The catalog reads it once at startup
when entity definitions are explicitly registered with a
``CatalogBuilder``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

MARKER_ATTRIBUTE = "__data_agent__"

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class DiscoveryMarker:
    """Description and discoverable flag for one entity definition."""

    description: str = ""
    discoverable: bool = True
    table_name: str = ""

    def as_dict(self) -> dict[str, Any]:
        return {"description": self.description, "discoverable": self.discoverable}


def data_agent(
    description: str = "", discoverable: bool = True, table_name: str = ""
) -> Callable[[T], T]:
    """Class decorator attaching a ``DiscoveryMarker`` to an entity definition.

    Args:
        description: Human-readable description; the catalog index key.
        discoverable: Whether the catalog should index the entity.
        table_name: Table name to report when it differs from the mapped one.
    """
    marker = DiscoveryMarker(
        description=description, discoverable=discoverable, table_name=table_name
    )

    def decorate(cls: T) -> T:
        setattr(cls, MARKER_ATTRIBUTE, marker)
        return cls

    return decorate


def get_marker(entity_cls: type) -> DiscoveryMarker | None:
    """Return the marker declared directly on ``entity_cls``, if any.

    Subclasses do not inherit a parent's marker.
    """
    return entity_cls.__dict__.get(MARKER_ATTRIBUTE)


def catalog_field(
    description: str = "",
    category: str = "",
    sensitive: bool = False,
    examples: str = "",
    data_quality: str = "",
) -> dict[str, Any]:
    """Field-level catalog metadata for a pydantic ``json_schema_extra``."""
    return {
        "catalog": {
            "description": description,
            "category": category,
            "sensitive": sensitive,
            "examples": examples,
            "data_quality": data_quality,
        }
    }
