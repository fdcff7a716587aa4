"""Startup catalog build for the account entities."""

from loguru import logger

from user_accounts.catalog.registry import CatalogBuilder, CatalogIndex, SchemaRegistry
from user_accounts.entities.core.profile import Profile, ProfileTable
from user_accounts.entities.core.user import User, UserTable
from user_accounts.runtime.context import get_config


def default_builder(max_entities: int | None = None) -> CatalogBuilder:
    """A builder with every entity definition of this package registered."""
    if max_entities is None:
        max_entities = get_config().catalog.max_entities
    return (
        CatalogBuilder(max_entities=max_entities)
        .register(User, UserTable)
        .register(Profile, ProfileTable)
    )


def run_discovery(builder: CatalogBuilder | None = None) -> CatalogIndex:
    """Build the catalog index once at startup.

    Returns an empty index when ``catalog.auto_discover`` is disabled.
    """
    catalog_config = get_config().catalog
    if not catalog_config.auto_discover:
        logger.info("Catalog auto-discovery is disabled")
        return CatalogIndex({}, SchemaRegistry())

    builder = builder or default_builder(catalog_config.max_entities)
    logger.info(
        "Starting catalog discovery for {} registered entities",
        len(builder.registrations),
    )
    index = builder.build()

    if catalog_config.debug:
        for entity_name, summary in index.registry.summary().items():
            logger.debug("Catalog entity {}: {}", entity_name, summary)

    logger.info("Catalog discovery completed. Indexed: {}", ", ".join(index.entity_names()))
    return index
