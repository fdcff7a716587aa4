"""Database and catalog initialization."""

from user_accounts.catalog.discovery import run_discovery
from user_accounts.catalog.registry import CatalogIndex
from user_accounts.core.services.database.db_session import DbSessionService
from user_accounts.runtime.config.config_data import ConfigData
from user_accounts.runtime.log_config import configure_logging


def init_db(config: ConfigData | None = None) -> DbSessionService:
    """Create all database tables and return the session service."""
    db_service = DbSessionService(config)
    db_service.create_all()
    return db_service


def startup(config: ConfigData | None = None) -> tuple[DbSessionService, CatalogIndex]:
    """Configure logging, create tables and build the entity catalog."""
    configure_logging()
    db_service = init_db(config)
    return db_service, run_discovery()
