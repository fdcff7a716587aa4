"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from user_accounts.runtime.config.config_data import ConfigData, DatabaseConfig
from user_accounts.runtime.context import get_config


def register_tables() -> None:
    """Import every table model so it is present in ``SQLModel.metadata``."""
    from user_accounts.entities.core.profile.table import ProfileTable  # noqa: F401
    from user_accounts.entities.core.user.table import UserTable  # noqa: F401


class DbSessionService:
    def __init__(self, config: ConfigData | None = None, engine: Engine | None = None):
        """Initialize the shared database engine and session factory."""
        main_config = config or get_config()
        self._db_config = main_config.database

        if engine is not None:
            self._engine = engine
            return

        engine_kwargs = self._get_engine_kwargs(self._db_config)
        logger.info(
            "Initializing database engine for environment: {}",
            main_config.app.environment,
        )
        self._engine = create_engine(self._db_config.url, **engine_kwargs)

        if main_config.app.environment == "production" and self._db_config.is_sqlite:
            logger.warning(
                "SQLite is not recommended for production use. "
                "Consider PostgreSQL for better performance and reliability."
            )

    @property
    def engine(self) -> Engine:
        return self._engine

    @staticmethod
    def _get_engine_kwargs(db_config: DatabaseConfig) -> dict[str, Any]:
        """Build engine arguments for the configured backend."""
        engine_kwargs: dict[str, Any] = {"echo": db_config.echo}

        if db_config.is_sqlite:
            engine_kwargs["connect_args"] = {
                "check_same_thread": False,
                "timeout": 20,  # lock timeout
            }
            if db_config.is_memory:
                # one shared connection, otherwise each checkout sees an empty database
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                    "pool_pre_ping": True,
                }
            )
        return engine_kwargs

    def create_all(self) -> None:
        """Create all database tables."""
        register_tables()
        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        register_tables()
        SQLModel.metadata.drop_all(self._engine)
        logger.info("Database tables dropped.")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager style helper for repositories and tests."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed: {}: {}", type(e).__name__, e
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed: {}: {}", type(e).__name__, e
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
