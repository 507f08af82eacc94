"""
Database Infrastructure
=======================

Builds the connection URL, creates the engine and validates it.

Uses SQLAlchemy 2.0 async engines. The engine returned by ``connect()`` is
owned by the caller and passed explicitly to the repositories that need it.
"""

from typing import Dict, Optional, Tuple

from sqlalchemy import MetaData, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from poem_collector.config import DatabaseConfig, Settings, get_settings
from poem_collector.core import ConnectOpenError, ConnectPingError
from poem_collector.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

metadata = MetaData()

# Configured driver name -> (SQLAlchemy async drivername, URL query)
DRIVERS: Dict[str, Tuple[str, Dict[str, str]]] = {
    "mysql": ("mysql+aiomysql", {"charset": "utf8mb4"}),
    "postgres": ("postgresql+asyncpg", {}),
    "postgresql": ("postgresql+asyncpg", {}),
    "sqlite": ("sqlite+aiosqlite", {}),
}


def build_database_url(config: DatabaseConfig) -> URL:
    """
    Build a driver-specific SQLAlchemy URL from the connection parameters.

    For SQLite the ``name`` is the database file path and the network
    parameters are ignored.

    Raises:
        ConnectOpenError: On an unknown driver or a non-numeric port
    """
    driver = config.driver.strip().lower()
    if "+" in driver:
        drivername, query = driver, {}
    elif driver in DRIVERS:
        drivername, query = DRIVERS[driver]
    else:
        raise ConnectOpenError(
            f"DB connect create error: unsupported driver {config.driver!r}",
            {"driver": config.driver, "supported": sorted(DRIVERS)}
        )

    if drivername.startswith("sqlite"):
        return URL.create(drivername, database=config.name)

    port: Optional[int] = None
    if config.port:
        try:
            port = int(config.port)
        except ValueError as e:
            raise ConnectOpenError(
                f"DB connect create error: invalid port {config.port!r}",
                {"port": config.port}
            ) from e

    return URL.create(
        drivername,
        username=config.user or None,
        password=config.password or None,
        host=config.host or None,
        port=port,
        database=config.name,
        query=query,
    )


async def connect(config: DatabaseConfig, settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Open the database engine and check that the database answers.

    Args:
        config: Connection parameters from the config file
        settings: Pool sizing; defaults to ``get_settings()``

    Returns:
        AsyncEngine: The validated engine

    Raises:
        ConnectOpenError: If the engine cannot be created
        ConnectPingError: If the liveness check fails
    """
    settings = settings or get_settings()
    url = build_database_url(config)

    engine_kwargs = {"pool_pre_ping": True}
    if not url.drivername.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )

    try:
        engine = create_async_engine(url, **engine_kwargs)
    except (ArgumentError, ImportError, TypeError) as e:
        raise ConnectOpenError(
            f"DB connect create error: {e}",
            {"driver": url.drivername}
        ) from e

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        await engine.dispose()
        raise ConnectPingError(
            f"DB ping fail: {e}",
            {"driver": url.drivername, "host": url.host, "database": url.database}
        ) from e

    logger.info(
        "Database connected",
        extra={"driver": url.drivername, "host": url.host, "database": url.database}
    )
    return engine


async def close_database(engine: AsyncEngine) -> None:
    """Dispose of the engine and its pooled connections."""
    await engine.dispose()
    logger.info("Database connections closed")


async def create_tables(engine: AsyncEngine) -> None:
    """
    Create all tables known to the metadata.

    For development and tests only; the service never creates or migrates
    its schema.
    """
    # Registers t_poem on the metadata
    from poem_collector.poems.infrastructure import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
