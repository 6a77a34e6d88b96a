"""Opening and health-checking the target database connection."""
from __future__ import annotations
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import asyncpg

from pgschemadoc.errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

_CONNECT_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
    ValueError,
)


async def connect(database_url: str, timeout: float | None = None) -> asyncpg.Connection:
    """Open a connection and make sure the server answers.

    Args:
        database_url: PostgreSQL connection string
        timeout: Seconds to wait for the connection and the ping

    Returns:
        An open asyncpg connection

    Raises:
        DatabaseConnectionError: If the database cannot be reached
    """
    connect_kwargs = {"dsn": database_url}
    if timeout is not None:
        connect_kwargs["timeout"] = timeout

    try:
        conn = await asyncpg.connect(**connect_kwargs)
    except asyncpg.InvalidCatalogNameError as e:
        raise DatabaseConnectionError(f"Database does not exist: {e}") from e
    except _CONNECT_ERRORS as e:
        raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e

    try:
        await ping(conn, timeout=timeout)
    except DatabaseConnectionError:
        await conn.close()
        raise

    return conn


async def ping(conn: asyncpg.Connection, timeout: float | None = None) -> None:
    """Run a trivial query to confirm the connection is usable."""
    try:
        result = await conn.fetchval("SELECT 1", timeout=timeout)
    except _CONNECT_ERRORS as e:
        raise DatabaseConnectionError(f"Database ping failed: {e}") from e
    if result != 1:
        raise DatabaseConnectionError(f"Database ping returned {result!r}")
    logger.debug("Database ping ok")


@asynccontextmanager
async def open_connection(
    database_url: str,
    timeout: float | None = None
) -> AsyncIterator[asyncpg.Connection]:
    """Connect, yield the connection, and always close it afterwards."""
    conn = await connect(database_url, timeout=timeout)
    try:
        yield conn
    finally:
        await conn.close()
