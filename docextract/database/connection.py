from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool, PoolTimeout

from docextract.config.settings import Settings
from docextract.database.exceptions import RecordStoreError
from docextract.logging.logger import Log

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
        connect_timeout=settings.db_connect_timeout_seconds,
    )


def init_pool(settings: Settings) -> None:
    """Open the process-wide pool and wait for its first connection.

    Calling it again while a pool is open is a no-op.

    Raises:
        RecordStoreError: if no connection could be made within the connect timeout.
    """
    global _pool  # noqa: PLW0603
    if _pool is not None:
        return
    pool = ConnectionPool(
        build_conninfo(settings),
        min_size=1,
        max_size=settings.db_pool_max_size,
        open=True,
    )
    try:
        pool.wait(timeout=settings.db_connect_timeout_seconds)
    except PoolTimeout as exc:
        pool.close()
        raise RecordStoreError(
            f"Could not connect to PostgreSQL at {settings.db_host}:{settings.db_port}"
        ) from exc
    _pool = pool
    Log.info(
        f"Connection pool ready: {settings.db_host}:{settings.db_port}/{settings.db_database} "
        f"(max {settings.db_pool_max_size})"
    )


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a pooled connection. Caller manages commit/rollback."""
    if _pool is None:
        raise RecordStoreError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn
