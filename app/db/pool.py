"""
PostgreSQL connection pool.

The pool is created closed and opened by the application's startup hook,
so importing this module never touches the network.
"""

from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from core.config import (
    POSTGRES_URL,
    POSTGRES_SSLMODE,
    POSTGRES_POOL_MIN_SIZE,
    POSTGRES_POOL_MAX_SIZE,
    POSTGRES_POOL_TIMEOUT,
)


def create_pool(
    conninfo=POSTGRES_URL,
    sslmode=POSTGRES_SSLMODE,
    min_size=POSTGRES_POOL_MIN_SIZE,
    max_size=POSTGRES_POOL_MAX_SIZE,
    timeout=POSTGRES_POOL_TIMEOUT,
) -> ConnectionPool:
    """
    Build the process-wide pool. Rows are returned as dicts.
    """
    if sslmode:
        conninfo = make_conninfo(conninfo, sslmode=sslmode)

    return ConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max_size,
        timeout=timeout,
        kwargs={"row_factory": dict_row},
        open=False,
    )
