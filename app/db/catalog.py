"""
Catalog query helpers.

This module runs the count and page queries for a MovieQuery against the
movies table, using one pooled connection per request.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import psycopg
from loguru import logger

from core.errors import DatabaseError
from db.query import build_count_query, build_data_query, build_movie_filters


@dataclass
class MoviePage:
    items: List[Dict[str, Any]] = field(default_factory=list)
    total_items: int = 0


def _run(conn, sql, params):
    logger.debug("Executing SQL: {} Params: {}", sql, params)
    try:
        return conn.execute(sql, params)
    except psycopg.Error as e:
        raise DatabaseError(str(e), query=sql, params=params) from e


def fetch_movie_page(pool, query) -> MoviePage:
    """
    Return the requested page of movies and the total match count.

    - Id lookups skip the count and report the number of rows found (0 or 1)
    - Pages past the end of a non-empty result skip the data query
    - The connection goes back to the pool on every exit path
    """
    filters = build_movie_filters(query)

    try:
        with pool.connection() as conn:
            if not query.is_id_lookup:
                sql, params = build_count_query(filters)
                total_items = int(_run(conn, sql, params).fetchone()["total"])
                logger.info("Total items found for query: {}", total_items)

                if total_items > 0 and query.offset >= total_items:
                    logger.warning(
                        "Requested offset {} is >= total items {}. Returning empty items.",
                        query.offset,
                        total_items,
                    )
                    return MoviePage(items=[], total_items=total_items)

            sql, params = build_data_query(query, filters)
            items = _run(conn, sql, params).fetchall()
            logger.info("Fetched {} item(s).", len(items))

    except psycopg.Error as e:
        # Acquisition failures and pool timeouts surface here
        raise DatabaseError(str(e), params=filters.params) from e

    if query.is_id_lookup:
        total_items = len(items)

    return MoviePage(items=list(items), total_items=total_items)
