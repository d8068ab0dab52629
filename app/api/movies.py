"""
Movie catalog query endpoint.

This module exposes GET /api/movies, which filters, sorts and paginates
the movies table, plus the CORS pre-flight and method-not-allowed replies
for the same path.
"""

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger

from core.config import IS_DEVELOPMENT
from core.errors import DatabaseError
from core.params import DEFAULT_SORT, DEFAULT_SORT_DIR, MovieQuery
from db.catalog import fetch_movie_page

router = APIRouter()

MOVIES_PATH = "/api/movies"
ALLOWED_METHODS = "GET, OPTIONS"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Allow-Headers": "Content-Type",
}

FETCH_ERROR = "Failed to fetch movie data from database."
PRODUCTION_ERROR_DETAILS = "Internal Server Error. Check API logs."

# Columns whose schema is most often wrong in a fresh database
SCHEMA_HINTS = {
    "last_updated_ts": "Potential issue with 'last_updated_ts' column. Check schema.",
    "is_series": "Potential issue with 'is_series' column. Check schema (should be BOOLEAN).",
    "size_bytes": "Potential issue with 'size_bytes' column. Check schema (should be NUMERIC/BIGINT).",
}


def get_pool(request: Request):
    """
    Dependency returning the process-wide connection pool.
    """
    return request.app.state.pool


def build_envelope(query: MovieQuery, items, total_items: int) -> dict:
    """
    Shape a page of rows into the paginated response body.
    """
    if query.is_id_lookup:
        total_pages = 1
    else:
        total_pages = math.ceil(total_items / query.limit)

    return {
        "items": items,
        "totalItems": total_items,
        "page": query.page,
        "totalPages": total_pages,
        "limit": query.limit,
        "filters": {
            "search": query.search,
            "quality": query.quality,
            "type": query.type,
        },
        "sorting": {
            "sort": query.sort,
            "sortDir": query.sort_dir,
        },
    }


def _log_failure(error: DatabaseError):
    logger.exception("API Database Error: {}", error.message)
    for column, hint in SCHEMA_HINTS.items():
        if column in error.message:
            logger.error(">>> {} <<<", hint)
    logger.error("Failing query: {} Params: {}", error.query, error.params)


@router.get(MOVIES_PATH)
def list_movies(
    search: Optional[str] = None,
    quality: Optional[str] = None,
    type_: Optional[str] = Query(None, alias="type"),
    sort: str = DEFAULT_SORT,
    sort_dir: str = Query(DEFAULT_SORT_DIR, alias="sortDir"),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    id: Optional[str] = None,
    pool=Depends(get_pool),
):
    # page and limit stay strings so malformed values fall back to defaults
    query = MovieQuery.from_params(
        search=search,
        quality=quality,
        type=type_,
        sort=sort,
        sort_dir=sort_dir,
        page=page,
        limit=limit,
        id=id,
    )

    logger.debug(
        "Parsed params: page={}, limit={}, offset={}, sort={}, dir={}, "
        "search={!r}, quality={!r}, type={!r}, id={!r}",
        query.page,
        query.limit,
        query.offset,
        query.sort_column,
        query.sort_direction,
        query.search,
        query.quality,
        query.type,
        query.id,
    )

    try:
        result = fetch_movie_page(pool, query)
    except DatabaseError as e:
        _log_failure(e)
        return fetch_error_response(e.message)

    return build_envelope(query, result.items, result.total_items)


@router.options(MOVIES_PATH)
def movies_preflight():
    return Response(status_code=200)


def fetch_error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": FETCH_ERROR,
            "details": message if IS_DEVELOPMENT else PRODUCTION_ERROR_DETAILS,
        },
    )


def method_not_allowed_response(method: str) -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"error": f"Method {method} Not Allowed"},
        headers={"Allow": ALLOWED_METHODS},
    )


def unexpected_error_response(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort reply for failures outside the database layer, such as a
    pool that never opened or a row that can't be JSON encoded.

    Runs outside the app middleware, so CORS headers are set here.
    """
    logger.opt(exception=exc).error(
        "Unhandled error on {} {}", request.method, request.url.path
    )
    response = fetch_error_response(str(exc))
    response.headers.update(CORS_HEADERS)
    return response
