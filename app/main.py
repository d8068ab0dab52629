"""
Application entry point.

This module creates the FastAPI app, opens the database connection pool on
startup, and wires together the API routers.
"""

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.logging import configure_logging
from db.pool import create_pool
from api.movies import (
    router as movies_router,
    CORS_HEADERS,
    MOVIES_PATH,
    method_not_allowed_response,
    unexpected_error_response,
)

configure_logging()

app = FastAPI()


# Browser clients call the API cross-origin; every reply carries CORS headers
@app.middleware("http")
async def log_request_and_add_cors(request: Request, call_next):
    logger.info(
        "API Request Received. {} {} Query: {}",
        request.method,
        request.url.path,
        dict(request.query_params),
    )
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(StarletteHTTPException)
async def movies_method_not_allowed(request: Request, exc: StarletteHTTPException):
    """
    Only GET and OPTIONS are served on the catalog path; every other
    method, including HEAD and non-standard verbs, gets the JSON 405.
    """
    if exc.status_code == 405 and request.url.path == MOVIES_PATH:
        return method_not_allowed_response(request.method)
    return await http_exception_handler(request, exc)


app.add_exception_handler(Exception, unexpected_error_response)


@app.on_event("startup")
def startup():
    """
    Open the process-wide connection pool.
    """
    app.state.pool = create_pool()
    app.state.pool.open()
    logger.info("Database connection pool opened.")


@app.on_event("shutdown")
def shutdown():
    pool = getattr(app.state, "pool", None)
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed.")


# Catalog query endpoint
app.include_router(movies_router)
