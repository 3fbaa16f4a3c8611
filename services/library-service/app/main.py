"""FastAPI application wiring for the library service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.books import router as books_router
from .api.errors import register_exception_handlers
from .api.routes import router as users_router
from .config import get_settings
from .domain.catalog import CrudService
from .domain.service import AccountService
from .domain.validation import validate_book_draft
from .repository import AccountRepository, BookRepository, bootstrap_schema
from .security.passwords import BcryptHasher

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    if settings.auto_create_schema:
        bootstrap_schema(pool)
    app.state.pool = pool
    app.state.account_service = AccountService(
        AccountRepository(pool),
        BcryptHasher(rounds=settings.bcrypt_rounds),
        temp_password_length=settings.temp_password_length,
    )
    app.state.book_service = CrudService(
        BookRepository(pool),
        entity_name="book",
        validate=validate_book_draft,
    )
    try:
        yield
    finally:
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)

register_exception_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(users_router)
app.include_router(books_router)


def run() -> None:
    """Console entry point serving the app with uvicorn."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=settings.http_host, port=settings.http_port)
