"""Database engine and helpers.

The engine is built once by the application factory from
`Settings.DATABASE_URL` and kept on `app.state.engine`; request handlers
receive a `Session` bound to it through the `get_session` dependency.
Tests and scripts build their own engine with `create_db_engine`.
"""

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for `url`.

    SQLite connections are shared across FastAPI's worker threads, so the
    same-thread check is disabled for them.
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


def create_db_and_tables(engine: Engine) -> None:
    """Create database tables using SQLModel metadata.

    Intended for local development and tests; production deployments
    should rely on a proper migration tool (alembic) instead.
    """
    # register the table classes on the metadata
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(request.app.state.engine) as session:
        yield session
