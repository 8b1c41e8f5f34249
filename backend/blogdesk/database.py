"""
Blogdesk Backend: Database Handle & Session Management
========================================================

What:  The `Database` handle (async engine, session factory, connection
       state), the declarative `Base`, and the per-request session dependency.
How:   `create_app()` builds one `Database` from settings and stores it on
       `app.state.database`; the lifespan connects and disposes it. Route
       handlers receive sessions through `get_db_session`, which commits on
       success and rolls back on error.
Who:   App factory, route handlers (via Depends), health check, admin CLI.

Connection state (reported by GET /_health):
    disconnected → connecting → connected → disconnecting → disconnected
    A failed ping moves a connected handle back to disconnected.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from blogdesk.exceptions import BlogdeskError, DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which Alembic and
    `Database.create_all()` use to build the schema.
    """
    pass


class Database:
    """
    Explicitly constructed store handle.

    Owns the engine (and therefore the connection pool) for the lifetime of
    the process. Nothing in the package reaches for a module-level engine;
    whoever needs the database is handed this object or a session from it.
    """

    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTING = "disconnecting"
    DISCONNECTED = "disconnected"

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        engine_kwargs = {"pool_pre_ping": pool_pre_ping, "echo": echo}
        # SQLite (used in tests) does not accept queue pool sizing
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: response serialization reads attributes after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.state = self.DISCONNECTED

    @classmethod
    def from_settings(cls, settings) -> "Database":
        """Builds a handle from the application settings object."""
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    async def connect(self) -> bool:
        """
        Open a first connection to verify the database is reachable.

        Returns False (and logs) instead of raising, so the server still
        starts and reports the problem through the health endpoint.
        """
        self.state = self.CONNECTING
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            self.state = self.DISCONNECTED
            logger.error("Database connection failed: %s", str(e))
            return False
        self.state = self.CONNECTED
        logger.info("Connected to database")
        return True

    async def ping(self) -> str:
        """Runs SELECT 1 and returns the resulting connection state."""
        if self.state in (self.CONNECTING, self.DISCONNECTING):
            return self.state
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self.state = self.CONNECTED
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            self.state = self.DISCONNECTED
        return self.state

    async def dispose(self) -> None:
        """Closes every pooled connection (application shutdown)."""
        self.state = self.DISCONNECTING
        await self.engine.dispose()
        self.state = self.DISCONNECTED

    async def create_all(self) -> None:
        """Creates all tables known to `Base.metadata` (development only)."""
        # Registers the models on Base.metadata
        from blogdesk.models import admin, blog, category  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Transactional session scope for code outside a request (CLI).

        Commits on success, rolls back and re-raises on error.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


@asynccontextmanager
async def translate_db_errors(action: str, **context) -> AsyncIterator[None]:
    """
    Service-layer guard: application exceptions pass through untouched,
    anything else is logged and re-raised as DatabaseError.

    Example:
        async with translate_db_errors("fetching blog", blog_id=blog_id):
            ...
    """
    try:
        yield
    except BlogdeskError:
        raise
    except Exception as e:
        logger.error("Database error %s: %s", action, str(e), exc_info=True)
        raise DatabaseError(
            context={"action": action, "error_type": type(e).__name__, **context},
        ) from e


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Takes the `Database` handle the app factory stored on app.state
        2. Yields a new session to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/blogs")
        async def list_blogs(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
