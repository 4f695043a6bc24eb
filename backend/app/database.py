"""Async database engine and session management."""

from typing import Any

from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings


def _connect_args(database_url: str, statement_timeout_ms: int) -> dict[str, Any]:
    """Driver-level connection arguments.

    On asyncpg the client-side command timeout and the server-side
    statement timeout are both set from configuration, and every transaction
    is opened read-only. Other drivers get no extra arguments.
    """
    url = make_url(database_url)
    if url.drivername != "postgresql+asyncpg":
        return {}
    return {
        "command_timeout": statement_timeout_ms / 1000,
        "server_settings": {
            "statement_timeout": str(statement_timeout_ms),
            "default_transaction_read_only": "on",
        },
    }


def create_engine(
    database_url: str = settings.database_url,
    statement_timeout_ms: int = settings.statement_timeout_ms,
) -> AsyncEngine:
    """Create the async engine for the projection data source."""
    return create_async_engine(
        database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        connect_args=_connect_args(database_url, statement_timeout_ms),
    )


engine = create_engine()

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def dispose_engine() -> None:
    await engine.dispose()
