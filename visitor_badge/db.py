"""Async SQLAlchemy database layer."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

from sqlalchemy import select, text, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from visitor_badge.models import Visitor

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Engine & session factory
# ------------------------------------------------------------------

_engine = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def configure(db_path: Path) -> None:
    """Set the database path and create the async engine."""
    global _engine, _session_factory
    url = f"sqlite+aiosqlite:///{db_path}"
    _engine = create_async_engine(url, echo=False)
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)


def _get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not configured – call db.configure() first")
    return _session_factory


@asynccontextmanager
async def session() -> AsyncIterator[AsyncSession]:
    """Async context manager yielding a ready-to-use SQLAlchemy session."""
    factory = _get_session_factory()
    async with factory() as sess:
        yield sess
        await sess.commit()


# ------------------------------------------------------------------
# Alembic helpers
# ------------------------------------------------------------------

_ALEMBIC_DIR = str(Path(__file__).resolve().parent.parent / "alembic")


def _run_alembic_upgrade(connection: Any) -> None:
    """Synchronous helper executed inside ``run_sync``."""
    from alembic import command
    from alembic.config import Config

    cfg = Config()
    cfg.set_main_option("script_location", _ALEMBIC_DIR)
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, "head")


async def init_db() -> None:
    """Apply pending Alembic migrations to bring the database up to date."""
    if _engine is None:
        raise RuntimeError("Database not configured – call db.configure() first")
    async with _engine.begin() as conn:
        await conn.execute(text("PRAGMA journal_mode=WAL"))
        await conn.run_sync(_run_alembic_upgrade)


async def dispose() -> None:
    """Dispose of the engine and reset module state."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


# ------------------------------------------------------------------
# Counter helpers
# ------------------------------------------------------------------


async def get_view_count(counter_id: str) -> int | None:
    """Current count for *counter_id*, or ``None`` if it is not registered."""
    async with session() as sess:
        stmt = select(Visitor.view_count).where(Visitor.id == counter_id).limit(1)
        result = await sess.execute(stmt)
        row = result.first()
        return None if row is None else int(row[0])


async def increment_view_count(counter_id: str) -> int | None:
    """Add one view and return the new count, in a single transaction.

    Unknown counters are left alone and ``None`` is returned.
    """
    async with session() as sess:
        await sess.execute(
            update(Visitor)
            .where(Visitor.id == counter_id)
            .values(view_count=Visitor.view_count + 1)
        )
        result = await sess.execute(
            select(Visitor.view_count).where(Visitor.id == counter_id).limit(1)
        )
        row = result.first()
        return None if row is None else int(row[0])


async def register_counter(counter_id: str, start: int = 0) -> bool:
    """Create *counter_id* at *start*; ``False`` if it already existed."""
    async with session() as sess:
        stmt = sqlite_insert(Visitor).values(id=counter_id, view_count=start)
        stmt = stmt.on_conflict_do_nothing(index_elements=[Visitor.id])
        result = await sess.execute(stmt)
        created = bool(result.rowcount)
    if created:
        logger.info("Registered counter %s starting at %d", counter_id, start)
    return created
