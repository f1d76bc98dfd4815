"""Connect the model layer to a database and scope sessions"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .naming import morph_name, singular
from .state import _CURRENT_SESSION, _ENGINE, _MODEL_REGISTRY_PY

logger = logging.getLogger("morphs.engine")


def register_model(model_cls: Any) -> None:
    """Make a model class resolvable by class name and by morph name."""
    keys = {model_cls.__name__.lower()}
    if "__table__" in model_cls.__dict__:
        keys.add(morph_name(model_cls).lower())
    for key in keys:
        existing = _MODEL_REGISTRY_PY.get(key)
        if existing is not None and existing is not model_cls:
            logger.debug(
                "Model name '%s' now refers to %s (was %s)",
                key,
                model_cls.__qualname__,
                existing.__qualname__,
            )
        _MODEL_REGISTRY_PY[key] = model_cls


def lookup_model(name: str | None) -> Any | None:
    """
    Return the model class registered under ``name``, or None.

    Class names (``"Upvote"``), morph names (``"upvote"``) and table names
    (``"upvotes"``) all resolve, case insensitively.
    """
    if not name:
        return None
    key = name.lower()
    model_cls = _MODEL_REGISTRY_PY.get(key)
    if model_cls is None:
        model_cls = _MODEL_REGISTRY_PY.get(singular(key))
    return model_cls


def clear_registry() -> None:
    """Forget every registered model."""
    _MODEL_REGISTRY_PY.clear()


async def connect(url: str, auto_migrate: bool = False, echo: bool = False) -> None:
    """
    Establish a connection to the database.

    Args:
        url: An async SQLAlchemy URL (e.g., "sqlite+aiosqlite:///app.db").
        auto_migrate: If True, create tables for all declared models.
        echo: Log every SQL statement through SQLAlchemy's logger.
    """
    await reset_engine()
    engine = create_async_engine(url, echo=echo)
    _ENGINE["engine"] = engine
    _ENGINE["sessionmaker"] = async_sessionmaker(engine, expire_on_commit=False)
    logger.debug("Connected to %s", engine.url.render_as_string(hide_password=True))
    if auto_migrate:
        await create_tables()


def _require_engine():
    engine = _ENGINE["engine"]
    if engine is None:
        raise RuntimeError(
            "Database is not connected. Call 'await connect(url)' first."
        )
    return engine


async def create_tables() -> None:
    """Create the tables of every declared model that do not exist yet."""
    from .models import Model

    engine = _require_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Model.metadata.create_all)


async def reset_engine() -> None:
    """Dispose of the current engine, if any."""
    engine = _ENGINE["engine"]
    _ENGINE["engine"] = None
    _ENGINE["sessionmaker"] = None
    if engine is not None:
        await engine.dispose()


@asynccontextmanager
async def transaction() -> AsyncIterator[AsyncSession]:
    """
    Asynchronous context manager for database transactions.

    Usage:
        async with morphs.transaction():
            await Website.create(name="example.com")
            ...
    """
    _require_engine()
    async with _ENGINE["sessionmaker"]() as session:
        token = _CURRENT_SESSION.set(session)
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            _CURRENT_SESSION.reset(token)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield the active transaction's session, or a short-lived committed one."""
    session = _CURRENT_SESSION.get()
    if session is not None:
        yield session
        return
    async with transaction() as session:
        yield session
