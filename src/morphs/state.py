from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Context variable to store the session of the active transaction for the current task
_CURRENT_SESSION: ContextVar["AsyncSession | None"] = ContextVar(
    "current_session", default=None
)

# Global registry for models (Python side), keyed by lowercased class and morph name
_MODEL_REGISTRY_PY: dict[str, Any] = {}

# Engine and session factory created by connect()
_ENGINE: dict[str, "AsyncEngine | async_sessionmaker | None"] = {
    "engine": None,
    "sessionmaker": None,
}
