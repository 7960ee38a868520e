from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine as sa_create_async_engine

from player_matching.config.settings import get_settings

_engine: AsyncEngine | None = None


def get_engine(echo: bool = False) -> AsyncEngine:
    """Return the cached async engine, creating it on first use.

    ``pool_pre_ping`` guards against connections dropped by the hosted
    database between human-paced review requests.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = sa_create_async_engine(settings.database_url, echo=echo, pool_pre_ping=True)
    return _engine


async def dispose_engine() -> None:
    """Close pooled connections and forget the cached engine."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
