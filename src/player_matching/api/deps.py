"""FastAPI dependency injection for async DB sessions and matching config."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.db.session import get_session_factory
from player_matching.matching.config import MatchingConfig, load_config_for_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session for request handling."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_matching_config(db: AsyncSession = Depends(get_db)) -> MatchingConfig:
    """Effective matching config (YAML plus stored overrides) for this request."""
    return await load_config_for_session(db)
