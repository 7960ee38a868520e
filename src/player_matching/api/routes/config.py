"""REST API endpoints for dynamic matching configuration."""

from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.api.deps import get_db
from player_matching.api.schemas import (
    ConfigResponse,
    ConfigUpdateRequest,
    config_to_response,
)
from player_matching.config.settings import get_settings
from player_matching.matching.config import (
    MatchingConfig,
    load_matching_config,
    merge_config_dicts,
)
from player_matching.models.config_settings import ConfigSettings

logger = structlog.get_logger()

router = APIRouter(prefix="/api/config", tags=["config"])


async def _load_row(db: AsyncSession) -> ConfigSettings | None:
    result = await db.execute(sa.select(ConfigSettings).where(ConfigSettings.id == 1))
    return result.scalar_one_or_none()


def _effective_config(row: ConfigSettings | None) -> MatchingConfig:
    base = load_matching_config(get_settings().matching_config_path)
    if row is None or not row.config_json:
        return base
    return MatchingConfig(**merge_config_dicts(base.model_dump(), row.config_json))


@router.get("", response_model=ConfigResponse)
async def get_config(db: AsyncSession = Depends(get_db)) -> ConfigResponse:
    """Return the current matching configuration.

    If no configuration has been saved to the database yet, returns the
    YAML file values (or defaults).
    """
    row = await _load_row(db)
    config = _effective_config(row)
    if row is None:
        return ConfigResponse(**config_to_response(config))
    return ConfigResponse(**config_to_response(config, row.updated_at, row.updated_by))


@router.patch("", response_model=ConfigResponse)
async def patch_config(
    body: ConfigUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> ConfigResponse:
    """Apply a partial update to the matching configuration.

    Only the fields present in the request body are updated; unset fields
    retain their current values.  The merged configuration is validated
    before anything is stored, so an update that would put the review
    threshold above the auto-approve threshold is rejected with 422.
    """
    row = await _load_row(db)
    current = _effective_config(row)

    update_data = body.model_dump(exclude_unset=True, exclude_none=True, exclude={"operator"})
    merged = merge_config_dicts(current.model_dump(), update_data)

    # Validate merged config through Pydantic
    try:
        new_config = MatchingConfig(**merged)
    except ValidationError as e:
        detail = [{"loc": err["loc"], "msg": err["msg"], "type": err["type"]} for err in e.errors()]
        raise HTTPException(status_code=422, detail=detail) from e

    config_dict = new_config.model_dump()
    now = dt.datetime.now(dt.UTC).replace(tzinfo=None)

    if row is None:
        row = ConfigSettings(
            id=1,
            config_json=config_dict,
            updated_at=now,
            updated_by=body.operator,
        )
        db.add(row)
    else:
        row.config_json = config_dict
        row.updated_at = now
        row.updated_by = body.operator

    await db.commit()
    await db.refresh(row)

    logger.info("config_updated", sections=sorted(update_data), operator=body.operator)

    return ConfigResponse(**config_to_response(new_config, row.updated_at, row.updated_by))
