"""FastAPI application for the Player Matching review API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from player_matching.api.routes.config import router as config_router
from player_matching.api.routes.dashboard import router as dashboard_router
from player_matching.api.routes.health import router as health_router
from player_matching.api.routes.matches import router as matches_router
from player_matching.api.routes.review import audit_router, router as review_router
from player_matching.config.settings import get_settings
from player_matching.logging_config import configure_from_settings

settings = get_settings()
configure_from_settings(settings)

app = FastAPI(title="Player Matching API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(review_router)
app.include_router(audit_router)
app.include_router(matches_router)
app.include_router(dashboard_router)
app.include_router(config_router)
