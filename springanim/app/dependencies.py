"""
Shared FastAPI dependencies.

Tests override these through app.dependency_overrides.
"""
from __future__ import annotations

from fastapi import Depends

from springanim.config import Settings, get_settings
from springanim.database import SpringDB, get_db
from springanim.services import SpringAnimator


def get_app_settings() -> Settings:
    """Dependency: Settings."""
    return get_settings()


async def get_database(settings: Settings = Depends(get_app_settings)) -> SpringDB:
    """Dependency: Database instance."""
    return await get_db(settings.database.path)


async def get_animator(
    db: SpringDB = Depends(get_database),
    settings: Settings = Depends(get_app_settings)
) -> SpringAnimator:
    """Dependency: Animation service configured from settings."""
    physics = settings.physics
    return SpringAnimator(
        db,
        max_steps=physics.max_steps,
        fps=physics.fps,
        prefixes=physics.prefixes,
        cleanup_margin_ms=physics.cleanup_margin_ms
    )
