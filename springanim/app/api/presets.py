"""
SPRINGANIM - PRESETS & ANIMATIONS API
=====================================

Endpoints for spring presets and logged animations.
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Depends

from springanim.app.dependencies import get_database, get_animator
from springanim.app.models import (
    PresetUpsertRequest,
    PresetResponse,
    PresetListResponse,
    AnimationRecordResponse,
    format_timestamp
)
from springanim.core.physics import SpringParameters, SpringDidNotConverge
from springanim.database import SpringDB
from springanim.services import SpringAnimator


router = APIRouter(tags=["presets"])


# ============================================================================
# PRESET ENDPOINTS
# ============================================================================

@router.get("/presets", response_model=PresetListResponse)
async def list_presets(db: SpringDB = Depends(get_database)):
    """
    List all spring presets (default first).

    Example:
        GET /presets

    Returns:
        {
            "presets": [
                {"preset_name": "default", "stiffness": 1.0, "damping": 0.1, ...},
                {"preset_name": "gentle", ...}
            ]
        }
    """
    presets = await db.list_presets()

    return PresetListResponse(presets=presets)


@router.get("/presets/{preset_name}", response_model=PresetResponse)
async def get_preset(
    preset_name: str,
    include_preview: bool = False,
    preview_points: int = 50,
    animator: SpringAnimator = Depends(get_animator)
):
    """
    Get a spring preset.

    Args:
        preset_name: Preset identifier (e.g., "wobbly")
        include_preview: Sample the spring from x=100
        preview_points: Maximum preview points

    Example:
        GET /presets/wobbly?include_preview=true
    """
    preset = await animator.db.get_preset(preset_name)

    if not preset:
        raise HTTPException(
            status_code=404,
            detail=f"Preset '{preset_name}' not found"
        )

    preview = None
    if include_preview:
        params = SpringParameters(
            stiffness=preset["stiffness"],
            damping=preset["damping"],
            mass=preset["mass"]
        )
        try:
            preview = animator.preview(params, max_points=max(2, preview_points))
        except SpringDidNotConverge as e:
            raise HTTPException(
                status_code=400,
                detail=f"Preset '{preset_name}' does not settle: {e}"
            )

    return PresetResponse(**preset, preview=preview)


@router.put("/presets/{preset_name}", response_model=PresetResponse)
async def put_preset(
    preset_name: str,
    request: PresetUpsertRequest,
    db: SpringDB = Depends(get_database)
):
    """
    Create or replace a preset.

    Example:
        PUT /presets/snappy
        {"stiffness": 0.8, "damping": 0.12, "description": "Snappy"}
    """
    await db.upsert_preset(
        preset_name=preset_name,
        stiffness=request.stiffness,
        damping=request.damping,
        mass=request.mass,
        description=request.description,
        is_default=request.is_default
    )

    preset = await db.get_preset(preset_name)

    return PresetResponse(**preset)


# ============================================================================
# ANIMATION LOG ENDPOINTS
# ============================================================================

@router.get("/animations/{name}", response_model=AnimationRecordResponse, tags=["animations"])
async def get_animation(
    name: str,
    db: SpringDB = Depends(get_database)
):
    """
    Get a previously generated animation (CSS included).

    Example:
        GET /animations/animation-1f3a9c0e
    """
    record = await db.get_animation(name)

    if not record:
        raise HTTPException(
            status_code=404,
            detail=f"Animation '{name}' not found"
        )

    return AnimationRecordResponse(
        name=record["name"],
        preset_name=record["preset_name"],
        stiffness=record["stiffness"],
        damping=record["damping"],
        mass=record["mass"],
        frame_count=record["frame_count"],
        duration_ms=record["duration_ms"],
        fps=record["fps"],
        css=record["css"],
        created_at=format_timestamp(record["created_at"])
    )
