"""
SPRINGANIM - SPRING API ROUTES
==============================

Sampling, CSS animation and live streaming endpoints.
"""
from __future__ import annotations

import asyncio
import json
from contextlib import contextmanager
from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import StreamingResponse

from springanim.app.dependencies import get_animator, get_app_settings
from springanim.app.models import (
    SpringRequest,
    SampleRequest,
    SampleResponse,
    AnimationRequest,
    AnimationResponse,
    LiveRequest
)
from springanim.config import Settings
from springanim.core.physics import (
    SpringParameters,
    SpringDidNotConverge,
    AsyncioFrameScheduler,
    run_live,
    sample_spring,
    trace_live
)
from springanim.core.animation import build_mapper
from springanim.services import SpringAnimator, PresetNotFound, AnimationNameTaken


router = APIRouter(prefix="/springs", tags=["springs"])


# ============================================================================
# HELPERS
# ============================================================================

@contextmanager
def spring_errors():
    """Translate service errors into HTTP errors."""
    try:
        yield
    except PresetNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AnimationNameTaken as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SpringDidNotConverge as e:
        raise HTTPException(
            status_code=400,
            detail=f"{e} (last displacement={e.displacement}, velocity={e.velocity})"
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


async def resolve_params(
    request: SpringRequest,
    animator: SpringAnimator,
    settings: Settings
) -> SpringParameters:
    """Explicit values win; otherwise fall back to the configured default preset."""
    preset = request.preset
    if preset is None and (request.stiffness is None or request.damping is None):
        preset = settings.physics.default_preset

    with spring_errors():
        return await animator.resolve_params(
            preset_name=preset,
            stiffness=request.stiffness,
            damping=request.damping,
            mass=request.mass
        )


def preset_used(request: SpringRequest, settings: Settings):
    if request.preset is not None:
        return request.preset
    if request.stiffness is None or request.damping is None:
        return settings.physics.default_preset
    return None


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/sample", response_model=SampleResponse)
async def sample_endpoint(
    request: SampleRequest,
    animator: SpringAnimator = Depends(get_animator),
    settings: Settings = Depends(get_app_settings)
):
    """
    Sample a spring until it comes to rest.

    Example:
        POST /springs/sample
        {"x": 10, "stiffness": 1, "damping": 0.1}

    Returns:
        {"samples": [9.9, 9.711, ...], "count": 70, "params": {...}}
    """
    params = await resolve_params(request, animator, settings)
    max_steps = request.max_steps or animator.max_steps

    with spring_errors():
        samples = sample_spring(request.x, request.velocity, params, max_steps=max_steps)

    return SampleResponse(
        samples=samples,
        count=len(samples),
        params=params.to_dict(),
        preset=preset_used(request, settings)
    )


@router.post("/animation", response_model=AnimationResponse)
async def animation_endpoint(
    request: AnimationRequest,
    animator: SpringAnimator = Depends(get_animator),
    settings: Settings = Depends(get_app_settings)
):
    """
    Build a CSS keyframe animation for a spring.

    Example:
        POST /springs/animation
        {
            "x": 100,
            "preset": "wobbly",
            "mapper": {"kind": "translate", "options": {"axis": "Y"}},
            "prefixes": ["-moz-", ""]
        }

    Returns:
        {
            "name": "animation-1f3a9c0e",
            "css": "@-moz-keyframes animation-1f3a9c0e {0%{...}...}...",
            "duration_ms": 3883.33,
            "remove_after_ms": 3884.33,
            ...
        }
    """
    params = await resolve_params(request, animator, settings)

    with spring_errors():
        mapper = build_mapper(request.mapper.kind, **request.mapper.options)
        plan = await animator.animate(
            request.x,
            request.velocity,
            params,
            mapper,
            name=request.name,
            prefixes=request.prefixes,
            fps=request.fps,
            preset_name=preset_used(request, settings)
        )

    return AnimationResponse(**plan.to_dict())


@router.post("/live")
async def live_endpoint(
    request: LiveRequest,
    animator: SpringAnimator = Depends(get_animator),
    settings: Settings = Depends(get_app_settings)
):
    """
    Stream a spring in real time as NDJSON, one line per frame.

    Lines:
        {"frame": 1, "x": 99.0}
        ...
        {"frame": 106, "resting": true}

    Unstable parameters are rejected up front with 400. If a run still
    fails mid-stream the last line is {"frame": n, "error": "..."}.
    """
    params = await resolve_params(request, animator, settings)

    with spring_errors():
        trace_live(
            request.x,
            request.velocity,
            params.mass,
            params.stiffness,
            params.damping,
            max_steps=animator.max_steps
        )

    fps = request.fps or settings.physics.fps

    async def frames():
        queue: asyncio.Queue = asyncio.Queue()
        done = object()

        live = run_live(
            request.x,
            request.velocity,
            params.mass,
            params.stiffness,
            params.damping,
            on_tick=queue.put_nowait,
            scheduler=AsyncioFrameScheduler(fps),
            on_rest=lambda: queue.put_nowait(done),
            on_error=queue.put_nowait,
            max_steps=animator.max_steps
        )

        try:
            frame = 0
            while True:
                item = await queue.get()
                if item is done:
                    break
                if isinstance(item, SpringDidNotConverge):
                    yield json.dumps({"frame": frame, "error": str(item)}) + "\n"
                    return
                frame += 1
                yield json.dumps({"frame": frame, "x": item}) + "\n"

            yield json.dumps({"frame": frame, "resting": True}) + "\n"
        finally:
            live.cancel()

    return StreamingResponse(frames(), media_type="application/x-ndjson")
