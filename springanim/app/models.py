"""
SPRINGANIM - API MODELS
=======================

Pydantic models for request/response validation.

Responses are immutable (frozen=True via ConfigDict).
"""
from __future__ import annotations

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime, timezone


# ============================================================================
# SPRING MODELS
# ============================================================================

class SpringRequest(BaseModel):
    """
    Initial state plus spring parameters.

    Either name a preset, give stiffness and damping explicitly, or both
    (explicit values override the preset).

    Example:
        {
            "x": 100,
            "velocity": 0,
            "preset": "wobbly"
        }
    """
    x: float = Field(0.0, allow_inf_nan=False, description="Initial displacement")
    velocity: float = Field(0.0, allow_inf_nan=False, description="Initial velocity (per frame)")
    preset: Optional[str] = Field(None, description="Spring preset name")
    stiffness: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Spring constant k")
    damping: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Friction b")
    mass: Optional[float] = Field(None, gt=0, allow_inf_nan=False, description="Point mass")

    model_config = ConfigDict(frozen=False)


class SampleRequest(SpringRequest):
    """Sample a spring until rest."""
    max_steps: Optional[int] = Field(None, ge=1, le=1_000_000, description="Step cap")


class SampleResponse(BaseModel):
    """
    Sampled displacements.

    Example:
        {
            "samples": [99.0, 97.01, ...],
            "count": 106,
            "params": {"stiffness": 1.0, "damping": 0.1, "mass": 1.0},
            "preset": "default"
        }
    """
    samples: List[float]
    count: int
    params: Dict[str, float]
    preset: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class MapperSpec(BaseModel):
    """
    Displacement -> CSS mapper.

    Example:
        {"kind": "translate", "options": {"axis": "Y", "unit": "px"}}
    """
    kind: str = Field("translate", description="identity, translate, scale, rotate or opacity")
    options: Dict[str, Any] = Field(default_factory=dict)


class AnimationRequest(SpringRequest):
    """
    Build a CSS keyframe animation.

    Example:
        {
            "x": 100,
            "preset": "stiff",
            "mapper": {"kind": "translate", "options": {"axis": "X"}},
            "prefixes": ["-moz-", ""]
        }
    """
    mapper: MapperSpec = Field(default_factory=MapperSpec)
    prefixes: Optional[List[str]] = Field(None, min_length=1, description="Vendor prefixes, cascade order")
    fps: Optional[float] = Field(None, gt=0, le=1000)
    name: Optional[str] = Field(None, pattern=r"^-?[_a-zA-Z][_a-zA-Z0-9-]*$", max_length=64)


class AnimationResponse(BaseModel):
    """Everything needed to attach, play and clean up a CSS animation."""
    name: str
    class_name: str
    css: str
    duration_ms: float
    remove_after_ms: float
    frame_count: int
    fps: float
    keyframes: List[Dict[str, Any]]
    params: Optional[Dict[str, float]] = None
    preset_name: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class LiveRequest(SpringRequest):
    """Stream a spring frame by frame."""
    fps: Optional[float] = Field(None, gt=0, le=1000)


class AnimationRecordResponse(BaseModel):
    """Logged animation."""
    name: str
    preset_name: Optional[str] = None
    stiffness: float
    damping: float
    mass: float
    frame_count: int
    duration_ms: float
    fps: float
    css: str
    created_at: str  # ISO format

    model_config = ConfigDict(frozen=True)


# ============================================================================
# PRESET MODELS
# ============================================================================

class PresetUpsertRequest(BaseModel):
    """
    Create or replace a preset.

    Example:
        {"stiffness": 0.8, "damping": 0.12, "description": "Snappy"}
    """
    stiffness: float = Field(..., ge=0, allow_inf_nan=False)
    damping: float = Field(..., ge=0, allow_inf_nan=False)
    mass: float = Field(1.0, gt=0, allow_inf_nan=False)
    description: str = Field("", max_length=500)
    is_default: bool = False


class PresetResponse(BaseModel):
    """
    Spring preset.

    Example:
        {
            "preset_name": "wobbly",
            "description": "Loose spring, several visible bounces",
            "stiffness": 0.5,
            "damping": 0.05,
            "mass": 1.0,
            "is_default": false,
            "preview": [99.5, 98.5, ...]
        }
    """
    preset_name: str
    description: str
    stiffness: float
    damping: float
    mass: float
    is_default: bool = False

    # Optional: sampled curve preview
    preview: Optional[List[float]] = Field(
        None,
        description="Downsampled displacement curve from x=100"
    )

    model_config = ConfigDict(frozen=True)


class PresetListResponse(BaseModel):
    presets: List[Dict[str, Any]]

    model_config = ConfigDict(frozen=True)


# ============================================================================
# SYSTEM MODELS
# ============================================================================

class HealthResponse(BaseModel):
    """
    System health check.

    Example:
        {
            "status": "healthy",
            "database": {"connected": true, "presets": 5},
            "version": "1.0.0"
        }
    """
    status: str = Field(..., description="healthy or unhealthy")
    database: Dict[str, Any]
    version: str
    uptime_seconds: float = 0.0

    model_config = ConfigDict(frozen=True)


class StatsResponse(BaseModel):
    database: Dict[str, Any]
    performance: Dict[str, float]

    model_config = ConfigDict(frozen=True)


# ============================================================================
# ERROR MODELS
# ============================================================================

class ErrorResponse(BaseModel):
    """
    Standard error response.

    Example:
        {
            "error": "not_found",
            "message": "Endpoint /nope not found",
            "details": {...}
        }
    """
    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional context")

    model_config = ConfigDict(frozen=True)


# ============================================================================
# UTILITIES
# ============================================================================

def format_timestamp(unix_time: float) -> str:
    """
    Format Unix timestamp as ISO 8601 (UTC).

    Example:
        >>> format_timestamp(0)
        '1970-01-01T00:00:00Z'
    """
    return datetime.fromtimestamp(unix_time, tz=timezone.utc).replace(tzinfo=None).isoformat() + "Z"
