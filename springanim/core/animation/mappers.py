"""
Displacement -> CSS property mappers.

A mapper receives one sampled displacement and returns the CSS declarations
for that keyframe ("transform:translateX(12.5px);").
"""
from __future__ import annotations

from typing import Any, Callable, Dict

from .keyframes import Mapper, format_number, round_to


VALUE_DECIMALS = 5


def _num(value: float) -> str:
    return format_number(round_to(value, VALUE_DECIMALS))


def identity_mapper(displacement: float) -> str:
    """Displacement as plain text. Mostly for debugging and tests."""
    return format_number(displacement)


def translate_mapper(
    axis: str = "X",
    unit: str = "px",
    scale: float = 1.0,
    origin: float = 0.0
) -> Mapper:
    """
    Move along one axis.

    Args:
        axis: "X", "Y" or "Z"
        unit: CSS length unit
        scale: Multiplier applied to the displacement
        origin: Offset added after scaling

    Example:
        >>> translate_mapper()(12.5)
        'transform:translateX(12.5px);'
    """
    axis = axis.upper()
    if axis not in ("X", "Y", "Z"):
        raise ValueError(f"axis must be X, Y or Z, got {axis!r}")

    def mapper(displacement: float) -> str:
        return f"transform:translate{axis}({_num(origin + displacement * scale)}{unit});"

    return mapper


def scale_mapper(base: float = 1.0, factor: float = 0.01) -> Mapper:
    """Uniform scale: base + displacement * factor."""

    def mapper(displacement: float) -> str:
        return f"transform:scale({_num(base + displacement * factor)});"

    return mapper


def rotate_mapper(unit: str = "deg", scale: float = 1.0) -> Mapper:
    """Rotation by the (scaled) displacement."""
    if unit not in ("deg", "rad", "turn", "grad"):
        raise ValueError(f"Unsupported angle unit: {unit!r}")

    def mapper(displacement: float) -> str:
        return f"transform:rotate({_num(displacement * scale)}{unit});"

    return mapper


def opacity_mapper(base: float = 1.0, factor: float = 0.01) -> Mapper:
    """Opacity base + displacement * factor, clamped to [0, 1]."""

    def mapper(displacement: float) -> str:
        value = max(0.0, min(1.0, base + displacement * factor))
        return f"opacity:{_num(value)};"

    return mapper


# ============================================================================
# REGISTRY
# ============================================================================

MAPPERS: Dict[str, Callable[..., Mapper]] = {
    "translate": translate_mapper,
    "scale": scale_mapper,
    "rotate": rotate_mapper,
    "opacity": opacity_mapper,
}


def build_mapper(kind: str, **options: Any) -> Mapper:
    """
    Build a mapper by name.

    Args:
        kind: "identity", "translate", "scale", "rotate" or "opacity"
        **options: Factory keyword arguments

    Raises:
        ValueError: Unknown kind or bad options
    """
    if kind == "identity":
        if options:
            raise ValueError("identity mapper takes no options")
        return identity_mapper

    factory = MAPPERS.get(kind)
    if factory is None:
        known = ", ".join(["identity", *sorted(MAPPERS)])
        raise ValueError(f"Unknown mapper '{kind}' (expected one of: {known})")

    try:
        return factory(**options)
    except TypeError as e:
        raise ValueError(f"Bad options for mapper '{kind}': {e}") from e
