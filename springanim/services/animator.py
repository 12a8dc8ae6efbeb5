"""
SPRINGANIM - ANIMATION SERVICE
==============================

Glue between presets, the spring sampler and the CSS generator.

Workflow:
1. Resolve spring parameters (explicit values or a stored preset)
2. Sample the spring until rest
3. Build CSS keyframes + animation class
4. Log the animation

The returned AnimationPlan carries everything a presentation layer needs:
the CSS to put in a <style> element, the class name to add to the target
element, and when to remove both again.
"""
from __future__ import annotations

import itertools
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

import aiosqlite

from springanim.core.physics import SpringParameters, sample_spring, DEFAULT_MAX_STEPS
from springanim.core.animation import (
    Keyframe,
    Mapper,
    NO_PREFIX,
    animation_duration_ms,
    check_name,
    quantize,
    generate_animation_css
)
from springanim.database.engine import SpringDB


# ============================================================================
# ANIMATION NAMES
# ============================================================================

class NameProvider(Protocol):
    def next_name(self) -> str:
        ...


class CounterNameProvider:
    """
    Sequential names: animation-1, animation-2, ...

    The counter belongs to the provider instance, so two providers can hand
    out the same names. Share one provider per page / document.
    """

    def __init__(self, prefix: str = "animation", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def next_name(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"


class TokenNameProvider:
    """Random short hex names: animation-1f3a9c0e."""

    def __init__(self, prefix: str = "animation", nbytes: int = 4):
        self.prefix = prefix
        self.nbytes = nbytes

    def next_name(self) -> str:
        return f"{self.prefix}-{secrets.token_hex(self.nbytes)}"


# ============================================================================
# ANIMATION PLAN
# ============================================================================

@dataclass(frozen=True)
class AnimationPlan:
    """
    Immutable description of one CSS animation.

    Attributes:
        name: Animation name (= class name and <style> id)
        css: Keyframes + animation class
        duration_ms: Play time
        remove_after_ms: When to drop the style and class again
        frame_count: Number of samples / keyframes
        fps: Frame rate used for the duration
        keyframes: Percent -> value entries
        params: Spring parameters (if known)
        preset_name: Preset used (if any)
    """
    name: str
    css: str
    duration_ms: float
    remove_after_ms: float
    frame_count: int
    fps: float
    keyframes: List[Keyframe] = field(default_factory=list)
    params: Optional[SpringParameters] = None
    preset_name: Optional[str] = None

    @property
    def class_name(self) -> str:
        return self.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'class_name': self.class_name,
            'css': self.css,
            'duration_ms': self.duration_ms,
            'remove_after_ms': self.remove_after_ms,
            'frame_count': self.frame_count,
            'fps': self.fps,
            'keyframes': [k.to_dict() for k in self.keyframes],
            'params': self.params.to_dict() if self.params else None,
            'preset_name': self.preset_name
        }


def plan_css_animation(
    samples: Sequence[float],
    mapper: Mapper,
    name: str,
    prefixes: Sequence[str] = NO_PREFIX,
    fps: float = 60.0,
    cleanup_margin_ms: float = 1.0,
    params: Optional[SpringParameters] = None,
    preset_name: Optional[str] = None
) -> AnimationPlan:
    """
    Build the CSS animation for a sampled curve.

    Args:
        samples: Displacements, one per frame (non-empty)
        mapper: Displacement -> CSS properties
        name: Unique animation name
        prefixes: Vendor prefixes in cascade order
        fps: Frames per second
        cleanup_margin_ms: Added to the duration for remove_after_ms

    Returns:
        AnimationPlan

    Raises:
        ValueError: Empty samples, bad name or fps <= 0
    """
    check_name(name)

    duration_ms = animation_duration_ms(len(samples), fps)
    keyframes = quantize(samples, mapper)
    css = generate_animation_css(samples, name, duration_ms, mapper, prefixes)

    return AnimationPlan(
        name=name,
        css=css,
        duration_ms=duration_ms,
        remove_after_ms=duration_ms + cleanup_margin_ms,
        frame_count=len(samples),
        fps=fps,
        keyframes=keyframes,
        params=params,
        preset_name=preset_name
    )


# ============================================================================
# SERVICE
# ============================================================================

class PresetNotFound(LookupError):
    """Raised when a named preset does not exist."""


class AnimationNameTaken(ValueError):
    """Raised when an explicit animation name is already logged."""


class SpringAnimator:
    """
    Preset-aware animation builder.

    Usage:
        animator = SpringAnimator(db)
        params = await animator.resolve_params(preset_name="wobbly")
        plan = await animator.animate(100, 0, params, mapper)
    """

    def __init__(
        self,
        db: SpringDB,
        names: Optional[NameProvider] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        fps: float = 60.0,
        prefixes: Sequence[str] = NO_PREFIX,
        cleanup_margin_ms: float = 1.0
    ):
        self.db = db
        self.names = names or TokenNameProvider()
        self.max_steps = max_steps
        self.fps = fps
        self.prefixes = tuple(prefixes)
        self.cleanup_margin_ms = cleanup_margin_ms

    async def resolve_params(
        self,
        preset_name: Optional[str] = None,
        stiffness: Optional[float] = None,
        damping: Optional[float] = None,
        mass: Optional[float] = None
    ) -> SpringParameters:
        """
        Merge explicit values over a preset.

        Without a preset all of stiffness and damping must be given
        (mass defaults to 1).

        Raises:
            PresetNotFound: Unknown preset
            ValueError: Missing values or mass <= 0
        """
        if preset_name is not None:
            preset = await self.db.get_preset(preset_name)
            if preset is None:
                raise PresetNotFound(f"Preset '{preset_name}' not found")

            return SpringParameters(
                stiffness=preset['stiffness'] if stiffness is None else stiffness,
                damping=preset['damping'] if damping is None else damping,
                mass=preset['mass'] if mass is None else mass
            )

        if stiffness is None or damping is None:
            raise ValueError("stiffness and damping are required without a preset")

        return SpringParameters(
            stiffness=stiffness,
            damping=damping,
            mass=1.0 if mass is None else mass
        )

    def sample(self, x: float, velocity: float, params: SpringParameters) -> List[float]:
        return sample_spring(x, velocity, params, max_steps=self.max_steps)

    async def unique_name(self, attempts: int = 5) -> str:
        """Next provider name not already in the animation log."""
        for _ in range(attempts):
            name = self.names.next_name()
            if not await self.db.animation_name_exists(name):
                return name
        raise RuntimeError(f"No unused animation name after {attempts} attempts")

    async def animate(
        self,
        x: float,
        velocity: float,
        params: SpringParameters,
        mapper: Mapper,
        name: Optional[str] = None,
        prefixes: Optional[Sequence[str]] = None,
        fps: Optional[float] = None,
        preset_name: Optional[str] = None,
        log: bool = True
    ) -> AnimationPlan:
        """
        Sample a spring and turn it into a logged AnimationPlan.

        Raises:
            ValueError: Spring already at rest (nothing to animate), bad input
            SpringDidNotConverge: Unstable parameters
        """
        samples = self.sample(x, velocity, params)
        if not samples:
            raise ValueError(
                f"Spring is already at rest (x={x}, velocity={velocity}); nothing to animate"
            )

        if name is None:
            name = await self.unique_name()
        elif log and await self.db.animation_name_exists(name):
            raise AnimationNameTaken(f"Animation name '{name}' is already in use")

        plan = plan_css_animation(
            samples,
            mapper,
            name,
            prefixes=self.prefixes if prefixes is None else tuple(prefixes),
            fps=self.fps if fps is None else fps,
            cleanup_margin_ms=self.cleanup_margin_ms,
            params=params,
            preset_name=preset_name
        )

        if log:
            try:
                await self.db.log_animation(
                    name=plan.name,
                    stiffness=params.stiffness,
                    damping=params.damping,
                    mass=params.mass,
                    frame_count=plan.frame_count,
                    duration_ms=plan.duration_ms,
                    fps=plan.fps,
                    css=plan.css,
                    preset_name=preset_name
                )
            except aiosqlite.IntegrityError as e:
                # Lost a race for the name between the check and the insert
                if await self.db.animation_name_exists(plan.name):
                    raise AnimationNameTaken(f"Animation name '{plan.name}' is already in use") from e
                raise

        return plan

    def preview(
        self,
        params: SpringParameters,
        x: float = 100.0,
        velocity: float = 0.0,
        max_points: int = 50
    ) -> List[float]:
        """
        Downsampled curve for visualization.

        Keeps every k-th sample (plus the last one) so at most max_points
        values come back.
        """
        if max_points < 2:
            raise ValueError("max_points must be >= 2")

        samples = self.sample(x, velocity, params)
        if len(samples) <= max_points:
            return samples

        stride = -(-len(samples) // (max_points - 1))
        points = samples[::stride]
        if (len(samples) - 1) % stride:
            points.append(samples[-1])
        return points
