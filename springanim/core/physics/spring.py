"""
SPRINGANIM - SPRING PHYSICS ENGINE
==================================

Damped harmonic oscillator stepped with a fixed time step.

Every simulation step is one animation frame. Fast springs take fewer steps
to settle than slow springs; steps-per-frame is constant, only how much the
state changes at each step differs.

Mathematical Foundation:
- Hooke's Law with friction: F = -kx - bv
- Semi-implicit Euler: v += F/m, then x += v/100

Exports:
- Particle: Mutable point mass on a spring
- SpringParameters: Immutable (k, b, m) for one run
- step / is_resting / sample
"""
from __future__ import annotations

import math
from typing import List
from dataclasses import dataclass


# Displacement moves by velocity / STEP_DIVISOR on every step
STEP_DIVISOR = 100.0

# |v| below this counts as still
REST_VELOCITY = 0.2

DEFAULT_MAX_STEPS = 10_000


class SpringDidNotConverge(RuntimeError):
    """
    Raised when a spring never reaches its rest state.

    Attributes:
        steps: Number of steps taken before giving up
        displacement: Last displacement
        velocity: Last velocity
    """

    def __init__(self, message: str, steps: int, displacement: float, velocity: float):
        super().__init__(message)
        self.steps = steps
        self.displacement = displacement
        self.velocity = velocity


# ============================================================================
# STATE
# ============================================================================

@dataclass(frozen=True)
class SpringParameters:
    """
    Constants for one simulation run.

    Attributes:
        stiffness: k, tightness of the spring
        damping: b, velocity-proportional friction
        mass: Point mass (must be > 0)
    """
    stiffness: float
    damping: float
    mass: float = 1.0

    def __post_init__(self):
        """Validate ranges."""
        if self.stiffness < 0:
            raise ValueError(f"stiffness must be >= 0, got {self.stiffness}")
        if self.damping < 0:
            raise ValueError(f"damping must be >= 0, got {self.damping}")
        if self.mass <= 0:
            raise ValueError(f"mass must be > 0, got {self.mass}")

    def to_dict(self) -> dict:
        return {
            'stiffness': self.stiffness,
            'damping': self.damping,
            'mass': self.mass
        }


class Particle:
    """
    Point mass attached to a spring anchor.

    Mutated in place by step(). One particle belongs to exactly one run.
    """

    __slots__ = ('displacement', 'velocity', 'mass')

    def __init__(self, displacement: float = 0.0, velocity: float = 0.0, mass: float = 1.0):
        if mass <= 0:
            raise ValueError(f"mass must be > 0, got {mass}")

        self.displacement = float(displacement)
        self.velocity = float(velocity)
        self.mass = float(mass)

    def __repr__(self) -> str:
        return (
            f"Particle(displacement={self.displacement!r}, "
            f"velocity={self.velocity!r}, mass={self.mass!r})"
        )


# ============================================================================
# INTEGRATOR
# ============================================================================

def dampened_hooke_force(
    displacement: float,
    velocity: float,
    stiffness: float,
    damping: float
) -> float:
    """
    Spring force with linear friction.

    Formula:
        F = -kx - bv

    where x is the displacement from equilibrium, k the stiffness,
    b the damping and v the velocity.

    Example:
        >>> dampened_hooke_force(1, 0, 1, 0)
        -1
    """
    hooke_force = -(stiffness * displacement)
    return hooke_force - (damping * velocity)


def step(particle: Particle, stiffness: float, damping: float) -> float:
    """
    Advance a particle by one step. Mutates the particle.

    Velocity is updated first and the new velocity moves the displacement
    (semi-implicit Euler). Changing that order changes every sampled curve.

    Args:
        particle: Particle to advance (mass > 0)
        stiffness: Spring constant k
        damping: Friction b

    Returns:
        New displacement
    """
    force = dampened_hooke_force(
        particle.displacement,
        particle.velocity,
        stiffness,
        damping
    )

    acceleration = force / particle.mass

    particle.velocity += acceleration
    particle.displacement += particle.velocity / STEP_DIVISOR

    return particle.displacement


# ============================================================================
# REST DETECTION
# ============================================================================

def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 going up (-0.5 -> 0, 0.5 -> 1)."""
    return math.floor(value + 0.5)


def is_resting(particle: Particle) -> bool:
    """
    Find out if a particle is at rest.

    Heuristic, not an exact zero-crossing: the displacement must round to 0
    and the speed must be under REST_VELOCITY.
    """
    if not math.isfinite(particle.displacement):
        return False

    return (
        round_half_up(particle.displacement) == 0
        and abs(particle.velocity) < REST_VELOCITY
    )


# ============================================================================
# CURVE SAMPLING
# ============================================================================

def sample(
    x: float,
    velocity: float,
    mass: float,
    stiffness: float,
    damping: float,
    max_steps: int = DEFAULT_MAX_STEPS
) -> List[float]:
    """
    Accumulate all states of a spring as a list of displacements.

    The displacement of the step that reaches rest is not included, so the
    last element is the last moving frame.

    Args:
        x: Initial displacement
        velocity: Initial velocity
        mass: Point mass (> 0)
        stiffness: Spring constant k
        damping: Friction b
        max_steps: Step cap before giving up

    Returns:
        Displacements over time, one per frame ([] if already resting)

    Raises:
        ValueError: If mass <= 0 or max_steps < 1
        SpringDidNotConverge: If the cap is hit or the state blows up

    Example:
        >>> len(sample(0, 10, 1, 0, 0.5))
        5
    """
    if max_steps < 1:
        raise ValueError(f"max_steps must be >= 1, got {max_steps}")

    particle = Particle(x, velocity, mass)
    points: List[float] = []

    steps = 0
    while not is_resting(particle):
        if steps >= max_steps:
            raise SpringDidNotConverge(
                f"Spring did not come to rest within {max_steps} steps",
                steps,
                particle.displacement,
                particle.velocity
            )

        step(particle, stiffness, damping)
        steps += 1

        if not (math.isfinite(particle.displacement) and math.isfinite(particle.velocity)):
            raise SpringDidNotConverge(
                f"Spring diverged after {steps} steps "
                f"(stiffness={stiffness}, damping={damping}, mass={mass})",
                steps,
                particle.displacement,
                particle.velocity
            )

        if is_resting(particle):
            break

        points.append(particle.displacement)

    return points


def sample_spring(
    x: float,
    velocity: float,
    params: SpringParameters,
    max_steps: int = DEFAULT_MAX_STEPS
) -> List[float]:
    """sample() taking a SpringParameters bundle."""
    return sample(x, velocity, params.mass, params.stiffness, params.damping, max_steps=max_steps)
