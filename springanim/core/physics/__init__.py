"""
Physics engine for spring trajectories.

Exports:
- Particle: Mutable point mass
- SpringParameters: Immutable (k, b, m)
- sample: Spring -> list of displacements
- LiveSpring / run_live: Frame-by-frame stepping
"""
from .spring import (
    DEFAULT_MAX_STEPS,
    Particle,
    SpringParameters,
    SpringDidNotConverge,
    dampened_hooke_force,
    step,
    is_resting,
    sample,
    sample_spring
)
from .live import (
    FrameScheduler,
    ManualFrameScheduler,
    AsyncioFrameScheduler,
    LiveSpring,
    run_live,
    trace_live
)

__all__ = [
    'DEFAULT_MAX_STEPS',
    'Particle',
    'SpringParameters',
    'SpringDidNotConverge',
    'dampened_hooke_force',
    'step',
    'is_resting',
    'sample',
    'sample_spring',
    'FrameScheduler',
    'ManualFrameScheduler',
    'AsyncioFrameScheduler',
    'LiveSpring',
    'run_live',
    'trace_live'
]
