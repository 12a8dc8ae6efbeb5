"""
SPRINGANIM - LIVE SPRING STEPPER
================================

Real-time stepping of a spring, one step per display frame.

No pre-sampling: each frame advances the particle once and hands the
displacement to a callback until the spring is at rest. Frame delivery is
an injected capability, so the stepper never picks a platform timer itself.
"""
from __future__ import annotations

import asyncio
import math
from collections import deque
from typing import Callable, Deque, List, Optional, Protocol

from .spring import DEFAULT_MAX_STEPS, Particle, SpringDidNotConverge, step, is_resting


FrameCallback = Callable[[], None]
TickCallback = Callable[[float], None]
ErrorCallback = Callable[[SpringDidNotConverge], None]


class FrameScheduler(Protocol):
    """Invoke the given callback once on the next frame, in request order."""

    def request_frame(self, callback: FrameCallback) -> None:
        ...


# ============================================================================
# SCHEDULERS
# ============================================================================

class ManualFrameScheduler:
    """
    Scheduler driven by explicit tick() calls.

    Useful for headless rendering and tests: every tick() delivers one
    frame to the callbacks queued before it.
    """

    def __init__(self):
        self._pending: Deque[FrameCallback] = deque()

    def request_frame(self, callback: FrameCallback) -> None:
        self._pending.append(callback)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def tick(self) -> int:
        """
        Deliver one frame.

        Callbacks requested while the frame runs wait for the next tick.

        Returns:
            Number of callbacks invoked
        """
        count = len(self._pending)
        for _ in range(count):
            callback = self._pending.popleft()
            callback()
        return count

    def run_until_idle(self, max_frames: int = 100_000) -> int:
        """Tick until nothing is pending. Returns the number of frames delivered."""
        frames = 0
        while self._pending:
            if frames >= max_frames:
                raise RuntimeError(f"Scheduler still busy after {max_frames} frames")
            self.tick()
            frames += 1
        return frames


class AsyncioFrameScheduler:
    """
    Fixed-rate frames on an asyncio event loop.

    Args:
        fps: Frames per second (> 0)
        loop: Event loop (defaults to the running loop)
    """

    def __init__(self, fps: float = 60.0, loop: Optional[asyncio.AbstractEventLoop] = None):
        if fps <= 0:
            raise ValueError(f"fps must be > 0, got {fps}")

        self.fps = fps
        self.frame_interval = 1.0 / fps
        self._loop = loop

    def request_frame(self, callback: FrameCallback) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(self.frame_interval, callback)


# ============================================================================
# STEPPER
# ============================================================================

class LiveSpring:
    """
    Animate a spring from its current state to rest.

    on_tick is called with the displacement on every frame until the spring
    is at rest. The resting frame itself is not reported; on_rest (if any)
    fires once instead.

    A run that blows up (non-finite state) or is still moving after
    max_steps stops with SpringDidNotConverge. With on_error set the error
    is handed to it; otherwise it is raised from the frame that failed.

    Usage:
        scheduler = ManualFrameScheduler()
        live = LiveSpring(Particle(100), 1.0, 0.1, print, scheduler)
        live.start()
        scheduler.run_until_idle()
    """

    def __init__(
        self,
        particle: Particle,
        stiffness: float,
        damping: float,
        on_tick: TickCallback,
        scheduler: FrameScheduler,
        on_rest: Optional[Callable[[], None]] = None,
        on_error: Optional[ErrorCallback] = None,
        max_steps: int = DEFAULT_MAX_STEPS
    ):
        if max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {max_steps}")

        self.particle = particle
        self.stiffness = stiffness
        self.damping = damping
        self.on_tick = on_tick
        self.on_rest = on_rest
        self.on_error = on_error
        self.scheduler = scheduler
        self.max_steps = max_steps

        self.frames = 0
        self.steps = 0
        self.error: Optional[SpringDidNotConverge] = None
        self._started = False
        self._cancelled = False
        self._resting = False

    @property
    def running(self) -> bool:
        return self._started and not (self._cancelled or self._resting or self.error)

    @property
    def resting(self) -> bool:
        return self._resting

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self) -> "LiveSpring":
        """Run the first frame now. Later frames follow the scheduler."""
        if self._started:
            raise RuntimeError("LiveSpring already started")

        self._started = True
        self._loop()
        return self

    def cancel(self) -> None:
        """Stop at the next frame boundary. No further on_tick calls."""
        self._cancelled = True

    def _fail(self, message: str) -> None:
        self.error = SpringDidNotConverge(
            message,
            self.steps,
            self.particle.displacement,
            self.particle.velocity
        )
        if self.on_error is None:
            raise self.error
        self.on_error(self.error)

    def _loop(self) -> None:
        if self._cancelled:
            return

        if self.steps >= self.max_steps:
            self._fail(f"Spring did not come to rest within {self.max_steps} steps")
            return

        step(self.particle, self.stiffness, self.damping)
        self.steps += 1

        if not (math.isfinite(self.particle.displacement) and math.isfinite(self.particle.velocity)):
            self._fail(
                f"Spring diverged after {self.steps} steps "
                f"(stiffness={self.stiffness}, damping={self.damping}, mass={self.particle.mass})"
            )
            return

        if is_resting(self.particle):
            self._resting = True
            if self.on_rest is not None:
                self.on_rest()
            return

        self.frames += 1
        self.on_tick(self.particle.displacement)

        # on_tick may cancel
        if not self._cancelled:
            self.scheduler.request_frame(self._loop)


def run_live(
    x: float,
    velocity: float,
    mass: float,
    stiffness: float,
    damping: float,
    on_tick: TickCallback,
    scheduler: FrameScheduler,
    on_rest: Optional[Callable[[], None]] = None,
    on_error: Optional[ErrorCallback] = None,
    max_steps: int = DEFAULT_MAX_STEPS
) -> LiveSpring:
    """
    Start a live spring and return its handle.

    Args:
        x: Initial displacement
        velocity: Initial velocity
        mass: Point mass (> 0)
        stiffness: Spring constant k
        damping: Friction b
        on_tick: Called with the displacement once per moving frame
        scheduler: Frame source
        on_rest: Called once when the spring settles
        on_error: Called once if the spring diverges or hits max_steps
        max_steps: Step cap

    Returns:
        Running LiveSpring (call cancel() to stop early)
    """
    live = LiveSpring(
        Particle(x, velocity, mass),
        stiffness,
        damping,
        on_tick,
        scheduler,
        on_rest=on_rest,
        on_error=on_error,
        max_steps=max_steps
    )
    return live.start()


def trace_live(
    x: float,
    velocity: float,
    mass: float,
    stiffness: float,
    damping: float,
    max_steps: int = DEFAULT_MAX_STEPS
) -> List[float]:
    """
    Run a live spring to completion without a clock.

    Unlike sample(), the first step is always taken, so a start that
    already counts as resting is still stepped once.

    Returns:
        Displacements on_tick would receive, in order

    Raises:
        SpringDidNotConverge: If the live run would never settle
    """
    ticks: List[float] = []
    scheduler = ManualFrameScheduler()

    run_live(x, velocity, mass, stiffness, damping, ticks.append, scheduler, max_steps=max_steps)
    scheduler.run_until_idle(max_frames=max_steps + 1)

    return ticks
