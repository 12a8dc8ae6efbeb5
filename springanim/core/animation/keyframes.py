"""
SPRINGANIM - CSS KEYFRAME GENERATOR
===================================

Turns a sampled spring curve into a hardware-accelerated CSS keyframe
animation.

Pipeline:
- Quantize: sample i of n -> percentage i * 100 / (n - 1), 5 decimals
- Map: caller-supplied mapper turns each displacement into CSS properties
- Serialize: @keyframes block + animation rule block, duplicated once per
  vendor prefix in cascade order

Prefix order is the cascade order: list vendor-prefixed variants before the
unprefixed one so the standard rule wins where both are supported.

Example output (prefixes = ("-moz-", "")):
    @-moz-keyframes bounce {0%{...}100%{...}}@keyframes bounce {...}
    .bounce{-moz-animation-duration:250ms;animation-duration:250ms;...}
"""
from __future__ import annotations

import math
import re
from typing import Callable, List, Sequence, Tuple, Union
from dataclasses import dataclass


Mapper = Callable[[float], str]

# Style dialect variants, listed in cascade order
NO_PREFIX: Tuple[str, ...] = ('',)
STANDARD_PREFIXES: Tuple[str, ...] = ('-moz-', '')
ALL_PREFIXES: Tuple[str, ...] = ('-webkit-', '-moz-', '')

PERCENT_DECIMALS = 5

_IDENTIFIER_RE = re.compile(r'^-?[_a-zA-Z][_a-zA-Z0-9-]*$')


# ============================================================================
# NUMBER FORMATTING
# ============================================================================

def round_to(number: float, decimals: int) -> float:
    """
    Round a number to a given number of decimal places, halves going up.

    Example:
        >>> round_to(33.333333333, 5)
        33.33333
    """
    d = 10 ** decimals
    return math.floor(number * d + 0.5) / d


def format_number(value: float) -> str:
    """
    Format a number for CSS output.

    Integral values drop the fraction (50.0 -> "50"), others use the
    shortest round-tripping form, never exponent notation.
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot format non-finite number {value!r} for CSS")

    if value == int(value):
        return str(int(value))

    text = repr(float(value))
    if 'e' in text or 'E' in text:
        text = format(value, '.20f').rstrip('0').rstrip('.')
    return text


def format_duration(duration: Union[float, int, str]) -> str:
    """Numbers become milliseconds, strings pass through ("1.5s")."""
    if isinstance(duration, str):
        return duration
    return format_number(duration) + 'ms'


def animation_duration_ms(sample_count: int, fps: float = 60.0) -> float:
    """
    Timespan of an animation playing one sample per frame.

    A single frame (or none) plays instantly.
    """
    if fps <= 0:
        raise ValueError(f"fps must be > 0, got {fps}")
    if sample_count <= 1:
        return 0.0
    return (sample_count / fps) * 1000


# ============================================================================
# QUANTIZATION
# ============================================================================

@dataclass(frozen=True)
class Keyframe:
    """
    One percentage-indexed snapshot.

    Attributes:
        percent: Position on the timeline [0, 100]
        value: CSS properties for this frame (mapper output)
    """
    percent: float
    value: str

    def to_dict(self) -> dict:
        return {'percent': self.percent, 'value': self.value}


def quantize(samples: Sequence[float], mapper: Mapper) -> List[Keyframe]:
    """
    Spread samples evenly over 0% - 100%.

    Args:
        samples: Displacements, one per frame
        mapper: Displacement -> CSS properties string

    Returns:
        One Keyframe per sample, in sample order

    Raises:
        ValueError: If samples is empty

    A single sample becomes one frame at 100%, so with fill-mode "both" the
    element holds that value.
    """
    count = len(samples)
    if count == 0:
        raise ValueError("Cannot build keyframes from an empty curve")

    if count == 1:
        return [Keyframe(100.0, mapper(samples[0]))]

    frame_size = 100 / (count - 1)

    return [
        Keyframe(round_to(frame_size * i, PERCENT_DECIMALS), mapper(point))
        for i, point in enumerate(samples)
    ]


# ============================================================================
# SERIALIZATION
# ============================================================================

def _check_prefixes(prefixes: Sequence[str]) -> Sequence[str]:
    if isinstance(prefixes, str):
        raise TypeError("prefixes must be a sequence of strings, not a string")
    if not prefixes:
        raise ValueError("At least one prefix is required ('' for unprefixed)")
    return prefixes


def check_name(name: str) -> str:
    """Animation names double as class names; reject anything else."""
    if not _IDENTIFIER_RE.fullmatch(name):
        raise ValueError(f"Invalid animation name: {name!r}")
    return name


def rule(key: str, value: str, prefixes: Sequence[str] = NO_PREFIX) -> str:
    """
    CSS property declaration, once per prefix.

    Example:
        >>> rule('animation-name', 'bounce', ('-moz-', ''))
        '-moz-animation-name:bounce;animation-name:bounce;'
    """
    return ''.join(
        f"{prefix}{key}:{value};"
        for prefix in _check_prefixes(prefixes)
    )


def as_css_statement(identifier: str, css: str, prefixes: Sequence[str] = NO_PREFIX) -> str:
    """Wrap css in a block, once per prefix: prefix + identifier + {css}."""
    return ''.join(
        f"{prefix}{identifier}{{{css}}}"
        for prefix in _check_prefixes(prefixes)
    )


def generate_css_keyframes(
    samples: Sequence[float],
    name: str,
    mapper: Mapper,
    prefixes: Sequence[str] = NO_PREFIX
) -> str:
    """
    Create a CSS @keyframes block from a series of points.

    Args:
        samples: Displacements, one per frame
        name: Animation name
        mapper: Returns a valid set of CSS properties for a displacement
        prefixes: Vendor prefixes in cascade order

    Returns:
        "@<prefix>keyframes <name> {<percent>%{<css>}...}" per prefix
    """
    check_name(name)

    keyframes = ''.join(
        as_css_statement(format_number(frame.percent) + '%', frame.value)
        for frame in quantize(samples, mapper)
    )

    at_prefixes = ['@' + prefix for prefix in _check_prefixes(prefixes)]

    return as_css_statement(f"keyframes {name} ", keyframes, at_prefixes)


def generate_animation_css(
    samples: Sequence[float],
    name: str,
    duration: Union[float, int, str],
    mapper: Mapper,
    prefixes: Sequence[str] = NO_PREFIX
) -> str:
    """
    Keyframes plus the class that plays them.

    Args:
        samples: Displacements, one per frame
        name: Animation name, also used as the class name
        duration: Milliseconds, or a CSS time string
        mapper: Displacement -> CSS properties
        prefixes: Vendor prefixes in cascade order

    Returns:
        CSS text: keyframe blocks followed by ".<name>{...}"
    """
    keyframe_statement = generate_css_keyframes(samples, name, mapper, prefixes)

    properties = ''.join([
        rule('animation-duration', format_duration(duration), prefixes),
        rule('animation-name', name, prefixes),
        rule('animation-timing-function', 'linear', prefixes),
        rule('animation-fill-mode', 'both', prefixes)
    ])

    animation_statement = as_css_statement('.' + name, properties)

    return keyframe_statement + animation_statement
