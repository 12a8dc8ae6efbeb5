"""
CSS animation generation from sampled curves.

Exports:
- quantize: Samples -> evenly spaced Keyframes
- generate_css_keyframes / generate_animation_css: CSS text
- Mappers: displacement -> CSS properties
"""
from .keyframes import (
    Keyframe,
    Mapper,
    NO_PREFIX,
    STANDARD_PREFIXES,
    ALL_PREFIXES,
    round_to,
    format_number,
    animation_duration_ms,
    check_name,
    quantize,
    rule,
    as_css_statement,
    generate_css_keyframes,
    generate_animation_css
)
from .mappers import (
    MAPPERS,
    identity_mapper,
    translate_mapper,
    scale_mapper,
    rotate_mapper,
    opacity_mapper,
    build_mapper
)

__all__ = [
    'Keyframe',
    'Mapper',
    'NO_PREFIX',
    'STANDARD_PREFIXES',
    'ALL_PREFIXES',
    'round_to',
    'format_number',
    'animation_duration_ms',
    'check_name',
    'quantize',
    'rule',
    'as_css_statement',
    'generate_css_keyframes',
    'generate_animation_css',
    'MAPPERS',
    'identity_mapper',
    'translate_mapper',
    'scale_mapper',
    'rotate_mapper',
    'opacity_mapper',
    'build_mapper'
]
