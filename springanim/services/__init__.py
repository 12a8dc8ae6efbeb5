"""
Services package for springanim.

Exports:
- SpringAnimator: Preset-aware animation builder
- AnimationPlan / plan_css_animation: CSS animation description
- CounterNameProvider / TokenNameProvider: Animation names
"""
from .animator import (
    AnimationNameTaken,
    AnimationPlan,
    CounterNameProvider,
    NameProvider,
    PresetNotFound,
    SpringAnimator,
    TokenNameProvider,
    plan_css_animation
)

__all__ = [
    'AnimationNameTaken',
    'AnimationPlan',
    'CounterNameProvider',
    'NameProvider',
    'PresetNotFound',
    'SpringAnimator',
    'TokenNameProvider',
    'plan_css_animation'
]
