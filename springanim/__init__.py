"""
springanim - spring physics to CSS keyframe animations.
"""

__version__ = "1.0.0"
