"""Small helpers shared across rt_rotator."""

from .geometry import (
    clamp,
    fit_scale,
    half_turn_angle_deg,
    rotated_bounds,
    vector_angle_deg,
)

__all__ = [
    "clamp",
    "fit_scale",
    "half_turn_angle_deg",
    "rotated_bounds",
    "vector_angle_deg",
]
