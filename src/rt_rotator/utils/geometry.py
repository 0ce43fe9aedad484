"""Geometry helpers used by the rotation resolver and the preview canvas."""

import math
from typing import Tuple


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to the inclusive range ``[lo, hi]``."""
    return max(lo, min(hi, value))


def vector_angle_deg(dx: float, dy: float) -> float:
    """Angle of ``(dx, dy)`` in degrees, in ``(-180, 180]``."""
    return math.degrees(math.atan2(dy, dx))


def half_turn_angle_deg(dx: float, dy: float) -> float:
    """Direction-free angle of a line along ``(dx, dy)``, in ``[0, 180)``."""
    angle = vector_angle_deg(dx, dy)
    if angle < 0.0:
        angle += 180.0
    # atan2 yields exactly 180 for (-x, 0); a line at 180° is the same as 0°
    if angle >= 180.0:
        angle -= 180.0
    return angle


def fit_scale(
    content_w: float, content_h: float, box_w: float, box_h: float
) -> float:
    """Scale factor that fits a content rectangle inside a box, never upscaling."""
    if content_w <= 0 or content_h <= 0:
        return 1.0
    return min(1.0, box_w / content_w, box_h / content_h)


def rotated_bounds(w: float, h: float, angle_deg: float) -> Tuple[float, float]:
    """Width and height of the axis-aligned box around a rotated ``w x h`` rect."""
    theta = math.radians(angle_deg)
    cos_t = abs(math.cos(theta))
    sin_t = abs(math.sin(theta))
    return w * cos_t + h * sin_t, w * sin_t + h * cos_t


__all__ = [
    "clamp",
    "vector_angle_deg",
    "half_turn_angle_deg",
    "fit_scale",
    "rotated_bounds",
]
