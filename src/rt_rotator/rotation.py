"""Turn pointer drags into rotation corrections.

Two modes are supported:

* **Free**: the vertical drag distance is scaled by :data:`SENSITIVITY` and
  added to the accumulated angle, which stays within ``±FREE_LIMIT_DEG``.
* **Line**: on release, the drawn line is snapped to the nearest of
  horizontal/vertical. Lines close to a diagonal fall into a dead zone and
  leave the angle untouched. The accumulated angle is unbounded.

All functions are pure; :class:`RotationInteraction` adds the per-image
``Idle -> Dragging -> Idle`` bookkeeping on top of them.
"""

from __future__ import annotations

from typing import Optional

from .models import DragGesture, Point, RotationMode, RotationState
from .utils import clamp, half_turn_angle_deg

SENSITIVITY = 0.1  # degrees per pixel of vertical drag
FREE_LIMIT_DEG = 45.0

# Sector bounds on the [0, 180) line angle
HORIZONTAL_MAX_DEG = 40.0
VERTICAL_MIN_DEG = 50.0
VERTICAL_MAX_DEG = 130.0
HORIZONTAL_MIN_DEG = 140.0


def reset(mode: RotationMode = RotationMode.LINE) -> RotationState:
    """Fresh state for a newly selected image."""
    return RotationState(accumulated_degrees=0.0, mode=mode)


def with_mode(state: RotationState, mode: RotationMode) -> RotationState:
    """Switch modes; entering Free mode pulls the angle into its range."""
    angle = state.accumulated_degrees
    if mode is RotationMode.FREE:
        angle = clamp(angle, -FREE_LIMIT_DEG, FREE_LIMIT_DEG)
    return RotationState(accumulated_degrees=angle, mode=mode)


def apply_free_drag(state: RotationState, delta_y: float) -> RotationState:
    angle = clamp(
        state.accumulated_degrees + delta_y * SENSITIVITY,
        -FREE_LIMIT_DEG,
        FREE_LIMIT_DEG,
    )
    return RotationState(accumulated_degrees=angle, mode=state.mode)


def drag_angle(gesture: DragGesture) -> float:
    """Angle in ``[0, 180)`` of the vector pointing from ``end`` back to ``start``."""
    dx = gesture.start.x - gesture.end.x
    dy = gesture.start.y - gesture.end.y
    return half_turn_angle_deg(dx, dy)


def snap_correction(angle: float) -> float:
    """Rotation that brings a line at ``angle`` (``[0, 180)``) level or plumb.

    Returns ``0.0`` inside the dead zones ``[40, 50]`` and ``[130, 140]``.
    """
    if angle < HORIZONTAL_MAX_DEG:
        return -angle
    if angle > HORIZONTAL_MIN_DEG:
        return 180.0 - angle
    if VERTICAL_MIN_DEG < angle < VERTICAL_MAX_DEG:
        return 90.0 - angle
    return 0.0


def apply_line_drag(state: RotationState, gesture: DragGesture) -> RotationState:
    correction = snap_correction(drag_angle(gesture))
    return RotationState(
        accumulated_degrees=state.accumulated_degrees + correction,
        mode=state.mode,
    )


class RotationInteraction:
    """Drag bookkeeping for the image currently on screen.

    Holds the rotation state and, while the pointer is down, the drag start.
    Every transition returns the (possibly unchanged) :class:`RotationState`.
    """

    def __init__(self, state: Optional[RotationState] = None) -> None:
        self._state = state if state is not None else reset()
        self._start: Optional[Point] = None
        self._last: Optional[Point] = None

    # ----------------------------- Properties ---------------------------------

    @property
    def state(self) -> RotationState:
        return self._state

    @property
    def dragging(self) -> bool:
        return self._start is not None

    @property
    def gesture(self) -> Optional[DragGesture]:
        """Line from the drag start to the last seen pointer position."""
        if self._start is None or self._last is None:
            return None
        return DragGesture(self._start, self._last)

    # ----------------------------- Transitions --------------------------------

    def set_mode(self, mode: RotationMode) -> RotationState:
        self.cancel()
        self._state = with_mode(self._state, mode)
        return self._state

    def reset(self) -> RotationState:
        """Back to Idle with a zero angle; used whenever the image changes."""
        self.cancel()
        self._state = reset(self._state.mode)
        return self._state

    def begin(self, pos: Point) -> RotationState:
        self._start = pos
        self._last = pos
        return self._state

    def move(self, pos: Point) -> RotationState:
        if self._start is None or self._last is None:
            return self._state
        if self._state.mode is RotationMode.FREE:
            self._state = apply_free_drag(self._state, pos.y - self._last.y)
        self._last = pos
        return self._state

    def release(self, pos: Point) -> RotationState:
        """Finish the drag; in Line mode the completed gesture is resolved."""
        start = self._start
        if start is None:
            return self._state
        if self._state.mode is RotationMode.FREE:
            self.move(pos)
        else:
            self._state = apply_line_drag(self._state, DragGesture(start, pos))
        self.cancel()
        return self._state

    def cancel(self) -> None:
        self._start = None
        self._last = None


__all__ = [
    "SENSITIVITY",
    "FREE_LIMIT_DEG",
    "reset",
    "with_mode",
    "apply_free_drag",
    "apply_line_drag",
    "drag_angle",
    "snap_correction",
    "RotationInteraction",
]
