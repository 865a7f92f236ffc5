"""Input-driven components: keyboard movement and mouse look."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, Optional

import numpy as np

from .components import Component, Motion
from .depsgraph import CursorMove, Depsgraph


class Key(IntEnum):
    """Key codes used by the controllers (GLFW numbering)."""

    SPACE = 32
    A = 65
    D = 68
    S = 83
    W = 87
    RIGHT = 262
    LEFT = 263
    DOWN = 264
    UP = 265
    LEFT_SHIFT = 340


_MOVE_KEYS = {
    Key.W: (0.0, 0.0, -1.0),
    Key.S: (0.0, 0.0, 1.0),
    Key.A: (-1.0, 0.0, 0.0),
    Key.D: (1.0, 0.0, 0.0),
    Key.LEFT_SHIFT: (0.0, -1.0, 0.0),
    Key.SPACE: (0.0, 1.0, 0.0),
}

_TURN_KEYS = {
    Key.UP: (0.0, 1.0, 0.0),
    Key.DOWN: (0.0, -1.0, 0.0),
    Key.LEFT: (1.0, 0.0, 0.0),
    Key.RIGHT: (-1.0, 0.0, 0.0),
}


class KeyboardController(Component):
    """Sets a Motion's velocities from WASD/Shift/Space and the arrow keys.

    ``input_context`` is a callable telling whether a :class:`Key` is held.
    Movement is rotated by the owner's yaw only.
    """

    MOVE_SPEED = 3.0
    TURN_SPEED = 1.0

    def __init__(
        self,
        owner: Any,
        input_context: Optional[Callable[[Key], bool]] = None,
        motion: Optional[Motion] = None,
    ) -> None:
        super().__init__(owner)
        self.input_context = input_context
        self.motion = motion

    def evaluate(self, delta_time: float) -> None:
        if self.motion is None:
            self.motion = self.owner.get_component(Motion)
            if self.motion is None:
                return
        pressed = self.input_context
        if pressed is None:
            return

        pos_motion = np.zeros(3)
        for key, offset in _MOVE_KEYS.items():
            if pressed(key):
                pos_motion += offset
        rot_motion = np.zeros(3)
        for key, offset in _TURN_KEYS.items():
            if pressed(key):
                rot_motion += offset

        direction = self.owner.transform.vector_apply_yaw(pos_motion)
        self.motion.velocity = direction * self.MOVE_SPEED
        self.motion.angular_velocity = rot_motion * self.TURN_SPEED


class MouseRotation(Component):
    """Turns a Motion by cursor movement while the cursor is captured.

    Each cursor event sets the pending rotation; evaluation adds it to the
    Motion's angular velocity once and clears it.
    """

    TURN_SENSITIVITY = 0.70

    def __init__(
        self,
        owner: Any,
        depsgraph: Optional[Depsgraph] = None,
        cursor_captured: Optional[Callable[[], bool]] = None,
        motion: Optional[Motion] = None,
    ) -> None:
        super().__init__(owner)
        self.cursor_captured = cursor_captured
        self.motion = motion
        self.last_delta_rot = np.zeros(3)
        self._depsgraph: Optional[Depsgraph] = None
        if depsgraph is not None:
            self.attach(depsgraph)

    def attach(self, depsgraph: Depsgraph) -> None:
        """Hook cursor events from ``depsgraph``; repeated attachment is ignored."""
        if self._depsgraph is depsgraph:
            return
        self._depsgraph = depsgraph
        depsgraph.hook_cursor_move(self.on_cursor_move)

    def on_cursor_move(self, event: CursorMove) -> None:
        """Record the rotation implied by a cursor movement."""
        if self.motion is None:
            return
        if self.cursor_captured is not None and not self.cursor_captured():
            return
        dx, dy = event.delta
        self.last_delta_rot = np.array(
            [-dx * self.TURN_SENSITIVITY, -dy * self.TURN_SENSITIVITY, 0.0]
        )

    def evaluate(self, delta_time: float) -> None:
        if self.motion is None:
            self.motion = self.owner.get_component(Motion)
            if self.motion is None:
                return
        self.motion.delta_angular_velocity(self.last_delta_rot)
        self.last_delta_rot = np.zeros(3)