"""Per-object behaviours evaluated once per frame, and the motion components."""

from __future__ import annotations

from typing import Any, Iterable, Optional, TypeVar

import numpy as np

C = TypeVar("C", bound="Component")


def _vec3(value: Iterable, name: str) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have exactly three components")
    return arr


class Component:
    """A behaviour attached to a scene object.

    Components of an object are evaluated in order, once per frame, after the
    components of every ancestor object. ``delta_time`` is the approximate
    frame time in seconds, shared by every component during a frame.
    """

    def __init__(self, owner: Any) -> None:
        self.owner = owner

    def is_type(self, cls: type[C]) -> Optional[C]:
        """Return self if its type is exactly ``cls`` (subclasses do not match)."""
        if type(self) is cls:
            return self  # type: ignore[return-value]
        return None

    def evaluate(self, delta_time: float) -> None:
        """Run this component for one frame; the base component does nothing."""


class Motion(Component):
    """Stores velocity and angular velocity, and the current frame time.

    Motion does not move its object; an :class:`ApplyMotion` placed after it
    does. Components that adjust motion belong between the two. The ``*_step``
    accessors express motion as the offset applied during the current frame;
    they only take effect once Motion has been evaluated with a positive time.
    """

    def __init__(self, owner: Any) -> None:
        super().__init__(owner)
        self.frame_delta_time = 0.0
        self._velocity = np.zeros(3)
        self._angular_velocity = np.zeros(3)

    @property
    def velocity(self) -> np.ndarray:
        return self._velocity.copy()

    @velocity.setter
    def velocity(self, value: Iterable) -> None:
        self._velocity = _vec3(value, "velocity")

    @property
    def angular_velocity(self) -> np.ndarray:
        """Angular velocity as (yaw, pitch, roll) per second."""
        return self._angular_velocity.copy()

    @angular_velocity.setter
    def angular_velocity(self, value: Iterable) -> None:
        self._angular_velocity = _vec3(value, "angular velocity")

    def delta_velocity(self, dvelocity: Iterable) -> np.ndarray:
        """Add to the velocity and return the old value."""
        old = self._velocity.copy()
        self._velocity = old + _vec3(dvelocity, "dvelocity")
        return old

    def delta_angular_velocity(self, dvelocity: Iterable) -> np.ndarray:
        """Add to the angular velocity and return the old value."""
        old = self._angular_velocity.copy()
        self._angular_velocity = old + _vec3(dvelocity, "dvelocity")
        return old

    def set_velocity_step(self, velocity: Iterable) -> None:
        """Set the velocity so this frame moves by ``velocity``; no-op before evaluation."""
        step = _vec3(velocity, "velocity")
        if self.frame_delta_time > 0:
            self._velocity = step / self.frame_delta_time

    def set_angular_velocity_step(self, velocity: Iterable) -> None:
        """Set the angular velocity so this frame turns by ``velocity``; no-op before evaluation."""
        step = _vec3(velocity, "velocity")
        if self.frame_delta_time > 0:
            self._angular_velocity = step / self.frame_delta_time

    def delta_velocity_step(self, dvelocity: Iterable) -> np.ndarray:
        """Add a per-frame offset to the velocity; return the old value, or zeros if not evaluated."""
        step = _vec3(dvelocity, "dvelocity")
        if self.frame_delta_time > 0:
            old = self._velocity.copy()
            self._velocity = old + step / self.frame_delta_time
            return old
        return np.zeros(3)

    def delta_angular_velocity_step(self, dvelocity: Iterable) -> np.ndarray:
        """Add a per-frame offset to the angular velocity; return the old value, or zeros."""
        step = _vec3(dvelocity, "dvelocity")
        if self.frame_delta_time > 0:
            old = self._angular_velocity.copy()
            self._angular_velocity = old + step / self.frame_delta_time
            return old
        return np.zeros(3)

    @property
    def velocity_step(self) -> np.ndarray:
        """The positional offset for the current frame."""
        return self._velocity * self.frame_delta_time

    @property
    def angular_velocity_step(self) -> np.ndarray:
        """The rotational offset for the current frame."""
        return self._angular_velocity * self.frame_delta_time

    def evaluate(self, delta_time: float) -> None:
        self.frame_delta_time = delta_time


class ApplyMotion(Component):
    """Applies the current frame's motion step of a :class:`Motion` to its object.

    Without an assigned Motion, one is looked up on the owner at every
    evaluation until found.
    """

    def __init__(self, owner: Any, motion: Optional[Motion] = None) -> None:
        super().__init__(owner)
        if motion is None:
            motion = owner.get_component(Motion)
        self.motion = motion

    def assign_motion(self, motion: Optional[Motion]) -> None:
        """Link a Motion component, or disconnect with None."""
        self.motion = motion

    def evaluate(self, delta_time: float) -> None:
        if self.motion is None:
            self.motion = self.owner.get_component(Motion)
            if self.motion is None:
                return
        self.owner.transform.delta_position(self.motion.velocity_step)
        self.owner.transform.delta_rotation(self.motion.angular_velocity_step)