"""Position/rotation/scale transforms with Euler (yaw, pitch, roll) angles."""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np


def yaw_pitch_roll(yaw: float, pitch: float, roll: float) -> np.ndarray:
    """Return the 4x4 rotation Ry(yaw) @ Rx(pitch) @ Rz(roll)."""
    ch, sh = math.cos(yaw), math.sin(yaw)
    cp, sp = math.cos(pitch), math.sin(pitch)
    cb, sb = math.cos(roll), math.sin(roll)
    columns = np.array(
        [
            [ch * cb + sh * sp * sb, sb * cp, -sh * cb + ch * sp * sb, 0.0],
            [-ch * sb + sh * sp * cb, cb * cp, sb * sh + ch * sp * cb, 0.0],
            [sh * cp, -sp, ch * cp, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )
    return columns.T


def extract_euler_angle_yxz(mat: Iterable) -> tuple[float, float, float]:
    """Recover (yaw, pitch, roll) from a rotation built by :func:`yaw_pitch_roll`."""
    m = np.asarray(mat, dtype=float)
    if m.shape not in ((3, 3), (4, 4)):
        raise ValueError("expected a 3x3 or 4x4 matrix")
    g = m.T  # g[column][row]
    t1 = math.atan2(g[2][0], g[2][2])
    c2 = math.hypot(g[0][1], g[1][1])
    t2 = math.atan2(-g[2][1], c2)
    s1, c1 = math.sin(t1), math.cos(t1)
    t3 = math.atan2(s1 * g[1][2] - c1 * g[1][0], c1 * g[0][0] - s1 * g[0][2])
    return t1, t2, t3


def _vec3(value: Iterable, name: str) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have exactly three components")
    return arr


class Transform:
    """A cached TRS transform; rotation is Euler (yaw, pitch, roll) in radians."""

    def __init__(self) -> None:
        self._position = np.zeros(3)
        self._rotation = np.zeros(3)
        self._scale = np.ones(3)
        self._cached = np.eye(4)
        self._dirty = True

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @position.setter
    def position(self, value: Iterable) -> None:
        self._position = _vec3(value, "position")
        self._dirty = True

    @property
    def rotation(self) -> np.ndarray:
        return self._rotation.copy()

    @rotation.setter
    def rotation(self, value: Iterable) -> None:
        self._rotation = _vec3(value, "rotation")
        self._dirty = True

    @property
    def scale(self) -> np.ndarray:
        return self._scale.copy()

    @scale.setter
    def scale(self, value: Iterable) -> None:
        self._scale = _vec3(value, "scale")
        self._dirty = True

    def delta_position(self, dposition: Iterable) -> np.ndarray:
        """Add to the position and return the old value."""
        old = self._position.copy()
        self._position = old + _vec3(dposition, "dposition")
        self._dirty = True
        return old

    def delta_rotation(self, deuler: Iterable) -> np.ndarray:
        """Add to the rotation and return the old value."""
        old = self._rotation.copy()
        self._rotation = old + _vec3(deuler, "deuler")
        self._dirty = True
        return old

    def delta_scale(self, dscale: Iterable) -> np.ndarray:
        """Multiply the scale componentwise and return the old value."""
        old = self._scale.copy()
        self._scale = old * _vec3(dscale, "dscale")
        self._dirty = True
        return old

    def from_matrix(self, mat: Iterable) -> None:
        """Decompose a 4x4 TRS matrix into position, rotation and scale."""
        m = np.array(mat, dtype=float)
        if m.shape != (4, 4):
            raise ValueError("expected a 4x4 matrix")
        self._cached = m
        self._dirty = False
        self._position = m[:3, 3].copy()
        self._scale = np.linalg.norm(m[:3, :3], axis=0)
        rot = np.eye(4)
        rot[:3, :3] = m[:3, :3] / self._scale
        self._rotation = np.array(extract_euler_angle_yxz(rot))

    def clear(self) -> None:
        """Reset to the identity transform."""
        self._position = np.zeros(3)
        self._rotation = np.zeros(3)
        self._scale = np.ones(3)
        self._dirty = True

    @property
    def matrix(self) -> np.ndarray:
        """The 4x4 matrix translate @ rotate @ scale."""
        if self._dirty:
            translate = np.eye(4)
            translate[:3, 3] = self._position
            scale = np.diag([*self._scale, 1.0])
            self._cached = translate @ yaw_pitch_roll(*self._rotation) @ scale
            self._dirty = False
        return self._cached.copy()

    def transform_vector(self, vector: Iterable) -> np.ndarray:
        """Apply the full transform to a point."""
        v = _vec3(vector, "vector")
        return (self.matrix @ np.append(v, 1.0))[:3]

    def rotate_vector(self, vector: Iterable) -> np.ndarray:
        """Rotate a vector without translating or scaling it."""
        v = _vec3(vector, "vector")
        return yaw_pitch_roll(*self._rotation)[:3, :3] @ v

    def vector_apply_yaw_pitch(self, vector: Iterable) -> np.ndarray:
        """Rotate the horizontal part by the full rotation; add the vertical part as-is."""
        v = _vec3(vector, "vector")
        rotated = yaw_pitch_roll(*self._rotation)[:3, :3] @ np.array([v[0], 0.0, v[2]])
        return np.array([rotated[0], rotated[1] + v[1], rotated[2]])

    def vector_apply_yaw(self, vector: Iterable) -> np.ndarray:
        """Rotate the horizontal part by yaw alone; keep the vertical part."""
        v = _vec3(vector, "vector")
        angle = -self._rotation[0]
        c, s = math.cos(angle), math.sin(angle)
        x = c * v[0] - s * v[2]
        z = s * v[0] + c * v[2]
        return np.array([x, v[1], z])