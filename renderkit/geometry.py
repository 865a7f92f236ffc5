"""Geometric primitives that can be turned into triangle meshes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

PI = 3.141592653598


class GeometryError(ValueError):
    """Raised when a primitive cannot be turned into a mesh."""


def _vec(value: Iterable, size: int, name: str) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have exactly {size} components")
    return arr


@dataclass(eq=False)
class Vertex:
    """One mesh vertex with its shading attributes."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    normal: np.ndarray = field(default_factory=lambda: np.zeros(3))
    tangent: np.ndarray = field(default_factory=lambda: np.zeros(3))
    bitangent: np.ndarray = field(default_factory=lambda: np.zeros(3))
    uv: np.ndarray = field(default_factory=lambda: np.zeros(2))


@dataclass(eq=False)
class MeshData:
    """Vertices plus a triangle index list (three indices per face)."""

    vertices: list[Vertex] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)

    @property
    def positions(self) -> np.ndarray:
        return np.array([v.position for v in self.vertices], dtype=float).reshape(-1, 3)

    @property
    def normals(self) -> np.ndarray:
        return np.array([v.normal for v in self.vertices], dtype=float).reshape(-1, 3)

    @property
    def uvs(self) -> np.ndarray:
        return np.array([v.uv for v in self.vertices], dtype=float).reshape(-1, 2)

    @property
    def triangles(self) -> np.ndarray:
        """The indices grouped into one row per triangle."""
        return np.array(self.indices, dtype=np.int64).reshape(-1, 3)


class Primitive:
    """A 2D or 3D shape described by a handful of values such as radii or sides."""


@dataclass(eq=False)
class Rectangle(Primitive):
    """A 2D rectangle given by its bottom-left corner and its width/height.

    Negative side lengths are ill-formed; see :meth:`correct_negative_side_lengths`.
    """

    bottom_left: np.ndarray = field(default_factory=lambda: np.zeros(2))
    width_height: np.ndarray = field(default_factory=lambda: np.ones(2))

    def __post_init__(self) -> None:
        self.bottom_left = _vec(self.bottom_left, 2, "bottom_left")
        self.width_height = _vec(self.width_height, 2, "width_height")

    def correct_negative_side_lengths(self) -> None:
        """Move the corner so the same area is enclosed with positive side lengths."""
        for axis in range(2):
            if self.width_height[axis] < 0.0:
                self.bottom_left[axis] += self.width_height[axis]
                self.width_height[axis] *= -1.0

    def to_mesh(self) -> MeshData:
        """Build a two-triangle mesh on the plane z=0."""
        x, y = self.bottom_left
        w, h = self.width_height
        corners = [
            ((x, y, 0.0), (0.0, 0.0)),
            ((x + w, y, 0.0), (1.0, 0.0)),
            ((x, y + h, 0.0), (0.0, 1.0)),
            ((x + w, y + h, 0.0), (1.0, 1.0)),
        ]
        vertices = [
            Vertex(position=np.array(pos, dtype=float), uv=np.array(uv, dtype=float))
            for pos, uv in corners
        ]
        return MeshData(vertices=vertices, indices=[0, 1, 2, 1, 3, 2])


@dataclass(eq=False)
class Ellipsoid(Primitive):
    """An axis-aligned ellipsoid with per-axis radii around a centre."""

    radii: np.ndarray = field(default_factory=lambda: np.ones(3))
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.radii = _vec(self.radii, 3, "radii")
        self.position = _vec(self.position, 3, "position")

    def to_mesh(self, segments: int, rings: int) -> MeshData:
        """Build a UV-sphere style mesh with positions and normals.

        Needs at least 3 segments, 2 rings and strictly positive radii.
        """
        if segments < 3 or rings < 2 or bool(np.any(self.radii <= 0.0)):
            raise GeometryError(
                "an ellipsoid mesh needs segments >= 3, rings >= 2 and positive radii"
            )

        num_verts = segments * (rings - 1) + 2
        positions = np.zeros((num_verts, 3))
        theta = 2 * PI * np.arange(segments) / segments
        for r in range(1, rings):
            phi = PI * (1.0 - r / rings)
            u_rad, u_y = math.sin(phi), math.cos(phi)
            ring = np.column_stack(
                [u_rad * np.cos(theta), np.full(segments, u_y), u_rad * np.sin(theta)]
            )
            positions[(r - 1) * segments : r * segments] = self.position + self.radii * ring
        positions[-2] = self.position + np.array([0.0, -self.radii[1], 0.0])
        positions[-1] = self.position + np.array([0.0, self.radii[1], 0.0])

        indices: list[int] = []
        for r in range(rings - 2):
            base, nxt = r * segments, (r + 1) * segments
            # Close the ring between the last and the first segment.
            indices += [base, nxt, nxt + segments - 1, nxt - 1, base, nxt + segments - 1]
            for s in range(segments - 1):
                indices += [
                    base + s, base + s + 1, nxt + s,
                    nxt + s, base + s + 1, nxt + s + 1,
                ]

        bottom, top = num_verts - 2, num_verts - 1
        last_ring = num_verts - 2 - segments
        indices += [segments - 1, bottom, 0, num_verts - 3, last_ring, top]
        for s in range(segments - 1):
            indices += [s, bottom, s + 1, last_ring + s, last_ring + s + 1, top]

        scaled = (positions - self.position) / self.radii
        normals = scaled / np.linalg.norm(scaled, axis=1, keepdims=True)
        vertices = [Vertex(position=p.copy(), normal=n.copy()) for p, n in zip(positions, normals)]
        return MeshData(vertices=vertices, indices=indices)


@dataclass(eq=False)
class Sphere(Primitive):
    """A sphere given by radius and centre."""

    radius: float = 1.0
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.radius = float(self.radius)
        self.position = _vec(self.position, 3, "position")

    def to_ellipsoid(self) -> Ellipsoid:
        """Return the equivalent ellipsoid with equal radii."""
        return Ellipsoid(radii=np.full(3, self.radius), position=self.position.copy())

    def to_mesh(self, segments: int, rings: int) -> MeshData:
        """Build a mesh as :meth:`Ellipsoid.to_mesh` does."""
        return self.to_ellipsoid().to_mesh(segments, rings)