from collections import Counter

import numpy as np
import pytest

from renderkit.geometry import (
    Ellipsoid,
    GeometryError,
    MeshData,
    Rectangle,
    Sphere,
    Vertex,
)


def _edges(mesh):
    counts = Counter()
    for a, b, c in mesh.triangles.tolist():
        for u, v in ((a, b), (b, c), (c, a)):
            counts[frozenset((u, v))] += 1
    return counts


def test_rectangle_indices_fixed_by_source():
    mesh = Rectangle().to_mesh()
    assert mesh.indices == [0, 1, 2, 1, 3, 2]


def test_rectangle_corners_and_uvs():
    rect = Rectangle(bottom_left=(2.0, 3.0), width_height=(4.0, 5.0))
    mesh = rect.to_mesh()
    pos = mesh.positions
    assert len(mesh.vertices) == 4
    assert np.allclose(pos[0], [2.0, 3.0, 0.0])
    assert np.allclose(pos[3, :2], rect.bottom_left + rect.width_height)
    assert np.allclose(pos[:, 2], 0.0)
    assert np.allclose(mesh.uvs, [[0, 0], [1, 0], [0, 1], [1, 1]])


def test_default_primitives():
    mesh = Rectangle().to_mesh()
    assert np.allclose(
        mesh.positions,
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]],
    )
    sphere = Sphere()
    assert sphere.radius == 1.0
    assert np.allclose(sphere.position, np.zeros(3))


def test_correct_negative_side_lengths_keeps_area():
    rect = Rectangle(bottom_left=(1.0, 1.0), width_height=(-2.0, 3.0))
    before = rect.to_mesh().positions
    rect.correct_negative_side_lengths()
    after = rect.to_mesh().positions
    assert np.all(rect.width_height >= 0)
    assert np.allclose(before.min(axis=0), after.min(axis=0))
    assert np.allclose(before.max(axis=0), after.max(axis=0))


def test_correct_negative_leaves_positive_rectangle():
    rect = Rectangle(bottom_left=(1.0, 2.0), width_height=(3.0, 4.0))
    rect.correct_negative_side_lengths()
    assert np.allclose(rect.bottom_left, [1.0, 2.0])
    assert np.allclose(rect.width_height, [3.0, 4.0])


def test_rectangle_rejects_bad_shape():
    with pytest.raises(ValueError):
        Rectangle(bottom_left=(1.0, 2.0, 3.0))


@pytest.mark.parametrize("segments,rings", [(3, 2), (8, 4), (24, 12)])
def test_ellipsoid_mesh_is_closed_surface(segments, rings):
    mesh = Ellipsoid(radii=(1.0, 2.0, 3.0)).to_mesh(segments, rings)
    tris = mesh.triangles
    assert len(mesh.indices) % 3 == 0
    assert tris.min() >= 0
    assert tris.max() < len(mesh.vertices)
    assert all(len(set(t)) == 3 for t in tris.tolist())
    edges = _edges(mesh)
    assert set(edges.values()) == {2}
    # Euler characteristic of a sphere.
    assert len(mesh.vertices) - len(edges) + len(tris) == 2


def test_ellipsoid_vertices_on_surface_and_unit_normals():
    ell = Ellipsoid(radii=(1.0, 2.0, 0.5), position=(1.0, -1.0, 2.0))
    mesh = ell.to_mesh(10, 6)
    scaled = (mesh.positions - ell.position) / ell.radii
    assert np.allclose(np.sum(scaled**2, axis=1), 1.0, atol=1e-6)
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)


def test_ellipsoid_caps():
    ell = Ellipsoid(radii=(1.0, 2.0, 3.0), position=(0.5, 0.5, 0.5))
    pos = ell.to_mesh(6, 4).positions
    assert np.allclose(pos[-2], ell.position - [0.0, ell.radii[1], 0.0])
    assert np.allclose(pos[-1], ell.position + [0.0, ell.radii[1], 0.0])


@pytest.mark.parametrize(
    "radii,segments,rings",
    [((1, 1, 1), 2, 4), ((1, 1, 1), 8, 1), ((0, 1, 1), 8, 4), ((1, -1, 1), 8, 4)],
)
def test_ellipsoid_invalid(radii, segments, rings):
    with pytest.raises(GeometryError):
        Ellipsoid(radii=radii).to_mesh(segments, rings)


def test_sphere_to_ellipsoid():
    sphere = Sphere(2.5, position=(1.0, 2.0, 3.0))
    ell = sphere.to_ellipsoid()
    assert np.allclose(ell.radii, sphere.radius)
    assert np.allclose(ell.position, sphere.position)


def test_sphere_mesh_matches_ellipsoid():
    sphere = Sphere(1.5)
    a = sphere.to_mesh(12, 6)
    b = sphere.to_ellipsoid().to_mesh(12, 6)
    assert a.indices == b.indices
    assert np.allclose(a.positions, b.positions)
    assert np.allclose(np.linalg.norm(a.positions, axis=1), sphere.radius)


def test_sphere_invalid_radius():
    with pytest.raises(GeometryError):
        Sphere(0.0).to_mesh(8, 4)


def test_mesh_data_defaults():
    mesh = MeshData(vertices=[Vertex()], indices=[])
    assert mesh.positions.shape == (1, 3)
    assert mesh.triangles.shape == (0, 3)