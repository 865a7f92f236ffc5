import math

import numpy as np
import pytest

from renderkit.transform import Transform, extract_euler_angle_yxz, yaw_pitch_roll

ANGLES = [
    (0.0, 0.0, 0.0),
    (0.3, -0.4, 0.5),
    (-2.0, 1.2, -0.7),
    (1.5, -1.0, 2.5),
]


def test_default_matrix_is_identity():
    assert np.allclose(Transform().matrix, np.eye(4))


def test_position_appears_in_translation_column():
    t = Transform()
    t.position = (1.0, 2.0, 3.0)
    assert np.allclose(t.matrix[:3, 3], [1.0, 2.0, 3.0])


def test_transform_vector_of_origin_is_position():
    t = Transform()
    t.position = (4.0, -1.0, 2.0)
    t.rotation = (0.4, 0.2, -0.3)
    t.scale = (2.0, 3.0, 0.5)
    assert np.allclose(t.transform_vector((0.0, 0.0, 0.0)), t.position)


def test_delta_position_returns_old_and_adds():
    t = Transform()
    t.position = (1.0, 1.0, 1.0)
    old = t.delta_position((1.0, 2.0, 3.0))
    assert np.allclose(old, [1.0, 1.0, 1.0])
    assert np.allclose(t.position, [2.0, 3.0, 4.0])


def test_delta_rotation_returns_old_and_adds():
    t = Transform()
    old = t.delta_rotation((0.1, 0.2, 0.3))
    assert np.allclose(old, [0.0, 0.0, 0.0])
    assert np.allclose(t.rotation, [0.1, 0.2, 0.3])


def test_delta_scale_multiplies():
    t = Transform()
    t.scale = (2.0, 3.0, 4.0)
    old = t.delta_scale((2.0, 3.0, 4.0))
    assert np.allclose(old, [2.0, 3.0, 4.0])
    assert np.allclose(t.scale, np.array([2.0, 3.0, 4.0]) ** 2)


def test_matrix_updates_after_change():
    t = Transform()
    first = t.matrix
    t.delta_position((0.0, 5.0, 0.0))
    assert not np.allclose(first, t.matrix)


@pytest.mark.parametrize("angles", ANGLES)
def test_yaw_pitch_roll_is_proper_rotation(angles):
    r = yaw_pitch_roll(*angles)[:3, :3]
    assert np.allclose(r @ r.T, np.eye(3))
    assert math.isclose(np.linalg.det(r), 1.0)


@pytest.mark.parametrize("angles", ANGLES)
def test_extract_inverts_yaw_pitch_roll(angles):
    assert np.allclose(extract_euler_angle_yxz(yaw_pitch_roll(*angles)), angles)


@pytest.mark.parametrize("angles", ANGLES)
def test_from_matrix_round_trip(angles):
    source = Transform()
    source.position = (1.5, -2.0, 0.25)
    source.rotation = angles
    source.scale = (0.5, 2.0, 3.0)
    target = Transform()
    target.from_matrix(source.matrix)
    assert np.allclose(target.position, source.position)
    assert np.allclose(target.rotation, source.rotation)
    assert np.allclose(target.scale, source.scale)
    assert np.allclose(target.matrix, source.matrix)


def test_clear_resets():
    t = Transform()
    t.position = (1.0, 2.0, 3.0)
    t.rotation = (0.5, 0.5, 0.5)
    t.scale = (2.0, 2.0, 2.0)
    t.clear()
    assert np.allclose(t.matrix, np.eye(4))


def test_rotate_vector_ignores_translation_and_scale():
    t = Transform()
    t.position = (9.0, 9.0, 9.0)
    t.scale = (5.0, 5.0, 5.0)
    t.rotation = (0.7, -0.3, 1.1)
    v = np.array([1.0, 2.0, -3.0])
    rotated = t.rotate_vector(v)
    assert math.isclose(np.linalg.norm(rotated), np.linalg.norm(v))


def test_vector_apply_yaw_keeps_vertical_and_length():
    t = Transform()
    t.rotation = (1.1, 0.6, 0.2)
    v = np.array([3.0, -2.0, 4.0])
    out = t.vector_apply_yaw(v)
    assert out[1] == v[1]
    assert math.isclose(math.hypot(out[0], out[2]), math.hypot(v[0], v[2]))


def test_vector_apply_yaw_matches_rotation_for_pure_yaw():
    t = Transform()
    t.rotation = (0.9, 0.0, 0.0)
    v = (1.0, 0.0, -2.0)
    assert np.allclose(t.vector_apply_yaw(v), t.rotate_vector(v))


def test_quarter_turn_yaw_moves_forward_to_left():
    t = Transform()
    t.rotation = (math.pi / 2, 0.0, 0.0)
    assert np.allclose(t.vector_apply_yaw((0.0, 0.0, -1.0)), [-1.0, 0.0, 0.0])


def test_vector_apply_yaw_pitch_keeps_vertical_unrotated():
    t = Transform()
    t.rotation = (0.4, 0.8, 0.0)
    v = (0.0, 2.5, 0.0)
    assert np.allclose(t.vector_apply_yaw_pitch(v), v)


def test_invalid_vector_shape_rejected():
    t = Transform()
    with pytest.raises(ValueError):
        t.position = (1.0, 2.0)
    with pytest.raises(ValueError):
        t.from_matrix(np.eye(3))