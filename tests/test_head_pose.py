"""
Head pose tests: matrix decomposition, geometric fallback, and agreement of
the two paths on sign convention for a rotated synthetic face.
"""

import math

import numpy as np
import pytest

from gaze_system.features import LandmarkConfig, compute_head_pose, estimate_head_pose, matrix_to_euler
from gaze_system.types import EulerAngles

CFG = LandmarkConfig()


def axis_rotation(axis: str, radians: float) -> np.ndarray:
    """Right-handed 3x3 rotation about x, y or z."""
    c, s = math.cos(radians), math.sin(radians)
    i, j = {'x': (1, 2), 'y': (2, 0), 'z': (0, 1)}[axis]
    r = np.eye(3)
    r[i, i] = r[j, j] = c
    r[i, j], r[j, i] = -s, s
    return r


def rot_x(a):
    return axis_rotation('x', a)


def rot_y(a):
    return axis_rotation('y', a)


def rot_z(a):
    return axis_rotation('z', a)


def to_column_major(r: np.ndarray, translation=None) -> list:
    """Flat column-major 4x4, as the face landmarker emits its transformation matrix."""
    m = np.eye(4)
    m[:3, :3] = r
    if translation is not None:
        m[:3, 3] = translation
    return m.flatten(order='F').tolist()


def identity4x4():
    return [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1]


class TestMatrixToEuler:

    def test_identity(self):
        e = matrix_to_euler(identity4x4())
        assert e.yaw == pytest.approx(0.0, abs=1e-9)
        assert e.pitch == pytest.approx(0.0, abs=1e-9)
        assert e.roll == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("deg", [-40.0, -10.0, 15.0, 30.0])
    def test_pure_y_rotation_is_yaw(self, deg):
        e = matrix_to_euler(to_column_major(rot_y(math.radians(deg))))
        assert e.yaw == pytest.approx(deg, abs=1e-6)
        assert e.pitch == pytest.approx(0.0, abs=1e-6)
        assert e.roll == pytest.approx(0.0, abs=1e-6)

    @pytest.mark.parametrize("deg", [-25.0, 30.0])
    def test_pure_x_rotation_is_pitch(self, deg):
        e = matrix_to_euler(to_column_major(rot_x(math.radians(deg))))
        assert e.pitch == pytest.approx(deg, abs=1e-6)
        assert e.yaw == pytest.approx(0.0, abs=1e-6)

    @pytest.mark.parametrize("deg", [-45.0, 45.0])
    def test_pure_z_rotation_is_roll(self, deg):
        e = matrix_to_euler(to_column_major(rot_z(math.radians(deg))))
        assert e.roll == pytest.approx(deg, abs=1e-6)
        assert e.yaw == pytest.approx(0.0, abs=1e-6)

    def test_accepts_4x4_array(self):
        m = np.eye(4)
        m[:3, :3] = rot_y(math.radians(20))
        assert matrix_to_euler(m).yaw == pytest.approx(20.0, abs=1e-6)

    def test_translation_is_ignored(self):
        m = to_column_major(rot_x(math.radians(12)), translation=(3.0, -2.0, -40.0))
        assert matrix_to_euler(m).pitch == pytest.approx(12.0, abs=1e-6)

    def test_out_of_range_entry_is_clamped(self):
        m = identity4x4()
        m[2] = -1.0000001
        e = matrix_to_euler(m)
        assert e.yaw == pytest.approx(90.0)
        assert all(math.isfinite(v) for v in (e.yaw, e.pitch, e.roll))

    def test_short_input_falls_back_to_identity(self):
        e = matrix_to_euler([1.0, 0.0, 0.0])
        assert (e.yaw, e.pitch, e.roll) == pytest.approx((0.0, 0.0, 0.0))


class TestGeometricPose:

    def test_short_input_is_neutral(self):
        assert estimate_head_pose([]) == EulerAngles()

    def test_frontal_face(self, make_landmarks):
        e = estimate_head_pose(make_landmarks())
        assert e.yaw == pytest.approx(0.0, abs=1e-9)
        assert e.pitch == pytest.approx(0.0, abs=1e-9)
        assert e.roll == pytest.approx(0.0, abs=1e-9)

    def test_nose_toward_image_right_is_positive_yaw(self, make_landmarks):
        e = estimate_head_pose(make_landmarks({CFG.nose_tip: (0.56, 0.52)}))
        assert e.yaw > 0

    def test_nose_lower_is_positive_pitch(self, make_landmarks):
        e = estimate_head_pose(make_landmarks({CFG.nose_tip: (0.50, 0.60)}))
        assert e.pitch > 0

    def test_extreme_offsets_stay_finite(self, make_landmarks):
        e = estimate_head_pose(make_landmarks({CFG.nose_tip: (5.0, 5.0)}))
        assert e.yaw == pytest.approx(90.0)
        assert e.pitch == pytest.approx(90.0)

    def test_compute_head_pose_prefers_matrix(self, make_landmarks):
        m = to_column_major(rot_y(math.radians(10)))
        assert compute_head_pose(make_landmarks(), m).yaw == pytest.approx(10.0, abs=1e-6)
        assert compute_head_pose(make_landmarks(), None).yaw == pytest.approx(0.0, abs=1e-9)


def _rotated_face(base: np.ndarray, rotation: np.ndarray) -> np.ndarray:
    """Rotate the synthetic face in a metric frame (x right, y up, z toward camera)."""
    depth = np.zeros(len(base))
    depth[CFG.nose_tip] = 0.1
    depth[[CFG.left_cheek, CFG.right_cheek]] = -0.05
    metric = np.column_stack([base[:, 0] - 0.5, 0.5 - base[:, 1], depth])
    rotated = metric @ rotation.T
    out = base.copy()
    out[:, 0] = rotated[:, 0] + 0.5
    out[:, 1] = 0.5 - rotated[:, 1]
    return out


@pytest.mark.parametrize("rotation, axis", [
    (rot_y, 'yaw'),
    (rot_x, 'pitch'),
    (rot_z, 'roll'),
])
@pytest.mark.parametrize("deg", [-20.0, 20.0])
def test_geometric_and_matrix_paths_agree_in_sign(make_landmarks, rotation, axis, deg):
    r = rotation(math.radians(deg))
    from_matrix = getattr(matrix_to_euler(to_column_major(r)), axis)
    from_geometry = getattr(estimate_head_pose(_rotated_face(make_landmarks(), r)), axis)
    assert np.sign(from_geometry) == np.sign(from_matrix)
