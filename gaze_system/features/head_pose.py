"""
Head Pose Estimation
Euler angles from the detector's facial transformation matrix, with a
geometric fallback from landmark ratios when no matrix is available.

Both paths share one convention (degrees):
    yaw   > 0  nose turned toward +x in the image
    pitch > 0  head tilted down
    roll  > 0  rotation about the camera axis, matching the matrix ZYX decomposition
"""

import math
from typing import Any, Optional, Sequence

import numpy as np

from ..types import EulerAngles
from .config import DEFAULT_LANDMARKS, LandmarkConfig
from .gaze import head_pose_ratios
from .utils import as_landmark_array, clamp, has_min_landmarks, midpoint

NEUTRAL_POSE = EulerAngles(0.0, 0.0, 0.0)

_IDENTITY = np.eye(4).flatten(order='F')


def matrix_to_euler(matrix: Sequence[float]) -> EulerAngles:
    """
    Decompose a 4x4 column-major transform into ZYX Tait-Bryan angles

    R[row][col] = m[col * 4 + row]. Entries missing from a short input fall
    back to the identity matrix values.

    Args:
        matrix: 16 numbers (column-major) or a 4x4 array (row/col indexed)

    Returns:
        EulerAngles in degrees
    """
    arr = np.asarray(matrix, dtype=float)
    if arr.shape == (4, 4):
        flat = arr.flatten(order='F')
    else:
        flat = arr.flatten()
        if flat.size < 16:
            flat = np.concatenate([flat, _IDENTITY[flat.size:]])

    r00, r10, r20 = flat[0], flat[1], flat[2]
    r21, r22 = flat[6], flat[10]

    # asin argument must be clamped: float error can push |r20| past 1
    yaw = math.degrees(math.asin(-clamp(r20, -1.0, 1.0)))
    pitch = math.degrees(math.atan2(r21, r22))
    roll = math.degrees(math.atan2(r10, r00))
    return EulerAngles(yaw, pitch, roll)


def estimate_head_pose(landmarks: Any, config: Optional[LandmarkConfig] = None) -> EulerAngles:
    """
    Approximate Euler angles from landmark geometry

    Treats the nose as a point on a unit-radius head: a nose offset of half the
    face width (yaw) or half the face height from its neutral position (pitch)
    corresponds to 90 degrees. Roll is the angle of the inter-eye line.

    Returns:
        EulerAngles in degrees, zero if the landmark set is too short
    """
    cfg = config or DEFAULT_LANDMARKS
    lm = as_landmark_array(landmarks)
    if not has_min_landmarks(lm, cfg.min_landmarks):
        return NEUTRAL_POSE

    yaw_ratio, pitch_ratio = head_pose_ratios(lm, cfg)
    yaw = math.degrees(math.asin(clamp(2.0 * yaw_ratio, -1.0, 1.0)))
    pitch = math.degrees(math.asin(clamp(2.0 * (pitch_ratio - cfg.neutral_pitch_ratio), -1.0, 1.0)))

    l_center = midpoint(lm[cfg.left_eye_inner], lm[cfg.left_eye_outer])
    r_center = midpoint(lm[cfg.right_eye_inner], lm[cfg.right_eye_outer])
    dx = r_center[0] - l_center[0]
    dy = r_center[1] - l_center[1]
    # Image y grows downward; flip to match the matrix convention
    roll = math.degrees(math.atan2(-dy, dx)) if (dx or dy) else 0.0

    return EulerAngles(yaw, pitch, roll)


def compute_head_pose(
        landmarks: Any,
        matrix: Optional[Sequence[float]] = None,
        config: Optional[LandmarkConfig] = None,
) -> EulerAngles:
    """Matrix-based Euler angles when a matrix is supplied, geometric otherwise."""
    if matrix is not None and len(matrix) > 0:
        return matrix_to_euler(matrix)
    return estimate_head_pose(landmarks, config)
