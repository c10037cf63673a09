"""
Shared value types for the gaze system.

All coordinates from the landmark detector are normalised image space
([0, 1] in x and y, z a relative depth). Screen points are pixels.
Timestamps are seconds (e.g. time.monotonic()).
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class Point2D:
    x: float = 0.0
    y: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


@dataclass(frozen=True)
class EulerAngles:
    """Head rotation in degrees. Positive yaw turns the nose toward +x image."""

    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0


@dataclass(frozen=True)
class GazeFeatures:
    """
    Head-invariant gaze features for one frame.

    left_gaze / right_gaze: iris offset from the eye-corner midpoint divided
    by the eye span, per axis (nominally [-1, 1], unclamped).
    head_yaw / head_pitch: geometric pose proxies (nose offset ratios).
    """

    left_gaze: Point2D = field(default_factory=Point2D)
    right_gaze: Point2D = field(default_factory=Point2D)
    head_yaw: float = 0.0
    head_pitch: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([
            self.left_gaze.x, self.left_gaze.y,
            self.right_gaze.x, self.right_gaze.y,
            self.head_yaw, self.head_pitch,
        ], dtype=float)


@dataclass(frozen=True, eq=False)
class EyePatches:
    """Flattened low-resolution grayscale eye crops, values in [0, 1]."""

    left: np.ndarray
    right: np.ndarray


@dataclass
class TrackingObservation:
    """
    One processed frame from the landmark detector.

    landmarks is None when no face was detected. transform_matrix is the
    optional column-major 4x4 facial transformation matrix.
    """

    timestamp: float
    landmarks: Optional[np.ndarray] = None
    transform_matrix: Optional[Sequence[float]] = None
    eye_patches: Optional[EyePatches] = None

    @property
    def face_present(self) -> bool:
        return self.landmarks is not None and len(self.landmarks) > 0
