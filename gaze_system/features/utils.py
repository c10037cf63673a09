"""
Feature Extraction Utility Functions
Landmark coercion and planar geometry
"""

import math
from typing import Any

import numpy as np


def as_landmark_array(landmarks: Any) -> np.ndarray:
    """
    Coerce a landmark set into an (N, 3) float array

    Accepts an ndarray, a sequence of (x, y[, z]) tuples, or a sequence of
    objects exposing .x/.y/.z (e.g. MediaPipe NormalizedLandmark).

    Args:
        landmarks: Landmark set, or None

    Returns:
        (N, 3) array; empty (0, 3) array for None or empty input
    """
    if landmarks is None:
        return np.zeros((0, 3), dtype=float)

    if isinstance(landmarks, np.ndarray):
        arr = np.asarray(landmarks, dtype=float)
    else:
        seq = list(landmarks)
        if not seq:
            return np.zeros((0, 3), dtype=float)
        if hasattr(seq[0], 'x'):
            arr = np.array([[p.x, p.y, getattr(p, 'z', 0.0)] for p in seq], dtype=float)
        else:
            arr = np.asarray(seq, dtype=float)

    if arr.ndim != 2 or arr.shape[0] == 0:
        return np.zeros((0, 3), dtype=float)
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((arr.shape[0], 1))])
    return arr[:, :3]


def has_min_landmarks(landmarks: np.ndarray, min_landmarks: int) -> bool:
    return landmarks.shape[0] >= min_landmarks


def planar_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance in the image plane (x, y only)."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def midpoint(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return (a[:2] + b[:2]) / 2.0


def floored(value: float, floor: float) -> float:
    """Return value, or floor if value is not above it."""
    return value if value > floor else floor


def clamp(v: float, lo: float, hi: float) -> float:
    return lo if v < lo else hi if v > hi else v

