"""
Gaze Feature Extraction
Head-invariant iris offsets, geometric head-pose proxies and eye openness,
computed directly from face-mesh landmark geometry.

None of these functions raise on degraded input: a landmark set shorter than
the detector contract yields neutral defaults, and degenerate spans are floored.
"""

from typing import Any, Optional

from ..types import GazeFeatures, Point2D
from .config import DEFAULT_LANDMARKS, LandmarkConfig
from .utils import as_landmark_array, floored, has_min_landmarks, midpoint, planar_distance

NEUTRAL_FEATURES = GazeFeatures()
NEUTRAL_FACE_CENTER = Point2D(0.5, 0.5)


def compute_gaze_features(landmarks: Any, config: Optional[LandmarkConfig] = None) -> GazeFeatures:
    """
    Compute per-eye iris offsets and head-pose proxies

    Iris offset = (iris - eye corner midpoint) / eye span, per axis. Normalising
    by the eye's own span makes it invariant to face distance and position.

    Args:
        landmarks: Landmark set (see as_landmark_array)
        config: Landmark indices; defaults to the 478-point face mesh

    Returns:
        GazeFeatures, all zero if the landmark set is too short
    """
    cfg = config or DEFAULT_LANDMARKS
    lm = as_landmark_array(landmarks)
    if not has_min_landmarks(lm, cfg.min_landmarks):
        return NEUTRAL_FEATURES

    l_iris, r_iris = lm[cfg.left_iris_idx], lm[cfg.right_iris_idx]
    l_in, l_out = lm[cfg.left_eye_inner], lm[cfg.left_eye_outer]
    r_in, r_out = lm[cfg.right_eye_inner], lm[cfg.right_eye_outer]

    l_center = midpoint(l_in, l_out)
    r_center = midpoint(r_in, r_out)
    l_span = floored(planar_distance(l_in, l_out), cfg.min_span)
    r_span = floored(planar_distance(r_in, r_out), cfg.min_span)

    head_yaw, head_pitch = _head_pose_ratios(lm, cfg, l_center, r_center)

    return GazeFeatures(
        left_gaze=Point2D(
            (l_iris[0] - l_center[0]) / l_span,
            (l_iris[1] - l_center[1]) / l_span,
        ),
        right_gaze=Point2D(
            (r_iris[0] - r_center[0]) / r_span,
            (r_iris[1] - r_center[1]) / r_span,
        ),
        head_yaw=head_yaw,
        head_pitch=head_pitch,
    )


def head_pose_ratios(landmarks: Any, config: Optional[LandmarkConfig] = None) -> tuple:
    """
    Geometric head-pose proxies (yaw_ratio, pitch_ratio)

    yaw_ratio: nose-tip offset from the inter-cheek midline / inter-cheek span
    pitch_ratio: nose-tip offset below the inter-eye line / forehead-to-chin span

    Returns:
        (0.0, 0.0) if the landmark set is too short
    """
    cfg = config or DEFAULT_LANDMARKS
    lm = as_landmark_array(landmarks)
    if not has_min_landmarks(lm, cfg.min_landmarks):
        return 0.0, 0.0
    l_center = midpoint(lm[cfg.left_eye_inner], lm[cfg.left_eye_outer])
    r_center = midpoint(lm[cfg.right_eye_inner], lm[cfg.right_eye_outer])
    return _head_pose_ratios(lm, cfg, l_center, r_center)


def _head_pose_ratios(lm, cfg: LandmarkConfig, l_center, r_center) -> tuple:
    nose = lm[cfg.nose_tip]
    cheek_l, cheek_r = lm[cfg.left_cheek], lm[cfg.right_cheek]
    forehead, chin = lm[cfg.forehead], lm[cfg.chin]

    face_mid_x = (cheek_l[0] + cheek_r[0]) / 2.0
    face_width = floored(abs(cheek_r[0] - cheek_l[0]), cfg.min_span)

    eye_mid_y = (l_center[1] + r_center[1]) / 2.0
    face_height = floored(abs(chin[1] - forehead[1]), cfg.min_span)

    return (
        float((nose[0] - face_mid_x) / face_width),
        float((nose[1] - eye_mid_y) / face_height),
    )


def compute_gaze_ratio(landmarks: Any, config: Optional[LandmarkConfig] = None) -> Point2D:
    """
    Binocular gaze ratio in [-1, 1] per axis

    Horizontal: iris position between inner (0) and outer (1) corner.
    Vertical: iris position between top (0) and bottom (1) eyelid.
    Both eyes are averaged and mapped to [-1, 1]. An eye with zero extent on
    an axis contributes the centre value (0.5) for that axis.

    Returns:
        Point2D(0, 0) if the landmark set is too short
    """
    cfg = config or DEFAULT_LANDMARKS
    lm = as_landmark_array(landmarks)
    if not has_min_landmarks(lm, cfg.min_landmarks):
        return Point2D(0.0, 0.0)

    l_iris, r_iris = lm[cfg.left_iris_idx], lm[cfg.right_iris_idx]
    l_in, l_out = lm[cfg.left_eye_inner], lm[cfg.left_eye_outer]
    r_in, r_out = lm[cfg.right_eye_inner], lm[cfg.right_eye_outer]
    l_top, l_bot = lm[cfg.left_eye_top], lm[cfg.left_eye_bottom]
    r_top, r_bot = lm[cfg.right_eye_top], lm[cfg.right_eye_bottom]

    l_ratio_x = _ratio(l_iris[0], l_in[0], l_out[0])
    r_ratio_x = _ratio(r_iris[0], r_in[0], r_out[0])
    l_ratio_y = _ratio(l_iris[1], l_top[1], l_bot[1])
    r_ratio_y = _ratio(r_iris[1], r_top[1], r_bot[1])

    # average * 2 - 1
    return Point2D(
        float(l_ratio_x + r_ratio_x - 1.0),
        float(l_ratio_y + r_ratio_y - 1.0),
    )


def _ratio(value: float, start: float, end: float) -> float:
    extent = end - start
    if extent == 0:
        return 0.5
    return (value - start) / extent


def compute_eye_aspect_ratio(landmarks: Any, config: Optional[LandmarkConfig] = None) -> float:
    """
    Eye aspect ratio (EAR) averaged over both eyes

    Per eye: eyelid span / corner span. An eye whose corner span is below the
    floor counts as open (1.0) rather than producing a spurious closure.

    Returns:
        Mean EAR, or 1.0 (open) if the landmark set is too short
    """
    cfg = config or DEFAULT_LANDMARKS
    lm = as_landmark_array(landmarks)
    if not has_min_landmarks(lm, cfg.min_landmarks):
        return 1.0

    left = _single_ear(lm, cfg.left_eye_top, cfg.left_eye_bottom,
                       cfg.left_eye_inner, cfg.left_eye_outer, cfg.min_span)
    right = _single_ear(lm, cfg.right_eye_top, cfg.right_eye_bottom,
                        cfg.right_eye_inner, cfg.right_eye_outer, cfg.min_span)
    return (left + right) / 2.0


def _single_ear(lm, top: int, bottom: int, inner: int, outer: int, min_span: float) -> float:
    width = planar_distance(lm[inner], lm[outer])
    if width <= min_span:
        return 1.0
    return planar_distance(lm[top], lm[bottom]) / width


def compute_face_center(landmarks: Any, config: Optional[LandmarkConfig] = None) -> Point2D:
    """Nose-tip position in normalised image space, (0.5, 0.5) if unavailable."""
    cfg = config or DEFAULT_LANDMARKS
    lm = as_landmark_array(landmarks)
    if not has_min_landmarks(lm, cfg.min_landmarks):
        return NEUTRAL_FACE_CENTER
    nose = lm[cfg.nose_tip]
    return Point2D(float(nose[0]), float(nose[1]))
