"""
Eye Patch Sampling
Low-resolution grayscale eye crops used as optional appearance features
"""

import logging
from typing import Any, Optional

import cv2
import numpy as np

from ..types import EyePatches
from .config import DEFAULT_LANDMARKS, LandmarkConfig
from .utils import as_landmark_array, has_min_landmarks

logger = logging.getLogger(__name__)


def extract_eye_patches(
        frame: np.ndarray,
        landmarks: Any,
        config: Optional[LandmarkConfig] = None,
) -> Optional[EyePatches]:
    """
    Crop both eyes from a BGR frame and downsample to tiny grayscale patches

    Args:
        frame: HxWx3 BGR image (or HxW grayscale) the landmarks were computed on
        landmarks: Landmark set in normalised image coordinates
        config: Landmark indices and patch geometry

    Returns:
        EyePatches with flattened float32 arrays in [0, 1], or None if the
        landmark set is too short or either crop falls outside the frame
    """
    cfg = config or DEFAULT_LANDMARKS
    lm = as_landmark_array(landmarks)
    if frame is None or not has_min_landmarks(lm, cfg.min_landmarks):
        return None

    gray = frame if frame.ndim == 2 else cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)

    left = _extract_single_eye(
        gray, lm[cfg.left_eye_outer], lm[cfg.left_eye_inner],
        lm[cfg.left_eye_top], lm[cfg.left_eye_bottom], cfg,
    )
    right = _extract_single_eye(
        gray, lm[cfg.right_eye_inner], lm[cfg.right_eye_outer],
        lm[cfg.right_eye_top], lm[cfg.right_eye_bottom], cfg,
    )
    if left is None or right is None:
        return None
    return EyePatches(left=left, right=right)


def _extract_single_eye(gray, corner1, corner2, top, bottom, cfg: LandmarkConfig) -> Optional[np.ndarray]:
    fh, fw = gray.shape[:2]

    x_min = min(corner1[0], corner2[0])
    x_max = max(corner1[0], corner2[0])
    y_min = min(top[1], corner1[1], corner2[1])
    y_max = max(bottom[1], corner1[1], corner2[1])

    margin_x = (x_max - x_min) * cfg.eye_patch_margin_x
    margin_y = (y_max - y_min) * cfg.eye_patch_margin_y

    sx = max(0, int(np.floor((x_min - margin_x) * fw)))
    sy = max(0, int(np.floor((y_min - margin_y) * fh)))
    sw = min(fw - sx, int(np.ceil((x_max - x_min + 2 * margin_x) * fw)))
    sh = min(fh - sy, int(np.ceil((y_max - y_min + 2 * margin_y) * fh)))

    if sw <= 0 or sh <= 0:
        logger.debug(f"Eye crop outside frame ({fw}x{fh}) at x={sx}, y={sy}")
        return None

    crop = gray[sy:sy + sh, sx:sx + sw]
    patch = cv2.resize(crop, (cfg.eye_patch_width, cfg.eye_patch_height), interpolation=cv2.INTER_AREA)
    return (patch.astype(np.float32) / 255.0).flatten()
