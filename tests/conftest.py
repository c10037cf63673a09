"""
Shared fixtures: synthetic 478-point face meshes with a frontal, eyes-open face.

Layout (normalised image coordinates, y grows downward):
    eyes on y = 0.40, left eye x 0.35..0.45, right eye x 0.55..0.65
    eyelids +-0.03 around the eye line (EAR = 0.6)
    irises centred in each eye
    forehead y = 0.20, chin y = 0.80, cheeks x = 0.30 / 0.70
    nose tip 0.2 face-heights below the eye line (geometric pitch = 0)
"""

import numpy as np
import pytest

from gaze_system.features.config import LandmarkConfig

CFG = LandmarkConfig()

BASE_POINTS = {
    CFG.left_eye_outer:   (0.35, 0.40),
    CFG.left_eye_inner:   (0.45, 0.40),
    CFG.left_eye_top:     (0.40, 0.37),
    CFG.left_eye_bottom:  (0.40, 0.43),
    CFG.right_eye_inner:  (0.55, 0.40),
    CFG.right_eye_outer:  (0.65, 0.40),
    CFG.right_eye_top:    (0.60, 0.37),
    CFG.right_eye_bottom: (0.60, 0.43),
    CFG.left_iris_idx:    (0.40, 0.40),
    CFG.right_iris_idx:   (0.60, 0.40),
    CFG.forehead:         (0.50, 0.20),
    CFG.chin:             (0.50, 0.80),
    CFG.left_cheek:       (0.30, 0.50),
    CFG.right_cheek:      (0.70, 0.50),
    CFG.nose_tip:         (0.50, 0.52),
}

CLOSED_EYES = {
    CFG.left_eye_top:     (0.40, 0.399),
    CFG.left_eye_bottom:  (0.40, 0.401),
    CFG.right_eye_top:    (0.60, 0.399),
    CFG.right_eye_bottom: (0.60, 0.401),
}


def build_landmarks(overrides=None) -> np.ndarray:
    lm = np.zeros((CFG.min_landmarks, 3), dtype=float)
    lm[:, 0] = 0.5
    lm[:, 1] = 0.5
    for idx, (x, y) in BASE_POINTS.items():
        lm[idx, :2] = (x, y)
    for idx, (x, y) in (overrides or {}).items():
        lm[idx, :2] = (x, y)
    return lm


def shift_irises(dx: float, dy: float) -> dict:
    return {
        CFG.left_iris_idx:  (0.40 + dx, 0.40 + dy),
        CFG.right_iris_idx: (0.60 + dx, 0.40 + dy),
    }


@pytest.fixture
def make_landmarks():
    return build_landmarks


@pytest.fixture
def closed_eyes():
    return dict(CLOSED_EYES)


@pytest.fixture
def iris_shift():
    return shift_irises
