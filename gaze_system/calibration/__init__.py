"""
Calibration Module for the Gaze System
Personalised ridge regression from gaze features to screen pixels

Architecture:
- FeatureSchema:      Tagged layout / length of the feature vector
- compute_transform:  Ridge fit with feature standardisation (None on failure)
- apply_transform:    Inference with the fit-time mean/std
- CalibrationSession: Sample accumulation, refit and online refinement
- validation:         Pixel / visual-angle error and rating

Usage:
    session = CalibrationSession(FeatureSchema.geometric())
    for target in targets:
        session.add_observation(features, target)
    if session.fit() is not None:
        point = session.predict(vector)
"""

from .config import CalibrationConfig
from .schema import FeatureSchema
from .transform import GazeTransform, FeatureMismatchError
from .engine import (
    CalibrationSample,
    compute_transform,
    compute_affine_transform,
    apply_transform,
)
from .session import CalibrationSession
from .solver import LinearSolver, solve_linear_system
from .validation import (
    CALIBRATION_GRID,
    VALIDATION_GRID,
    ScreenGeometry,
    ValidationReport,
    evaluate,
    grid_targets,
)

__all__ = [
    'CalibrationConfig',
    'FeatureSchema',
    'GazeTransform',
    'FeatureMismatchError',
    'CalibrationSample',
    'compute_transform',
    'compute_affine_transform',
    'apply_transform',
    'CalibrationSession',
    'LinearSolver',
    'solve_linear_system',
    'CALIBRATION_GRID',
    'VALIDATION_GRID',
    'ScreenGeometry',
    'ValidationReport',
    'evaluate',
    'grid_targets',
]
