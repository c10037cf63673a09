"""
Gaze System
Screen-gaze estimation and attention classification from face-mesh landmarks

Components:
- features:    Landmark geometry -> gaze features, head pose, eye openness
- filtering:   One Euro adaptive smoothing per signal channel
- calibration: Personalised ridge regression from features to screen pixels
- attention:   Debounced attention state machine with session statistics
- pipeline:    Per-observation orchestration of the above

The landmark detector, camera loop and UI are external: feed one
TrackingObservation per processed frame.
"""

from .types import (
    Point2D,
    EulerAngles,
    GazeFeatures,
    EyePatches,
    TrackingObservation,
)
from .features import (
    LandmarkConfig,
    compute_gaze_features,
    compute_gaze_ratio,
    compute_eye_aspect_ratio,
    compute_head_pose,
    matrix_to_euler,
)
from .filtering import FilterConfig, OneEuroFilter, PointFilter, PoseFilter
from .calibration import (
    CalibrationConfig,
    CalibrationSample,
    CalibrationSession,
    FeatureSchema,
    GazeTransform,
    FeatureMismatchError,
    compute_transform,
    compute_affine_transform,
    apply_transform,
)
from .attention import AttentionConfig, AttentionClassifier, AttentionState
from .pipeline import GazePipeline, FrameResult

__all__ = [
    'Point2D',
    'EulerAngles',
    'GazeFeatures',
    'EyePatches',
    'TrackingObservation',

    # Feature extraction
    'LandmarkConfig',
    'compute_gaze_features',
    'compute_gaze_ratio',
    'compute_eye_aspect_ratio',
    'compute_head_pose',
    'matrix_to_euler',

    # Filtering
    'FilterConfig',
    'OneEuroFilter',
    'PointFilter',
    'PoseFilter',

    # Calibration
    'CalibrationConfig',
    'CalibrationSample',
    'CalibrationSession',
    'FeatureSchema',
    'GazeTransform',
    'FeatureMismatchError',
    'compute_transform',
    'compute_affine_transform',
    'apply_transform',

    # Attention
    'AttentionConfig',
    'AttentionClassifier',
    'AttentionState',

    # Pipeline
    'GazePipeline',
    'FrameResult',
]

__version__ = '1.0.0'
