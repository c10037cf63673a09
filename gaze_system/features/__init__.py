"""
Feature Extraction Module for the Gaze System
Stateless mapping from face-mesh landmarks to gaze and head-pose features

Architecture:
- gaze:        Iris offsets, head-pose proxies, gaze ratio, eye aspect ratio
- head_pose:   Euler angles from the transformation matrix or landmark geometry
- eye_patches: Optional low-resolution eye crops (appearance features)
- LandmarkConfig: Semantic landmark indices for the 478-point face mesh

Usage:
    features = compute_gaze_features(landmarks)
    pose = compute_head_pose(landmarks, matrix)
    ear = compute_eye_aspect_ratio(landmarks)
"""

from .config import LandmarkConfig, DEFAULT_LANDMARKS
from .gaze import (
    compute_gaze_features,
    compute_gaze_ratio,
    compute_eye_aspect_ratio,
    compute_face_center,
    head_pose_ratios,
)
from .head_pose import matrix_to_euler, estimate_head_pose, compute_head_pose
from .eye_patches import extract_eye_patches
from .utils import as_landmark_array

__all__ = [
    'LandmarkConfig',
    'DEFAULT_LANDMARKS',
    'compute_gaze_features',
    'compute_gaze_ratio',
    'compute_eye_aspect_ratio',
    'compute_face_center',
    'head_pose_ratios',
    'matrix_to_euler',
    'estimate_head_pose',
    'compute_head_pose',
    'extract_eye_patches',
    'as_landmark_array',
]
