"""
Gaze System - Observation Pipeline
===================================
Single-owner orchestration of the per-frame path:

    landmarks ──► features ──► calibration (sample | predict) ──► point filter
            └──► head pose / EAR ──► attention classifier

Usage:
    pipeline = GazePipeline()
    for target in calibration_targets:
        pipeline.add_calibration_sample(observation, target)
    pipeline.calibrate()

    result = pipeline.process(observation)
    result.gaze            # smoothed screen point, or None
    result.attention.state

Failure policy:
    A missing face or an uncalibrated pipeline never raises from process():
    the frame is classified (absent / attentive / ...) and gaze is None.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .attention import AttentionClassifier, AttentionConfig, AttentionResult
from .calibration import CalibrationConfig, CalibrationSession, FeatureSchema, GazeTransform
from .features import (
    LandmarkConfig,
    as_landmark_array,
    compute_eye_aspect_ratio,
    compute_face_center,
    compute_gaze_features,
    compute_head_pose,
)
from .filtering import FilterConfig, PointFilter
from .types import EulerAngles, GazeFeatures, Point2D, TrackingObservation

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class FrameResult:
    timestamp: float
    face_present: bool
    features: GazeFeatures
    feature_vector: Optional[np.ndarray]
    head_pose: EulerAngles
    eye_openness: float
    raw_gaze: Optional[Point2D]
    gaze: Optional[Point2D]
    attention: AttentionResult


class GazePipeline:
    """
    Owns one calibration session, one gaze point filter and one attention
    classifier for a single tracked user.

    Responsibilities:
      - Turn each observation into the schema's feature vector
      - Accumulate calibration samples and fit the transform
      - Predict and smooth the on-screen gaze point once calibrated
      - Update attention state and session statistics
    """

    def __init__(
            self,
            schema: Optional[FeatureSchema] = None,
            calibration_config: Optional[CalibrationConfig] = None,
            attention_config: Optional[AttentionConfig] = None,
            gaze_filter_config: Optional[FilterConfig] = None,
            landmark_config: Optional[LandmarkConfig] = None,
    ):
        self.landmark_config = landmark_config or LandmarkConfig.for_face_mesh()
        self.calibration = CalibrationSession(schema, calibration_config)
        self.attention = AttentionClassifier(attention_config)
        self.gaze_filter = PointFilter(gaze_filter_config or FilterConfig.for_gaze())

        # Latest smoothed gaze, readable from other threads
        self._gaze_lock = threading.Lock()
        self._gaze: Optional[Point2D] = None
        self.frame_count = 0

        logger.info(f"GazePipeline created (schema '{self.calibration.schema.name}')")

    @property
    def schema(self) -> FeatureSchema:
        return self.calibration.schema

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def feature_vector(self, observation: TrackingObservation) -> Tuple[GazeFeatures, Optional[np.ndarray]]:
        """Extract gaze features and the schema vector (None without usable landmarks)."""
        landmarks = as_landmark_array(observation.landmarks)
        features = compute_gaze_features(landmarks, self.landmark_config)
        if len(landmarks) < self.landmark_config.min_landmarks:
            return features, None
        face_center = compute_face_center(landmarks, self.landmark_config)
        vector = self.schema.build(features, face_center=face_center, eye_patches=observation.eye_patches)
        return features, vector

    def add_calibration_sample(self, observation: TrackingObservation, target: Point2D) -> bool:
        """
        Record the observation against an on-screen target

        Returns:
            False if the observation has no face (nothing recorded)
        """
        _, vector = self.feature_vector(observation)
        if vector is None:
            return False
        self.calibration.add_sample(vector, target)
        return True

    def calibrate(self) -> bool:
        """Fit from all recorded samples; a failed refit keeps the previous transform."""
        transform = self.calibration.fit()
        if transform is not None:
            self.gaze_filter.reset()
        return transform is not None

    def refine(self, observation: TrackingObservation, target: Point2D) -> bool:
        """Add a correction sample (e.g. a missed validation point) and refit."""
        _, vector = self.feature_vector(observation)
        if vector is None:
            return False
        return self.calibration.refine(vector, target) is not None

    def load_transform(self, record: Dict[str, Any]):
        """Install a transform from its persistence record."""
        self.calibration.load_transform(GazeTransform.from_dict(record))
        self.gaze_filter.reset()

    def process(self, observation: TrackingObservation) -> FrameResult:
        """Run one observation through feature extraction, prediction and attention."""
        self.frame_count += 1
        t = observation.timestamp
        features, vector = self.feature_vector(observation)

        if observation.face_present:
            head_pose = compute_head_pose(observation.landmarks, observation.transform_matrix, self.landmark_config)
            ear = compute_eye_aspect_ratio(observation.landmarks, self.landmark_config)
        else:
            head_pose, ear = EulerAngles(), 0.0

        raw_gaze = gaze = None
        if vector is not None and self.calibration.is_calibrated:
            raw_gaze = self.calibration.predict(vector)
            gaze = self.gaze_filter.filter(raw_gaze, t)
            with self._gaze_lock:
                self._gaze = gaze

        attention = self.attention.update(t, observation.face_present, head_pose, ear if observation.face_present else 1.0)

        return FrameResult(
            timestamp=t,
            face_present=observation.face_present,
            features=features,
            feature_vector=vector,
            head_pose=head_pose,
            eye_openness=ear,
            raw_gaze=raw_gaze,
            gaze=gaze,
            attention=attention,
        )

    def get_current_gaze(self) -> Optional[Point2D]:
        """
        Thread-safe read of the latest smoothed gaze point.

        Returns:
            Point2D in pixels, or None if no gaze has been computed yet.
        """
        with self._gaze_lock:
            return self._gaze

    def reset(self):
        """Start a new tracking session; the calibration is kept."""
        self.attention.reset()
        self.gaze_filter.reset()
        with self._gaze_lock:
            self._gaze = None
        self.frame_count = 0
        logger.info("✓ GazePipeline reset")

    def get_status(self) -> dict:
        """
        Return the current pipeline state.

        Returns:
            Dict containing calibration state, sample counts, current gaze
            and attention statistics.
        """
        gaze = self.get_current_gaze()
        return {
            'schema':              self.schema.name,
            'feature_count':       self.schema.feature_count,
            'is_calibrated':       self.calibration.is_calibrated,
            'calibration_samples': self.calibration.sample_count,
            'frames_processed':    self.frame_count,
            'current_gaze':        (gaze.x, gaze.y) if gaze else None,
            'attention':           self.attention.get_status(),
        }
