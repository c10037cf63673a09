"""
Calibration Session
Caller-owned accumulator for calibration samples with online refinement.

The session controller (UI choreography, point layout, stabilisation delays)
lives outside this package; it feeds (features, target) pairs here and asks
for fits. A failed refit never discards a working transform.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..types import EyePatches, GazeFeatures, Point2D
from .config import CalibrationConfig
from .engine import CalibrationSample, apply_transform, compute_transform
from .schema import FeatureSchema
from .transform import FeatureMismatchError, GazeTransform

logger = logging.getLogger(__name__)


class CalibrationSession:
    """
    Accumulates calibration samples for one user and fits the gaze transform.

    Samples can be added during guided capture and afterwards as corrections
    (e.g. a missed validation point recorded against the true target).
    """

    def __init__(
            self,
            schema: Optional[FeatureSchema] = None,
            config: Optional[CalibrationConfig] = None,
    ):
        self.schema = schema or FeatureSchema.geometric()
        self.config = config or CalibrationConfig.for_geometric()

        self._samples: List[CalibrationSample] = []
        self._transform: Optional[GazeTransform] = None

        logger.info(f"CalibrationSession initialised (schema '{self.schema.name}', "
                    f"{self.schema.feature_count} features)")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def samples(self) -> Tuple[CalibrationSample, ...]:
        """Immutable snapshot of the accumulated samples."""
        return tuple(self._samples)

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def transform(self) -> Optional[GazeTransform]:
        return self._transform

    @property
    def is_calibrated(self) -> bool:
        return self._transform is not None

    def add_sample(self, features: Sequence[float], target: Point2D) -> CalibrationSample:
        """
        Record one feature vector against its on-screen target

        Raises:
            FeatureMismatchError: if the vector does not match the schema length
            ValueError: if the vector or the target holds NaN or infinity
        """
        sample = CalibrationSample(features=features, screen=target)
        if sample.features.size != self.schema.feature_count:
            raise FeatureMismatchError(
                f"Schema '{self.schema.name}' expects {self.schema.feature_count} features, "
                f"got {sample.features.size}"
            )
        if not np.all(np.isfinite(sample.features)) or not np.all(np.isfinite(target.as_array())):
            raise ValueError("Calibration sample contains non-finite values")
        self._samples.append(sample)
        return sample

    def add_observation(
            self,
            features: GazeFeatures,
            target: Point2D,
            face_center: Optional[Point2D] = None,
            eye_patches: Optional[EyePatches] = None,
    ) -> CalibrationSample:
        """Build the schema vector from extracted features and record it."""
        vector = self.schema.build(features, face_center=face_center, eye_patches=eye_patches)
        return self.add_sample(vector, target)

    def fit(self, lam: Optional[float] = None) -> Optional[GazeTransform]:
        """
        Fit from every accumulated sample

        Returns:
            The new transform, or None if the fit failed (the previous
            transform, if any, stays active)
        """
        transform = compute_transform(self._samples, lam=lam, config=self.config, schema=self.schema.name)
        if transform is None:
            if self._transform is not None:
                logger.warning("Refit failed, keeping previous gaze transform")
            return None
        self._transform = transform
        return transform

    def refine(self, features: Sequence[float], target: Point2D) -> Optional[GazeTransform]:
        """
        Add a correction sample and refit

        Returns:
            The active transform after refinement (the previous one if the
            refit failed, None if never calibrated)

        Raises:
            FeatureMismatchError, ValueError: as add_sample; nothing is recorded
        """
        self.add_sample(features, target)
        self.fit()
        return self._transform

    def predict(self, features: Sequence[float]) -> Point2D:
        """
        Raises:
            RuntimeError if called before a successful fit()
        """
        if self._transform is None:
            raise RuntimeError("Fit calibration before calling predict()")
        return apply_transform(self._transform, features)

    def load_transform(self, transform: GazeTransform):
        """
        Install a previously fitted transform (e.g. from GazeTransform.from_dict)

        Raises:
            FeatureMismatchError: if it was fitted on a different vector length
        """
        if transform.feature_count != self.schema.feature_count:
            raise FeatureMismatchError(
                f"Transform has {transform.feature_count} features, "
                f"schema '{self.schema.name}' has {self.schema.feature_count}"
            )
        self._transform = transform
        logger.info(f"✓ Calibration loaded ({transform.feature_count} features, "
                    f"{transform.sample_count} samples)")

    def clear(self):
        """Drop all samples and the active transform."""
        self._samples.clear()
        self._transform = None

    def to_dict(self) -> Dict[str, Any]:
        """Transform record plus the raw calibration data it was fitted on."""
        return {
            'schema':         self.schema.name,
            'transform':      self._transform.to_dict() if self._transform else None,
            'calib_features': [s.features.tolist() for s in self._samples],
            'calib_targets':  [[s.screen.x, s.screen.y] for s in self._samples],
        }

    @staticmethod
    def mean_features(frames: Sequence[Sequence[float]]) -> np.ndarray:
        """Average per-frame vectors captured while fixating one target."""
        return np.mean(np.asarray(frames, dtype=float), axis=0)

    def __repr__(self):
        status = "calibrated" if self.is_calibrated else "not calibrated"
        return f"<CalibrationSession({self.sample_count} samples, {status})>"
