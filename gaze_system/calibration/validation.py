"""
Calibration Validation
Accuracy of a fitted transform against held-out targets, in pixels and in
degrees of visual angle, with a GOOD / ACCEPTABLE / POOR rating.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .engine import apply_transform
from .transform import GazeTransform

logger = logging.getLogger(__name__)

# Normalised on-screen target layouts (x, y in [0, 1])
CALIBRATION_GRID = np.array([
    [0.05, 0.05], [0.50, 0.05], [0.95, 0.05],
    [0.05, 0.50], [0.50, 0.50], [0.95, 0.50],
    [0.05, 0.95], [0.50, 0.95], [0.95, 0.95],
], dtype=float)

VALIDATION_GRID = np.array([
    [0.25, 0.25], [0.75, 0.25],
    [0.50, 0.50],
    [0.25, 0.75], [0.75, 0.75],
    [0.15, 0.50], [0.85, 0.50],
    [0.50, 0.05], [0.50, 0.95],
], dtype=float)

RATING_GOOD = "GOOD"
RATING_ACCEPTABLE = "ACCEPTABLE"
RATING_POOR = "POOR"


@dataclass(frozen=True)
class ScreenGeometry:
    """Physical screen setup used to convert pixel error into visual angle"""

    width_px: int = 1920
    height_px: int = 1080
    width_mm: float = 527.0       # 24" 16:9 panel
    distance_mm: float = 600.0    # eye to screen

    @property
    def mm_per_px(self) -> float:
        return self.width_mm / self.width_px


@dataclass(frozen=True, eq=False)
class ValidationReport:
    targets: np.ndarray
    predictions: np.ndarray
    error_px: np.ndarray
    error_deg: np.ndarray
    mean_px: float
    std_px: float
    mean_deg: float
    std_deg: float
    rating: str

    @property
    def point_count(self) -> int:
        return len(self.targets)

    def to_dict(self) -> dict:
        return {
            'validation_mean_px':  self.mean_px,
            'validation_std_px':   self.std_px,
            'validation_mean_deg': self.mean_deg,
            'validation_std_deg':  self.std_deg,
            'validation_rating':   self.rating,
            'points':              self.point_count,
        }


def grid_targets(grid: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale a normalised grid to pixel targets."""
    return np.asarray(grid, dtype=float) * np.array([width, height], dtype=float)


def rate(std_deg: float) -> str:
    return RATING_GOOD if std_deg < 1.0 else RATING_ACCEPTABLE if std_deg < 2.0 else RATING_POOR


def evaluate(
        transform: GazeTransform,
        features: Sequence[Sequence[float]],
        targets: Sequence[Sequence[float]],
        screen: ScreenGeometry = ScreenGeometry(),
) -> ValidationReport:
    """
    Score a transform on (features, target pixel) pairs

    Raises:
        ValueError: if features and targets differ in length or are empty
        FeatureMismatchError: if a feature vector has the wrong length
    """
    if len(features) != len(targets):
        raise ValueError(f"{len(features)} feature vectors for {len(targets)} targets")
    if len(targets) == 0:
        raise ValueError("Validation needs at least one point")

    tgts = np.asarray(targets, dtype=float).reshape(-1, 2)
    preds = np.array([apply_transform(transform, f).as_array() for f in features])

    err = np.linalg.norm(preds - tgts, axis=1)
    deg = np.degrees(np.arctan((err * screen.mm_per_px) / screen.distance_mm))
    mean_deg = float(np.mean(deg))
    std_deg = float(np.std(deg))
    rating = rate(std_deg)

    if rating == RATING_POOR:
        logger.warning(f"Validation: {std_deg:.2f}deg std ({rating})")
    else:
        logger.info(f"Validation: {std_deg:.2f}deg std ({rating})")

    return ValidationReport(
        targets=tgts,
        predictions=preds,
        error_px=err,
        error_deg=deg,
        mean_px=float(np.mean(err)),
        std_px=float(np.std(err)),
        mean_deg=mean_deg,
        std_deg=std_deg,
        rating=rating,
    )
