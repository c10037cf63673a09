"""
Calibration Engine
Fits and applies the per-user linear mapping from gaze features to screen pixels.

Fit (ridge regression on standardised features):
    1. Standardise every feature to zero mean / unit variance over the samples
       (std below the floor is replaced by 1, so a constant feature contributes
       nothing instead of exploding)
    2. Append a constant bias feature
    3. Solve (F'F + lambda I') beta = F'y for x and y from one factorisation,
       where I' penalises every original feature but never the bias

Insufficient samples or a singular system yield None, never an exception.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence

import numpy as np
from sklearn.preprocessing import PolynomialFeatures

from ..types import Point2D
from .config import CalibrationConfig
from .solver import LinearSolver
from .transform import FeatureMismatchError, GazeTransform

logger = logging.getLogger(__name__)

AFFINE_FEATURES = 2


@dataclass(frozen=True, eq=False)
class CalibrationSample:
    """One (feature vector, screen point) observation."""

    features: np.ndarray
    screen: Point2D

    def __post_init__(self):
        arr = np.array(self.features, dtype=float).ravel()
        arr.setflags(write=False)
        object.__setattr__(self, 'features', arr)


@lru_cache(maxsize=16)
def _polynomial_expander(n_features: int, degree: int) -> PolynomialFeatures:
    poly = PolynomialFeatures(degree=degree, include_bias=False)
    # Fit on a dummy row so the transformer knows its input width
    poly.fit(np.zeros((1, n_features)))
    return poly


def expand_features(x: np.ndarray, degree: int) -> np.ndarray:
    """Polynomial expansion of a (n, d) feature matrix; identity for degree 1."""
    if degree <= 1:
        return x
    return _polynomial_expander(x.shape[1], degree).transform(x)


def _stack_samples(samples: Sequence[CalibrationSample]):
    feature_count = samples[0].features.size
    for i, s in enumerate(samples):
        if s.features.size != feature_count:
            raise FeatureMismatchError(
                f"Sample {i} has {s.features.size} features, expected {feature_count}"
            )
    x = np.vstack([s.features for s in samples])
    targets = np.array([[s.screen.x, s.screen.y] for s in samples], dtype=float)
    return x, targets


def _solve_normal_equations(
        design: np.ndarray,
        targets: np.ndarray,
        lam: float,
        tolerance: float,
) -> Optional[np.ndarray]:
    """
    Solve the ridge normal equations for both output axes

    Args:
        design: (n, d + 1) matrix, bias column last
        targets: (n, 2) screen points

    Returns:
        (d + 1, 2) coefficients, or None if singular
    """
    ata = design.T @ design
    n_features = ata.shape[0] - 1
    ata[np.arange(n_features), np.arange(n_features)] += lam
    atb = design.T @ targets

    solver = LinearSolver.factor(ata, tolerance)
    if solver is None:
        return None
    coeffs = solver.solve(atb)
    if not np.all(np.isfinite(coeffs)):
        return None
    return coeffs


def compute_transform(
        samples: Sequence[CalibrationSample],
        lam: Optional[float] = None,
        config: Optional[CalibrationConfig] = None,
        schema: str = '',
) -> Optional[GazeTransform]:
    """
    Fit a ridge-regularised linear gaze transform

    Args:
        samples: Calibration samples, all with the same feature length
        lam: Ridge penalty; defaults to config.ridge_lambda
        config: Fit parameters
        schema: Tag recorded on the transform (FeatureSchema.name)

    Returns:
        GazeTransform, or None if there are too few samples or the system is singular

    Raises:
        FeatureMismatchError: if samples disagree on feature length
    """
    cfg = config or CalibrationConfig()
    lam = cfg.ridge_lambda if lam is None else float(lam)
    if lam < 0:
        raise ValueError(f"Ridge lambda must be non-negative, got {lam}")

    if not samples:
        logger.warning("Calibration fit skipped: no samples")
        return None

    raw, targets = _stack_samples(samples)
    feature_count = raw.shape[1]
    if not (np.all(np.isfinite(raw)) and np.all(np.isfinite(targets))):
        logger.warning("Calibration fit skipped: non-finite sample values")
        return None
    x = expand_features(raw, cfg.poly_degree)

    n_samples, n_expanded = x.shape
    required = cfg.required_samples(n_expanded + 1)
    if n_samples < required:
        logger.warning(f"Calibration fit skipped: {n_samples} samples, {required} required")
        return None

    mean = x.mean(axis=0)
    std = x.std(axis=0)
    std[std < cfg.min_feature_std] = 1.0

    design = np.hstack([(x - mean) / std, np.ones((n_samples, 1))])
    coeffs = _solve_normal_equations(design, targets, lam, cfg.singular_tolerance)
    if coeffs is None:
        logger.warning(f"Calibration fit failed: singular system ({n_samples} samples, {feature_count} features)")
        return None

    transform = GazeTransform(
        x_coeffs=coeffs[:, 0],
        y_coeffs=coeffs[:, 1],
        feature_mean=mean,
        feature_std=std,
        feature_count=feature_count,
        poly_degree=cfg.poly_degree,
        schema=schema,
        sample_count=n_samples,
        lam=lam,
    )
    logger.info(f"✓ Gaze transform fitted ({n_samples} samples, {feature_count} features, "
                f"degree {cfg.poly_degree}, lambda {lam})")
    return transform


def compute_affine_transform(
        samples: Sequence[CalibrationSample],
        config: Optional[CalibrationConfig] = None,
) -> Optional[GazeTransform]:
    """
    Plain least-squares affine fit on a 2D gaze ratio

    screen = a * gx + b * gy + c, per axis. No standardisation (mean 0,
    std 1 are recorded so apply_transform works unchanged) and no ridge.

    Returns:
        GazeTransform, or None if there are too few samples or the system is singular

    Raises:
        FeatureMismatchError: if any sample is not 2-dimensional
    """
    cfg = config or CalibrationConfig.for_affine()
    if not samples:
        logger.warning("Affine fit skipped: no samples")
        return None

    x, targets = _stack_samples(samples)
    if x.shape[1] != AFFINE_FEATURES:
        raise FeatureMismatchError(f"Affine fit takes {AFFINE_FEATURES} features, got {x.shape[1]}")

    required = cfg.required_samples(AFFINE_FEATURES + 1)
    if x.shape[0] < required:
        logger.warning(f"Affine fit skipped: {x.shape[0]} samples, {required} required")
        return None

    design = np.hstack([x, np.ones((x.shape[0], 1))])
    coeffs = _solve_normal_equations(design, targets, 0.0, cfg.singular_tolerance)
    if coeffs is None:
        logger.warning("Affine fit failed: singular system")
        return None

    logger.info(f"✓ Affine gaze transform fitted ({x.shape[0]} samples)")
    return GazeTransform(
        x_coeffs=coeffs[:, 0],
        y_coeffs=coeffs[:, 1],
        feature_mean=np.zeros(AFFINE_FEATURES),
        feature_std=np.ones(AFFINE_FEATURES),
        feature_count=AFFINE_FEATURES,
        poly_degree=1,
        schema='affine',
        sample_count=x.shape[0],
        lam=0.0,
    )


def apply_transform(transform: GazeTransform, features: Sequence[float]) -> Point2D:
    """
    Map a feature vector to a screen point

    Uses the transform's stored mean/std; the result is not clamped to the screen.

    Raises:
        FeatureMismatchError: if the vector length differs from the fitted one
    """
    x = np.asarray(features, dtype=float).ravel()
    if x.size != transform.feature_count:
        raise FeatureMismatchError(
            f"Transform expects {transform.feature_count} features, got {x.size}"
        )

    x = expand_features(x.reshape(1, -1), transform.poly_degree)[0]
    if x.size != transform.feature_mean.size:
        raise FeatureMismatchError(
            f"Expanded vector has {x.size} terms, transform was fitted on {transform.feature_mean.size}"
        )

    row = np.append((x - transform.feature_mean) / transform.feature_std, 1.0)
    return Point2D(float(row @ transform.x_coeffs), float(row @ transform.y_coeffs))
