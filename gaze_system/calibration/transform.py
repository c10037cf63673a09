"""
Gaze Transform
Immutable result of a calibration fit: per-axis coefficients plus the exact
standardisation (mean/std) used at fit time, which inference must reuse.
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence

import numpy as np

from ..types import Point2D


class FeatureMismatchError(ValueError):
    """Feature vector length differs from the one a transform was fitted on."""


def _frozen(values: Sequence[float]) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class GazeTransform:
    """
    Fitted mapping from feature space to screen pixels

    Coefficient vectors have one entry per (expanded, standardised) feature
    followed by the bias term.
    """

    x_coeffs: np.ndarray
    y_coeffs: np.ndarray
    feature_mean: np.ndarray
    feature_std: np.ndarray
    feature_count: int
    poly_degree: int = 1
    schema: str = ''
    sample_count: int = 0
    lam: float = 0.0

    def __post_init__(self):
        for name in ('x_coeffs', 'y_coeffs', 'feature_mean', 'feature_std'):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

        n_expanded = self.feature_mean.size
        if self.feature_std.size != n_expanded:
            raise ValueError(
                f"feature_std has {self.feature_std.size} entries, feature_mean has {n_expanded}"
            )
        if self.x_coeffs.size != n_expanded + 1 or self.y_coeffs.size != n_expanded + 1:
            raise ValueError(
                f"Coefficient vectors must have {n_expanded + 1} entries "
                f"(got {self.x_coeffs.size} and {self.y_coeffs.size})"
            )
        if self.feature_count < 1:
            raise ValueError(f"feature_count must be positive, got {self.feature_count}")
        if np.any(self.feature_std <= 0):
            raise ValueError("feature_std entries must be positive")

    @property
    def n_params(self) -> int:
        return self.x_coeffs.size

    def predict(self, features: Sequence[float]) -> Point2D:
        """Map one feature vector to a screen point (see apply_transform)."""
        from .engine import apply_transform
        return apply_transform(self, features)

    def to_dict(self) -> Dict[str, Any]:
        """Opaque persistence record (JSON-serialisable)."""
        return {
            'feature_count': self.feature_count,
            'poly_degree':   self.poly_degree,
            'schema':        self.schema,
            'sample_count':  self.sample_count,
            'lambda':        self.lam,
            'x_coeffs':      self.x_coeffs.tolist(),
            'y_coeffs':      self.y_coeffs.tolist(),
            'feature_mean':  self.feature_mean.tolist(),
            'feature_std':   self.feature_std.tolist(),
        }

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> 'GazeTransform':
        """
        Rebuild a transform from to_dict() output

        Raises:
            ValueError: if the record is missing fields or has inconsistent lengths
        """
        try:
            return cls(
                x_coeffs=record['x_coeffs'],
                y_coeffs=record['y_coeffs'],
                feature_mean=record['feature_mean'],
                feature_std=record['feature_std'],
                feature_count=int(record['feature_count']),
                poly_degree=int(record.get('poly_degree', 1)),
                schema=str(record.get('schema', '')),
                sample_count=int(record.get('sample_count', 0)),
                lam=float(record.get('lambda', 0.0)),
            )
        except KeyError as e:
            raise ValueError(f"Calibration record missing field {e}") from e

    def __repr__(self):
        return (f"<GazeTransform(features={self.feature_count}, degree={self.poly_degree}, "
                f"schema='{self.schema}', samples={self.sample_count})>")
