"""
Calibration Engine Configuration
Ridge regression and sample-count parameters for the gaze transform
"""

from dataclasses import dataclass


@dataclass
class CalibrationConfig:
    """Calibration fit parameters"""

    # Ridge penalty added to every original feature (never the bias)
    ridge_lambda: float = 1.0

    # Optional polynomial expansion of the raw feature vector (1 = linear)
    poly_degree: int = 1

    # Sample-count precondition: max(min_samples, min(n_params, sample_cap))
    min_samples: int = 5
    sample_cap: int = 20

    # Features whose std falls below this are left unscaled (std = 1)
    min_feature_std: float = 1e-10

    # Pivot magnitude (relative to the largest matrix entry) treated as singular
    singular_tolerance: float = 1e-12

    def __post_init__(self):
        if self.ridge_lambda < 0:
            raise ValueError(f"ridge_lambda must be non-negative, got {self.ridge_lambda}")
        if self.poly_degree < 1:
            raise ValueError(f"poly_degree must be >= 1, got {self.poly_degree}")
        if self.min_samples < 1 or self.sample_cap < 1:
            raise ValueError("Sample floors must be positive")

    def required_samples(self, n_params: int) -> int:
        """
        Minimum number of samples for a fit with n_params coefficients per axis.

        Low-dimensional models need one sample per parameter; high-dimensional
        ones are capped, since the ridge term keeps them solvable.
        """
        return max(self.min_samples, min(n_params, self.sample_cap))

    @classmethod
    def for_geometric(cls) -> 'CalibrationConfig':
        """Head-invariant geometric features (6-dim), linear ridge"""
        return cls(ridge_lambda=1.0)

    @classmethod
    def for_appearance(cls) -> 'CalibrationConfig':
        """Eye-patch appearance features (124-dim) need stronger shrinkage"""
        return cls(ridge_lambda=10.0)

    @classmethod
    def for_polynomial(cls, degree: int = 2) -> 'CalibrationConfig':
        """Polynomial ridge over the raw features, as a 9-point grid supports"""
        return cls(ridge_lambda=1.0, poly_degree=degree)

    @classmethod
    def for_affine(cls) -> 'CalibrationConfig':
        """Unregularised 2-feature affine fit"""
        return cls(ridge_lambda=0.0)
