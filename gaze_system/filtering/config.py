"""
Temporal Filter Configuration
One Euro filter parameters (timestamps in seconds)
"""

from dataclasses import dataclass


@dataclass
class FilterConfig:
    """One Euro filter parameters"""

    min_cutoff: float = 1.0    # Hz - cutoff while the signal is still
    beta: float = 0.007        # speed coefficient - raises cutoff as the signal moves
    d_cutoff: float = 1.0      # Hz - cutoff for the derivative estimate

    def __post_init__(self):
        if self.min_cutoff <= 0:
            raise ValueError(f"min_cutoff must be positive, got {self.min_cutoff}")
        if self.d_cutoff <= 0:
            raise ValueError(f"d_cutoff must be positive, got {self.d_cutoff}")
        if self.beta < 0:
            raise ValueError(f"beta must be non-negative, got {self.beta}")

    @classmethod
    def for_pose(cls) -> 'FilterConfig':
        """
        Head yaw/pitch in degrees: moves fast and far, so a large beta keeps
        turns responsive while holding still stays smooth.
        """
        return cls(min_cutoff=1.0, beta=0.3)

    @classmethod
    def for_gaze(cls) -> 'FilterConfig':
        """Predicted screen point or normalised gaze ratio"""
        return cls(min_cutoff=1.0, beta=0.007)
