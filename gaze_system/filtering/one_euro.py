"""
One Euro Filter
Adaptive exponential smoother whose cutoff rises with signal speed: heavy
smoothing while still, little lag while moving.

One instance per scalar channel; PointFilter and PoseFilter compose channels.
Instances are single-owner and not thread-safe.
"""

import math
from typing import Optional

from ..types import EulerAngles, Point2D
from .config import FilterConfig


def smoothing_factor(te: float, cutoff: float) -> float:
    """
    Exponential smoothing factor for sample period te and cutoff frequency

    alpha = 1 / (1 + tau / te), tau = 1 / (2 * pi * cutoff)
    """
    tau = 1.0 / (2.0 * math.pi * cutoff)
    return 1.0 / (1.0 + tau / te)


def exponential_smoothing(alpha: float, current: float, previous: float) -> float:
    return alpha * current + (1.0 - alpha) * previous


class OneEuroFilter:
    """Single-channel One Euro filter keyed by timestamp (seconds)"""

    def __init__(self, min_cutoff: float = 1.0, beta: float = 0.007, d_cutoff: float = 1.0):
        config = FilterConfig(min_cutoff=min_cutoff, beta=beta, d_cutoff=d_cutoff)
        self.min_cutoff = config.min_cutoff
        self.beta = config.beta
        self.d_cutoff = config.d_cutoff

        self._last_time: Optional[float] = None
        self._last_value = 0.0
        self._last_dx = 0.0

    @classmethod
    def from_config(cls, config: FilterConfig) -> 'OneEuroFilter':
        return cls(min_cutoff=config.min_cutoff, beta=config.beta, d_cutoff=config.d_cutoff)

    @property
    def last_value(self) -> Optional[float]:
        return self._last_value if self._last_time is not None else None

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._last_time

    def filter(self, value: float, timestamp: float) -> float:
        """
        Smooth one sample

        Args:
            value: Raw sample
            timestamp: Sample time in seconds

        Returns:
            Smoothed value. The first sample after construction or reset()
            is returned unchanged; a non-advancing timestamp returns the
            previous smoothed value.
        """
        if self._last_time is None:
            self._last_time = timestamp
            self._last_value = value
            self._last_dx = 0.0
            return value

        te = timestamp - self._last_time
        if te <= 0:
            return self._last_value

        dx = (value - self._last_value) / te
        edx = exponential_smoothing(smoothing_factor(te, self.d_cutoff), dx, self._last_dx)
        cutoff = self.min_cutoff + self.beta * abs(edx)
        result = exponential_smoothing(smoothing_factor(te, cutoff), value, self._last_value)

        self._last_time = timestamp
        self._last_value = result
        self._last_dx = edx
        return result

    __call__ = filter

    def reset(self):
        """Forget all state; the next sample passes through."""
        self._last_time = None
        self._last_value = 0.0
        self._last_dx = 0.0

    def __repr__(self):
        return (f"<OneEuroFilter(min_cutoff={self.min_cutoff}, beta={self.beta}, "
                f"d_cutoff={self.d_cutoff})>")


class PointFilter:
    """Two independent One Euro channels for a 2D point"""

    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config or FilterConfig.for_gaze()
        self._x = OneEuroFilter.from_config(self.config)
        self._y = OneEuroFilter.from_config(self.config)

    def filter(self, point: Point2D, timestamp: float) -> Point2D:
        return Point2D(
            self._x.filter(point.x, timestamp),
            self._y.filter(point.y, timestamp),
        )

    __call__ = filter

    def reset(self):
        self._x.reset()
        self._y.reset()


class PoseFilter:
    """
    One Euro channels for head yaw and pitch (and optionally roll).
    Roll passes through untouched unless smooth_roll is set.
    """

    def __init__(self, config: Optional[FilterConfig] = None, smooth_roll: bool = False):
        self.config = config or FilterConfig.for_pose()
        self.smooth_roll = smooth_roll
        self._yaw = OneEuroFilter.from_config(self.config)
        self._pitch = OneEuroFilter.from_config(self.config)
        self._roll = OneEuroFilter.from_config(self.config)

    def filter(self, pose: EulerAngles, timestamp: float) -> EulerAngles:
        roll = self._roll.filter(pose.roll, timestamp) if self.smooth_roll else pose.roll
        return EulerAngles(
            yaw=self._yaw.filter(pose.yaw, timestamp),
            pitch=self._pitch.filter(pose.pitch, timestamp),
            roll=roll,
        )

    __call__ = filter

    def reset(self):
        self._yaw.reset()
        self._pitch.reset()
        self._roll.reset()
