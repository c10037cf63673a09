"""
Temporal Filtering Module for the Gaze System
One Euro adaptive low-pass filters for jitter removal without perceptible lag

Usage:
    yaw_filter = OneEuroFilter(min_cutoff=1.0, beta=0.3)
    smoothed = yaw_filter.filter(raw_yaw, timestamp)
    yaw_filter.reset()

    point_filter = PointFilter(FilterConfig.for_gaze())
    smoothed_point = point_filter.filter(Point2D(x, y), timestamp)
"""

from .config import FilterConfig
from .one_euro import OneEuroFilter, PointFilter, PoseFilter, smoothing_factor

__all__ = [
    'FilterConfig',
    'OneEuroFilter',
    'PointFilter',
    'PoseFilter',
    'smoothing_factor',
]
