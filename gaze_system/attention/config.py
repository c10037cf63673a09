"""
Attention Classifier Configuration
Thresholds and hysteresis timers (seconds)
"""

from dataclasses import dataclass, field

from ..filtering.config import FilterConfig


@dataclass
class AttentionConfig:
    """Attention state machine configuration"""

    # Head pose thresholds (degrees, absolute)
    yaw_threshold: float = 25.0
    pitch_threshold: float = 20.0

    # Eye aspect ratio below which the eyes count as closed
    ear_closed_threshold: float = 0.2

    # Continuous eye closure before a drowsy candidate is promoted
    drowsy_hold_seconds: float = 2.0

    # A candidate must persist this long before it is committed
    debounce_seconds: float = 0.3

    # Inter-observation gaps at or above this are not accounted (pauses, stale frames)
    max_frame_gap_seconds: float = 1.0

    # Smooth yaw/pitch before thresholding
    smooth_pose: bool = True
    pose_filter: FilterConfig = field(default_factory=FilterConfig.for_pose)

    def __post_init__(self):
        if self.yaw_threshold <= 0 or self.pitch_threshold <= 0:
            raise ValueError("Pose thresholds must be positive")
        if self.drowsy_hold_seconds < 0 or self.debounce_seconds < 0:
            raise ValueError("Hold and debounce durations must be non-negative")
        if self.max_frame_gap_seconds <= 0:
            raise ValueError(f"max_frame_gap_seconds must be positive, got {self.max_frame_gap_seconds}")

    @classmethod
    def for_desktop(cls) -> 'AttentionConfig':
        """Webcam above a desktop monitor"""
        return cls()

    @classmethod
    def for_unfiltered(cls) -> 'AttentionConfig':
        """Pose signals already smoothed upstream"""
        return cls(smooth_pose=False)
