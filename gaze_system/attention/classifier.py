"""
Attention Classifier
Debounced attention state machine with session accounting.

Per observation:
    1. Raw state by priority: absent > looking_away > drowsy > attentive
    2. Drowsy is only proposed after continuous eye closure for the hold
       duration; shorter closures (blinks) count as attentive
    3. A candidate must persist for the debounce window before it is committed
    4. Elapsed / attentive time accumulate from positive inter-observation
       gaps below the sanity ceiling
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..features.config import LandmarkConfig
from ..features.gaze import compute_eye_aspect_ratio
from ..features.head_pose import compute_head_pose
from ..filtering.one_euro import PoseFilter
from ..types import EulerAngles, TrackingObservation
from .config import AttentionConfig

logger = logging.getLogger(__name__)


class AttentionState(str, Enum):
    ATTENTIVE = "attentive"
    LOOKING_AWAY = "looking_away"
    DROWSY = "drowsy"
    ABSENT = "absent"


@dataclass(frozen=True)
class AttentionResult:
    state: AttentionState          # committed (debounced) state
    raw_state: AttentionState      # this frame's classification
    candidate: AttentionState      # raw state after the drowsy hold
    head_yaw: float
    head_pitch: float
    eye_openness: float
    face_present: bool
    timestamp: float


@dataclass(frozen=True)
class SessionStats:
    attentive_seconds: float = 0.0
    total_seconds: float = 0.0
    distraction_count: int = 0
    current_streak_seconds: float = 0.0

    @property
    def distracted_seconds(self) -> float:
        return self.total_seconds - self.attentive_seconds

    @property
    def attention_rate(self) -> float:
        """Fraction of accounted time spent attentive (0 before any time accrues)."""
        return self.attentive_seconds / self.total_seconds if self.total_seconds > 0 else 0.0


def classify_frame(
        face_present: bool,
        yaw: float,
        pitch: float,
        ear: float,
        config: Optional[AttentionConfig] = None,
) -> AttentionState:
    """
    Undebounced classification of a single frame

    Looking away takes priority over closed eyes: a turned head distorts
    the eyelid geometry.
    """
    cfg = config or AttentionConfig()
    if not face_present:
        return AttentionState.ABSENT
    if abs(yaw) > cfg.yaw_threshold or abs(pitch) > cfg.pitch_threshold:
        return AttentionState.LOOKING_AWAY
    if ear < cfg.ear_closed_threshold:
        return AttentionState.DROWSY
    return AttentionState.ATTENTIVE


class AttentionClassifier:
    """
    Stateful attention classifier for one tracked face / session.
    Single-owner: feed observations in timestamp order from one thread.
    """

    def __init__(self, config: Optional[AttentionConfig] = None):
        self.config = config or AttentionConfig.for_desktop()
        self._pose_filter = PoseFilter(self.config.pose_filter)
        self.reset()

        logger.info(f"AttentionClassifier initialised (yaw ±{self.config.yaw_threshold}°, "
                    f"pitch ±{self.config.pitch_threshold}°, EAR < {self.config.ear_closed_threshold})")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> AttentionState:
        return self._state

    @property
    def stats(self) -> SessionStats:
        return SessionStats(
            attentive_seconds=self._attentive_seconds,
            total_seconds=self._total_seconds,
            distraction_count=self._distraction_count,
            current_streak_seconds=self._streak_seconds,
        )

    def update(
            self,
            timestamp: float,
            face_present: bool,
            head_pose: Optional[EulerAngles] = None,
            ear: float = 1.0,
    ) -> AttentionResult:
        """
        Process one observation

        Args:
            timestamp: Observation time in seconds
            face_present: Whether a face was detected
            head_pose: Raw head pose in degrees (smoothed here if configured)
            ear: Eye aspect ratio

        Returns:
            AttentionResult with the committed state after this observation
        """
        yaw = pitch = 0.0
        if face_present and head_pose is not None:
            if self.config.smooth_pose:
                head_pose = self._pose_filter.filter(head_pose, timestamp)
            yaw, pitch = head_pose.yaw, head_pose.pitch

        raw = classify_frame(face_present, yaw, pitch, ear, self.config)
        candidate = self._apply_drowsy_hold(raw, timestamp)
        self._debounce(candidate, timestamp)
        self._account(timestamp)

        return AttentionResult(
            state=self._state,
            raw_state=raw,
            candidate=candidate,
            head_yaw=yaw,
            head_pitch=pitch,
            eye_openness=ear if face_present else 0.0,
            face_present=face_present,
            timestamp=timestamp,
        )

    def update_observation(
            self,
            observation: TrackingObservation,
            landmark_config: Optional[LandmarkConfig] = None,
    ) -> AttentionResult:
        """Derive presence, head pose and EAR from a tracking observation, then update()."""
        if not observation.face_present:
            return self.update(observation.timestamp, False)

        pose = compute_head_pose(observation.landmarks, observation.transform_matrix, landmark_config)
        ear = compute_eye_aspect_ratio(observation.landmarks, landmark_config)
        return self.update(observation.timestamp, True, pose, ear)

    def reset(self):
        """Start a new session: clear counters and timers, state -> absent, reset pose smoothing."""
        self._state = AttentionState.ABSENT
        self._pending: Optional[AttentionState] = None
        self._pending_since = 0.0
        self._eye_closed_since: Optional[float] = None
        self._last_timestamp: Optional[float] = None

        self._attentive_seconds = 0.0
        self._total_seconds = 0.0
        self._distraction_count = 0
        self._streak_seconds = 0.0

        self._pose_filter.reset()

    def get_status(self) -> dict:
        stats = self.stats
        return {
            'state':                  self._state.value,
            'total_seconds':          round(stats.total_seconds, 3),
            'attentive_seconds':      round(stats.attentive_seconds, 3),
            'distracted_seconds':     round(stats.distracted_seconds, 3),
            'current_streak_seconds': round(stats.current_streak_seconds, 3),
            'distraction_count':      stats.distraction_count,
            'attention_percentage':   round(stats.attention_rate * 100, 1),
        }

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _apply_drowsy_hold(self, raw: AttentionState, timestamp: float) -> AttentionState:
        if raw != AttentionState.DROWSY:
            self._eye_closed_since = None
            return raw
        if self._eye_closed_since is None:
            self._eye_closed_since = timestamp
        if timestamp - self._eye_closed_since < self.config.drowsy_hold_seconds:
            return AttentionState.ATTENTIVE
        return AttentionState.DROWSY

    def _debounce(self, candidate: AttentionState, timestamp: float):
        if candidate == self._state:
            self._pending = None
            return
        if self._pending != candidate:
            self._pending = candidate
            self._pending_since = timestamp
        if timestamp - self._pending_since >= self.config.debounce_seconds:
            self._commit(candidate, timestamp)

    def _commit(self, new_state: AttentionState, timestamp: float):
        previous = self._state
        self._state = new_state
        self._pending = None

        if previous == AttentionState.ATTENTIVE:
            self._distraction_count += 1
        # Every commit either enters or leaves attentive (or moves between
        # non-attentive states, where the streak is already zero)
        self._streak_seconds = 0.0

        logger.debug(f"Attention {previous.value} -> {new_state.value} at t={timestamp:.3f}")

    def _account(self, timestamp: float):
        if self._last_timestamp is not None:
            dt = timestamp - self._last_timestamp
            if 0 < dt < self.config.max_frame_gap_seconds:
                self._total_seconds += dt
                if self._state == AttentionState.ATTENTIVE:
                    self._attentive_seconds += dt
                    self._streak_seconds += dt
        self._last_timestamp = timestamp

    def __repr__(self):
        return f"<AttentionClassifier(state={self._state.value}, distractions={self._distraction_count})>"
