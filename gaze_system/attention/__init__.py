"""
Attention Module for the Gaze System
Debounced attention state (attentive / looking_away / drowsy / absent)
with session accounting

Usage:
    classifier = AttentionClassifier(AttentionConfig.for_desktop())
    result = classifier.update_observation(observation)
    stats = classifier.stats
    classifier.reset()
"""

from .config import AttentionConfig
from .classifier import (
    AttentionState,
    AttentionResult,
    AttentionClassifier,
    SessionStats,
    classify_frame,
)

__all__ = [
    'AttentionConfig',
    'AttentionState',
    'AttentionResult',
    'AttentionClassifier',
    'SessionStats',
    'classify_frame',
]
