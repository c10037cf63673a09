"""
Feature Schema
Declares the layout and length of the calibration feature vector, so one
parameterised engine serves every feature variant.

Layout (in order, each block optional):
    [+4]     left gaze x, left gaze y, right gaze x, right gaze y
    [+P]     left eye patch  (P = eye_patch_size)
    [+P]     right eye patch
    [+2]     head yaw proxy, head pitch proxy
    [+2]     face centre x, y

The appearance vector (no iris offsets) is therefore
patches[0:120] + pose[120:122] + face[122:124].
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..types import EyePatches, GazeFeatures, Point2D

DEFAULT_FACE_CENTER = Point2D(0.5, 0.5)


@dataclass(frozen=True)
class FeatureSchema:
    include_gaze: bool = True
    include_head_pose: bool = True
    include_face_center: bool = False
    eye_patch_size: int = 0

    def __post_init__(self):
        if self.eye_patch_size < 0:
            raise ValueError(f"eye_patch_size must be >= 0, got {self.eye_patch_size}")
        if self.feature_count == 0:
            raise ValueError("Feature schema selects no features")

    @property
    def feature_count(self) -> int:
        n = 4 if self.include_gaze else 0
        n += 2 * self.eye_patch_size
        if self.include_head_pose:
            n += 2
        if self.include_face_center:
            n += 2
        return n

    @property
    def name(self) -> str:
        parts = []
        if self.include_gaze:
            parts.append('gaze')
        if self.eye_patch_size:
            parts.append(f'patch{self.eye_patch_size}')
        if self.include_head_pose:
            parts.append('pose')
        if self.include_face_center:
            parts.append('face')
        return '+'.join(parts)

    def build(
            self,
            features: GazeFeatures,
            face_center: Optional[Point2D] = None,
            eye_patches: Optional[EyePatches] = None,
    ) -> np.ndarray:
        """
        Assemble the feature vector for this schema

        A missing face centre defaults to the image centre; missing eye
        patches are zero-filled, so the vector length never varies.

        Raises:
            ValueError: if supplied eye patches do not match eye_patch_size
        """
        blocks = []
        if self.include_gaze:
            blocks.append([
                features.left_gaze.x, features.left_gaze.y,
                features.right_gaze.x, features.right_gaze.y,
            ])
        if self.eye_patch_size:
            if eye_patches is None:
                blocks.append(np.zeros(2 * self.eye_patch_size))
            else:
                left = np.asarray(eye_patches.left, dtype=float).ravel()
                right = np.asarray(eye_patches.right, dtype=float).ravel()
                if left.size != self.eye_patch_size or right.size != self.eye_patch_size:
                    raise ValueError(
                        f"Eye patches must have {self.eye_patch_size} samples each, "
                        f"got {left.size} and {right.size}"
                    )
                blocks.append(left)
                blocks.append(right)
        if self.include_head_pose:
            blocks.append([features.head_yaw, features.head_pitch])
        if self.include_face_center:
            fc = face_center or DEFAULT_FACE_CENTER
            blocks.append([fc.x, fc.y])
        return np.concatenate([np.asarray(b, dtype=float) for b in blocks])

    @classmethod
    def gaze_only(cls) -> 'FeatureSchema':
        """Four iris offsets; head held fixed"""
        return cls(include_head_pose=False)

    @classmethod
    def geometric(cls) -> 'FeatureSchema':
        """Iris offsets + geometric head-pose proxies (default)"""
        return cls()

    @classmethod
    def with_face_center(cls) -> 'FeatureSchema':
        return cls(include_face_center=True)

    @classmethod
    def appearance(cls, eye_patch_size: int = 60) -> 'FeatureSchema':
        """Two 10x6 eye patches + head-pose proxies + face centre (124-dim)"""
        return cls(include_gaze=False, include_face_center=True, eye_patch_size=eye_patch_size)
