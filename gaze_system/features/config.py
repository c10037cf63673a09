"""
Feature Extraction Configuration
Landmark semantics for the 478-point MediaPipe face mesh (refine_landmarks=True)
"""

from dataclasses import dataclass


@dataclass
class LandmarkConfig:
    """Landmark indices and geometric floors used by feature extraction"""

    # Detector contract
    min_landmarks: int = 478

    # Iris centres (only present with refined landmarks)
    left_iris_idx: int = 468
    right_iris_idx: int = 473

    # Eye corners
    left_eye_inner: int = 133
    left_eye_outer: int = 33
    right_eye_inner: int = 362
    right_eye_outer: int = 263

    # Eyelids
    left_eye_top: int = 159
    left_eye_bottom: int = 145
    right_eye_top: int = 386
    right_eye_bottom: int = 374

    # Face geometry for head-pose proxies
    nose_tip: int = 1
    left_cheek: int = 234
    right_cheek: int = 454
    forehead: int = 10
    chin: int = 152

    # Degenerate-geometry floor for spans in normalised image units
    min_span: float = 0.001

    # Nose-below-eye-line ratio of a frontal face (geometric pitch zero)
    neutral_pitch_ratio: float = 0.2

    # Eye patch sampling
    eye_patch_width: int = 10
    eye_patch_height: int = 6
    eye_patch_margin_x: float = 0.2   # fraction of eye box width
    eye_patch_margin_y: float = 0.3   # fraction of eye box height

    def __post_init__(self):
        if self.min_span <= 0:
            raise ValueError(f"min_span must be positive, got {self.min_span}")
        if self.eye_patch_width <= 0 or self.eye_patch_height <= 0:
            raise ValueError("Eye patch dimensions must be positive")
        if self.max_index >= self.min_landmarks:
            raise ValueError(f"Landmark index {self.max_index} outside a {self.min_landmarks}-point mesh")

    @property
    def eye_patch_size(self) -> int:
        """Number of samples in one flattened eye patch."""
        return self.eye_patch_width * self.eye_patch_height

    @property
    def max_index(self) -> int:
        return max(
            self.left_iris_idx, self.right_iris_idx,
            self.left_eye_inner, self.left_eye_outer,
            self.right_eye_inner, self.right_eye_outer,
            self.left_eye_top, self.left_eye_bottom,
            self.right_eye_top, self.right_eye_bottom,
            self.nose_tip, self.left_cheek, self.right_cheek,
            self.forehead, self.chin,
        )

    @classmethod
    def for_face_mesh(cls) -> 'LandmarkConfig':
        """Configuration for MediaPipe FaceMesh / FaceLandmarker with iris refinement"""
        return cls()


DEFAULT_LANDMARKS = LandmarkConfig()
