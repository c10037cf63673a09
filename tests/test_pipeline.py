"""
End-to-end pipeline tests: calibrate on a synthetic 3x3 grid, then track.

Synthetic subject: iris offset is linear in the on-screen target, head held
frontal, eyes open.
"""

import json

import pytest

from gaze_system import (
    AttentionState,
    CalibrationSample,
    GazePipeline,
    TrackingObservation,
    apply_transform,
    compute_transform,
)
from gaze_system.calibration import CALIBRATION_GRID, grid_targets
from gaze_system.types import Point2D

W, H = 1920, 1080


@pytest.fixture
def landmarks_for(make_landmarks, iris_shift):
    def build(sx, sy):
        return make_landmarks(iris_shift((sx / W - 0.5) * 0.04, (sy / H - 0.5) * 0.02))
    return build


def grid_points():
    return [Point2D(float(x), float(y)) for x, y in grid_targets(CALIBRATION_GRID, W, H)]


@pytest.fixture
def calibrated_pipeline(landmarks_for):
    pipeline = GazePipeline()
    for i, target in enumerate(grid_points()):
        obs = TrackingObservation(timestamp=i * 0.5, landmarks=landmarks_for(target.x, target.y))
        assert pipeline.add_calibration_sample(obs, target)
    assert pipeline.calibrate()
    return pipeline


def test_linear_features_on_3x3_grid():
    samples = []
    for gy, sy in ((-1.0, 0.0), (0.0, H / 2), (1.0, H)):
        for gx, sx in ((-1.0, 0.0), (0.0, W / 2), (1.0, W)):
            samples.append(CalibrationSample([gx, gy, gx, gy, 0.0, 0.3], Point2D(sx, sy)))
    t = compute_transform(samples)
    assert t is not None

    center = apply_transform(t, [0.0, 0.0, 0.0, 0.0, 0.0, 0.3])
    assert center.x == pytest.approx(W / 2, abs=1.0)
    assert center.y == pytest.approx(H / 2, abs=1.0)

    # ridge shrinkage pulls the extremes inward a little
    corner = apply_transform(t, [1.0, 1.0, 1.0, 1.0, 0.0, 0.3])
    assert abs(corner.x - W) < 100
    assert abs(corner.y - H) < 100


class TestGazePipeline:

    def test_uncalibrated_frame_has_no_gaze(self, make_landmarks):
        pipeline = GazePipeline()
        r = pipeline.process(TrackingObservation(timestamp=0.0, landmarks=make_landmarks()))
        assert r.face_present
        assert r.gaze is None
        assert r.feature_vector.size == 6
        assert pipeline.get_current_gaze() is None

    def test_calibrated_centre(self, calibrated_pipeline, landmarks_for):
        r = calibrated_pipeline.process(TrackingObservation(timestamp=10.0, landmarks=landmarks_for(W / 2, H / 2)))
        assert r.raw_gaze.x == pytest.approx(W / 2, abs=1.0)
        assert r.raw_gaze.y == pytest.approx(H / 2, abs=1.0)
        # first point after calibration is not smoothed
        assert r.gaze == r.raw_gaze
        assert r.attention.raw_state == AttentionState.ATTENTIVE
        assert calibrated_pipeline.get_current_gaze() == r.gaze

    def test_gaze_moves_toward_target(self, calibrated_pipeline, landmarks_for):
        p = calibrated_pipeline.process(TrackingObservation(timestamp=10.0, landmarks=landmarks_for(W * 0.25, H / 2)))
        assert p.raw_gaze.x < W / 2

    def test_no_face(self, calibrated_pipeline):
        r = calibrated_pipeline.process(TrackingObservation(timestamp=10.0))
        assert not r.face_present
        assert r.gaze is None
        assert r.feature_vector is None
        assert r.attention.raw_state == AttentionState.ABSENT

    def test_no_face_sample_rejected(self):
        pipeline = GazePipeline()
        assert not pipeline.add_calibration_sample(TrackingObservation(timestamp=0.0), Point2D(0, 0))
        assert pipeline.calibration.sample_count == 0

    def test_calibrate_with_too_few_samples(self, make_landmarks):
        pipeline = GazePipeline()
        pipeline.add_calibration_sample(TrackingObservation(timestamp=0.0, landmarks=make_landmarks()), Point2D(0, 0))
        assert not pipeline.calibrate()
        assert not pipeline.calibration.is_calibrated

    def test_refine(self, calibrated_pipeline, landmarks_for):
        obs = TrackingObservation(timestamp=20.0, landmarks=landmarks_for(W * 0.7, H * 0.3))
        assert calibrated_pipeline.refine(obs, Point2D(W * 0.7, H * 0.3))
        assert calibrated_pipeline.calibration.sample_count == 10

    def test_load_saved_transform(self, calibrated_pipeline, landmarks_for):
        record = json.loads(json.dumps(calibrated_pipeline.calibration.transform.to_dict()))
        fresh = GazePipeline()
        fresh.load_transform(record)
        obs = TrackingObservation(timestamp=0.0, landmarks=landmarks_for(W / 2, H / 2))
        assert fresh.process(obs).raw_gaze.x == pytest.approx(W / 2, abs=1.0)

    def test_reset_keeps_calibration(self, calibrated_pipeline, landmarks_for):
        calibrated_pipeline.process(TrackingObservation(timestamp=10.0, landmarks=landmarks_for(W / 2, H / 2)))
        calibrated_pipeline.reset()
        assert calibrated_pipeline.calibration.is_calibrated
        assert calibrated_pipeline.get_current_gaze() is None
        assert calibrated_pipeline.frame_count == 0
        assert calibrated_pipeline.attention.state == AttentionState.ABSENT

    def test_status(self, calibrated_pipeline, landmarks_for):
        calibrated_pipeline.process(TrackingObservation(timestamp=10.0, landmarks=landmarks_for(W / 2, H / 2)))
        status = calibrated_pipeline.get_status()
        for key in ('schema', 'feature_count', 'is_calibrated', 'calibration_samples',
                    'frames_processed', 'current_gaze', 'attention'):
            assert key in status
        assert status['is_calibrated']
        assert status['calibration_samples'] == 9
        assert status['frames_processed'] == 1
        assert status['attention']['state'] == 'absent'
