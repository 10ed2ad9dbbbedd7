"""Test suite for the two-stage hand pipeline."""

import pytest
import torch

from conftest import FakeDetectorModel, FakeSkeletonModel, make_config
from handpose.detect.detector import HandDetector
from handpose.detect.pipeline import HandPipeline, _crop_region
from handpose.result import BoxCorners


class TestHandDetector:
    """Test cases for HandDetector."""

    def test_no_model(self, input_tensor, config):
        """Test that a detector without a model finds nothing."""
        detector = HandDetector(None)

        assert not detector.available
        assert detector.detect(input_tensor, config.hand) == []

    def test_scales_boxes_to_pixels(self, input_tensor, config):
        """Test conversion of normalized rows into pixel corners."""
        detector = HandDetector(FakeDetectorModel([[0.1, 0.2, 0.3, 0.6, 0.9]]))

        boxes = detector.detect(input_tensor, config.hand)

        assert len(boxes) == 1
        assert boxes[0].box.top_left == pytest.approx((20.0, 20.0))
        assert boxes[0].box.bottom_right == pytest.approx((60.0, 60.0))
        assert boxes[0].score == pytest.approx(0.9)

    def test_filters_low_confidence(self, input_tensor):
        """Test the minimum confidence filter."""
        config = make_config(min_confidence=0.5)
        detector = HandDetector(FakeDetectorModel([
            [0.1, 0.1, 0.2, 0.2, 0.4],
            [0.5, 0.5, 0.7, 0.7, 0.6],
        ]))

        boxes = detector.detect(input_tensor, config.hand)

        assert len(boxes) == 1
        assert boxes[0].score == pytest.approx(0.6)

    def test_suppresses_overlapping_boxes(self, input_tensor, config):
        """Test that overlapping proposals collapse to the best one."""
        detector = HandDetector(FakeDetectorModel([
            [0.10, 0.10, 0.40, 0.40, 0.7],
            [0.11, 0.11, 0.41, 0.41, 0.9],
            [0.60, 0.60, 0.80, 0.80, 0.8],
        ]))

        boxes = detector.detect(input_tensor, config.hand)

        assert [round(b.score, 2) for b in boxes] == [0.9, 0.8]

    def test_limits_detections(self, input_tensor):
        """Test that at most max_detected boxes are returned."""
        config = make_config(max_detected=1)
        detector = HandDetector(FakeDetectorModel([
            [0.1, 0.1, 0.2, 0.2, 0.5],
            [0.6, 0.6, 0.8, 0.8, 0.8],
        ]))

        boxes = detector.detect(input_tensor, config.hand)

        assert len(boxes) == 1
        assert boxes[0].score == pytest.approx(0.8)

    def test_accepts_batched_tuple_output(self, input_tensor, config):
        """Test (1, N, 5) outputs wrapped in a tuple."""
        rows = torch.tensor([[[0.1, 0.2, 0.3, 0.6, 0.9]]])
        detector = HandDetector(lambda image: (rows,))

        assert len(detector.detect(input_tensor, config.hand)) == 1

    def test_resizes_input(self, input_tensor, config):
        """Test that the model sees a square input of the configured size."""
        shapes = []

        def model(image):
            shapes.append(tuple(image.shape))
            return torch.zeros(0, 5)

        assert HandDetector(model).detect(input_tensor, config.hand) == []
        assert shapes == [(1, 3, 32, 32)]


class TestCropRegion:
    """Test cases for the landmark crop."""

    def test_enlarged_square_crop(self):
        assert _crop_region(BoxCorners((20, 20), (60, 60)), 1.65, 200, 100) == (7, 7, 73, 73)

    def test_clipped_to_image(self):
        assert _crop_region(BoxCorners((0, 0), (40, 40)), 2.0, 200, 100) == (0, 0, 60, 60)

    def test_empty_crop(self):
        assert _crop_region(BoxCorners((250, 10), (260, 20)), 1.0, 200, 100) is None


class TestHandPipeline:
    """Test cases for HandPipeline."""

    def setup_method(self):
        """Setup test fixtures."""
        # box (25, 25)-(75, 75) on the 200x100 input
        self.detector_model = FakeDetectorModel([[0.125, 0.25, 0.375, 0.75, 0.9]])
        self.skeleton_model = FakeSkeletonModel(point=(16.0, 16.0, 2.0), score=0.8)

    def test_detection_only_without_skeleton(self, input_tensor, config):
        """Test that detections carry no landmarks without a skeleton model."""
        pipeline = HandPipeline(HandDetector(self.detector_model), None)

        detections = pipeline.estimate_hands(input_tensor, config)

        assert len(detections) == 1
        assert detections[0].landmarks is None
        assert detections[0].confidence == pytest.approx(0.9)

    def test_landmarks_mapped_to_image(self, input_tensor):
        """Test landmark regression and mapping back to image pixels."""
        config = make_config(crop_scale=2.0)
        pipeline = HandPipeline(HandDetector(self.detector_model), self.skeleton_model)

        detections = pipeline.estimate_hands(input_tensor, config)

        assert len(detections) == 1
        detection = detections[0]
        assert detection.confidence == pytest.approx(0.8)
        assert len(detection.landmarks) == 21
        # crop (0, 0)-(100, 100) sampled at 32px: 16 * 100 / 32 = 50
        assert detection.landmarks[0] == pytest.approx((50.0, 50.0, 6.25))
        assert self.skeleton_model.input_shapes == [(1, 3, 32, 32)]

    def test_low_landmark_confidence_is_dropped(self, input_tensor):
        """Test that hands below min_confidence after regression are dropped."""
        config = make_config(min_confidence=0.5)
        pipeline = HandPipeline(HandDetector(self.detector_model), FakeSkeletonModel(score=0.3))

        assert pipeline.estimate_hands(input_tensor, config) == []

    def test_landmarks_flag_disables_regression(self, input_tensor):
        """Test that landmarks=False skips the skeleton model."""
        config = make_config(landmarks=False)
        pipeline = HandPipeline(HandDetector(self.detector_model), self.skeleton_model)

        detections = pipeline.estimate_hands(input_tensor, config)

        assert detections[0].landmarks is None
        assert self.skeleton_model.input_shapes == []

    def test_hand_disabled(self, input_tensor):
        config = make_config(enabled=False)
        pipeline = HandPipeline(HandDetector(self.detector_model), self.skeleton_model)

        assert pipeline.estimate_hands(input_tensor, config) == []
        assert self.detector_model.calls == 0

    def test_no_detector_model(self, input_tensor, config):
        """Test degraded operation without a detector."""
        pipeline = HandPipeline(HandDetector(None), self.skeleton_model)

        assert pipeline.estimate_hands(input_tensor, config) == []


class DeviceRecordingModel:
    """Wraps a fake model and records the device of every input it sees."""

    def __init__(self, model):
        self.model = model
        self.devices = []

    def __call__(self, image):
        self.devices.append(image.device.type)
        return self.model(torch.zeros(image.shape))


class TestDevicePlacement:
    """Test cases for moving model inputs onto the model device."""

    def test_detector_input_on_model_device(self, input_tensor, config):
        model = DeviceRecordingModel(FakeDetectorModel([[0.1, 0.2, 0.3, 0.6, 0.9]]))
        detector = HandDetector(model, device="meta")

        boxes = detector.detect(input_tensor, config.hand)

        assert model.devices == ["meta"]
        assert len(boxes) == 1

    def test_skeleton_input_on_model_device(self, input_tensor):
        config = make_config(crop_scale=2.0)
        detector_model = DeviceRecordingModel(FakeDetectorModel([[0.125, 0.25, 0.375, 0.75, 0.9]]))
        skeleton_model = DeviceRecordingModel(FakeSkeletonModel(point=(16.0, 16.0, 2.0)))
        pipeline = HandPipeline(
            HandDetector(detector_model, device="meta"),
            skeleton_model,
            device="meta",
        )

        detections = pipeline.estimate_hands(input_tensor, config)

        assert detector_model.devices == ["meta"]
        assert skeleton_model.devices == ["meta"]
        assert detections[0].landmarks[0] == pytest.approx((50.0, 50.0, 6.25))


class TestSkeletonOutput:
    """Test cases for skeleton output validation."""

    def test_short_landmark_output(self, input_tensor, config):
        def skeleton_model(patch):
            return torch.zeros(1, 60), torch.tensor([[0.9]])

        pipeline = HandPipeline(
            HandDetector(FakeDetectorModel([[0.125, 0.25, 0.375, 0.75, 0.9]])),
            skeleton_model,
        )

        with pytest.raises(ValueError, match="Expected 63 landmark values"):
            pipeline.estimate_hands(input_tensor, config)
