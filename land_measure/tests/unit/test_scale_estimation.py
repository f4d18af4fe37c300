"""Unit tests for pixel-to-meter scale estimation."""

import pytest
from land_measure.domain.entities.detection import Detection
from land_measure.domain.services.scale_estimation import estimate_scale


def det(name, width):
    return Detection.from_xywh(name, 0.9, 5, 5, width, 20)


class TestEstimateScale:
    """Tests for estimate_scale."""
    
    def test_fence(self):
        # 2 m / (200 px / 100)
        assert estimate_scale([det("fence", 200)]) == pytest.approx(1.0)
    
    def test_building(self):
        # 10 m / (500 px / 100)
        assert estimate_scale([det("building", 500)]) == pytest.approx(2.0)
    
    def test_fence_takes_priority_over_building(self):
        detections = [det("building", 500), det("fence", 100)]
        assert estimate_scale(detections) == pytest.approx(2.0)
    
    def test_first_matching_fence_used(self):
        detections = [det("fence", 400), det("fence", 100)]
        assert estimate_scale(detections) == pytest.approx(0.5)
    
    def test_case_insensitive(self):
        assert estimate_scale([det("Fence", 200)]) == pytest.approx(1.0)
    
    def test_no_reference_object(self):
        assert estimate_scale([det("house", 200), det("wall", 50)]) is None
    
    def test_empty(self):
        assert estimate_scale([]) is None
    
    def test_zero_width(self):
        assert estimate_scale([det("fence", 0)]) is None
    
    def test_custom_heuristics(self):
        assert estimate_scale([det("car", 450)], heuristics=[("car", 4.5)]) == pytest.approx(1.0)
