"""Unit tests for land detection filtering."""

from land_measure.domain.entities.detection import Detection
from land_measure.domain.services.detection_filter import filter_land_detections


def det(name, score):
    return Detection.from_xywh(name, score, 0, 0, 10, 10)


class TestFilterLandDetections:
    """Tests for filter_land_detections."""
    
    def test_keeps_allowed_classes_above_threshold(self):
        detections = [det("fence", 0.9), det("person", 0.99), det("building", 0.6)]
        kept = filter_land_detections(detections)
        assert [d.class_name for d in kept] == ["fence", "building"]
    
    def test_threshold_is_exclusive(self):
        assert filter_land_detections([det("fence", 0.5)]) == []
        assert len(filter_land_detections([det("fence", 0.5001)])) == 1
    
    def test_case_insensitive(self):
        kept = filter_land_detections([det("Fence", 0.8), det("HOUSE", 0.7)])
        assert len(kept) == 2
    
    def test_order_preserved(self):
        detections = [det("wall", 0.6), det("barn", 0.95), det("shed", 0.7)]
        assert filter_land_detections(detections) == detections
    
    def test_empty_input(self):
        assert filter_land_detections([]) == []
    
    def test_custom_classes_and_threshold(self):
        detections = [det("car", 0.3), det("fence", 0.9)]
        kept = filter_land_detections(detections, allowed_classes=["CAR"], threshold=0.2)
        assert [d.class_name for d in kept] == ["car"]
    
    def test_input_not_modified(self):
        detections = [det("person", 0.9), det("fence", 0.9)]
        filter_land_detections(detections)
        assert len(detections) == 2
    
    def test_mixed_classes_and_scores(self):
        detections = [det("dog", 0.9), det("fence", 0.6), det("building", 0.4), det("cat", 0.9)]
        assert [d.class_name for d in filter_land_detections(detections)] == ["fence"]
