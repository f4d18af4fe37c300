"""Unit tests for configuration."""

import pytest
from land_measure.config import LAND_OBJECT_CLASSES, SCALE_HEURISTICS
from land_measure.domain.value_objects.config import (
    AnalysisConfig, Backend, DetectorType
)


class TestAnalysisConfig:
    """Tests for AnalysisConfig."""
    
    def test_default_values(self):
        config = AnalysisConfig()
        assert config.confidence_threshold == 0.5
        assert config.max_dimension == 1024
        assert config.fallback_scale == 0.01
        assert config.land_classes == LAND_OBJECT_CLASSES
        assert config.detector == DetectorType.SSDLITE.value
        assert config.device == Backend.AUTO
    
    def test_custom_values(self):
        config = AnalysisConfig(
            confidence_threshold=0.7,
            max_dimension=512,
            device="cpu"
        )
        assert config.confidence_threshold == 0.7
        assert config.max_dimension == 512
        assert config.device == Backend.CPU
    
    def test_land_classes_normalized(self):
        config = AnalysisConfig(land_classes=("Fence", " BUILDING "))
        assert config.land_classes == ("fence", "building")
    
    def test_empty_land_classes_rejected(self):
        with pytest.raises(ValueError):
            AnalysisConfig(land_classes=())
    
    @pytest.mark.parametrize("field,value", [
        ("confidence_threshold", 1.5),
        ("confidence_threshold", -0.1),
        ("max_dimension", 0),
        ("jpeg_quality", 101),
        ("fallback_scale", 0.0),
        ("device", "tpu"),
    ])
    def test_validation(self, field, value):
        with pytest.raises(ValueError):
            AnalysisConfig(**{field: value})
    
    def test_frozen(self):
        config = AnalysisConfig()
        with pytest.raises(Exception):
            config.confidence_threshold = 0.9


class TestConstants:
    """Tests for module-level defaults."""
    
    def test_default_land_classes(self):
        assert set(LAND_OBJECT_CLASSES) == {
            "building", "fence", "house", "bridge", "wall",
            "hedge", "shed", "garage", "barn", "landmark",
        }
    
    def test_scale_heuristics_order(self):
        assert SCALE_HEURISTICS == (("fence", 2.0), ("building", 10.0))
    
    def test_backend_values(self):
        assert {b.value for b in Backend} == {"auto", "cuda", "mps", "cpu"}
