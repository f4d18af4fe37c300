"""Tests for the boundary analysis pipeline."""

import dataclasses
import io
import struct
import threading
import zlib
from unittest.mock import Mock

import pytest
from PIL import Image as PILImage

from ..application.services.boundary_pipeline import (
    BoundaryAnalyzer,
    BoundaryPipeline,
    CancellationToken,
    PipelineState,
    PipelineStatus,
)
from ..domain.entities.detection import Detection
from ..domain.services.hull import polygon_area
from ..domain.value_objects.config import AnalysisConfig
from ..domain.value_objects.geometry import Point
from ..exceptions import (
    DetectionError,
    FileReadError,
    ModelLoadError,
    PipelineCancelledError,
    PipelineError,
)


def png_bytes(width=400, height=300):
    buffer = io.BytesIO()
    PILImage.new("RGB", (width, height), (90, 140, 60)).save(buffer, format="PNG")
    return buffer.getvalue()


def header_only_png(width, height):
    """PNG with an IHDR chunk and no pixel data."""
    def chunk(kind, data):
        return (
            struct.pack(">I", len(data)) + kind + data
            + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)
        )
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def make_detector(detections=None):
    detector = Mock()
    detector.name = "fake"
    detector.detect.return_value = list(detections or [])
    return detector


FENCE = Detection.from_xywh("fence", 0.9, 50, 50, 200, 20)
PERSON = Detection.from_xywh("person", 0.99, 0, 0, 30, 80)
WEAK_FENCE = Detection.from_xywh("fence", 0.4, 300, 200, 50, 50)


class TestFallbackBoundary:
    """No land objects: the whole image is measured at the fallback scale."""
    
    def test_empty_detections(self):
        result = BoundaryPipeline(make_detector()).analyze(png_bytes(400, 300))
        
        assert result.detections == ()
        assert result.used_fallback_boundary
        assert result.hull_points == (
            Point(0, 0), Point(400, 0), Point(400, 300), Point(0, 300), Point(0, 0)
        )
        assert result.area_pixels == 120000
        assert result.pixel_to_meter_scale == 0.01
        assert result.area_square_meters == pytest.approx(12.0)
        assert result.area_hectares == pytest.approx(0.0012)
    
    def test_only_irrelevant_detections(self):
        detector = make_detector([PERSON, WEAK_FENCE])
        result = BoundaryPipeline(detector).analyze(png_bytes(400, 300))
        assert result.used_fallback_boundary
        assert result.area_pixels == 120000


class TestDetectedBoundary:
    """Hull, area and scale from filtered detections."""
    
    def test_fence_sets_scale(self):
        detector = make_detector([PERSON, FENCE, WEAK_FENCE])
        result = BoundaryPipeline(detector).analyze(png_bytes())
        
        assert result.detections == (FENCE,)
        assert result.pixel_to_meter_scale == pytest.approx(1.0)
        assert result.area_pixels == 4000
        assert result.area_square_meters == pytest.approx(4000)
        assert result.area_hectares == pytest.approx(0.4)
    
    def test_hull_spans_all_detections(self):
        building = Detection.from_xywh("building", 0.8, 100, 150, 100, 100)
        result = BoundaryPipeline(make_detector([FENCE, building])).analyze(png_bytes())
        
        assert set(result.hull_points) == {
            Point(50, 50), Point(250, 50), Point(250, 70),
            Point(200, 250), Point(100, 250), Point(50, 70),
        }
        assert result.area_pixels == polygon_area(list(result.hull_points))
        # fence wins over building
        assert result.pixel_to_meter_scale == pytest.approx(1.0)
    
    def test_no_reference_object_uses_fallback_scale(self):
        house = Detection.from_xywh("house", 0.7, 10, 10, 100, 50)
        result = BoundaryPipeline(make_detector([house])).analyze(png_bytes())
        
        assert not result.used_fallback_boundary
        assert result.area_pixels == 5000
        assert result.pixel_to_meter_scale == 0.01
        assert result.area_square_meters == pytest.approx(0.5)
    
    def test_custom_threshold(self):
        config = AnalysisConfig(confidence_threshold=0.3)
        result = BoundaryPipeline(make_detector([WEAK_FENCE]), config).analyze(png_bytes())
        assert result.detections == (WEAK_FENCE,)
        assert result.pixel_to_meter_scale == pytest.approx(4.0)
    
    def test_visualization_assets(self):
        result = BoundaryPipeline(make_detector([FENCE])).analyze(png_bytes())
        for uri in (
            result.visualization.original,
            result.visualization.detections,
            result.visualization.boundary,
        ):
            assert uri.startswith("data:image/jpeg;base64,")
    
    def test_large_image_clamped_before_detection(self):
        detector = make_detector()
        result = BoundaryPipeline(detector).analyze(png_bytes(2048, 1024))
        
        assert result.image_size == (1024, 512)
        seen = detector.detect.call_args[0][0]
        assert seen.size == (1024, 512)
        assert result.area_pixels == 1024 * 512
    
    def test_result_is_frozen(self):
        result = BoundaryPipeline(make_detector()).analyze(png_bytes())
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.area_pixels = 1.0
    
    def test_to_dict(self):
        data = BoundaryPipeline(make_detector([FENCE])).analyze(png_bytes()).to_dict()
        assert data["area_square_meters"] == pytest.approx(4000)
        assert data["detections"][0]["class"] == "fence"
        assert data["detections"][0]["bbox"] == [50, 50, 200, 20]
        assert "visualization" not in data


class TestPipelineFailures:
    """Failures end in FAILED without a partial result."""
    
    def test_detector_error(self):
        detector = make_detector()
        detector.detect.side_effect = RuntimeError("inference crashed")
        pipeline = BoundaryPipeline(detector)
        
        with pytest.raises(DetectionError) as exc_info:
            pipeline.analyze(png_bytes())
        assert exc_info.value.detector == "fake"
        
        status = pipeline.run(png_bytes())
        assert status.state is PipelineState.FAILED
        assert status.result is None
        assert isinstance(status.error, DetectionError)
        assert "inference crashed" in status.error_message
    
    def test_undecodable_image(self):
        detector = make_detector()
        status = BoundaryPipeline(detector).run(b"definitely not an image")
        
        assert status.state is PipelineState.FAILED
        assert isinstance(status.error, FileReadError)
        detector.detect.assert_not_called()
    
    def test_oversized_image(self):
        detector = make_detector()
        status = BoundaryPipeline(detector).run(header_only_png(20000, 10000))
        
        assert status.state is PipelineState.FAILED
        assert isinstance(status.error, FileReadError)
        assert status.result is None
        detector.detect.assert_not_called()
    
    def test_unexpected_step_error(self):
        pipeline = BoundaryPipeline(make_detector([object()]))
        
        with pytest.raises(PipelineError) as exc_info:
            pipeline.analyze(png_bytes())
        assert exc_info.value.stage == "filter"
        
        status = pipeline.run(png_bytes())
        assert status.state is PipelineState.FAILED
        assert status.result is None
        assert isinstance(status.error, PipelineError)
        assert status.error.error_code == "PIPELINE_ERROR"
    
    def test_unexpected_error_outside_steps(self):
        detector = make_detector()
        pipeline = BoundaryPipeline(detector)
        pipeline.analyze = Mock(side_effect=MemoryError("out of memory"))
        events = []
        pipeline.subscribe_to_events(events.append)
        
        status = pipeline.run(png_bytes(), run_id=4)
        
        assert status.state is PipelineState.FAILED
        assert isinstance(status.error, PipelineError)
        assert "out of memory" in status.error_message
        assert status.run_id == 4
        assert [e.stage for e in events] == ["failed"]
        
        detector.detect.assert_not_called()
    
    def test_success_status(self):
        status = BoundaryPipeline(make_detector([FENCE])).run(png_bytes(), run_id=7)
        assert status.state is PipelineState.DONE
        assert status.run_id == 7
        assert status.error is None
        assert status.result.area_pixels == 4000
        assert status.processing_time_ms >= 0


class TestCancellation:
    """Cancellation token stops a run between steps."""
    
    def test_cancelled_before_start(self):
        detector = make_detector()
        token = CancellationToken()
        token.cancel()
        
        status = BoundaryPipeline(detector).run(png_bytes(), token=token)
        
        assert status.state is PipelineState.CANCELLED
        assert status.result is None
        assert status.error.stage == "decode"
        detector.detect.assert_not_called()
    
    def test_cancelled_during_detection(self):
        token = CancellationToken()
        detector = make_detector()
        
        def detect(image):
            token.cancel()
            return [FENCE]
        
        detector.detect.side_effect = detect
        
        with pytest.raises(PipelineCancelledError) as exc_info:
            BoundaryPipeline(detector).analyze(png_bytes(), token=token)
        assert exc_info.value.stage == "filter"
    
    def test_token(self):
        token = CancellationToken()
        assert not token.is_cancelled
        token.raise_if_cancelled()
        token.cancel()
        assert token.is_cancelled
        with pytest.raises(PipelineCancelledError):
            token.raise_if_cancelled("detect")


class TestPipelineEvents:
    """Published stage transitions."""
    
    def test_stage_order(self):
        events = []
        pipeline = BoundaryPipeline(make_detector([FENCE]))
        pipeline.subscribe_to_events(events.append)
        
        pipeline.run(png_bytes(), run_id=3)
        
        assert [e.stage for e in events] == [
            "decoding", "detecting", "filtering", "computing_boundary", "rendering", "done",
        ]
        assert all(e.run_id == 3 for e in events)
        assert events[-1].progress == 1.0
    
    def test_failed_event(self):
        events = []
        pipeline = BoundaryPipeline(make_detector())
        pipeline.subscribe_to_events(events.append)
        
        pipeline.run(b"broken")
        
        assert [e.stage for e in events] == ["decoding", "failed"]
    
    def test_terminal_states(self):
        assert PipelineState.DONE.is_terminal
        assert PipelineState.FAILED.is_terminal
        assert PipelineState.CANCELLED.is_terminal
        assert not PipelineState.DETECTING.is_terminal
        assert PipelineStatus.idle().state is PipelineState.IDLE


class TestBoundaryAnalyzer:
    """Background analyzer owning the detector."""
    
    def test_loads_and_unloads_detector(self):
        detector = make_detector()
        with BoundaryAnalyzer(detector) as analyzer:
            detector.load.assert_called_once()
            status = analyzer.analyze(png_bytes())
        detector.unload.assert_called_once()
        
        assert status.state is PipelineState.DONE
        assert analyzer.current_result is status.result
        assert analyzer.latest_status.state is PipelineState.DONE
    
    def test_load_failure(self):
        detector = make_detector()
        detector.load.side_effect = RuntimeError("weights missing")
        with pytest.raises(ModelLoadError):
            with BoundaryAnalyzer(detector):
                pass
    
    def test_submit_requires_context(self):
        with pytest.raises(RuntimeError):
            BoundaryAnalyzer(make_detector()).submit(png_bytes())
    
    def test_failure_keeps_previous_result(self):
        detector = make_detector([FENCE])
        with BoundaryAnalyzer(detector) as analyzer:
            first = analyzer.analyze(png_bytes())
            second = analyzer.analyze(b"not an image")
        
        assert second.state is PipelineState.FAILED
        assert analyzer.latest_status.state is PipelineState.FAILED
        assert analyzer.current_result is first.result
    
    def test_newer_submission_supersedes(self):
        started = threading.Event()
        release = threading.Event()
        calls = []
        
        def detect(image):
            calls.append(image.size)
            if len(calls) == 1:
                started.set()
                release.wait(5)
                return []
            return [FENCE]
        
        detector = make_detector()
        detector.detect.side_effect = detect
        
        with BoundaryAnalyzer(detector) as analyzer:
            first = analyzer.submit(png_bytes(400, 300))
            assert started.wait(5)
            second = analyzer.submit(png_bytes(500, 400))
            release.set()
            
            first_status = first.result(5)
            second_status = second.result(5)
        
        assert first_status.state is PipelineState.CANCELLED
        assert first_status.result is None
        assert second_status.state is PipelineState.DONE
        assert second_status.run_id > first_status.run_id
        assert analyzer.current_result is second_status.result
        assert analyzer.current_result.image_size == (500, 400)


class TestEndToEndArea:
    """Scale squared converts pixel area to square meters."""
    
    def test_fence_500_square_pixels(self):
        fence = Detection.from_xywh("fence", 0.8, 100, 100, 200, 2.5)
        result = BoundaryPipeline(make_detector([fence])).analyze(png_bytes())
        
        assert result.pixel_to_meter_scale == pytest.approx(1.0)
        assert result.area_pixels == pytest.approx(500)
        assert result.area_square_meters == pytest.approx(500)
        assert result.area_hectares == pytest.approx(0.05)
