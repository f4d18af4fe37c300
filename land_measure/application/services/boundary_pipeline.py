"""Boundary pipeline - estimates parcel area from a photo."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum

from ...config import HULL_COLOR, FALLBACK_BOUNDARY_COLOR
from ...core import image_ops
from ...domain.entities.detection import Detection
from ...domain.entities.image import Image
from ...domain.entities.results import BoundaryResult, VisualizationAssets
from ...domain.services.detection_filter import filter_land_detections
from ...domain.services.hull import convex_hull, polygon_area
from ...domain.services.scale_estimation import estimate_scale
from ...domain.value_objects.config import AnalysisConfig
from ...domain.value_objects.geometry import Point
from ...exceptions import (
    DetectionError,
    LandMeasureError,
    ModelLoadError,
    PipelineCancelledError,
    PipelineError,
)
from ..ports.event_publisher import EventPublisher, PipelineEvent, SimpleEventPublisher
from ..ports.object_detector import ObjectDetector

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    """Stages of a single analysis run."""
    IDLE = "idle"
    DECODING = "decoding"
    DETECTING = "detecting"
    FILTERING = "filtering"
    COMPUTING_BOUNDARY = "computing_boundary"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"
    
    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED, PipelineState.CANCELLED)


@dataclass(frozen=True, slots=True)
class PipelineStatus:
    """Tagged state of a run: a result only when DONE, an error only when FAILED."""
    state: PipelineState
    run_id: int = 0
    result: BoundaryResult | None = None
    error: LandMeasureError | None = None
    processing_time_ms: float = 0.0
    
    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal
    
    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error else None
    
    @classmethod
    def idle(cls) -> PipelineStatus:
        return cls(state=PipelineState.IDLE)
    
    @classmethod
    def done(cls, result: BoundaryResult, run_id: int = 0, processing_time_ms: float = 0.0) -> PipelineStatus:
        return cls(
            state=PipelineState.DONE,
            run_id=run_id,
            result=result,
            processing_time_ms=processing_time_ms
        )
    
    @classmethod
    def failed(cls, error: LandMeasureError, run_id: int = 0) -> PipelineStatus:
        return cls(state=PipelineState.FAILED, run_id=run_id, error=error)
    
    @classmethod
    def cancelled(cls, error: PipelineCancelledError, run_id: int = 0) -> PipelineStatus:
        return cls(state=PipelineState.CANCELLED, run_id=run_id, error=error)


class CancellationToken:
    """Cooperative cancellation flag shared between a run and its owner."""
    
    def __init__(self):
        self._event = threading.Event()
    
    def cancel(self) -> None:
        self._event.set()
    
    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()
    
    def raise_if_cancelled(self, stage: str | None = None) -> None:
        if self._event.is_set():
            raise PipelineCancelledError(stage=stage)


@dataclass
class PipelineContext:
    """Context passed through pipeline steps."""
    source: image_ops.ImageSource
    config: AnalysisConfig
    image: Image | None = None
    raw_detections: list[Detection] = field(default_factory=list)
    detections: list[Detection] = field(default_factory=list)
    hull: list[Point] = field(default_factory=list)
    area_pixels: float = 0.0
    scale: float = 0.0
    visualization: VisualizationAssets | None = None


class PipelineStep:
    """Base class for pipeline steps."""
    
    state: PipelineState = PipelineState.IDLE
    
    def __init__(self, name: str):
        self.name = name
    
    def execute(self, ctx: PipelineContext) -> PipelineContext:
        """Execute this step and return updated context."""
        raise NotImplementedError


class DecodeStep(PipelineStep):
    """Step 1: Decode the source and bound its size."""
    
    state = PipelineState.DECODING
    
    def __init__(self):
        super().__init__("decode")
    
    def execute(self, ctx: PipelineContext) -> PipelineContext:
        image = image_ops.decode_image(ctx.source)
        ctx.image, factor = image_ops.fit_within(image, ctx.config.max_dimension)
        logger.info(f"Decoded image {ctx.image.width}x{ctx.image.height} (scaled by {factor:.3f})")
        return ctx


class DetectStep(PipelineStep):
    """Step 2: Single detector pass, no retries."""
    
    state = PipelineState.DETECTING
    
    def __init__(self, detector: ObjectDetector):
        super().__init__("detect")
        self._detector = detector
    
    def execute(self, ctx: PipelineContext) -> PipelineContext:
        try:
            ctx.raw_detections = list(self._detector.detect(ctx.image))
        except LandMeasureError:
            raise
        except Exception as e:
            raise DetectionError(f"Detection failed: {e}", detector=self._detector.name) from e
        
        logger.info(f"Detector returned {len(ctx.raw_detections)} objects")
        return ctx


class FilterStep(PipelineStep):
    """Step 3: Keep land-relevant detections."""
    
    state = PipelineState.FILTERING
    
    def __init__(self):
        super().__init__("filter")
    
    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.detections = filter_land_detections(
            ctx.raw_detections,
            allowed_classes=ctx.config.land_classes,
            threshold=ctx.config.confidence_threshold
        )
        logger.info(f"{len(ctx.detections)} land objects above threshold")
        return ctx


class ComputeBoundaryStep(PipelineStep):
    """Step 4: Hull, area and scale."""
    
    state = PipelineState.COMPUTING_BOUNDARY
    
    def __init__(self):
        super().__init__("compute_boundary")
    
    def execute(self, ctx: PipelineContext) -> PipelineContext:
        if not ctx.detections:
            w, h = ctx.image.size
            ctx.hull = [Point(0, 0), Point(w, 0), Point(w, h), Point(0, h), Point(0, 0)]
            ctx.area_pixels = polygon_area(ctx.hull)
            ctx.scale = ctx.config.fallback_scale
            logger.info("No land objects found, using whole image as boundary")
            return ctx
        
        corners = [corner for det in ctx.detections for corner in det.corners]
        ctx.hull = convex_hull(corners)
        ctx.area_pixels = polygon_area(ctx.hull)
        
        estimated = estimate_scale(ctx.detections)
        if estimated is None:
            logger.info(f"No reference object for scale, using {ctx.config.fallback_scale} m/px")
            ctx.scale = ctx.config.fallback_scale
        else:
            ctx.scale = estimated
        
        logger.info(
            f"Hull has {len(ctx.hull)} vertices, "
            f"{ctx.area_pixels:.1f} px², scale {ctx.scale:.4f} m/px"
        )
        return ctx


class RenderStep(PipelineStep):
    """Step 5: Export original, annotated and boundary images."""
    
    state = PipelineState.RENDERING
    
    def __init__(self):
        super().__init__("render")
    
    def execute(self, ctx: PipelineContext) -> PipelineContext:
        quality = ctx.config.jpeg_quality
        original = ctx.image.to_array()
        annotated = image_ops.draw_detections(original, ctx.detections)
        
        if ctx.detections:
            boundary = image_ops.draw_polygon(annotated, ctx.hull, HULL_COLOR)
        else:
            boundary = image_ops.draw_frame(annotated, FALLBACK_BOUNDARY_COLOR)
        
        ctx.visualization = VisualizationAssets(
            original=image_ops.encode_data_uri(original, quality),
            detections=image_ops.encode_data_uri(annotated, quality),
            boundary=image_ops.encode_data_uri(boundary, quality)
        )
        return ctx


class BoundaryPipeline:
    """Runs one image through decode, detect, filter, boundary and render.
    
    ``analyze`` raises on failure; ``run`` reports the outcome as a
    ``PipelineStatus`` instead. Neither ever returns a partial result.
    """
    
    def __init__(
        self,
        detector: ObjectDetector,
        config: AnalysisConfig | None = None,
        events: EventPublisher | None = None
    ):
        self._detector = detector
        self._config = config or AnalysisConfig()
        self._events = events or SimpleEventPublisher()
        self._pipeline = self._build_pipeline()
    
    @property
    def config(self) -> AnalysisConfig:
        return self._config
    
    def _build_pipeline(self) -> list[PipelineStep]:
        """Build processing pipeline."""
        return [
            DecodeStep(),
            DetectStep(self._detector),
            FilterStep(),
            ComputeBoundaryStep(),
            RenderStep(),
        ]
    
    def _publish(self, state: PipelineState, message: str, progress: float | None, run_id: int) -> None:
        self._events.publish(PipelineEvent(
            stage=state.value,
            message=message,
            progress=progress,
            run_id=run_id
        ))
    
    def analyze(
        self,
        source: image_ops.ImageSource,
        token: CancellationToken | None = None,
        run_id: int = 0
    ) -> BoundaryResult:
        """Analyze an image and return its boundary measurement.
        
        Args:
            source: File path, encoded bytes, or data URI
            token: Optional cancellation token checked between steps
            run_id: Identifier attached to published events
        
        Returns:
            Boundary result
        
        Raises:
            FileReadError: If the image cannot be decoded
            DetectionError: If the detector fails
            PipelineCancelledError: If the token was cancelled
            PipelineError: If a step fails unexpectedly
        """
        ctx = PipelineContext(source=source, config=self._config)
        total = len(self._pipeline)
        
        for i, step in enumerate(self._pipeline):
            if token is not None:
                token.raise_if_cancelled(step.name)
            self._publish(step.state, f"Executing {step.name}", i / total, run_id)
            try:
                ctx = step.execute(ctx)
            except LandMeasureError:
                raise
            except Exception as e:
                raise PipelineError(f"Step {step.name} failed: {e}", stage=step.name) from e
        
        if token is not None:
            token.raise_if_cancelled("assemble")
        
        return BoundaryResult(
            hull_points=tuple(ctx.hull),
            area_pixels=ctx.area_pixels,
            pixel_to_meter_scale=ctx.scale,
            detections=tuple(ctx.detections),
            visualization=ctx.visualization,
            image_size=ctx.image.size
        )
    
    def run(
        self,
        source: image_ops.ImageSource,
        token: CancellationToken | None = None,
        run_id: int = 0
    ) -> PipelineStatus:
        """Analyze an image, reporting failures as a status instead of raising."""
        start_time = time.time()
        
        try:
            result = self.analyze(source, token=token, run_id=run_id)
        except PipelineCancelledError as e:
            logger.info(f"Run {run_id} cancelled before {e.stage}")
            self._publish(PipelineState.CANCELLED, str(e), None, run_id)
            return PipelineStatus.cancelled(e, run_id=run_id)
        except LandMeasureError as e:
            logger.error(f"Run {run_id} failed: {e}")
            self._publish(PipelineState.FAILED, str(e), None, run_id)
            return PipelineStatus.failed(e, run_id=run_id)
        except Exception as e:
            logger.exception(f"Run {run_id} failed")
            error = PipelineError(f"Analysis failed: {e}")
            self._publish(PipelineState.FAILED, str(error), None, run_id)
            return PipelineStatus.failed(error, run_id=run_id)
        
        elapsed = (time.time() - start_time) * 1000
        self._publish(PipelineState.DONE, "Analysis complete", 1.0, run_id)
        return PipelineStatus.done(result, run_id=run_id, processing_time_ms=elapsed)
    
    def subscribe_to_events(self, callback) -> None:
        """Subscribe to pipeline events."""
        self._events.subscribe(callback)


class BoundaryAnalyzer:
    """Owns a detector and runs one analysis at a time in the background.
    
    Submitting a new image cancels the previous run; a superseded run ends
    as CANCELLED and never replaces ``current_result``.
    
    Use as a context manager so the detector is loaded and released
    deterministically.
    """
    
    def __init__(
        self,
        detector: ObjectDetector,
        config: AnalysisConfig | None = None,
        events: EventPublisher | None = None
    ):
        self._detector = detector
        self._events = events or SimpleEventPublisher()
        self._pipeline = BoundaryPipeline(detector, config, self._events)
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._run_id = 0
        self._token: CancellationToken | None = None
        self._latest_status = PipelineStatus.idle()
        self._current_result: BoundaryResult | None = None
        self._events.subscribe(self._on_event)
    
    @property
    def latest_status(self) -> PipelineStatus:
        """Status of the most recent submission."""
        with self._lock:
            return self._latest_status
    
    @property
    def current_result(self) -> BoundaryResult | None:
        """Result of the most recent successful, non-superseded run."""
        with self._lock:
            return self._current_result
    
    def _on_event(self, event: PipelineEvent) -> None:
        with self._lock:
            if event.run_id != self._run_id:
                return
            state = PipelineState(event.stage)
            if not state.is_terminal:
                self._latest_status = PipelineStatus(state=state, run_id=event.run_id)
    
    def submit(self, source: image_ops.ImageSource) -> Future:
        """Queue an analysis, cancelling any earlier one.
        
        Returns:
            Future resolving to the run's PipelineStatus
        """
        if self._executor is None:
            raise RuntimeError("BoundaryAnalyzer must be entered before submitting work")
        
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._run_id += 1
            run_id = self._run_id
            token = CancellationToken()
            self._token = token
            self._latest_status = PipelineStatus(state=PipelineState.IDLE, run_id=run_id)
        
        logger.debug(f"Submitted run {run_id}")
        return self._executor.submit(self._run, source, token, run_id)
    
    def analyze(self, source: image_ops.ImageSource) -> PipelineStatus:
        """Submit and wait for the result."""
        return self.submit(source).result()
    
    def _run(self, source: image_ops.ImageSource, token: CancellationToken, run_id: int) -> PipelineStatus:
        status = self._pipeline.run(source, token=token, run_id=run_id)
        with self._lock:
            if run_id == self._run_id:
                self._latest_status = status
                if status.state is PipelineState.DONE:
                    self._current_result = status.result
        return status
    
    def subscribe_to_events(self, callback) -> None:
        """Subscribe to pipeline events."""
        self._events.subscribe(callback)
    
    def __enter__(self) -> BoundaryAnalyzer:
        """Load the detector and start the worker."""
        try:
            self._detector.load()
        except LandMeasureError:
            raise
        except Exception as e:
            raise ModelLoadError(f"Model failed to load: {e}", model_id=self._detector.name) from e
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="boundary")
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Cancel pending work and release the detector."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._detector.unload()
        return False  # Don't suppress exceptions
