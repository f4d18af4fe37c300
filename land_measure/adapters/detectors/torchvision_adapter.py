"""Torchvision detector adapter - implements ObjectDetector port."""

from __future__ import annotations

import gc
import logging

from ...application.ports.object_detector import ObjectDetector
from ...config import Backend, DetectorType
from ...domain.entities.detection import Detection
from ...domain.entities.image import Image
from ...exceptions import ModelLoadError

logger = logging.getLogger(__name__)


class TorchvisionDetector(ObjectDetector):
    """Adapter for COCO-trained torchvision detection models.
    
    ``ssdlite`` (SSDLite320 MobileNetV3) is small enough for CPU use;
    ``faster_rcnn`` (Faster R-CNN MobileNetV3 FPN) is slower but more
    accurate.
    """
    
    def __init__(
        self,
        detector_type: DetectorType = DetectorType.SSDLITE,
        device: Backend | str = Backend.AUTO,
        min_score: float = 0.2,
        max_detections: int = 20
    ):
        self._detector_type = DetectorType(detector_type)
        self._requested_device = Backend(device)
        self._device: str | None = None
        self._min_score = min_score
        self._max_detections = max_detections
        self._model = None
        self._categories: list[str] = []
        self._transform = None
    
    @property
    def name(self) -> str:
        return f"torchvision-{self._detector_type.value}"
    
    @property
    def is_available(self) -> bool:
        """Check if torch and torchvision are installed."""
        try:
            import torch
            import torchvision
            return True
        except ImportError:
            return False
    
    @property
    def categories(self) -> list[str]:
        return list(self._categories)
    
    @staticmethod
    def _resolve_device(device: Backend) -> str:
        """Resolve device option to an available torch device."""
        import torch
        
        if device == Backend.AUTO:
            if torch.cuda.is_available():
                return "cuda"
            if torch.backends.mps.is_available():
                return "mps"
            return "cpu"
        
        if device == Backend.CUDA and not torch.cuda.is_available():
            logger.warning("CUDA requested but not available, falling back to CPU")
            return "cpu"
        if device == Backend.MPS and not torch.backends.mps.is_available():
            logger.warning("MPS requested but not available, falling back to CPU")
            return "cpu"
        return device.value
    
    def load(self) -> None:
        """Load detection weights."""
        if self._model is not None:
            return
        
        try:
            from torchvision.models import detection as detection_models
        except ImportError as e:
            raise ModelLoadError(
                "Detection requires torch and torchvision. "
                "Install with: pip install torch torchvision",
                model_id=self.name
            ) from e
        
        if self._detector_type == DetectorType.FASTER_RCNN:
            weights = detection_models.FasterRCNN_MobileNet_V3_Large_FPN_Weights.DEFAULT
            builder = detection_models.fasterrcnn_mobilenet_v3_large_fpn
            options = {"box_score_thresh": self._min_score}
        else:
            weights = detection_models.SSDLite320_MobileNet_V3_Large_Weights.DEFAULT
            builder = detection_models.ssdlite320_mobilenet_v3_large
            options = {"score_thresh": self._min_score}
        
        self._device = self._resolve_device(self._requested_device)
        logger.info(f"Loading {self.name} on {self._device}...")
        
        try:
            model = builder(weights=weights, **options)
        except Exception as e:
            raise ModelLoadError(f"Model failed to load: {e}", model_id=self.name) from e
        
        self._model = model.to(self._device).eval()
        self._categories = list(weights.meta.get("categories", []))
        self._transform = weights.transforms()
        logger.info(f"{self.name} loaded ({len(self._categories)} categories)")
    
    def unload(self) -> None:
        """Unload model."""
        if self._model is not None:
            self._model = None
            self._transform = None
            import torch
            if torch.cuda.is_available():
                torch.cuda.empty_cache()
            gc.collect()
            logger.info(f"{self.name} unloaded")
    
    def detect(self, image: Image) -> list[Detection]:
        """Run one inference pass, boxes in image pixel coordinates."""
        if self._model is None:
            self.load()
        
        import torch
        from torchvision.transforms.functional import pil_to_tensor
        
        tensor = self._transform(pil_to_tensor(image.data.convert("RGB"))).to(self._device)
        
        with torch.inference_mode():
            outputs = self._model([tensor])[0]
        
        detections: list[Detection] = []
        for score, label_idx, box in zip(
            outputs["scores"].cpu().tolist(),
            outputs["labels"].cpu().tolist(),
            outputs["boxes"].cpu().tolist(),
        ):
            left, top, right, bottom = box
            class_name = (
                self._categories[label_idx]
                if 0 <= label_idx < len(self._categories)
                else f"class_{label_idx}"
            )
            detections.append(Detection.from_xywh(
                class_name,
                score,
                left,
                top,
                right - left,
                bottom - top
            ))
        
        detections.sort(key=lambda d: d.confidence_score, reverse=True)
        return detections[:self._max_detections]
