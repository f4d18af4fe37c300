"""Detection filtering - keep objects that indicate land boundaries."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ...config import LAND_OBJECT_CLASSES, DEFAULT_CONFIDENCE_THRESHOLD
from ..entities.detection import Detection

logger = logging.getLogger(__name__)


def filter_land_detections(
    detections: Sequence[Detection],
    allowed_classes: Iterable[str] = LAND_OBJECT_CLASSES,
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
) -> list[Detection]:
    """Keep land-relevant detections above the confidence threshold.
    
    A detection passes when its lower-cased class name is in
    ``allowed_classes`` and its score is strictly greater than
    ``threshold``. Input order is preserved.
    
    An empty result is not an error: the pipeline then measures the
    whole image instead.
    
    Args:
        detections: Raw detector output
        allowed_classes: Class names to keep (case-insensitive)
        threshold: Minimum score, exclusive
    
    Returns:
        Filtered detections
    """
    allowed = {name.lower() for name in allowed_classes}
    
    kept = [
        d for d in detections
        if d.label in allowed and d.confidence_score > threshold
    ]
    
    logger.debug(
        f"Kept {len(kept)} of {len(detections)} detections "
        f"(threshold={threshold})"
    )
    return kept
