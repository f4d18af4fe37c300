"""Pixel-to-meter scale estimation from objects of known size.

The estimate assumes a fence is 2 m wide and a building 10 m wide, and
reads the width of the first matching bounding box. It ignores
perspective, camera distance and the actual object size, so results are
rough at best. It is kept deliberately simple; callers must be ready for
``None`` and supply their own fallback scale.
"""

from __future__ import annotations

from typing import Sequence

from ...config import SCALE_HEURISTICS
from ..entities.detection import Detection


def estimate_scale(
    detections: Sequence[Detection],
    heuristics: Sequence[tuple[str, float]] = SCALE_HEURISTICS
) -> float | None:
    """Estimate meters per pixel from the first object with a known size.
    
    Heuristics are tried in order; for the first class that appears in
    ``detections`` the scale is ``real_width / (box_width / 100)``.
    
    Args:
        detections: Filtered detections
        heuristics: (class name, assumed width in meters) pairs, in priority order
    
    Returns:
        Estimated scale, or None when no heuristic applies
    """
    for class_name, real_width in heuristics:
        match = next((d for d in detections if d.label == class_name), None)
        if match is None:
            continue
        width = match.bounding_box.width
        if width <= 0:
            return None
        return real_width / (width / 100)
    return None
