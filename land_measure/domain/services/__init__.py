"""Domain services - pure business logic, no external dependencies."""

from .hull import convex_hull, polygon_area, cross
from .detection_filter import filter_land_detections
from .scale_estimation import estimate_scale

__all__ = [
    'convex_hull',
    'polygon_area',
    'cross',
    'filter_land_detections',
    'estimate_scale',
]
