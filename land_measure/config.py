"""Configuration and constants for the Land Measure project."""

from enum import Enum


# Object classes that indicate a man-made parcel boundary or structure
LAND_OBJECT_CLASSES: tuple[str, ...] = (
    "building",
    "fence",
    "house",
    "bridge",
    "wall",
    "hedge",
    "shed",
    "garage",
    "barn",
    "landmark",
)

DEFAULT_CONFIDENCE_THRESHOLD = 0.5

# Assumed real-world widths (meters), checked in order
SCALE_HEURISTICS: tuple[tuple[str, float], ...] = (
    ("fence", 2.0),
    ("building", 10.0),
)

# 100px = 1m when nothing in the image gives a usable scale
FALLBACK_METERS_PER_PIXEL = 0.01

SQUARE_METERS_PER_HECTARE = 10_000.0


class Backend(str, Enum):
    """Compute backend options."""
    AUTO = "auto"
    CUDA = "cuda"
    MPS = "mps"
    CPU = "cpu"


class DetectorType(str, Enum):
    """Built-in object detectors."""
    SSDLITE = "ssdlite"
    FASTER_RCNN = "faster_rcnn"


# Image processing constants
MAX_IMAGE_DIMENSION = 1024
DEFAULT_JPEG_QUALITY = 92

# Overlay colours (RGB)
DETECTION_COLOR = (255, 0, 0)
HULL_COLOR = (0, 255, 0)
FALLBACK_BOUNDARY_COLOR = (0, 0, 255)
DETECTION_LINE_WIDTH = 2
BOUNDARY_LINE_WIDTH = 3

# Geodesy
ELLIPSOID = "WGS84"


# File handling
SUPPORTED_IMAGE_EXTENSIONS: tuple[str, ...] = (
    '.jpg', '.jpeg', '.jpe',
    '.png',
    '.bmp', '.dib',
    '.tiff', '.tif',
    '.webp',
)


# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
