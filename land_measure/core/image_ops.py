"""Image operations for boundary analysis: decode, resize, annotate, export."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from ..config import (
    DETECTION_COLOR,
    DETECTION_LINE_WIDTH,
    BOUNDARY_LINE_WIDTH,
    DEFAULT_JPEG_QUALITY,
    MAX_IMAGE_DIMENSION,
)
from ..domain.entities.detection import Detection
from ..domain.entities.image import Image
from ..domain.value_objects.geometry import Point
from ..exceptions import FileReadError

logger = logging.getLogger(__name__)

# Type aliases
ImageArray = npt.NDArray[np.uint8]  # HxWx3, RGB
ImageSource = bytes | str | Path

DATA_URI_PREFIX = "data:"


def _describe(source: ImageSource) -> str:
    if isinstance(source, bytes):
        return f"<{len(source)} bytes>"
    text = str(source)
    if text.startswith(DATA_URI_PREFIX):
        return text[:32] + "..."
    return text


def _decode_data_uri(uri: str) -> bytes:
    """Extract the payload of a base64 data URI."""
    header, sep, payload = uri.partition(",")
    if not sep or ";base64" not in header:
        raise FileReadError("Unsupported data URI, expected base64 payload", source=_describe(uri))
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise FileReadError(f"Invalid base64 payload: {e}", source=_describe(uri)) from e


def decode_image(source: ImageSource) -> Image:
    """Decode an image source into an RGB raster.
    
    Args:
        source: File path, raw encoded bytes, or a ``data:`` URI
    
    Returns:
        Decoded image
    
    Raises:
        FileReadError: If the source cannot be read or is not an image
    """
    label = _describe(source)
    
    if isinstance(source, bytes):
        raw = source
    elif str(source).startswith(DATA_URI_PREFIX):
        raw = _decode_data_uri(str(source))
    else:
        path = Path(source)
        if not path.is_file():
            raise FileReadError("Image file not found", source=label)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise FileReadError(f"Could not read file: {e}", source=label) from e
    
    if not raw:
        raise FileReadError("Image is empty", source=label)
    
    try:
        with PILImage.open(io.BytesIO(raw)) as img:
            img.load()
            rgb = img.convert("RGB")
    except PILImage.DecompressionBombError as e:
        raise FileReadError(f"Image too large: {e}", source=label) from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise FileReadError(f"Unsupported or corrupt image: {e}", source=label) from e
    
    logger.debug(f"Decoded {label}: {rgb.width}x{rgb.height}")
    return Image(_data=rgb, source=label)


def fit_within(image: Image, max_dimension: int = MAX_IMAGE_DIMENSION) -> tuple[Image, float]:
    """Downscale so the longer side is at most max_dimension.
    
    Aspect ratio is preserved. Images already within bounds are returned
    as-is.
    
    Returns:
        Tuple of (resized_image, scale_factor)
    """
    longest = max(image.width, image.height)
    if longest <= max_dimension:
        return image, 1.0
    
    factor = max_dimension / longest
    new_size = (
        max(1, round(image.width * factor)),
        max(1, round(image.height * factor)),
    )
    resized = image.data.resize(new_size, PILImage.Resampling.LANCZOS)
    logger.debug(f"Resized image from {image.size} to {new_size}")
    return Image(_data=resized, source=image.source), factor


def label_origin(detection: Detection) -> tuple[int, int]:
    """Text anchor for a detection caption: above the box, or at y=10 near the top edge."""
    box = detection.bounding_box
    y = box.y - 5 if box.y > 10 else 10
    return int(round(box.x)), int(round(y))


def draw_detections(
    img: ImageArray,
    detections: Sequence[Detection],
    color: tuple[int, int, int] = DETECTION_COLOR,
    thickness: int = DETECTION_LINE_WIDTH
) -> ImageArray:
    """Draw each detection's box and caption on a copy of img."""
    canvas = np.ascontiguousarray(img).copy()
    for det in detections:
        box = det.bounding_box
        top_left = (int(round(box.min_x)), int(round(box.min_y)))
        bottom_right = (int(round(box.max_x)), int(round(box.max_y)))
        cv2.rectangle(canvas, top_left, bottom_right, color, thickness)
        cv2.putText(
            canvas,
            det.caption,
            label_origin(det),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            color,
            1,
            cv2.LINE_AA
        )
    return canvas


def draw_polygon(
    img: ImageArray,
    points: Sequence[Point],
    color: tuple[int, int, int],
    thickness: int = BOUNDARY_LINE_WIDTH
) -> ImageArray:
    """Draw a closed polygon outline on a copy of img."""
    canvas = np.ascontiguousarray(img).copy()
    if len(points) < 2:
        return canvas
    pts = np.array(
        [[int(round(p.x)), int(round(p.y))] for p in points],
        dtype=np.int32
    ).reshape(-1, 1, 2)
    cv2.polylines(canvas, [pts], isClosed=True, color=color, thickness=thickness)
    return canvas


def draw_frame(
    img: ImageArray,
    color: tuple[int, int, int],
    thickness: int = BOUNDARY_LINE_WIDTH
) -> ImageArray:
    """Outline the full image rectangle on a copy of img."""
    canvas = np.ascontiguousarray(img).copy()
    h, w = canvas.shape[:2]
    cv2.rectangle(canvas, (0, 0), (w - 1, h - 1), color, thickness)
    return canvas


def encode_data_uri(img: ImageArray, quality: int = DEFAULT_JPEG_QUALITY) -> str:
    """Encode an RGB array as a JPEG data URI."""
    buffer = io.BytesIO()
    PILImage.fromarray(img).save(buffer, format="JPEG", quality=quality)
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{payload}"


def data_uri_to_bytes(uri: str) -> bytes:
    """Inverse of encode_data_uri, for saving rendered assets to disk."""
    return _decode_data_uri(uri)
