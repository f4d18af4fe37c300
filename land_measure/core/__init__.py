"""Core image processing functionality."""

from . import image_ops
from .image_ops import (
    ImageArray,
    ImageSource,
    decode_image,
    fit_within,
    draw_detections,
    draw_polygon,
    draw_frame,
    encode_data_uri,
    data_uri_to_bytes,
)

__all__ = [
    'image_ops',
    'ImageArray',
    'ImageSource',
    'decode_image',
    'fit_within',
    'draw_detections',
    'draw_polygon',
    'draw_frame',
    'encode_data_uri',
    'data_uri_to_bytes',
]
