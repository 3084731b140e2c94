"""
Image Buffer Adapters
Converts already-decoded Pillow images and OpenCV/numpy arrays into
PixelBuffers for the diff engine. File decoding stays with the caller.
"""

import cv2
import numpy as np
from PIL import Image

from diff_engine.errors import InvalidBuffer
from diff_engine.models import PixelBuffer

_CV2_CONVERSIONS = {
    1: cv2.COLOR_GRAY2RGBA,
    3: cv2.COLOR_BGR2RGBA,
    4: cv2.COLOR_BGRA2RGBA,
}


def from_pil_image(image: Image.Image) -> PixelBuffer:
    """Convert a Pillow image of any mode to an RGBA PixelBuffer."""
    rgba = image if image.mode == 'RGBA' else image.convert('RGBA')
    width, height = rgba.size
    return PixelBuffer(width=width, height=height, data=rgba.tobytes())


def from_cv2_image(image: np.ndarray) -> PixelBuffer:
    """Convert an OpenCV image (gray, BGR or BGRA, uint8) to an RGBA PixelBuffer."""
    if image.dtype != np.uint8:
        raise InvalidBuffer(f"OpenCV image must be uint8, got {image.dtype}")
    if image.ndim not in (2, 3):
        raise InvalidBuffer(f"Unsupported OpenCV image shape {image.shape}")
    channels = 1 if image.ndim == 2 else image.shape[2]
    conversion = _CV2_CONVERSIONS.get(channels)
    if conversion is None:
        raise InvalidBuffer(f"Unsupported OpenCV image shape {image.shape}")
    if image.ndim == 3 and channels == 1:
        image = image[..., 0]
    rgba = cv2.cvtColor(np.ascontiguousarray(image), conversion)
    height, width = rgba.shape[:2]
    return PixelBuffer(width=width, height=height, data=rgba)


def from_array(array: np.ndarray) -> PixelBuffer:
    """Wrap an (height, width, 4) RGBA array."""
    if array.ndim != 3 or array.shape[2] != 4:
        raise InvalidBuffer(f"Expected an (height, width, 4) RGBA array, got shape {array.shape}")
    height, width = array.shape[:2]
    return PixelBuffer(width=width, height=height, data=array)
