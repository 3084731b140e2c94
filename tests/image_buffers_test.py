import sys
import os
import numpy as np
import pytest
from PIL import Image
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from diff_engine.diff_analyzer import analyze
from diff_engine.errors import InvalidBuffer
from visual.image_buffers import from_array, from_cv2_image, from_pil_image


def test_pil_rgb_image_gets_opaque_alpha():
    buffer = from_pil_image(Image.new('RGB', (4, 3), (10, 20, 30)))
    assert buffer.size == (4, 3)
    assert tuple(buffer.as_array()[2, 3]) == (10, 20, 30, 255)


def test_pil_rgba_image_is_kept():
    buffer = from_pil_image(Image.new('RGBA', (2, 2), (1, 2, 3, 4)))
    assert tuple(buffer.as_array()[0, 0]) == (1, 2, 3, 4)


def test_cv2_bgr_channels_are_reordered():
    bgr = np.zeros((5, 6, 3), dtype=np.uint8)
    bgr[..., 0] = 200
    buffer = from_cv2_image(bgr)
    assert buffer.size == (6, 5)
    assert tuple(buffer.as_array()[0, 0]) == (0, 0, 200, 255)


def test_cv2_grayscale():
    buffer = from_cv2_image(np.full((3, 3), 77, dtype=np.uint8))
    assert tuple(buffer.as_array()[1, 1]) == (77, 77, 77, 255)


def test_cv2_rejects_float_images():
    with pytest.raises(InvalidBuffer):
        from_cv2_image(np.zeros((3, 3, 3), dtype=np.float32))


def test_from_array_requires_rgba():
    with pytest.raises(InvalidBuffer):
        from_array(np.zeros((3, 3, 3), dtype=np.uint8))
    assert from_array(np.zeros((3, 5, 4), dtype=np.uint8)).size == (5, 3)


def test_pil_and_cv2_sources_compare_equal():
    pil = Image.new('RGB', (20, 20), (0, 128, 255))
    bgr = np.zeros((20, 20, 3), dtype=np.uint8)
    bgr[...] = (255, 128, 0)
    result = analyze(from_pil_image(pil), from_cv2_image(bgr))
    assert result.match_percentage == 100.0


def test_pixel_buffer_is_read_only():
    buffer = from_array(np.zeros((2, 2, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        buffer.as_array()[0, 0, 0] = 1
