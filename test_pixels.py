"""
Tests for pixel extraction and stride subsampling.

Usage:
    pytest test_pixels.py
"""

import numpy as np
import pytest
from PIL import Image

from knitpattern.processors.pixels import (
    extract_pixels,
    extract_pixels_from_image,
    sample_pixels,
)


def test_extract_drops_pixels_at_or_below_alpha_threshold():
    data = bytes([
        10, 20, 30, 255,   # (0, 0) kept
        40, 50, 60, 128,   # (1, 0) dropped: alpha == 128
        70, 80, 90, 129,   # (0, 1) kept
        1, 2, 3, 0,        # (1, 1) dropped
    ])

    pixels = extract_pixels(data, 2, 2)

    assert pixels.tolist() == [
        [10, 20, 30, 0, 0],
        [70, 80, 90, 0, 1],
    ]


def test_extract_is_row_major():
    rgba = np.zeros((2, 3, 4), dtype=np.uint8)
    rgba[:, :, 3] = 255
    rgba[:, :, 0] = np.arange(6).reshape(2, 3)

    pixels = extract_pixels(rgba, 3, 2)

    assert pixels[:, 0].tolist() == [0, 1, 2, 3, 4, 5]
    assert pixels[:, 3].tolist() == [0, 1, 2, 0, 1, 2]
    assert pixels[:, 4].tolist() == [0, 0, 0, 1, 1, 1]


def test_extract_accepts_bytearray_and_memoryview():
    data = bytearray([5, 6, 7, 200])
    assert extract_pixels(data, 1, 1).tolist() == [[5, 6, 7, 0, 0]]
    assert extract_pixels(memoryview(data), 1, 1).tolist() == [[5, 6, 7, 0, 0]]


def test_extract_rejects_mismatched_buffer():
    with pytest.raises(ValueError):
        extract_pixels(bytes(15), 2, 2)
    with pytest.raises(ValueError):
        extract_pixels(bytes(20), 2, 2)


def test_extract_empty_raster():
    pixels = extract_pixels(b"", 0, 0)
    assert pixels.shape == (0, 5)


def test_extract_from_image_converts_to_rgba():
    im = Image.new("RGB", (3, 2), (1, 2, 3))

    pixels = extract_pixels_from_image(im)

    assert len(pixels) == 6
    assert (pixels[:, :3] == [1, 2, 3]).all()
    assert pixels[-1, 3:].tolist() == [2, 1]


def test_sample_returns_input_when_small_enough():
    pixels = np.zeros((10000, 5), dtype=np.int64)
    assert sample_pixels(pixels) is pixels


def test_sample_strides_large_input():
    pixels = np.zeros((25000, 5), dtype=np.int64)
    pixels[:, 0] = np.arange(25000)

    sample = sample_pixels(pixels, max_pixels=10000)

    # step = ceil(25000 / 10000) = 3
    assert len(sample) == 8334
    assert sample[:3, 0].tolist() == [0, 3, 6]
    assert len(sample) <= 10000


def test_sample_preserves_order():
    pixels = np.zeros((101, 5), dtype=np.int64)
    pixels[:, 0] = np.arange(101)

    sample = sample_pixels(pixels, max_pixels=10)

    # step = 11
    assert sample[:, 0].tolist() == list(range(0, 101, 11))
