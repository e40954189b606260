import math

import numpy as np
from PIL import Image

from knitpattern.config import ALPHA_THRESHOLD, MAX_SAMPLE_PIXELS

# Column layout of a pixel array
R, G, B, X, Y = range(5)


def extract_pixels(data, width: int, height: int, alpha_threshold: int = ALPHA_THRESHOLD) -> np.ndarray:
    """
    Extract opaque pixels from an interleaved RGBA buffer.

    Samples whose alpha is at or below the threshold are dropped entirely, so
    the result can be shorter than width * height.

    Args:
        data: RGBA samples, row-major, 8 bits per channel (bytes-like or array)
        width: Raster width in pixels
        height: Raster height in pixels
        alpha_threshold: Pixels need alpha strictly above this to be kept

    Returns:
        int64 array of shape (N, 5) with columns r, g, b, x, y in scan order

    Raises:
        ValueError: If the buffer does not hold exactly width * height * 4 samples
    """
    if width < 0 or height < 0:
        raise ValueError(f"Invalid raster size: {width}x{height}")

    if isinstance(data, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(data, dtype=np.uint8) if len(data) else np.zeros(0, dtype=np.uint8)
    else:
        arr = np.asarray(data, dtype=np.uint8).reshape(-1)

    expected = width * height * 4
    if arr.size != expected:
        raise ValueError(
            f"Raster buffer has {arr.size} samples, expected {expected} "
            f"for {width}x{height} RGBA"
        )

    rgba = arr.reshape(height, width, 4)
    ys, xs = np.nonzero(rgba[:, :, 3] > alpha_threshold)

    pixels = np.empty((len(xs), 5), dtype=np.int64)
    pixels[:, :3] = rgba[ys, xs, :3]
    pixels[:, X] = xs
    pixels[:, Y] = ys
    return pixels


def extract_pixels_from_image(im: Image.Image, alpha_threshold: int = ALPHA_THRESHOLD) -> np.ndarray:
    """Extract opaque pixels from a PIL Image (converted to RGBA first)."""
    im = im.convert("RGBA")
    return extract_pixels(np.array(im), im.width, im.height, alpha_threshold)


def sample_pixels(pixels: np.ndarray, max_pixels: int = MAX_SAMPLE_PIXELS) -> np.ndarray:
    """
    Deterministically subsample a pixel array with a fixed stride.

    Returns the input unchanged when it already fits, otherwise every
    ceil(n / max_pixels)-th pixel starting at the first one.
    """
    n = len(pixels)
    if n <= max_pixels:
        return pixels

    step = math.ceil(n / max_pixels)
    return pixels[::step]
