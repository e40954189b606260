import math
from typing import Tuple

from PIL import Image

from knitpattern.config import MAX_ROW_STITCHES, MAX_WIDTH_STITCHES, MIN_WIDTH_STITCHES


def stitch_dimensions(image_size: Tuple[int, int], width_stitches: int) -> Tuple[int, int]:
    """
    Compute the stitch grid size for an image, keeping its aspect ratio.

    Args:
        image_size: (width, height) of the source image in pixels
        width_stitches: Number of stitches across

    Returns:
        (columns, rows) of the pattern

    Raises:
        ValueError: If width_stitches is out of range, the image is empty, or
            the aspect ratio needs more rows than allowed
    """
    if width_stitches < MIN_WIDTH_STITCHES:
        raise ValueError(f"width_stitches must be at least {MIN_WIDTH_STITCHES}, got {width_stitches}")
    if width_stitches > MAX_WIDTH_STITCHES:
        raise ValueError(f"width_stitches must be at most {MAX_WIDTH_STITCHES}, got {width_stitches}")

    w, h = image_size
    if w <= 0 or h <= 0:
        raise ValueError(f"Invalid image size: {w}x{h}")

    rows = max(1, math.floor(width_stitches * h / w + 0.5))
    if rows > MAX_ROW_STITCHES:
        raise ValueError(f"Pattern would need {rows} rows, more than {MAX_ROW_STITCHES}")
    return width_stitches, rows


def resize_to_stitches(im: Image.Image, width_stitches: int) -> Image.Image:
    """
    Resize an image so that one pixel corresponds to one stitch.

    Args:
        im: Source PIL Image
        width_stitches: Number of stitches across

    Returns:
        RGBA PIL Image of size (columns, rows)
    """
    size = stitch_dimensions(im.size, width_stitches)
    return im.convert("RGBA").resize(size, Image.Resampling.BICUBIC)
