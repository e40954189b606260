"""
Stitch pattern generation and rendering.

Turns a source image into a grid of palette indices (one per stitch) and
draws it as an enlarged image with a counting grid: thin lines around every
stitch, bold lines every 10 stitches.
"""

from typing import List, Optional, Sequence

import numpy as np
from PIL import Image, ImageDraw

from knitpattern.config import (
    DEFAULT_COLOR_COUNT,
    DEFAULT_MAX_ITER,
    DEFAULT_WIDTH_STITCHES,
    GRID_MAJOR_EVERY,
    MAX_CELL_SIZE,
    MIN_CELL_SIZE,
    TARGET_RENDER_WIDTH,
)
from knitpattern.models import Pattern
from knitpattern.processors.color import rgb_to_hex
from knitpattern.processors.quantizer import RandomSource, kmeans
from knitpattern.processors.pixels import X, Y, extract_pixels_from_image
from knitpattern.processors.preprocess import resize_to_stitches

# Fill for stitches dropped as transparent
EMPTY_STITCH_RGB = (255, 255, 255)

GRID_MINOR_COLOR = (0, 0, 0, 38)
GRID_MAJOR_COLOR = (0, 0, 0, 204)


def build_pattern(
    im: Image.Image,
    width_stitches: int = DEFAULT_WIDTH_STITCHES,
    n_colors: int = DEFAULT_COLOR_COUNT,
    seed_colors: Sequence[Sequence[int]] = (),
    max_iter: int = DEFAULT_MAX_ITER,
    rng: RandomSource = None,
) -> Pattern:
    """
    Build a stitch pattern from an image.

    Args:
        im: Source PIL Image
        width_stitches: Number of stitches across; rows follow the aspect ratio
        n_colors: Maximum palette size
        seed_colors: Colors that must appear unchanged at the start of the palette
        max_iter: Maximum refinement passes
        rng: Generator or integer seed for the quantizer

    Returns:
        Pattern with one palette index per stitch (-1 where transparent)

    Raises:
        ValueError: If n_colors is below 1 or the stitch grid is out of range
    """
    if n_colors < 1:
        raise ValueError(f"n_colors must be at least 1, got {n_colors}")

    small = resize_to_stitches(im, width_stitches)
    pixels = extract_pixels_from_image(small)

    result = kmeans(
        pixels,
        n_colors,
        small.width,
        small.height,
        max_iter=max_iter,
        seed_colors=seed_colors,
        rng=rng,
    )

    labels = np.full((small.height, small.width), -1, dtype=np.int64)
    labels[pixels[:, Y], pixels[:, X]] = result.assignments

    return Pattern(
        width=small.width,
        height=small.height,
        palette=result.palette,
        labels=labels,
        iterations=result.iterations,
        converged=result.converged,
        # Seeds beyond the clamped palette size are dropped by the quantizer
        seed_colors=[c.rgb for c in result.palette if c.locked],
    )


def cell_size_for(width_stitches: int) -> int:
    """Pixels per stitch so the rendered pattern is roughly 800px wide."""
    return max(MIN_CELL_SIZE, min(MAX_CELL_SIZE, TARGET_RENDER_WIDTH // max(1, width_stitches)))


def draw_grid(im: Image.Image, cols: int, rows: int, cell_size: int) -> Image.Image:
    """Overlay the counting grid on a rendered pattern."""
    overlay = Image.new("RGBA", im.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    right = im.width - 1
    bottom = im.height - 1

    def vertical(x, fill, width):
        x = min(x * cell_size, right)
        draw.line([(x, 0), (x, bottom)], fill=fill, width=width)

    def horizontal(y, fill, width):
        y = min(y * cell_size, bottom)
        draw.line([(0, y), (right, y)], fill=fill, width=width)

    for x in range(cols + 1):
        vertical(x, GRID_MINOR_COLOR, 1)
    for y in range(rows + 1):
        horizontal(y, GRID_MINOR_COLOR, 1)

    for x in range(0, cols + 1, GRID_MAJOR_EVERY):
        vertical(x, GRID_MAJOR_COLOR, 2)
    for y in range(0, rows + 1, GRID_MAJOR_EVERY):
        horizontal(y, GRID_MAJOR_COLOR, 2)

    draw.rectangle([0, 0, right, bottom], outline=GRID_MAJOR_COLOR, width=2)

    return Image.alpha_composite(im.convert("RGBA"), overlay).convert("RGB")


def render_pattern(
    pattern: Pattern,
    cell_size: Optional[int] = None,
    show_grid: bool = True,
) -> Image.Image:
    """
    Draw a pattern with each stitch as a solid square of its palette color.

    Args:
        pattern: Pattern to draw
        cell_size: Pixels per stitch (default: fit to ~800px wide)
        show_grid: Overlay the counting grid

    Returns:
        RGB PIL Image of size (width * cell_size, height * cell_size)
    """
    cell_size = cell_size or cell_size_for(pattern.width)

    # Index -1 picks the trailing empty-stitch color
    colors = np.array([c.rgb for c in pattern.palette] + [EMPTY_STITCH_RGB], dtype=np.uint8)
    small = Image.fromarray(colors[pattern.labels])

    size = (pattern.width * cell_size, pattern.height * cell_size)
    im = small.resize(size, Image.Resampling.NEAREST)

    if show_grid:
        im = draw_grid(im, pattern.width, pattern.height, cell_size)
    return im


def legend_entries(pattern: Pattern) -> List[dict]:
    """
    Describe each palette color for a legend.

    Returns:
        One dict per palette color with keys number (1-based), hex, rgb,
        stitches, locked and label
    """
    counts = pattern.stitch_counts()
    entries = []
    for index, center in enumerate(pattern.palette):
        hex_color = rgb_to_hex(center.rgb)
        entries.append({
            "number": index + 1,
            "hex": hex_color,
            "rgb": list(center.rgb),
            "stitches": int(counts[index]),
            "locked": center.locked,
            "label": f"No.{index + 1} ({hex_color})",
        })
    return entries
