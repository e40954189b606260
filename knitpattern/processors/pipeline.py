"""
End-to-end pattern pipeline shared by the CLI and the HTTP API.

Steps: open image -> resize to stitch grid -> quantize -> render -> export
(PNG, PDF, SVG).
"""

import os
from typing import Sequence

from PIL import Image

from knitpattern.config import DEFAULT_COLOR_COUNT, DEFAULT_MAX_ITER, DEFAULT_WIDTH_STITCHES
from knitpattern.processors.exporter import export_to_pdf, export_to_png, export_to_svg
from knitpattern.processors.quantizer import RandomSource
from knitpattern.processors.pattern import build_pattern, render_pattern


def run_pattern_pipeline(
    input_image: Image.Image,
    output_dir: str,
    width_stitches: int = DEFAULT_WIDTH_STITCHES,
    n_colors: int = DEFAULT_COLOR_COUNT,
    seed_colors: Sequence[Sequence[int]] = (),
    max_iter: int = DEFAULT_MAX_ITER,
    show_grid: bool = True,
    rng: RandomSource = None,
) -> dict:
    """
    Run the full pattern pipeline on a PIL Image.

    Args:
        input_image: Source PIL Image
        output_dir: Directory to write pattern.png, pattern.pdf and pattern.svg
        width_stitches: Number of stitches across
        n_colors: Maximum palette size
        seed_colors: Colors pinned to the start of the palette
        max_iter: Maximum refinement passes
        show_grid: Draw the counting grid
        rng: Generator or integer seed for the quantizer

    Returns:
        Dictionary with the Pattern under "pattern" and output paths under
        "png", "pdf" and "svg"
    """
    # Step 1: Quantize onto the stitch grid
    pattern = build_pattern(
        input_image,
        width_stitches=width_stitches,
        n_colors=n_colors,
        seed_colors=seed_colors,
        max_iter=max_iter,
        rng=rng,
    )

    # Step 2: Render the enlarged pattern
    png_path = os.path.join(output_dir, "pattern.png")
    export_to_png(render_pattern(pattern, show_grid=show_grid), png_path)

    # Step 3: Printable PDF with legend
    pdf_path = os.path.join(output_dir, "pattern.pdf")
    export_to_pdf(pattern, pdf_path, show_grid=show_grid)

    # Step 4: SVG
    svg_path = os.path.join(output_dir, "pattern.svg")
    export_to_svg(pattern, svg_path, show_grid=show_grid)

    return {
        "pattern": pattern,
        "png": png_path,
        "pdf": pdf_path,
        "svg": svg_path,
    }
