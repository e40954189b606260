#!/usr/bin/env python3
"""
Knitting Pattern CLI

Turns an image into a stitch pattern: Resize → Quantize → Render → Export
"""

import argparse
import logging
import sys
from pathlib import Path

from PIL import Image

from knitpattern.config import (
    DEFAULT_COLOR_COUNT,
    DEFAULT_MAX_ITER,
    DEFAULT_WIDTH_STITCHES,
    OUTPUTS_DIR,
    RANDOM_SEED,
)
from knitpattern.processors.color import parse_seed_colors
from knitpattern.processors.pattern import legend_entries
from knitpattern.processors.pipeline import run_pattern_pipeline


def generate_pattern(
    input_path: str,
    output_dir: str | None = None,
    width_stitches: int = DEFAULT_WIDTH_STITCHES,
    n_colors: int = DEFAULT_COLOR_COUNT,
    seed_colors: list | None = None,
    max_iter: int = DEFAULT_MAX_ITER,
    show_grid: bool = True,
    random_seed: int | None = None,
) -> dict:
    """
    Generate a knitting pattern from an image file.

    Args:
        input_path: Path to the input image
        output_dir: Directory to save outputs (default: data/outputs)
        width_stitches: Number of stitches across
        n_colors: Maximum number of colors
        seed_colors: RGB colors that must stay in the palette unchanged
        max_iter: Maximum refinement passes
        show_grid: Draw the counting grid
        random_seed: Seed for reproducible palettes

    Returns:
        Dictionary with the Pattern and output file paths
    """
    output_dir = Path(output_dir) if output_dir else OUTPUTS_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    with Image.open(input_path) as im:
        outputs = run_pattern_pipeline(
            im,
            str(output_dir),
            width_stitches=width_stitches,
            n_colors=n_colors,
            seed_colors=seed_colors or [],
            max_iter=max_iter,
            show_grid=show_grid,
            rng=random_seed,
        )

    for name in ("png", "pdf", "svg"):
        print(f"Wrote {outputs[name]}")

    return outputs


def main():
    parser = argparse.ArgumentParser(
        description="Turn an image into a knitting pattern",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "input",
        help="Path to the input image (PNG or JPEG)",
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Directory to save output files (default: data/outputs)",
    )
    parser.add_argument(
        "-w", "--width",
        type=int,
        default=DEFAULT_WIDTH_STITCHES,
        help="Number of stitches across",
    )
    parser.add_argument(
        "-c", "--colors",
        type=int,
        default=DEFAULT_COLOR_COUNT,
        help="Maximum number of colors",
    )
    parser.add_argument(
        "--seed-color",
        action="append",
        default=[],
        help="Hex color to keep unchanged in the palette (repeatable)",
    )
    parser.add_argument(
        "--max-iter",
        type=int,
        default=DEFAULT_MAX_ITER,
        help="Maximum K-means refinement passes",
    )
    parser.add_argument(
        "--no-grid",
        action="store_true",
        help="Do not draw the counting grid",
    )
    parser.add_argument(
        "--random-seed",
        type=int,
        default=RANDOM_SEED,
        help="Seed for reproducible palettes",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print quantizer debug output",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if not Path(args.input).exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    print(f"Processing: {args.input}")
    try:
        outputs = generate_pattern(
            args.input,
            output_dir=args.output_dir,
            width_stitches=args.width,
            n_colors=args.colors,
            seed_colors=parse_seed_colors(args.seed_color),
            max_iter=args.max_iter,
            show_grid=not args.no_grid,
            random_seed=args.random_seed,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    pattern = outputs["pattern"]
    print(f"\nPattern: {pattern.width} x {pattern.height} stitches, {len(pattern.palette)} colors")
    for entry in legend_entries(pattern):
        print(f"  {entry['label']}  {entry['stitches']} st")


if __name__ == "__main__":
    main()
