from .color import color_distance_sq, hex_to_rgb, parse_seed_colors, rgb_to_hex
from .pixels import extract_pixels, extract_pixels_from_image, sample_pixels
from .quantizer import init_centers, kmeans, refine
from .preprocess import resize_to_stitches, stitch_dimensions
from .pattern import build_pattern, legend_entries, render_pattern
from .exporter import export_to_pdf, export_to_png, export_to_svg

__all__ = [
    "color_distance_sq",
    "hex_to_rgb",
    "parse_seed_colors",
    "rgb_to_hex",
    "extract_pixels",
    "extract_pixels_from_image",
    "sample_pixels",
    "init_centers",
    "kmeans",
    "refine",
    "resize_to_stitches",
    "stitch_dimensions",
    "build_pattern",
    "legend_entries",
    "render_pattern",
    "export_to_pdf",
    "export_to_png",
    "export_to_svg",
]
