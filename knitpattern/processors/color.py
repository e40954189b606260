"""
Color primitives shared by the quantizer and the presentation layers.

Distances use a luminance-weighted squared RGB difference (green dominant,
blue weakest). It is cheap, monotonic and stable under comparison, which is
all nearest-center lookup and K-means++ weighting need.
"""

import re
from typing import Iterable, List, Sequence, Tuple

import numpy as np

LUMA_WEIGHTS = np.array([0.30, 0.59, 0.11], dtype=np.float64)

_HEX_RE = re.compile(r"^#?([0-9A-Fa-f]{6})$")


def color_distance_sq(c1: Sequence[int], c2: Sequence[int]) -> float:
    """
    Weighted squared distance between two colors.

    Only the first three components are read, so pixel rows (r, g, b, x, y)
    can be passed directly.
    """
    r_diff = float(c1[0]) - float(c2[0])
    g_diff = float(c1[1]) - float(c2[1])
    b_diff = float(c1[2]) - float(c2[2])
    return r_diff * r_diff * 0.30 + g_diff * g_diff * 0.59 + b_diff * b_diff * 0.11


def color_distance_sq_matrix(colors: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """
    Weighted squared distances from every color to every center.

    Args:
        colors: Array of shape (N, >=3); only RGB columns are used
        centers: Array of shape (K, >=3)

    Returns:
        Float array of shape (N, K)
    """
    a = np.asarray(colors, dtype=np.float64)[:, :3]
    b = np.asarray(centers, dtype=np.float64)[:, :3]
    diff = a[:, np.newaxis, :] - b[np.newaxis, :, :]
    return (diff * diff) @ LUMA_WEIGHTS


def saturation(colors: np.ndarray) -> np.ndarray:
    """(max - min) / 255 per color, in [0, 1]."""
    rgb = np.asarray(colors, dtype=np.float64)[..., :3]
    return (rgb.max(axis=-1) - rgb.min(axis=-1)) / 255.0


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Format an RGB triple as an uppercase "#RRGGBB" string."""
    return "#{:02X}{:02X}{:02X}".format(int(rgb[0]), int(rgb[1]), int(rgb[2]))


def hex_to_rgb(hex_str: str) -> Tuple[int, int, int]:
    """
    Parse "#RRGGBB" (the leading # is optional) into an RGB triple.

    Raises:
        ValueError: If the string is not exactly six hex digits
    """
    match = _HEX_RE.match(hex_str.strip()) if isinstance(hex_str, str) else None
    if match is None:
        raise ValueError(f"Invalid hex color: {hex_str!r}")
    value = int(match.group(1), 16)
    return (value >> 16) & 255, (value >> 8) & 255, value & 255


def parse_seed_colors(values: Iterable[str]) -> List[Tuple[int, int, int]]:
    """
    Decode seed colors from hex strings.

    Each entry may itself hold several colors separated by commas or
    whitespace, so both ["#FF0000", "#00FF00"] and ["#FF0000, #00FF00"]
    are accepted. Order is preserved.
    """
    if isinstance(values, str):
        values = [values]

    colors = []
    for value in values:
        for token in re.split(r"[,\s]+", value.strip()):
            if token:
                colors.append(hex_to_rgb(token))
    return colors
