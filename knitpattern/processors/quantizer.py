"""
Weighted K-means++ color quantization for stitch patterns.

Initialization is biased toward vivid colors near the middle of the image,
since pattern subjects are usually centered and saturated. Refinement is a
plain Lloyd's loop over the full pixel set using the luminance-weighted
distance. Caller-pinned seed colors occupy the first palette slots and are
never moved.
"""

import logging
import math
from typing import List, Sequence, Tuple, Union

import numpy as np

from knitpattern.config import DEFAULT_MAX_ITER, MAX_DUPLICATE_RETRIES, MAX_SAMPLE_PIXELS
from knitpattern.models import Center, QuantizeResult
from knitpattern.processors.color import color_distance_sq_matrix, saturation
from knitpattern.processors.pixels import X, Y, sample_pixels

logger = logging.getLogger(__name__)

RandomSource = Union[np.random.Generator, int, None]

# Stride target for the first-center saliency scan
FIRST_CENTER_SCAN = 1000


def _make_rng(rng: RandomSource):
    # Anything with a random() method in [0, 1) works as a source
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    if not callable(getattr(rng, "random", None)):
        raise ValueError(f"Invalid random source: {rng!r}")
    return rng


def _normalize_colors(colors: Sequence[Sequence[int]]) -> List[Tuple[int, int, int]]:
    return [(int(c[0]), int(c[1]), int(c[2])) for c in colors]


def center_bias(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """
    Closeness of each pixel to the image's geometric center.

    1.0 at the center, 0.0 at a corner. Not clamped: positions outside the
    raster bounds can go negative.
    """
    center_x = width / 2
    center_y = height / 2
    max_dist = math.hypot(center_x, center_y)
    if max_dist == 0:
        return np.ones(len(pixels), dtype=np.float64)

    dist = np.hypot(pixels[:, X] - center_x, pixels[:, Y] - center_y)
    return 1.0 - dist / max_dist


def init_centers(
    sample: np.ndarray,
    k: int,
    width: int,
    height: int,
    seed_colors: Sequence[Sequence[int]] = (),
    rng: RandomSource = None,
    max_retries: int = MAX_DUPLICATE_RETRIES,
) -> List[Center]:
    """
    Build the initial centers with saliency-weighted K-means++.

    Seed colors are copied first as locked centers, in caller order. Without
    seeds, the first center is the most saturated pixel closest to the image
    center. Remaining slots are filled by roulette selection where each pixel's
    weight is its distance to the nearest center, amplified up to 6x for
    saturation and up to 4x for closeness to the image center.

    Args:
        sample: Pixel array (N, 5) to pick centers from
        k: Target number of centers (already clamped by the caller)
        width: Image width, for the center bias
        height: Image height, for the center bias
        seed_colors: Colors that must occupy the first slots unchanged
        rng: Generator, integer seed, or any object with random()
        max_retries: Consecutive duplicate picks tolerated for one slot

    Returns:
        List of at most k centers. Fewer means every remaining candidate
        duplicates an existing center.
    """
    rng = _make_rng(rng)

    centers = [Center(r, g, b, locked=True) for r, g, b in _normalize_colors(seed_colors)[: max(k, 0)]]
    if len(sample) == 0 or len(centers) >= k:
        return centers

    sat = saturation(sample)
    bias = center_bias(sample, width, height)

    if not centers:
        stride = max(1, len(sample) // FIRST_CENTER_SCAN)
        scores = sat[::stride] * bias[::stride]
        # argmax keeps the first of equal scores
        first = int(np.argmax(scores)) * stride
        r, g, b = (int(v) for v in sample[first, :3])
        centers.append(Center(r, g, b))

    weight_boost = (1.0 + 5.0 * sat) * (1.0 + 3.0 * np.maximum(bias, 0.0))
    existing = np.array([c.rgb for c in centers], dtype=np.float64)
    min_dist = color_distance_sq_matrix(sample, existing).min(axis=1)

    retries = 0
    while len(centers) < k:
        weights = min_dist * weight_boost
        total = weights.sum()
        if total <= 0:
            logger.debug("Seeding stopped at %d of %d centers: no weight left", len(centers), k)
            break

        # Roulette wheel: first pixel whose cumulative weight reaches the target
        target = rng.random() * total
        idx = int(np.searchsorted(np.cumsum(weights), target, side="left"))
        idx = min(idx, len(sample) - 1)
        rgb = tuple(int(v) for v in sample[idx, :3])

        if any(c.rgb == rgb for c in centers):
            retries += 1
            if retries > max_retries:
                logger.debug("Seeding stopped at %d of %d centers: duplicate picks", len(centers), k)
                break
            continue

        retries = 0
        centers.append(Center(*rgb))
        new_dist = color_distance_sq_matrix(sample, np.array([rgb], dtype=np.float64))[:, 0]
        min_dist = np.minimum(min_dist, new_dist)

    return centers


def refine(
    pixels: np.ndarray,
    centers: Sequence[Center],
    max_iter: int = DEFAULT_MAX_ITER,
    num_seeds: int = 0,
) -> QuantizeResult:
    """
    Lloyd's algorithm with the first `num_seeds` centers held fixed.

    Every pixel goes to its nearest center by plain color distance; unlocked
    centers then move to the rounded mean of their pixels. Empty clusters
    keep their color. Stops when no assignment changes or after `max_iter`
    passes, whichever comes first.
    """
    palette = np.array([c.rgb for c in centers], dtype=np.int64).reshape(-1, 3)
    k = len(palette)
    num_seeds = max(0, min(num_seeds, k))
    seeds = palette[:num_seeds].copy()

    rgb = pixels[:, :3].astype(np.float64)
    assignments = np.zeros(len(pixels), dtype=np.int64)
    iterations = 0
    converged = False

    while iterations < max_iter:
        iterations += 1
        nearest = color_distance_sq_matrix(rgb, palette).argmin(axis=1)
        changed = not np.array_equal(nearest, assignments)
        assignments = nearest
        if not changed:
            converged = True
            break

        counts = np.bincount(assignments, minlength=k)
        sums = np.stack(
            [np.bincount(assignments, weights=rgb[:, ch], minlength=k) for ch in range(3)],
            axis=1,
        )
        filled = counts > 0
        # Round half up
        means = np.floor(sums[filled] / counts[filled][:, np.newaxis] + 0.5).astype(np.int64)
        palette[filled] = means
        palette[:num_seeds] = seeds

    result_palette = [
        Center(int(r), int(g), int(b), locked=i < num_seeds)
        for i, (r, g, b) in enumerate(palette)
    ]
    return QuantizeResult(
        palette=result_palette,
        assignments=assignments,
        iterations=iterations,
        converged=converged,
    )


def kmeans(
    pixels: np.ndarray,
    k: int,
    width: int,
    height: int,
    max_iter: int = DEFAULT_MAX_ITER,
    seed_colors: Sequence[Sequence[int]] = (),
    rng: RandomSource = None,
    max_sample: int = MAX_SAMPLE_PIXELS,
) -> QuantizeResult:
    """
    Quantize pixels to a palette of at most k colors.

    Args:
        pixels: Pixel array (N, 5) with columns r, g, b, x, y
        k: Requested palette size
        width: Image width, for the center bias
        height: Image height, for the center bias
        max_iter: Maximum refinement passes (default 15)
        seed_colors: Ordered colors pinned to the first palette slots
        rng: Generator or integer seed; None draws fresh entropy
        max_sample: Pixel budget for initialization

    Returns:
        QuantizeResult whose assignments are parallel to `pixels`. Empty input
        yields a single black center.
    """
    pixels = np.asarray(pixels, dtype=np.int64).reshape(-1, 5)
    if len(pixels) == 0:
        return QuantizeResult(palette=[Center(0, 0, 0)], assignments=np.zeros(0, dtype=np.int64))

    seed_colors = _normalize_colors(seed_colors)
    distinct = len(np.unique(pixels[:, :3], axis=0))
    final_k = min(k, distinct)

    sample = sample_pixels(pixels, max_sample)
    centers = init_centers(sample, final_k, width, height, seed_colors, rng)
    num_seeds = max(0, min(len(seed_colors), final_k))

    if not centers:
        return QuantizeResult(palette=[Center(0, 0, 0)], assignments=np.zeros(len(pixels), dtype=np.int64))

    result = refine(pixels, centers, max_iter, num_seeds)
    logger.debug(
        "Quantized %d pixels to %d colors in %d iterations (converged=%s)",
        len(pixels), len(result.palette), result.iterations, result.converged,
    )
    return result
