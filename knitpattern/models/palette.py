from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np


@dataclass
class Center:
    """
    A palette color candidate.

    Locked centers come from caller-pinned seed colors and keep their RGB
    through every refinement iteration.
    """

    r: int
    g: int
    b: int
    locked: bool = False

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass
class QuantizeResult:
    """
    Output of the quantization engine.

    Attributes:
        palette: Ordered centers; the index of a center is its cluster id
        assignments: Cluster id per input pixel, parallel to the full pixel set
        iterations: Number of refinement passes that were run
        converged: True if refinement stopped because no assignment changed
    """

    palette: List[Center]
    assignments: np.ndarray
    iterations: int = 0
    converged: bool = False

    @property
    def colors(self) -> List[Tuple[int, int, int]]:
        return [c.rgb for c in self.palette]


@dataclass
class Pattern:
    """
    A stitch pattern: one palette index per stitch.

    `labels` has shape (height, width); stitches dropped as transparent hold -1.
    """

    width: int
    height: int
    palette: List[Center]
    labels: np.ndarray
    iterations: int = 0
    converged: bool = False
    seed_colors: List[Tuple[int, int, int]] = field(default_factory=list)

    def stitch_counts(self) -> np.ndarray:
        """Number of stitches per palette color."""
        used = self.labels[self.labels >= 0]
        return np.bincount(used, minlength=len(self.palette))[: len(self.palette)]
