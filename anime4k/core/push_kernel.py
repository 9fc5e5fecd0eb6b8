"""
Anime4K - Directional Push Kernel
=================================
The min/max-gated blend rule shared by every push stage.

Kernel layout around the current pixel (mc):

    [tl][tc][tr]
    [ml][mc][mr]
    [bl][bc][br]

Eight directional kernels, grouped in four opposing pairs. A kernel fires
when every pixel of its light triad has a feature value above both the
center and every pixel of its dark triad; the pixel is then blended toward
the average of the light triad.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from .errors import DimensionMismatch
from .frame_transform import ParallelFrameTransform, default_transform
from .pixel_grid import AUX, OPAQUE, PixelGrid


NEIGHBOR_OFFSETS = {
    'tl': (-1, -1), 'tc': (0, -1), 'tr': (1, -1),
    'ml': (-1, 0),  'mc': (0, 0),  'mr': (1, 0),
    'bl': (-1, 1),  'bc': (0, 1),  'br': (1, 1),
}

# (dark triad, light triad); the second kernel of a pair is only tried when
# the first does not fire
KERNEL_PAIRS = (
    # 0 / 4
    ((('br', 'bc', 'bl'), ('tl', 'tc', 'tr')),
     (('tl', 'tc', 'tr'), ('br', 'bc', 'bl'))),
    # 1 / 5
    ((('mc', 'ml', 'bc'), ('mr', 'tc', 'tr')),
     (('mc', 'mr', 'tc'), ('bl', 'ml', 'bc'))),
    # 2 / 6
    ((('ml', 'tl', 'bl'), ('mr', 'br', 'tr')),
     (('mr', 'br', 'tr'), ('ml', 'tl', 'bl'))),
    # 3 / 7
    ((('mc', 'ml', 'tc'), ('mr', 'br', 'bc')),
     (('mc', 'mr', 'bc'), ('tc', 'ml', 'tl'))),
)

LINE_DETECT_THRESHOLD = 15
LINE_DETECT_MULTI = 6.0


class GatePolicy(str, Enum):
    """How a firing pair updates the running result."""
    LIGHTEST_WINS = "lightest_wins"        # only if the feature gets lighter
    ALWAYS_OVERWRITE = "always_overwrite"  # unconditionally; last pair wins


class Quantize(str, Enum):
    """Float → byte conversion of blended channels."""
    ROUND = "round"  # half up
    FLOOR = "floor"


def quantize_bytes(values: np.ndarray, mode: Quantize) -> np.ndarray:
    if mode == Quantize.ROUND:
        values = values + 0.5
    return np.floor(np.clip(values, 0.0, 255.0))


@dataclass(frozen=True)
class LineGate:
    """
    Per-pixel gate from a line-strength map (v1.0-RC2).

    Pixels with line strength below `threshold` are passed through. With
    `scale_strength`, the blend strength becomes
    clamp(line / 255 * strength * multiplier, 0, 1).
    """
    lines: np.ndarray
    threshold: int = LINE_DETECT_THRESHOLD
    scale_strength: bool = False
    multiplier: float = LINE_DETECT_MULTI


@dataclass(frozen=True)
class DirectionalPushKernel:
    """
    Shared push rule, parameterized by gate policy and quantization.

    The feature is read from the AUX channel of the grid being pushed and is
    blended along with the color channels.
    """
    policy: GatePolicy
    quantize: Quantize = Quantize.FLOOR
    reset_aux: bool = False

    def push(
        self,
        grid: PixelGrid,
        strength: float,
        gate: Optional[LineGate] = None,
        transform: Optional[ParallelFrameTransform] = None
    ) -> PixelGrid:
        """
        Apply the kernel to every pixel.

        Args:
            grid: Working grid, colors in RGB and the feature in AUX
            strength: Blend weight toward the light triad (normalized, 1.0 = full)
            gate: Optional line gate
            transform: Frame transform to run on

        Returns:
            New grid; AUX holds the blended feature, or 255 with `reset_aux`
        """
        transform = transform or default_transform()
        if gate is not None and gate.lines.shape != (grid.height, grid.width):
            raise DimensionMismatch(
                f"Line map {gate.lines.shape} does not match grid {(grid.height, grid.width)}"
            )

        def band(y0, y1):
            neighbors = {
                name: grid.neighbor(dx, dy, y0, y1).astype(np.float64)
                for name, (dx, dy) in NEIGHBOR_OFFSETS.items()
            }

            band_strength = strength
            active = None
            if gate is not None:
                lines = gate.lines[y0:y1].astype(np.float64)
                active = lines >= gate.threshold
                if gate.scale_strength:
                    band_strength = np.clip(lines / 255.0 * strength * gate.multiplier, 0.0, 1.0)[..., np.newaxis]

            result = self.evaluate(neighbors, band_strength)

            if active is not None:
                result = np.where(active[..., np.newaxis], result, neighbors['mc'])
            if self.reset_aux:
                result[..., AUX] = OPAQUE
            return result.astype(np.uint8)

        return transform.map_rows(grid, band)

    def evaluate(self, neighbors: dict, strength: Union[float, np.ndarray]) -> np.ndarray:
        """
        Run the four kernel pairs over a band.

        Args:
            neighbors: name → (h, w, 4) float array, see NEIGHBOR_OFFSETS
            strength: scalar or (h, w, 1) array

        Returns:
            (h, w, 4) float array of byte values
        """
        center = neighbors['mc']
        feature = {name: px[..., AUX] for name, px in neighbors.items()}
        result = center.copy()

        for pair in KERNEL_PAIRS:
            fired = np.zeros(center.shape[:2], dtype=bool)
            candidate = np.empty_like(center)

            for dark, light in pair:
                max_dark = np.maximum.reduce([feature[n] for n in dark])
                min_light = np.minimum.reduce([feature[n] for n in light])
                hit = (min_light > feature['mc']) & (min_light > max_dark) & ~fired
                if not hit.any():
                    continue

                average = (neighbors[light[0]] + neighbors[light[1]] + neighbors[light[2]]) / 3.0
                blended = center * (1.0 - strength) + average * strength
                candidate[hit] = blended[hit]
                fired |= hit

            if self.policy == GatePolicy.LIGHTEST_WINS:
                take = fired & (candidate[..., AUX] > result[..., AUX])
            else:
                take = fired
            result[take] = quantize_bytes(candidate[take], self.quantize)

        return result
