"""
Anime4K - Pixel Grid
====================
Immutable width×height buffer of 4-channel 8-bit pixels.

Every neighborhood read clamps out-of-range coordinates to the nearest
edge pixel (replicate-edge). Nothing is ever wrapped or zero-filled.
"""

import numpy as np
from PIL import Image
from typing import Tuple

from .errors import DimensionMismatch, InvalidConfiguration


# Image channels
RED = 0
GREEN = 1
BLUE = 2
AUX = 3  # scratch in v0.9, alpha on output

# Data grid channels (v1.0-RC2)
LUMA = 0
LUMA_BLUR = 1
LINE = 2
GRADIENT = 3

CHANNELS = 4
OPAQUE = 255


class PixelGrid:
    """
    Read-only (H, W, 4) uint8 pixel buffer.

    Stages never write into a grid; they build a new one from a fresh array.
    """

    __slots__ = ('_pixels',)

    def __init__(self, pixels: np.ndarray):
        """
        Wrap a pixel array. The array is copied and frozen.

        Args:
            pixels: Array of shape (H, W, 4), any integer or float dtype
                with values in [0, 255]
        """
        arr = np.asarray(pixels)
        if arr.ndim != 3 or arr.shape[2] != CHANNELS:
            raise InvalidConfiguration(
                f"Expected (height, width, {CHANNELS}) pixels, got shape {arr.shape}"
            )
        if arr.shape[0] <= 0 or arr.shape[1] <= 0:
            raise InvalidConfiguration(f"Grid dimensions must be positive, got {arr.shape[1]}×{arr.shape[0]}")

        arr = np.array(arr, dtype=np.uint8, copy=True)
        arr.flags.writeable = False
        self._pixels = arr

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> 'PixelGrid':
        return cls(pixels)

    @classmethod
    def _adopt(cls, pixels: np.ndarray) -> 'PixelGrid':
        """
        Take ownership of a freshly built uint8 (H, W, 4) array without copying.

        The array is frozen in place; the caller must hold no other writable
        reference to it.
        """
        if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            return cls(pixels)
        grid = cls.__new__(cls)
        pixels.flags.writeable = False
        grid._pixels = pixels
        return grid

    @classmethod
    def filled(cls, width: int, height: int, color: Tuple[int, int, int, int] = (0, 0, 0, OPAQUE)) -> 'PixelGrid':
        """Create a grid with every pixel set to `color`."""
        if width <= 0 or height <= 0:
            raise InvalidConfiguration(f"Grid dimensions must be positive, got {width}×{height}")
        arr = np.empty((height, width, CHANNELS), dtype=np.uint8)
        arr[...] = color
        return cls(arr)

    @classmethod
    def from_image(cls, image: Image.Image) -> 'PixelGrid':
        """Decode a PIL image of any mode into an RGBA grid."""
        return cls(np.array(image.convert('RGBA')))

    def to_image(self) -> Image.Image:
        """Encode the grid as a PIL RGBA image."""
        return Image.fromarray(np.ascontiguousarray(self._pixels))

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), PIL order."""
        return self.width, self.height

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._pixels.shape

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the backing array."""
        return self._pixels

    def same_shape(self, other: 'PixelGrid') -> bool:
        return self.shape == other.shape

    def require_same_shape(self, other: 'PixelGrid'):
        if not self.same_shape(other):
            raise DimensionMismatch(
                f"Grid {self.width}×{self.height} does not match {other.width}×{other.height}"
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def clamp(self, x: int, y: int) -> Tuple[int, int]:
        """Clamp a coordinate to the nearest valid pixel."""
        return min(max(x, 0), self.width - 1), min(max(y, 0), self.height - 1)

    def get(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Pixel at (x, y); out-of-range coordinates read the nearest edge."""
        cx, cy = self.clamp(x, y)
        r, g, b, a = self._pixels[cy, cx]
        return int(r), int(g), int(b), int(a)

    def channel(self, c: int) -> np.ndarray:
        """Read-only (H, W) view of one channel."""
        return self._pixels[..., c]

    def rows(self, y0: int, y1: int, halo: int = 0) -> np.ndarray:
        """
        Rows [y0 - halo, y1 + halo) with clamped row indices.

        The result has (y1 - y0 + 2*halo) rows; rows outside the grid repeat
        the first or last row.
        """
        index = np.clip(np.arange(y0 - halo, y1 + halo), 0, self.height - 1)
        return self._pixels[index]

    def neighbor(self, dx: int, dy: int, y0: int = 0, y1: int = None) -> np.ndarray:
        """
        Band of rows [y0, y1) where every cell holds its (dx, dy) neighbor.

        out[j, x] == get(x + dx, y0 + j + dy)
        """
        if y1 is None:
            y1 = self.height
        ys = np.clip(np.arange(y0, y1) + dy, 0, self.height - 1)
        xs = np.clip(np.arange(self.width) + dx, 0, self.width - 1)
        return self._pixels[np.ix_(ys, xs)]

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def with_channel(self, c: int, plane: np.ndarray) -> 'PixelGrid':
        """New grid equal to this one with channel `c` replaced by `plane`."""
        plane = np.asarray(plane)
        if plane.shape != (self.height, self.width):
            raise DimensionMismatch(
                f"Channel plane {plane.shape} does not match grid {(self.height, self.width)}"
            )
        arr = self._pixels.copy()
        arr[..., c] = plane
        return PixelGrid._adopt(arr)

    def copy_array(self) -> np.ndarray:
        """Writable copy of the backing array."""
        return self._pixels.copy()

    def __eq__(self, other):
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._pixels, other._pixels)

    def __hash__(self):
        return hash((self.shape, self._pixels.tobytes()))

    def __repr__(self):
        return f"PixelGrid({self.width}×{self.height})"
