"""
Anime4K - Parallel Frame Transform
==================================
Applies a pure function to every pixel of a grid, producing a new grid.

Reads come from the source grid only and writes go to a freshly allocated
output, so the rows can be split into bands and computed on a thread pool
in any order. Joining the pool is the barrier between two stages.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

import numpy as np

from .errors import DimensionMismatch, InvalidConfiguration
from .pixel_grid import CHANNELS, PixelGrid

PixelFunc = Callable[[int, int, Tuple[int, int, int, int]], Tuple[int, int, int, int]]
BandFunc = Callable[[int, int], np.ndarray]


class ParallelFrameTransform:
    """
    Row-banded, thread-parallel per-pixel transform.

    Band functions are expected to be vectorized NumPy code, which releases
    the GIL; per-pixel Python functions are supported for small grids and
    custom stages.
    """

    def __init__(self, workers: Optional[int] = None, min_band_rows: int = 16):
        """
        Args:
            workers: Thread count (default: os.cpu_count())
            min_band_rows: Smallest band worth handing to a thread
        """
        if workers is None:
            workers = os.cpu_count() or 4
        if workers < 1:
            raise InvalidConfiguration(f"workers must be >= 1, got {workers}")
        if min_band_rows < 1:
            raise InvalidConfiguration(f"min_band_rows must be >= 1, got {min_band_rows}")

        self.workers = workers
        self.min_band_rows = min_band_rows

    def bands(self, height: int) -> List[Tuple[int, int]]:
        """Split [0, height) into contiguous row ranges, one per task."""
        count = max(1, min(self.workers, height // self.min_band_rows))
        chunk = height // count
        ranges = []
        for i in range(count):
            y_start = i * chunk
            y_end = (i + 1) * chunk if i < count - 1 else height
            ranges.append((y_start, y_end))
        return ranges

    def map_rows(self, source: PixelGrid, band_func: BandFunc) -> PixelGrid:
        """
        Build a new grid band by band.

        Args:
            source: Grid the band function reads from (never written)
            band_func: f(y_start, y_end) -> (y_end - y_start, W, 4) array

        Returns:
            New grid with the same dimensions as `source`
        """
        out = np.empty((source.height, source.width, CHANNELS), dtype=np.uint8)
        ranges = self.bands(source.height)

        def run(y_range):
            y_start, y_end = y_range
            band = np.asarray(band_func(y_start, y_end))
            expected = (y_end - y_start, source.width, CHANNELS)
            if band.shape != expected:
                raise DimensionMismatch(f"Band rows {y_start}-{y_end} returned {band.shape}, expected {expected}")
            out[y_start:y_end] = band

        if len(ranges) == 1:
            run(ranges[0])
        else:
            with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
                futures = [executor.submit(run, r) for r in ranges]
                for future in futures:
                    future.result()

        return PixelGrid._adopt(out)

    def map_pixels(self, source: PixelGrid, pixel_func: PixelFunc) -> PixelGrid:
        """
        Build a new grid from f(x, y, source[x, y]) for every pixel.

        Neighborhood reads inside `pixel_func` must go to `source`.
        """
        pixels = source.pixels

        def band(y_start, y_end):
            rows = np.empty((y_end - y_start, source.width, CHANNELS), dtype=np.uint8)
            for y in range(y_start, y_end):
                for x in range(source.width):
                    r, g, b, a = pixels[y, x]
                    rows[y - y_start, x] = pixel_func(x, y, (int(r), int(g), int(b), int(a)))
            return rows

        return self.map_rows(source, band)


_default_transform = None


def default_transform() -> ParallelFrameTransform:
    """Shared transform sized to the machine."""
    global _default_transform
    if _default_transform is None:
        _default_transform = ParallelFrameTransform()
    return _default_transform
