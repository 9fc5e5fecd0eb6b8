"""
Anime4K - Debug Phase Dumps
===========================
Saves every intermediate grid of a run to a directory.

Image grids are written as `<pass>-<phase>.png`. Data grids additionally get
one grayscale image per channel in `<pass>--<phase>/`:
0-RED.png, 1-GREEN.png, 2-BLUE.png, 3-ALPHA.png and 4-ORG.png.
"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..core.pixel_grid import OPAQUE, PixelGrid

CHANNEL_FILES = ('0-RED.png', '1-GREEN.png', '2-BLUE.png', '3-ALPHA.png')


class PhaseDumper:
    """Writes intermediate grids; usable directly as a pipeline phase hook."""

    def __init__(self, directory: Union[str, Path], verbose: bool = True):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.saved = 0
        if verbose:
            print(f"[Debug] Saving phases to: {self.directory}")

    def __call__(self, pass_index: int, name: str, grid: PixelGrid, is_data: bool = False):
        self.save(grid, pass_index, name, separate_channels=is_data)

    def save(self, grid: PixelGrid, pass_index: int, name: str, separate_channels: bool = False) -> Path:
        """
        Save one phase.

        Args:
            grid: Grid to save
            pass_index: Zero-based pass number
            name: Phase name, e.g. "2_push-col"
            separate_channels: Also save each channel as a grayscale image

        Returns:
            Path of the saved image or channel directory
        """
        if not separate_channels:
            path = self.directory / f"{pass_index}-{name}.png"
            grid.to_image().save(path)
            self.saved += 1
            return path

        phase_dir = self.directory / f"{pass_index}--{name}"
        phase_dir.mkdir(parents=True, exist_ok=True)

        for c, filename in enumerate(CHANNEL_FILES):
            channel_image(grid, c).save(phase_dir / filename)
        grid.to_image().save(phase_dir / "4-ORG.png")

        self.saved += 1
        return phase_dir


def channel_image(grid: PixelGrid, c: int) -> Image.Image:
    """Opaque grayscale RGBA image of one channel."""
    plane = grid.channel(c)
    rgba = np.empty(grid.shape, dtype=np.uint8)
    rgba[..., 0] = plane
    rgba[..., 1] = plane
    rgba[..., 2] = plane
    rgba[..., 3] = OPAQUE
    return Image.fromarray(rgba)
