"""
Anime4K - Image I/O
===================
Decode/encode and bicubic resize around the core filter. Everything here
goes through PIL; the core itself only sees PixelGrids.
"""

from pathlib import Path
from typing import Tuple, Union

from PIL import Image

from ..core.pixel_grid import PixelGrid

OUTPUT_SUFFIX = "_anime4k"
IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.gif', '.webp', '.tif', '.tiff')


def load_image(path: Union[str, Path]) -> Image.Image:
    """
    Load an image file as RGBA.

    Raises:
        FileNotFoundError: if the file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")

    with Image.open(path) as img:
        return img.convert('RGBA')


def save_image(image: Union[Image.Image, PixelGrid], path: Union[str, Path]) -> Path:
    """Save an image or grid, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(image, PixelGrid):
        image = image.to_image()

    # formats without alpha (jpeg, bmp) get the color channels only
    if path.suffix.lower() in ('.jpg', '.jpeg', '.bmp'):
        image = image.convert('RGB')

    image.save(path)
    return path


def default_output_path(input_path: Union[str, Path]) -> Path:
    """<dir>/<name>_anime4k.png next to the input."""
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}{OUTPUT_SUFFIX}.png")


def is_image_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS


def resize_bicubic(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Bicubic resize to (width, height).

    Returns an RGBA copy unchanged when the size already matches.
    """
    image = image.convert('RGBA')
    if image.size == tuple(size):
        return image.copy()
    return image.resize(tuple(size), Image.BICUBIC)
