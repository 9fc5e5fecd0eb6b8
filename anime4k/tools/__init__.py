"""Anime4K - Image I/O and debugging tools"""

from .image_io import (
    load_image,
    save_image,
    default_output_path,
    is_image_file,
    resize_bicubic
)
from .debug_dump import PhaseDumper, channel_image

__all__ = [
    'load_image',
    'save_image',
    'default_output_path',
    'is_image_file',
    'resize_bicubic',
    'PhaseDumper',
    'channel_image',
]
