"""
Anime4K
=======
CPU implementation of the Anime4K v0.9 and v1.0-RC2 upscaling filters.

    from PIL import Image
    import anime4k

    out = anime4k.scale(Image.open("in.png"), 2.0, version="v1.0-rc2")
"""

__version__ = "1.0.0"

from .core import (
    Anime4KError,
    InvalidConfiguration,
    DimensionMismatch,
    PixelGrid,
    AlgorithmVersion,
    create_pipeline
)
from .scaler import (
    ScalerConfig,
    Anime4KScaler,
    derive_strengths,
    scale,
    process_single_image,
    process_image_sequence
)

__all__ = [
    '__version__',
    'Anime4KError',
    'InvalidConfiguration',
    'DimensionMismatch',
    'PixelGrid',
    'AlgorithmVersion',
    'create_pipeline',
    'ScalerConfig',
    'Anime4KScaler',
    'derive_strengths',
    'scale',
    'process_single_image',
    'process_image_sequence',
]
