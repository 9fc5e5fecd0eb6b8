"""Anime4K - Core Filter Module"""

from .errors import Anime4KError, InvalidConfiguration, DimensionMismatch
from .pixel_grid import PixelGrid, RED, GREEN, BLUE, AUX, LUMA, LUMA_BLUR, LINE, GRADIENT, OPAQUE
from .frame_transform import ParallelFrameTransform, default_transform
from .feature_stages import (
    luminance,
    stage_luminance,
    stage_luma_data,
    stage_gaussian,
    stage_gradient,
    stage_detect_lines,
    stage_reset_aux,
    build_data_grid
)
from .push_kernel import DirectionalPushKernel, GatePolicy, Quantize, LineGate
from .fxaa import apply_fxaa
from .pipeline import (
    AlgorithmVersion,
    Anime4KPipeline,
    Anime4K09,
    Anime4K10RC2,
    create_pipeline,
    push_color,
    push_gradient,
    push_thin_lines,
    push_lines
)

__all__ = [
    'Anime4KError',
    'InvalidConfiguration',
    'DimensionMismatch',
    'PixelGrid',
    'RED',
    'GREEN',
    'BLUE',
    'AUX',
    'LUMA',
    'LUMA_BLUR',
    'LINE',
    'GRADIENT',
    'OPAQUE',
    'ParallelFrameTransform',
    'default_transform',
    'luminance',
    'stage_luminance',
    'stage_luma_data',
    'stage_gaussian',
    'stage_gradient',
    'stage_detect_lines',
    'stage_reset_aux',
    'build_data_grid',
    'DirectionalPushKernel',
    'GatePolicy',
    'Quantize',
    'LineGate',
    'apply_fxaa',
    'AlgorithmVersion',
    'Anime4KPipeline',
    'Anime4K09',
    'Anime4K10RC2',
    'create_pipeline',
    'push_color',
    'push_gradient',
    'push_thin_lines',
    'push_lines',
]
