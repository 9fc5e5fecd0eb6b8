"""
Anime4K - Algorithm Pipelines
=============================
Ordered compositions of feature and push stages.

Two generations:
1. v0.9: AUX channel as scratch (luminance, then gradient)
2. v1.0-RC2: separate data grid (luma, blurred luma, line map, gradient)

Both run on PixelGrids and never resize; resizing is the scaler's job.
"""

import math
import numbers
from enum import Enum
from typing import Callable, Optional

from .errors import InvalidConfiguration
from .feature_stages import (
    build_data_grid,
    stage_gradient,
    stage_luminance,
    stage_reset_aux,
)
from .frame_transform import ParallelFrameTransform, default_transform
from .fxaa import apply_fxaa
from .pixel_grid import AUX, GRADIENT, LINE, LUMA, PixelGrid
from .push_kernel import DirectionalPushKernel, GatePolicy, LineGate, Quantize

# phase_hook(pass_index, name, grid, is_data_grid)
PhaseHook = Callable[[int, str, PixelGrid, bool], None]


class AlgorithmVersion(str, Enum):
    """Selectable algorithm generations."""
    V09 = "v0.9"
    V10_RC2 = "v1.0-rc2"

    @classmethod
    def parse(cls, value) -> 'AlgorithmVersion':
        """Accept enum members, values and loose spellings ("v09", "rc2")."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace('_', '').replace('-', '').replace('.', '')
        aliases = {
            'v09': cls.V09, '09': cls.V09,
            'v10rc2': cls.V10_RC2, '10rc2': cls.V10_RC2, 'rc2': cls.V10_RC2,
        }
        if key not in aliases:
            choices = ', '.join(v.value for v in cls)
            raise InvalidConfiguration(f"Unknown Anime4K version '{value}'. Available: {choices}")
        return aliases[key]


# ==============================================================================
# Push stages
# ==============================================================================

PUSH_COLOR_09 = DirectionalPushKernel(GatePolicy.LIGHTEST_WINS, Quantize.ROUND)
PUSH_GRADIENT_09 = DirectionalPushKernel(GatePolicy.ALWAYS_OVERWRITE, Quantize.ROUND, reset_aux=True)
PUSH_THIN_LINES_RC2 = DirectionalPushKernel(GatePolicy.LIGHTEST_WINS, Quantize.FLOOR)
PUSH_LINES_RC2 = DirectionalPushKernel(GatePolicy.ALWAYS_OVERWRITE, Quantize.FLOOR)


def push_color(
    grid: PixelGrid,
    strength: float,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """Push colors (and AUX luminance) toward lighter neighbors, lightest wins (v0.9)."""
    return PUSH_COLOR_09.push(grid, strength, transform=transform)


def push_gradient(
    grid: PixelGrid,
    strength: float,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """Push colors along the AUX gradient, last firing pair wins; AUX reset to 255 (v0.9)."""
    return PUSH_GRADIENT_09.push(grid, strength, transform=transform)


def push_thin_lines(
    image: PixelGrid,
    data: PixelGrid,
    strength: float,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """
    Refine thin lines (v1.0-RC2).

    Same rule as push_color with the data grid's LUMA as feature, skipping
    pixels whose line strength is below the detection threshold.
    """
    image.require_same_shape(data)
    working = image.with_channel(AUX, data.channel(LUMA))
    gate = LineGate(data.channel(LINE))
    return PUSH_THIN_LINES_RC2.push(working, strength, gate=gate, transform=transform)


def push_lines(
    image: PixelGrid,
    data: PixelGrid,
    strength: float,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """
    Refine lines and edges (v1.0-RC2).

    Same rule as push_gradient with the data grid's GRADIENT as feature;
    line-gated, and the strength is scaled per pixel by the line map.
    """
    image.require_same_shape(data)
    working = image.with_channel(AUX, data.channel(GRADIENT))
    gate = LineGate(data.channel(LINE), scale_strength=True)
    return PUSH_LINES_RC2.push(working, strength, gate=gate, transform=transform)


# ==============================================================================
# Pipelines
# ==============================================================================

class Anime4KPipeline:
    """
    Base class: validates parameters and repeats one pass `passes` times.
    """

    version: AlgorithmVersion = None
    tag = "[Anime4K]"

    def __init__(
        self,
        transform: Optional[ParallelFrameTransform] = None,
        phase_hook: Optional[PhaseHook] = None,
        verbose: bool = True
    ):
        """
        Args:
            transform: Frame transform used by every stage
            phase_hook: Called with every intermediate grid (debug dumps)
            verbose: Print pass progress
        """
        self.transform = transform or default_transform()
        self.phase_hook = phase_hook
        self.verbose = verbose

    def run(
        self,
        grid: PixelGrid,
        passes: int = 1,
        strength_color: float = 0.33,
        strength_gradient: float = 0.99
    ) -> PixelGrid:
        """
        Apply the algorithm without scaling.

        Args:
            grid: Input image grid (already resized)
            passes: How many times the stage sequence is executed (>= 1)
            strength_color: Color / thin-line push strength (>= 0, 1.0 = full)
            strength_gradient: Gradient / line push strength (>= 0, 1.0 = full)

        Returns:
            Output grid, same dimensions, AUX = 255
        """
        validate_run_parameters(passes, strength_color, strength_gradient)

        for p in range(passes):
            if self.verbose:
                print(f"{self.tag} Pass {p + 1}/{passes} ({grid.width}×{grid.height})")
            grid = self.run_pass(grid, p, strength_color, strength_gradient)

        return grid

    def run_pass(self, grid: PixelGrid, pass_index: int, strength_color: float, strength_gradient: float) -> PixelGrid:
        raise NotImplementedError

    def _phase(self, pass_index: int, name: str, grid: PixelGrid, is_data: bool = False):
        if self.phase_hook is not None:
            self.phase_hook(pass_index, name, grid, is_data)


class Anime4K09(Anime4KPipeline):
    """
    Anime4K v0.9.

    Per pass: Luminance → PushColor → Gradient → PushGradient.
    """

    version = AlgorithmVersion.V09
    tag = "[Anime4K09]"

    def run_pass(self, grid, pass_index, strength_color, strength_gradient):
        grid = stage_luminance(grid, self.transform)
        self._phase(pass_index, "1_get-lum", grid)

        # AUX (luminance) is pushed along with the colors
        grid = push_color(grid, strength_color, self.transform)
        self._phase(pass_index, "2_push-col", grid)

        grid = stage_gradient(grid, AUX, AUX, skip_border=True, transform=self.transform)
        self._phase(pass_index, "3_get-grad", grid)

        grid = push_gradient(grid, strength_gradient, self.transform)
        self._phase(pass_index, "4_push-grad", grid)
        return grid


class Anime4K10RC2(Anime4KPipeline):
    """
    Anime4K v1.0 Release Candidate 2.

    Per pass: build data grid → PushThinLines → PushLines → (FXAA) → reset AUX.
    """

    version = AlgorithmVersion.V10_RC2
    tag = "[Anime4K10RC2]"

    def __init__(self, transform=None, phase_hook=None, verbose=True, enable_fxaa: bool = False):
        super().__init__(transform, phase_hook, verbose)
        self.enable_fxaa = enable_fxaa

    def run_pass(self, grid, pass_index, strength_color, strength_gradient):
        data = build_data_grid(
            grid,
            self.transform,
            on_phase=lambda name, d: self._phase(pass_index, name, d, True)
        )

        grid = push_thin_lines(grid, data, strength_color, self.transform)
        self._phase(pass_index, "3_img_push-thin-lines", grid)

        grid = push_lines(grid, data, strength_gradient, self.transform)
        self._phase(pass_index, "4_img_push-lines", grid)

        if self.enable_fxaa:
            grid = apply_fxaa(grid, data, strength_gradient, self.transform)
            self._phase(pass_index, "5_img_fxaa", grid)

        grid = stage_reset_aux(grid, self.transform)
        self._phase(pass_index, "6_img_reset-alpha", grid)
        return grid


PIPELINES = {
    AlgorithmVersion.V09: Anime4K09,
    AlgorithmVersion.V10_RC2: Anime4K10RC2,
}


def create_pipeline(
    version=AlgorithmVersion.V09,
    transform: Optional[ParallelFrameTransform] = None,
    phase_hook: Optional[PhaseHook] = None,
    verbose: bool = True,
    enable_fxaa: bool = False
) -> Anime4KPipeline:
    """
    Instantiate the pipeline for `version`.

    Raises:
        InvalidConfiguration: unknown version, or FXAA requested for v0.9
    """
    version = AlgorithmVersion.parse(version)
    if version == AlgorithmVersion.V10_RC2:
        return Anime4K10RC2(transform, phase_hook, verbose, enable_fxaa=enable_fxaa)
    if enable_fxaa:
        raise InvalidConfiguration("FXAA is only available for v1.0-rc2")
    return PIPELINES[version](transform, phase_hook, verbose)


def validate_run_parameters(passes: int, strength_color: float, strength_gradient: float):
    """Reject pass counts below 1 and negative or non-finite strengths."""
    if isinstance(passes, bool) or not isinstance(passes, numbers.Integral) or passes < 1:
        raise InvalidConfiguration(f"Anime4K needs at least 1 pass, got {passes!r}")
    for strength in (strength_color, strength_gradient):
        if not is_finite_number(strength) or strength < 0:
            raise InvalidConfiguration(
                f"Push strengths must be finite and >= 0, got color={strength_color}, gradient={strength_gradient}"
            )


def is_finite_number(value) -> bool:
    """True for real, non-bool numbers other than NaN and ±inf."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)
