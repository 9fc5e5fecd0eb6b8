"""
Anime4K - Scaler / Orchestrator
===============================
Resizes the input, derives push strengths from the scale factor and runs
the selected Anime4K pipeline.

Supports two sizing modes:
1. Scale factor: output = floor(input * factor)
2. Target size: explicit (width, height), overrides the factor
"""

import math
import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from PIL import Image

from anime4k.core.errors import InvalidConfiguration
from anime4k.core.frame_transform import ParallelFrameTransform
from anime4k.core.pipeline import AlgorithmVersion, create_pipeline, is_finite_number, validate_run_parameters
from anime4k.core.pixel_grid import PixelGrid
from anime4k.tools.debug_dump import PhaseDumper
from anime4k.tools.image_io import (
    default_output_path,
    is_image_file,
    load_image,
    resize_bicubic,
    save_image,
)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def derive_strengths(scale: float) -> Tuple[float, float]:
    """
    Auto push strengths for a scale factor.

    Returns:
        (color strength = clamp(scale / 6), gradient strength = clamp(scale / 2))
    """
    return clamp(scale / 6.0, 0.0, 1.0), clamp(scale / 2.0, 0.0, 1.0)


class ScalerConfig:
    """Configuration for the Anime4K scaler."""

    def __init__(self):
        # Algorithm selection
        self.version: AlgorithmVersion = AlgorithmVersion.V09
        self.enable_fxaa: bool = False  # v1.0-rc2 only, experimental

        # Sizing (target_size overrides scale_factor)
        self.scale_factor: float = 2.0
        self.target_size: Optional[Tuple[int, int]] = None

        # Push parameters (None = derive from scale)
        self.passes: int = 1
        self.strength_color: Optional[float] = None
        self.strength_gradient: Optional[float] = None

        # Execution
        self.workers: Optional[int] = None
        self.debug_dir: Optional[str] = None
        self.verbose: bool = True

    def validate(self):
        """
        Check every parameter that can be checked without an image.

        Raises:
            InvalidConfiguration: on the first invalid parameter
        """
        self.version = AlgorithmVersion.parse(self.version)

        if self.enable_fxaa and self.version != AlgorithmVersion.V10_RC2:
            raise InvalidConfiguration("FXAA is only available for v1.0-rc2")

        if self.target_size is not None:
            width, height = self.target_size
            if width <= 0 or height <= 0:
                raise InvalidConfiguration(f"Target size must be positive, got {width}×{height}")
        elif not is_finite_number(self.scale_factor) or self.scale_factor <= 0:
            raise InvalidConfiguration(f"Scale factor must be finite and > 0, got {self.scale_factor}")

        validate_run_parameters(
            self.passes,
            0.0 if self.strength_color is None else self.strength_color,
            0.0 if self.strength_gradient is None else self.strength_gradient
        )

        if self.workers is not None and self.workers < 1:
            raise InvalidConfiguration(f"workers must be >= 1, got {self.workers}")

    def as_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            'version': AlgorithmVersion.parse(self.version).value,
            'enable_fxaa': self.enable_fxaa,
            'scale_factor': self.scale_factor,
            'target_size': self.target_size,
            'passes': self.passes,
            'strength_color': self.strength_color,
            'strength_gradient': self.strength_gradient,
            'workers': self.workers,
            'debug_dir': self.debug_dir,
            'verbose': self.verbose,
        }


class Anime4KScaler:
    """
    Anime4K orchestrator.

    Validates configuration up front, then resize → pipeline passes.
    """

    def __init__(self, config: Optional[ScalerConfig] = None):
        """
        Initialize scaler with configuration.

        Args:
            config: Scaler configuration (defaults: v0.9, 2×, 1 pass, auto strengths)
        """
        self.config = config or ScalerConfig()
        self.config.validate()

        self.transform = ParallelFrameTransform(workers=self.config.workers)
        self.dumper = PhaseDumper(self.config.debug_dir, verbose=self.config.verbose) if self.config.debug_dir else None
        self.pipeline = create_pipeline(
            self.config.version,
            transform=self.transform,
            phase_hook=self.dumper,
            verbose=self.config.verbose,
            enable_fxaa=self.config.enable_fxaa
        )

        self._log(f"Anime4K {self.config.version.value} ({self.transform.workers} workers)")

    def _log(self, message: str):
        if self.config.verbose:
            print(f"[Scaler] {message}")

    def plan(self, width: int, height: int) -> Tuple[Tuple[int, int], float]:
        """
        Output size and effective scale factor for an input size.

        Raises:
            InvalidConfiguration: if the output would have no pixels
        """
        if self.config.target_size is not None:
            new_width, new_height = self.config.target_size
            scale = min(new_width / width, new_height / height)
        else:
            scale = self.config.scale_factor
            new_width = int(math.floor(width * scale))
            new_height = int(math.floor(height * scale))

        if new_width <= 0 or new_height <= 0:
            raise InvalidConfiguration(
                f"Scaled dimensions must be positive, got {new_width}×{new_height}"
            )
        return (new_width, new_height), scale

    def strengths(self, scale: float) -> Tuple[float, float]:
        """User strengths where given, derived from `scale` otherwise."""
        auto_color, auto_gradient = derive_strengths(scale)
        color = auto_color if self.config.strength_color is None else self.config.strength_color
        gradient = auto_gradient if self.config.strength_gradient is None else self.config.strength_gradient
        return color, gradient

    def process_image(self, input_image: Image.Image) -> Image.Image:
        """
        Scale a single image and apply Anime4K.

        Args:
            input_image: PIL image of any mode (converted to RGBA)

        Returns:
            Processed RGBA image; the input is not modified
        """
        (new_width, new_height), scale = self.plan(input_image.width, input_image.height)
        strength_color, strength_gradient = self.strengths(scale)

        self._log(f"Input: {input_image.width}×{input_image.height} → {new_width}×{new_height} ({scale:g}×)")
        self._log(f"Passes: {self.config.passes}, color strength: {strength_color:.3f}, "
                  f"gradient strength: {strength_gradient:.3f}")

        scaled = resize_bicubic(input_image, (new_width, new_height))
        grid = PixelGrid.from_image(scaled)
        if self.dumper is not None:
            self.dumper.save(grid, 0, "0_scale-up")

        start = time.perf_counter()
        output = self.pipeline.run(
            grid,
            passes=self.config.passes,
            strength_color=strength_color,
            strength_gradient=strength_gradient
        )
        self._log(f"Anime4K finished in {time.perf_counter() - start:.2f} s")

        return output.to_image()

    def process_grid(self, grid: PixelGrid) -> PixelGrid:
        """Same as process_image for an already decoded grid."""
        return PixelGrid.from_image(self.process_image(grid.to_image()))


# ==============================================================================
# Convenience Functions
# ==============================================================================

def scale(
    image: Image.Image,
    target: Union[float, Tuple[int, int]] = 2.0,
    passes: int = 1,
    strength_color: Optional[float] = None,
    strength_gradient: Optional[float] = None,
    version: Union[str, AlgorithmVersion] = AlgorithmVersion.V09,
    verbose: bool = False
) -> Image.Image:
    """
    Scale an image and apply Anime4K.

    Args:
        image: Source PIL image (not modified)
        target: Scale factor, or (width, height)
        passes: Number of Anime4K passes (>= 1)
        strength_color: Color push strength, derived from the scale if None
        strength_gradient: Gradient push strength, derived from the scale if None
        version: "v0.9" or "v1.0-rc2"

    Returns:
        Processed RGBA image

    Raises:
        InvalidConfiguration: before any pixel work, on invalid parameters
    """
    config = ScalerConfig()
    config.version = version
    if isinstance(target, (tuple, list)):
        config.target_size = (int(target[0]), int(target[1]))
    else:
        config.scale_factor = target
    config.passes = passes
    config.strength_color = strength_color
    config.strength_gradient = strength_gradient
    config.verbose = verbose

    return Anime4KScaler(config).process_image(image)


def process_single_image(
    input_path: str,
    output_path: Optional[str],
    config: ScalerConfig
) -> Path:
    """
    Process a single image file.

    Args:
        input_path: Path to input image
        output_path: Path to save output image (default: <input>_anime4k.png)
        config: Scaler configuration

    Returns:
        Path of the written image
    """
    input_img = load_image(input_path)

    scaler = Anime4KScaler(config)
    output_img = scaler.process_image(input_img)

    if output_path is None:
        output_path = default_output_path(input_path)
    written = save_image(output_img, output_path)
    if config.verbose:
        print(f"[Success] Saved output to: {written}")
    return written


def process_image_sequence(
    input_dir: str,
    output_dir: str,
    config: ScalerConfig,
    pattern: str = "*"
) -> int:
    """
    Process every image in a directory with one scaler.

    Args:
        input_dir: Directory containing input images
        output_dir: Directory to save output images (same file names)
        config: Scaler configuration
        pattern: Glob pattern for input files

    Returns:
        Number of processed images
    """
    input_path = Path(input_dir)
    if not input_path.is_dir():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    def log(message: str):
        if config.verbose:
            print(message)

    input_files = [f for f in sorted(input_path.glob(pattern)) if is_image_file(f)]
    if not input_files:
        log(f"[Batch] No images found matching {pattern} in {input_dir}")
        return 0

    log(f"[Batch] Processing {len(input_files)} images")

    scaler = Anime4KScaler(config)

    for i, input_file in enumerate(input_files):
        log(f"\n[Batch {i + 1}/{len(input_files)}] {input_file.name}")
        output_img = scaler.process_image(load_image(input_file))
        save_image(output_img, output_path / f"{input_file.stem}.png")

    log(f"\n[Success] Processed {len(input_files)} images")
    log(f"[Output] Saved to: {output_dir}")
    return len(input_files)
