"""
Anime4K - Feature Extraction Stages
===================================
Vectorized NumPy/SciPy implementations of the stages that fill scratch
channels: luminance, Sobel gradient, separable 7-tap Gaussian and the
line-strength heuristic.

Every stage returns a new PixelGrid built through a ParallelFrameTransform.
Stencil reads use replicate-edge borders (scipy mode='nearest').
"""

import numpy as np
from scipy.ndimage import correlate, correlate1d
from typing import Optional

from .frame_transform import ParallelFrameTransform, default_transform
from .pixel_grid import AUX, GRADIENT, LINE, LUMA, LUMA_BLUR, OPAQUE, PixelGrid


GAUSSIAN_WEIGHTS_7 = np.array(
    [0.124597, 0.142046, 0.155931, 0.160854, 0.155931, 0.142046, 0.124597],
    dtype=np.float64
)
GAUSSIAN_RADIUS = 3

SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]], dtype=np.float64)

SOBEL_Y = np.array([[-1, -2, -1],
                    [0, 0, 0],
                    [1, 2, 1]], dtype=np.float64)

# Line detection constants (v1.0-RC2)
LINE_LUMA_MIN = 0.001
LINE_LUMA_MAX = 0.999
LINE_BIAS = 0.05


def to_byte(values: np.ndarray) -> np.ndarray:
    """Clamp to [0, 255] and floor to uint8."""
    return np.floor(np.clip(values, 0.0, 255.0)).astype(np.uint8)


def luminance(pixels: np.ndarray) -> np.ndarray:
    """
    Lightness of RGB(A) pixels: floor((max(R,G,B) + min(R,G,B)) / 2).

    Args:
        pixels: (..., 3 or 4) uint8 array

    Returns:
        (...) uint8 luminance
    """
    rgb = pixels[..., :3].astype(np.uint16)
    return ((rgb.max(axis=-1) + rgb.min(axis=-1)) // 2).astype(np.uint8)


# ==============================================================================
# Luminance
# ==============================================================================

def stage_luminance(
    grid: PixelGrid,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """
    Store the luminance of every pixel in its AUX channel (v0.9).

    Args:
        grid: Image grid, AUX content is ignored

    Returns:
        Grid with colors unchanged and AUX = luminance
    """
    transform = transform or default_transform()
    pixels = grid.pixels

    def band(y0, y1):
        out = pixels[y0:y1].copy()
        out[..., AUX] = luminance(out)
        return out

    return transform.map_rows(grid, band)


def stage_luma_data(
    image: PixelGrid,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """
    Start a v1.0-RC2 data grid: luminance in all four channels.

    The image itself is not modified.
    """
    transform = transform or default_transform()
    pixels = image.pixels

    def band(y0, y1):
        luma = luminance(pixels[y0:y1])
        return np.repeat(luma[..., np.newaxis], 4, axis=-1)

    return transform.map_rows(image, band)


# ==============================================================================
# Separable Gaussian
# ==============================================================================

def stage_gaussian(
    grid: PixelGrid,
    src: int,
    dst: int,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """
    7-tap separable Gaussian of channel `src`, written to channel `dst`.

    Runs as two full-grid transforms: horizontal (src → dst), then vertical
    (dst → dst). Each pass floors and clamps its result to 0-255.
    """
    transform = transform or default_transform()

    def horizontal(source: PixelGrid):
        pixels = source.pixels

        def band(y0, y1):
            out = pixels[y0:y1].copy()
            plane = pixels[y0:y1, :, src].astype(np.float64)
            out[..., dst] = to_byte(correlate1d(plane, GAUSSIAN_WEIGHTS_7, axis=1, mode='nearest'))
            return out

        return band

    def vertical(source: PixelGrid):
        pixels = source.pixels

        def band(y0, y1):
            out = pixels[y0:y1].copy()
            plane = source.rows(y0, y1, halo=GAUSSIAN_RADIUS)[..., dst].astype(np.float64)
            blurred = correlate1d(plane, GAUSSIAN_WEIGHTS_7, axis=0, mode='nearest')
            out[..., dst] = to_byte(blurred[GAUSSIAN_RADIUS:-GAUSSIAN_RADIUS])
            return out

        return band

    blurred_x = transform.map_rows(grid, horizontal(grid))
    return transform.map_rows(blurred_x, vertical(blurred_x))


# ==============================================================================
# Sobel Gradient
# ==============================================================================

def sobel_magnitude(plane: np.ndarray) -> np.ndarray:
    """
    Sobel gradient magnitude sqrt(dx² + dy²) with replicate-edge borders.

    Args:
        plane: (H, W) array

    Returns:
        (H, W) float64 magnitude
    """
    plane = plane.astype(np.float64)
    dx = correlate(plane, SOBEL_X, mode='nearest')
    dy = correlate(plane, SOBEL_Y, mode='nearest')
    return np.sqrt(dx * dx + dy * dy)


def gradient_value(magnitude: np.ndarray) -> np.ndarray:
    """Inverted gradient byte: 255 = flat, 0 = strong edge."""
    return np.floor(255.0 - np.clip(magnitude, 0.0, 255.0)).astype(np.uint8)


def stage_gradient(
    grid: PixelGrid,
    src: int,
    dst: int,
    skip_border: bool,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """
    Sobel gradient of channel `src`, written inverted to channel `dst`.

    Args:
        grid: Grid holding the source channel
        src: Channel the gradient is computed from
        dst: Channel that receives 255 - clamp(magnitude, 0, 255)
        skip_border: Leave the first/last row and column as they are (v0.9);
            otherwise borders are computed with replicate-edge reads (v1.0-RC2)
    """
    transform = transform or default_transform()
    pixels = grid.pixels
    height, width = grid.height, grid.width

    def band(y0, y1):
        out = pixels[y0:y1].copy()
        plane = grid.rows(y0, y1, halo=1)[..., src]
        value = gradient_value(sobel_magnitude(plane)[1:-1])

        if skip_border:
            keep = np.zeros(value.shape, dtype=bool)
            keep[:, 0] = True
            keep[:, width - 1] = True
            rows = np.arange(y0, y1)
            keep[(rows == 0) | (rows == height - 1)] = True
            value = np.where(keep, out[..., dst], value)

        out[..., dst] = value
        return out

    return transform.map_rows(grid, band)


# ==============================================================================
# Line Detection (v1.0-RC2)
# ==============================================================================

def line_strength(luma: np.ndarray, luma_blur: np.ndarray) -> np.ndarray:
    """
    Line-strength heuristic from raw and blurred luminance bytes.

    Returns:
        uint8 line strength, floor(255 * (1 - clamp(ratio - 0.05, 0, 1)))
    """
    l = np.clip(luma.astype(np.float64) / 255.0, LINE_LUMA_MIN, LINE_LUMA_MAX)
    lg = np.clip(luma_blur.astype(np.float64) / 255.0, LINE_LUMA_MIN, LINE_LUMA_MAX)

    # l is clamped below 1, so the color-divide branch always applies
    ratio = np.minimum(lg / l, 1.0)
    lines = 1.0 - np.clip(ratio - LINE_BIAS, 0.0, 1.0)
    return to_byte(lines * 255.0)


def stage_detect_lines(
    data: PixelGrid,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """Write line strength from LUMA and LUMA_BLUR into the LINE channel."""
    transform = transform or default_transform()
    pixels = data.pixels

    def band(y0, y1):
        out = pixels[y0:y1].copy()
        out[..., LINE] = line_strength(out[..., LUMA], out[..., LUMA_BLUR])
        return out

    return transform.map_rows(data, band)


# ==============================================================================
# Data grid / AUX reset
# ==============================================================================

def build_data_grid(
    image: PixelGrid,
    transform: Optional[ParallelFrameTransform] = None,
    on_phase=None
) -> PixelGrid:
    """
    Compute the full v1.0-RC2 data grid for an image.

    LUMA (R), blurred LUMA (G), blurred LINE (B), GRADIENT (A).

    Args:
        image: Current image grid
        on_phase: Optional callback(name, grid) for debug dumps
    """
    data = stage_luma_data(image, transform)
    data = stage_gaussian(data, LUMA, LUMA_BLUR, transform)
    data = stage_detect_lines(data, transform)
    if on_phase is not None:
        on_phase("1_data_line-det-no-gauss", data)

    data = stage_gaussian(data, LINE, LINE, transform)
    data = stage_gradient(data, LUMA, GRADIENT, skip_border=False, transform=transform)
    if on_phase is not None:
        on_phase("2_data_line-gauss", data)

    return data


def stage_reset_aux(
    grid: PixelGrid,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """Set AUX to opaque (255) everywhere."""
    transform = transform or default_transform()
    pixels = grid.pixels

    def band(y0, y1):
        out = pixels[y0:y1].copy()
        out[..., AUX] = OPAQUE
        return out

    return transform.map_rows(grid, band)
