"""
Anime4K - Optional FXAA Stage
=============================
One iteration of fast approximate anti-aliasing, gated and weighted by the
v1.0-RC2 line map. Not part of any default pipeline; enabled with
`enable_fxaa=True`.

Luminance comes from the data grid (LUMA, normalized to 0-1) so that the
direction estimate and the range test use the same units.
"""

import numpy as np
from typing import Optional

from .feature_stages import luminance
from .frame_transform import ParallelFrameTransform, default_transform
from .pixel_grid import LINE, LUMA, PixelGrid
from .push_kernel import LINE_DETECT_MULTI, LINE_DETECT_THRESHOLD

FXAA_REDUCE_MIN = 1.0 / 128.0
FXAA_REDUCE_MUL = 1.0 / 8.0
FXAA_SPAN_MAX = 8.0


def apply_fxaa(
    image: PixelGrid,
    data: PixelGrid,
    strength: float,
    transform: Optional[ParallelFrameTransform] = None
) -> PixelGrid:
    """
    Anti-alias line pixels of `image`.

    Args:
        image: Image grid
        data: Data grid of the same pass (LUMA and LINE are read)
        strength: Gradient strength; blend weight is
            clamp(line / 255 * strength * 6, 0, 1)

    Returns:
        New image grid
    """
    transform = transform or default_transform()
    image.require_same_shape(data)
    pixels = image.pixels
    height, width = image.height, image.width

    def band(y0, y1):
        def luma(dx, dy):
            return data.neighbor(dx, dy, y0, y1)[..., LUMA].astype(np.float64) / 255.0

        tl, tr, bl, br, mc = luma(-1, -1), luma(1, -1), luma(-1, 1), luma(1, 1), luma(0, 0)
        luma_min = np.minimum.reduce([mc, tl, tr, bl, br])
        luma_max = np.maximum.reduce([mc, tl, tr, bl, br])

        dir_x = -(tl + tr) + (bl + br)
        dir_y = (tl + bl) - (tr + br)

        dir_reduce = np.maximum((tl + tr + bl + br) * (0.25 * FXAA_REDUCE_MUL), FXAA_REDUCE_MIN)
        rcp_dir_min = 1.0 / (np.minimum(np.abs(dir_x), np.abs(dir_y)) + dir_reduce)
        dir_x = np.clip(dir_x * rcp_dir_min, -FXAA_SPAN_MAX, FXAA_SPAN_MAX)
        dir_y = np.clip(dir_y * rcp_dir_min, -FXAA_SPAN_MAX, FXAA_SPAN_MAX)

        ys = np.arange(y0, y1, dtype=np.float64)[:, np.newaxis]
        xs = np.arange(width, dtype=np.float64)[np.newaxis, :]

        def sample(t):
            sx = np.clip(np.floor(xs + dir_x * t), 0, width - 1).astype(np.intp)
            sy = np.clip(np.floor(ys + dir_y * t), 0, height - 1).astype(np.intp)
            return pixels[sy, sx].astype(np.float64)

        rgb_a = 0.5 * (sample(-1.0 / 6.0) + sample(1.0 / 6.0))
        rgb_b = rgb_a * 0.5 + 0.25 * (sample(-0.5) + sample(0.5))

        luma_b = luminance(np.floor(rgb_b)).astype(np.float64) / 255.0
        outside = (luma_b < luma_min) | (luma_b > luma_max)
        chosen = np.where(outside[..., np.newaxis], rgb_a, rgb_b)

        lines = data.pixels[y0:y1, :, LINE].astype(np.float64)
        real_strength = np.clip(lines / 255.0 * strength * LINE_DETECT_MULTI, 0.0, 1.0)[..., np.newaxis]

        center = pixels[y0:y1].astype(np.float64)
        blended = np.floor(np.clip(center * (1.0 - real_strength) + chosen * real_strength, 0.0, 255.0))

        active = (lines >= LINE_DETECT_THRESHOLD)[..., np.newaxis]
        return np.where(active, blended, center).astype(np.uint8)

    return transform.map_rows(image, band)
