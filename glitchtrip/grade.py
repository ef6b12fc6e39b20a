"""Color grading: brightness, saturation, r-g plane hue rotation, contrast crush."""

from __future__ import annotations

import numpy as np

from glitchtrip.core import PixelBuffer, to_bytes


def crush_curve(values: np.ndarray, amount: float) -> np.ndarray:
    """Steepen around mid-gray: clamp((1 + 2*amount) * (x - 0.5) + 0.5)."""
    k = 1.0 + 2.0 * amount
    return np.clip(k * (values - 0.5) + 0.5, 0.0, 1.0)


def grade(
    buf: PixelBuffer,
    crush: float = 0.0,
    saturation: float = 1.0,
    hue: float = 0.0,
    brightness: float = 0.0,
) -> PixelBuffer:
    """Apply the color grade in fixed order.

    1. add `brightness` to r, g, b and clamp to [0, 1]
    2. scale each channel's distance from the per-pixel mean by `saturation`
    3. rotate (r, g) by `hue` degrees and clamp r, g
    4. contrast crush when `crush` > 0

    The hue step is a plain rotation in the r-g plane, not an HSV hue shift;
    blue is left alone. Alpha passes through.
    """
    if crush <= 0 and saturation == 1 and hue == 0 and brightness == 0:
        return buf

    px = buf.pixels
    rgb = np.clip(px[:, :, :3].astype(np.float64) / 255.0 + brightness, 0.0, 1.0)

    lum = (rgb[..., 0:1] + rgb[..., 1:2] + rgb[..., 2:3]) / 3.0
    rgb = lum + (rgb - lum) * saturation

    theta = np.deg2rad(hue)
    cos_h, sin_h = np.cos(theta), np.sin(theta)
    r, g = rgb[..., 0], rgb[..., 1]
    new_r = r * cos_h - g * sin_h
    new_g = r * sin_h + g * cos_h
    rgb[..., 0] = np.clip(new_r, 0.0, 1.0)
    rgb[..., 1] = np.clip(new_g, 0.0, 1.0)

    if crush > 0:
        rgb = crush_curve(rgb, crush)

    out = px.copy()
    out[:, :, :3] = to_bytes(np.nan_to_num(rgb) * 255.0)
    return PixelBuffer(out)
