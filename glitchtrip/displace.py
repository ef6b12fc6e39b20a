"""Attractor-driven wave displacement."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from glitchtrip.core import AttractorPoint, PixelBuffer, round_half_up

EPSILON = 1e-3
MIN_WAVELENGTH = 6.0


def wavelength(frequency: float) -> float:
    """Radial wavelength divisor for a given wave frequency."""
    return max(MIN_WAVELENGTH, 120.0 / (1.0 + frequency))


def displacement_field(
    width: int,
    height: int,
    amplitude: float,
    frequency: float,
    attractors: Sequence[AttractorPoint],
) -> tuple[np.ndarray, np.ndarray]:
    """Sum the tangential swirl of every attractor over the pixel grid.

    Each attractor pushes a pixel at radius r perpendicular to the radius
    by `amplitude * sin(r / wavelength)`.

    Returns:
        (dx, dy) float64 arrays of shape (height, width).
    """
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    dx = np.zeros((height, width), dtype=np.float64)
    dy = np.zeros((height, width), dtype=np.float64)
    wl = wavelength(frequency)

    for point in attractors:
        ox, oy = point.to_pixels(width, height)
        rx = xs - ox
        ry = ys - oy
        r = np.hypot(rx, ry)
        a = amplitude * np.sin(r / wl)
        dx += -ry / (r + EPSILON) * a
        dy += rx / (r + EPSILON) * a

    return dx, dy


def wave_displace(
    buf: PixelBuffer,
    amplitude: float,
    frequency: float,
    attractors: Sequence[AttractorPoint],
) -> PixelBuffer:
    """Warp the image around the attractors by pulling from displaced coordinates.

    Every output pixel samples the input at round(x + dx), round(y + dy),
    clamped to the frame, so there are no holes. Amplitudes below one pixel
    or a non-positive frequency leave the buffer untouched.
    """
    if amplitude < 1 or frequency <= 0 or not attractors:
        return buf

    h, w = buf.height, buf.width
    dx, dy = displacement_field(w, h, amplitude, frequency, attractors)
    xs = np.arange(w, dtype=np.float64)[np.newaxis, :]
    ys = np.arange(h, dtype=np.float64)[:, np.newaxis]

    sx = np.clip(round_half_up(np.nan_to_num(xs + dx)), 0, w - 1)
    sy = np.clip(round_half_up(np.nan_to_num(ys + dy)), 0, h - 1)

    return PixelBuffer(buf.pixels[sy, sx])


def nearest_attractor(attractors: Sequence[AttractorPoint], x: float, y: float) -> int:
    """Index of the attractor closest to normalized (x, y); first wins ties."""
    if not attractors:
        raise ValueError("No attractors to choose from")
    best = 0
    best_d = float("inf")
    for i, point in enumerate(attractors):
        d = (point.x - x) ** 2 + (point.y - y) ** 2
        if d < best_d:
            best, best_d = i, d
    return best
