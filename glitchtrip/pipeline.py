"""Pipeline orchestrator: runs every glitch stage in order."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterator

import numpy as np

from glitchtrip.core import GlitchParameters, InvalidInput, PixelBuffer, resample
from glitchtrip.displace import wave_displace
from glitchtrip.effects import block_jitter, film, pixel_sort, rgb_split, watermark
from glitchtrip.grade import grade

MAX_WORKING_WIDTH = 1600


def working_scale(width: int, max_width: int = MAX_WORKING_WIDTH) -> float:
    """Downscale factor that keeps the working width within `max_width`."""
    return min(1.0, max_width / width)


def working_size(width: int, height: int, scale: float) -> tuple[int, int]:
    return max(1, int(width * scale)), max(1, int(height * scale))


def apply_all(
    source: PixelBuffer,
    params: GlitchParameters,
    max_width: int = MAX_WORKING_WIDTH,
) -> PixelBuffer:
    """Glitch a decoded image.

    The source is box-resampled down to at most `max_width` pixels wide,
    pushed through channel split, wave displacement, block jitter, pixel
    sort, film, color grade and (in boost mode) the watermark, then
    resampled back to its original size. Pixel shifts and wave amplitude
    are scaled with the image so the look does not depend on resolution.

    Args:
        source: Input buffer. Never modified.
        params: Stage parameters. Out-of-range values are clamped.
        max_width: Working width budget.

    Returns:
        A new buffer with the source's dimensions.

    Raises:
        InvalidInput: If `source` is not a non-empty RGBA8 buffer.
    """
    if not isinstance(source, PixelBuffer):
        raise InvalidInput(f"Expected PixelBuffer, got {type(source).__name__}")
    source.validate()
    if max_width <= 0:
        raise ValueError(f"max_width must be positive, got {max_width}")

    p = params.clamped().boosted()
    rng = np.random.default_rng(p.seed)

    scale = working_scale(source.width, max_width)
    w, h = working_size(source.width, source.height, scale)
    buf = resample(source, w, h)

    buf = rgb_split(buf, p.rgb_shift_pixels * scale, p.aberration_strength)
    buf = wave_displace(buf, p.wave_amplitude * scale, p.wave_frequency, p.attractors)
    buf = block_jitter(buf, p.block_jitter_size, rng=rng)
    buf = pixel_sort(buf, p.pixel_sort_amount)
    buf = film(buf, p.scanline_strength, p.noise_amount, rng=rng)
    buf = grade(buf, p.contrast_crush, p.saturation, p.hue_degrees, p.brightness_offset)
    if p.boost_mode:
        buf = watermark(buf)

    if (w, h) != (source.width, source.height):
        buf = resample(buf, source.width, source.height)
    return buf


def record(
    source: PixelBuffer,
    params: GlitchParameters,
    frames: int,
    seed: int | None = None,
    max_width: int = MAX_WORKING_WIDTH,
) -> Iterator[PixelBuffer]:
    """Yield `frames` successive glitches of the same source.

    Each frame gets its own seed drawn from a generator seeded with `seed`,
    so jitter and grain change frame to frame but a seeded run repeats.
    """
    if frames < 1:
        raise ValueError(f"frames must be >= 1, got {frames}")
    seeder = np.random.default_rng(seed)
    for _ in range(frames):
        frame_seed = int(seeder.integers(0, 2**31))
        yield apply_all(source, replace(params, seed=frame_seed), max_width=max_width)
