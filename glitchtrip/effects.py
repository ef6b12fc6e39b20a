"""Per-buffer glitch stages: channel split, block jitter, pixel sort, film, watermark."""

from __future__ import annotations

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from scipy import ndimage

from glitchtrip.core import PixelBuffer, round_half_up, to_bytes

SCANLINE_ALPHA_SCALE = 40      # scanline alpha = strength * 40
NOISE_SCALE = 60               # max noise step = amount * 60
SORT_GAP = 3                   # pixels skipped between sorted runs
WATERMARK_TEXT = "~ SPAM ART ~"
WATERMARK_COLOR = (255, 64, 160, 90)


def _translate(channel: np.ndarray, dx: int, dy: int) -> np.ndarray:
    """Move a 2-D plane by (dx, dy); vacated pixels become 0."""
    h, w = channel.shape
    out = np.zeros_like(channel)
    if abs(dx) >= w or abs(dy) >= h:
        return out
    out[max(0, dy):h + min(0, dy), max(0, dx):w + min(0, dx)] = \
        channel[max(0, -dy):h + min(0, -dy), max(0, -dx):w + min(0, -dx)]
    return out


def _over(dst: np.ndarray, src: np.ndarray, opacity: float = 1.0) -> np.ndarray:
    """Source-over composite of straight-alpha float RGBA layers (0-255)."""
    sa = src[..., 3:4] / 255.0 * opacity
    da = dst[..., 3:4] / 255.0
    out_a = sa + da * (1.0 - sa)
    safe_a = np.where(out_a > 0, out_a, 1.0)
    rgb = (src[..., :3] * sa + dst[..., :3] * da * (1.0 - sa)) / safe_a
    return np.concatenate([rgb, out_a * 255.0], axis=-1)


def _scaled_ghost(pixels: np.ndarray, scale: float) -> np.ndarray:
    """Bilinear copy of the image magnified by `scale` about its center."""
    h, w = pixels.shape[:2]
    # Pixel centers sit at index + 0.5; map each output center back to its source
    offset = [
        (0.5 - h / 2.0) / scale + h / 2.0 - 0.5,
        (0.5 - w / 2.0) / scale + w / 2.0 - 0.5,
    ]
    src = pixels.astype(np.float64)
    planes = [
        ndimage.affine_transform(
            src[:, :, ch], [1.0 / scale, 1.0 / scale], offset=offset,
            order=1, mode="constant", cval=0.0,
        )
        for ch in range(4)
    ]
    return np.stack(planes, axis=-1)


def rgb_split(
    buf: PixelBuffer,
    shift_px: float,
    aberration: float = 0.0,
) -> PixelBuffer:
    """Offset red up-right and blue down-left, then overlay a magnified ghost.

    Red is taken from the image moved by (+s, -s), green stays put, blue is
    moved by (-s, +s). Channels that slide in from outside the frame are
    black. Alpha comes from the unshifted copy.

    Args:
        buf: Input buffer.
        shift_px: Shift magnitude in pixels (rounded half-up).
        aberration: 0-1 strength of the scaled ghost overlay.

    Returns:
        Split buffer, or `buf` itself when both effects are off.
    """
    s = round_half_up(max(0.0, shift_px))
    if s == 0 and aberration <= 0:
        return buf

    src = buf.pixels
    out = src.copy()
    if s:
        out[:, :, 0] = _translate(src[:, :, 0], s, -s)
        out[:, :, 2] = _translate(src[:, :, 2], -s, s)

    if aberration > 0:
        opacity = min(1.0, max(0.0, aberration * 80.0 / 255.0))
        ghost = _scaled_ghost(src, 1.0 + 0.02 * aberration)
        out = to_bytes(_over(out.astype(np.float64), ghost, opacity))

    return PixelBuffer(out)


def block_jitter(
    buf: PixelBuffer,
    size: int,
    rng: np.random.Generator | None = None,
) -> PixelBuffer:
    """Scatter square tiles by up to half a tile in each direction.

    Tiles are read from the input and written in raster order, so a later
    tile may cover part of an earlier one.
    """
    if size <= 0:
        return buf
    if rng is None:
        rng = np.random.default_rng()

    step = max(4, int(size))
    src = buf.pixels
    out = src.copy()
    h, w = src.shape[:2]

    # (row, col, [x, y]) offsets for every tile
    rows, cols = -(-h // step), -(-w // step)
    offsets = rng.integers(step, size=(rows, cols, 2)) - step // 2

    for row, y in enumerate(range(0, h, step)):
        for col, x in enumerate(range(0, w, step)):
            bw = min(step, w - x)
            bh = min(step, h - y)
            dx = x + int(offsets[row, col, 0])
            dy = y + int(offsets[row, col, 1])
            dx = min(max(dx, 0), w - bw)
            dy = min(max(dy, 0), h - bh)
            out[dy:dy + bh, dx:dx + bw] = src[y:y + bh, x:x + bw]

    return PixelBuffer(out)


def pixel_sort(buf: PixelBuffer, amount: float) -> PixelBuffer:
    """Sort runs of pixels along every even row by packed ARGB value.

    Runs are `round(20 + amount * 180)` pixels long (shorter at the row end)
    with a 3 pixel unsorted gap between them. Odd rows are untouched.
    """
    if amount <= 0.01:
        return buf

    packed = buf.packed()
    w = packed.shape[1]
    run = max(1, round_half_up(20 + amount * 180))

    # Run boundaries depend only on the width, so all even rows sort together
    rows = packed[::2]
    i = 0
    while i < w:
        seg = min(run, w - i)
        rows[:, i:i + seg] = np.sort(rows[:, i:i + seg], axis=1)
        i += seg + SORT_GAP

    return PixelBuffer.from_packed(packed)


def film(
    buf: PixelBuffer,
    scanlines: float = 0.0,
    noise: float = 0.0,
    rng: np.random.Generator | None = None,
) -> PixelBuffer:
    """Darken every even row and add grain.

    Scanlines are black at alpha `round(scanlines * 40)` composited over
    rows 0, 2, 4, ... Grain adds one integer in [-n, n] (n = round(noise * 60))
    to all three color channels of each pixel; alpha is kept.
    """
    line_alpha = min(255, max(0, round_half_up(scanlines * SCANLINE_ALPHA_SCALE)))
    n_scale = max(0, round_half_up(noise * NOISE_SCALE))
    if line_alpha == 0 and n_scale == 0:
        return buf
    if rng is None:
        rng = np.random.default_rng()

    out = buf.pixels.copy()
    h, w = out.shape[:2]

    if line_alpha > 0:
        rows = out[::2].astype(np.float64)
        black = np.zeros_like(rows)
        black[..., 3] = line_alpha
        out[::2] = to_bytes(_over(rows, black))

    if n_scale > 0:
        grain = rng.integers(-n_scale, n_scale + 1, size=(h, w), dtype=np.int16)
        rgb = out[:, :, :3].astype(np.int16) + grain[:, :, np.newaxis]
        out[:, :, :3] = np.clip(rgb, 0, 255).astype(np.uint8)

    return PixelBuffer(out)


def watermark(buf: PixelBuffer, text: str = WATERMARK_TEXT) -> PixelBuffer:
    """Tile a translucent pink text mark over the whole image.

    Rows are staggered by half the text width.
    """
    img = Image.fromarray(np.ascontiguousarray(buf.pixels))
    w, h = img.size
    layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    size = max(1.0, min(w, h) * 0.08)
    font = ImageFont.load_default(size=size)
    text_w = draw.textlength(text, font=font) or size

    y = size * 1.2
    stagger = False
    while y < h:
        x = -text_w / 2 if stagger else 0.0
        while x < w:
            draw.text((x, y), text, font=font, fill=WATERMARK_COLOR, anchor="ls")
            x += text_w * 1.5
        y += size * 1.8
        stagger = not stagger

    return PixelBuffer(np.array(Image.alpha_composite(img, layer)))
