"""PixelBuffer, GlitchParameters, and shared raster utilities."""

from __future__ import annotations

import json
import math
import os
import time
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path

import numpy as np
from PIL import Image


class InvalidInput(ValueError):
    """Raised when a pixel buffer has an unusable shape."""


def round_half_up(x):
    """Round to the nearest integer, halves going up. Works on scalars and arrays."""
    if isinstance(x, np.ndarray):
        return np.floor(x + 0.5).astype(np.int64)
    return int(math.floor(x + 0.5))


def to_bytes(values: np.ndarray) -> np.ndarray:
    """Convert [0, 255] floats to uint8 with round-half-up and clamping."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


@dataclass
class PixelBuffer:
    """Decoded RGBA8 raster: (H, W, 4) uint8, straight alpha."""
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def validate(self) -> PixelBuffer:
        """Raise InvalidInput unless this is a non-empty RGBA8 raster."""
        px = self.pixels
        if not isinstance(px, np.ndarray) or px.ndim != 3 or px.shape[2] != 4:
            shape = getattr(px, "shape", None)
            raise InvalidInput(f"Expected (H, W, 4) RGBA array, got shape {shape}")
        if px.dtype != np.uint8:
            raise InvalidInput(f"Expected uint8 pixels, got {px.dtype}")
        if px.shape[0] <= 0 or px.shape[1] <= 0:
            raise InvalidInput(f"Empty buffer: {px.shape[1]}x{px.shape[0]}")
        return self

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.pixels.copy())

    def packed(self) -> np.ndarray:
        """Pack to (H, W) uint32 ARGB words (alpha in the top byte)."""
        px = self.pixels.astype(np.uint32)
        return (px[:, :, 3] << 24) | (px[:, :, 0] << 16) | (px[:, :, 1] << 8) | px[:, :, 2]

    @classmethod
    def from_packed(cls, packed: np.ndarray) -> PixelBuffer:
        packed = packed.astype(np.uint32)
        px = np.empty(packed.shape + (4,), dtype=np.uint8)
        px[:, :, 0] = (packed >> 16) & 0xFF
        px[:, :, 1] = (packed >> 8) & 0xFF
        px[:, :, 2] = packed & 0xFF
        px[:, :, 3] = (packed >> 24) & 0xFF
        return cls(px)

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]) -> PixelBuffer:
        """A solid-color buffer."""
        px = np.empty((height, width, 4), dtype=np.uint8)
        px[:, :] = rgba
        return cls(px)


@dataclass(frozen=True)
class AttractorPoint:
    """Normalized (x, y) location in [0, 1]² that bends the wave field."""
    x: float
    y: float

    def to_pixels(self, width: int, height: int) -> tuple[float, float]:
        return self.x * width, self.y * height

    def to_dict(self) -> dict:
        return {"x": float(self.x), "y": float(self.y)}

    @classmethod
    def from_dict(cls, d: dict) -> AttractorPoint:
        return cls(x=float(d["x"]), y=float(d["y"]))


def _clamp(value: float, lo: float, hi: float, fallback: float) -> float:
    value = float(value)
    if math.isnan(value):
        return fallback
    return min(hi, max(lo, value))


@dataclass(frozen=True)
class GlitchParameters:
    """Every stage input for one pipeline run.

    Defaults are the neutral values: a pipeline run with a default record
    leaves the image untouched (up to resampling).
    """
    rgb_shift_pixels: float = 0.0
    aberration_strength: float = 0.0     # [0, 1]
    block_jitter_size: int = 0           # 0 disables
    noise_amount: float = 0.0            # [0, 1]
    scanline_strength: float = 0.0       # [0, 1]
    wave_amplitude: float = 0.0
    wave_frequency: float = 0.0
    pixel_sort_amount: float = 0.0       # [0, 1]
    contrast_crush: float = 0.0          # [0, 1]
    saturation: float = 1.0
    hue_degrees: float = 0.0             # [-180, 180]
    brightness_offset: float = 0.0       # [-0.5, 0.5]
    attractors: tuple[AttractorPoint, ...] = field(default_factory=tuple)
    boost_mode: bool = False
    seed: int | None = None

    def __post_init__(self):
        # Accept any sequence of points or (x, y) pairs
        points = tuple(
            a if isinstance(a, AttractorPoint) else AttractorPoint(*a)
            for a in self.attractors
        )
        object.__setattr__(self, "attractors", points)

    def clamped(self) -> GlitchParameters:
        """Copy with every numeric field forced into its documented range."""
        big = float(np.finfo(np.float32).max)
        jitter = self.block_jitter_size
        if isinstance(jitter, float) and not math.isfinite(jitter):
            jitter = 0
        return replace(
            self,
            rgb_shift_pixels=_clamp(self.rgb_shift_pixels, 0.0, 4096.0, 0.0),
            aberration_strength=_clamp(self.aberration_strength, 0.0, 1.0, 0.0),
            block_jitter_size=max(0, min(4096, int(jitter))),
            noise_amount=_clamp(self.noise_amount, 0.0, 1.0, 0.0),
            scanline_strength=_clamp(self.scanline_strength, 0.0, 1.0, 0.0),
            wave_amplitude=_clamp(self.wave_amplitude, 0.0, 4096.0, 0.0),
            wave_frequency=_clamp(self.wave_frequency, 0.0, big, 0.0),
            pixel_sort_amount=_clamp(self.pixel_sort_amount, 0.0, 1.0, 0.0),
            contrast_crush=_clamp(self.contrast_crush, 0.0, 1.0, 0.0),
            saturation=_clamp(self.saturation, 0.0, big, 1.0),
            hue_degrees=_clamp(self.hue_degrees, -180.0, 180.0, 0.0),
            brightness_offset=_clamp(self.brightness_offset, -0.5, 0.5, 0.0),
            attractors=tuple(
                AttractorPoint(_clamp(a.x, 0.0, 1.0, 0.5), _clamp(a.y, 0.0, 1.0, 0.5))
                for a in self.attractors
            ),
        )

    def boosted(self) -> GlitchParameters:
        """Apply the boost-mode color bias (hue +30°, saturation ×1.1)."""
        if not self.boost_mode:
            return self
        return replace(
            self,
            hue_degrees=self.hue_degrees + 30.0,
            saturation=self.saturation * 1.1,
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["attractors"] = [a.to_dict() for a in self.attractors]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> GlitchParameters:
        d = dict(d)
        d["attractors"] = tuple(AttractorPoint.from_dict(a) for a in d.get("attractors", []))
        known = {f for f in cls.__dataclass_fields__}
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        return cls(**d)

    def save(self, path: str) -> None:
        """Serialize to JSON."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> GlitchParameters:
        with open(path) as f:
            return cls.from_dict(json.load(f))


# --- Resampling & I/O ---

def resample(buf: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """Box-resample to (width, height). Area-preserving in both directions."""
    if buf.width == width and buf.height == height:
        return buf.copy()
    img = Image.fromarray(np.ascontiguousarray(buf.pixels))
    return PixelBuffer(np.array(img.resize((width, height), Image.BOX)))


FORMATS = {
    "png": ("PNG", ".png"),
    "jpeg": ("JPEG", ".jpg"),
    "webp": ("WEBP", ".webp"),
}

_EXTENSIONS = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".webp": "webp",
}


def format_for_path(path: str) -> str:
    """Infer the export format from a file extension."""
    ext = Path(path).suffix.lower()
    if ext not in _EXTENSIONS:
        raise ValueError(f"Unknown image extension: {ext}")
    return _EXTENSIONS[ext]


def output_name(fmt: str = "png", stem: str | None = None) -> str:
    """File name for an export, defaulting to a timestamped one."""
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format: {fmt}")
    if stem is None:
        stem = f"glitchtrip_{int(time.time() * 1000)}"
    return stem + FORMATS[fmt][1]


def load_image(path: str) -> PixelBuffer:
    """Decode any Pillow-readable image into an RGBA PixelBuffer."""
    with Image.open(path) as img:
        return PixelBuffer(np.array(img.convert("RGBA"))).validate()


def save_image(buf: PixelBuffer, path: str, fmt: str | None = None, quality: int = 95) -> None:
    """Encode a PixelBuffer as PNG, JPEG or lossy WebP."""
    if fmt is None:
        fmt = format_for_path(path)
    if fmt not in FORMATS:
        raise ValueError(f"Unknown export format: {fmt}")

    img = Image.fromarray(np.ascontiguousarray(buf.pixels))
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

    pil_format = FORMATS[fmt][0]
    if fmt == "png":
        img.save(path, format=pil_format)
    elif fmt == "jpeg":
        # JPEG has no alpha channel
        img.convert("RGB").save(path, format=pil_format, quality=quality)
    else:
        img.save(path, format=pil_format, quality=quality, lossless=False)
