"""Named parameter presets."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from glitchtrip.core import AttractorPoint, GlitchParameters

DEFAULT_ATTRACTORS = (AttractorPoint(0.3, 0.3), AttractorPoint(0.7, 0.6))


@dataclass(frozen=True)
class Preset:
    """A fully populated look, minus the per-run switches (boost, seed)."""
    name: str
    rgb_shift_pixels: float
    block_jitter_size: int
    noise_amount: float
    scanline_strength: float
    wave_amplitude: float
    wave_frequency: float
    pixel_sort_amount: float
    aberration_strength: float
    contrast_crush: float
    saturation: float
    hue_degrees: float
    brightness_offset: float
    attractors: tuple[AttractorPoint, ...] = field(default=DEFAULT_ATTRACTORS)
    boost_only: bool = False

    def to_params(self, boost_mode: bool = False, seed: int | None = None) -> GlitchParameters:
        return GlitchParameters(
            rgb_shift_pixels=self.rgb_shift_pixels,
            aberration_strength=self.aberration_strength,
            block_jitter_size=self.block_jitter_size,
            noise_amount=self.noise_amount,
            scanline_strength=self.scanline_strength,
            wave_amplitude=self.wave_amplitude,
            wave_frequency=self.wave_frequency,
            pixel_sort_amount=self.pixel_sort_amount,
            contrast_crush=self.contrast_crush,
            saturation=self.saturation,
            hue_degrees=self.hue_degrees,
            brightness_offset=self.brightness_offset,
            attractors=self.attractors,
            boost_mode=boost_mode,
            seed=seed,
        )


def _points(*pairs) -> tuple[AttractorPoint, ...]:
    return tuple(AttractorPoint(x, y) for x, y in pairs)


VHS = Preset("VHS", 4.0, 6, 0.12, 0.6, 4.0, 10.0, 0.0, 0.2, 0.1, 1.0, -4.0, 0.05,
             _points((0.25, 0.35), (0.7, 0.55)))
MOSH = Preset("MOSH", 10.0, 22, 0.05, 0.2, 8.0, 5.0, 0.7, 0.4, 0.2, 1.2, 8.0, 0.0,
              _points((0.2, 0.8), (0.8, 0.2)))
PINK = Preset("PINK", 8.0, 16, 0.10, 0.4, 12.0, 14.0, 0.4, 0.6, 0.1, 1.4, 22.0, 0.05,
              _points((0.4, 0.3), (0.65, 0.7)))
SPAMYETI = Preset("SPAMYETI", 14.0, 28, 0.16, 0.7, 18.0, 18.0, 0.55, 0.8, 0.25, 1.5, 44.0, 0.15,
                  _points((0.33, 0.33), (0.66, 0.66)), boost_only=True)

PRESETS = {p.name: p for p in (VHS, MOSH, PINK, SPAMYETI)}


def available_presets(boost_mode: bool = False) -> list[Preset]:
    """Presets a session may offer; boost-only looks need boost mode."""
    return [p for p in PRESETS.values() if boost_mode or not p.boost_only]


def get_preset(name: str) -> Preset:
    """Look up a built-in preset by name (case-insensitive)."""
    key = name.upper()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset: {name} (choose from {', '.join(PRESETS)})")
    return PRESETS[key]


def random_preset(rng: np.random.Generator | None = None) -> Preset:
    """Draw every parameter uniformly from its playful range."""
    if rng is None:
        rng = np.random.default_rng()

    def rf(lo, hi):
        return float(rng.uniform(lo, hi))

    return Preset(
        "RANDOM",
        rgb_shift_pixels=rf(0.0, 20.0),
        block_jitter_size=int(rng.integers(0, 30)),
        noise_amount=rf(0.0, 0.5),
        scanline_strength=rf(0.0, 1.0),
        wave_amplitude=rf(0.0, 30.0),
        wave_frequency=rf(0.0, 30.0),
        pixel_sort_amount=rf(0.0, 1.0),
        aberration_strength=rf(0.0, 1.0),
        contrast_crush=rf(0.0, 1.0),
        saturation=rf(0.6, 1.8),
        hue_degrees=rf(-90.0, 90.0),
        brightness_offset=rf(-0.2, 0.2),
        attractors=tuple(AttractorPoint(rf(0.1, 0.9), rf(0.1, 0.9)) for _ in range(2)),
    )
