"""glitchtrip: still-image glitch pipeline built on numpy, scipy and Pillow."""

from glitchtrip.core import (
    PixelBuffer, AttractorPoint, GlitchParameters, InvalidInput,
    load_image, save_image,
)
from glitchtrip.effects import rgb_split, block_jitter, pixel_sort, film, watermark
from glitchtrip.displace import wave_displace, nearest_attractor
from glitchtrip.grade import grade
from glitchtrip.pipeline import apply_all, record, MAX_WORKING_WIDTH
from glitchtrip.presets import Preset, get_preset, random_preset, available_presets

__version__ = "0.1.0"
