"""Tests for pipeline module."""

from dataclasses import replace

import numpy as np
import pytest

from glitchtrip.core import AttractorPoint, GlitchParameters, InvalidInput, PixelBuffer
from glitchtrip.pipeline import apply_all, record, working_scale, working_size


@pytest.fixture
def full_params():
    """Every stage switched on except the randomized ones."""
    return GlitchParameters(
        rgb_shift_pixels=3.0, aberration_strength=0.4, wave_amplitude=6.0,
        wave_frequency=12.0, pixel_sort_amount=0.3, scanline_strength=0.5,
        contrast_crush=0.2, saturation=1.3, hue_degrees=15.0, brightness_offset=0.05,
        attractors=(AttractorPoint(0.3, 0.3), AttractorPoint(0.7, 0.6)),
    )


class TestWorkingScale:
    def test_small_image_full_size(self):
        assert working_scale(800) == 1.0

    def test_large_image(self):
        assert working_scale(3200) == 0.5
        assert working_size(3200, 1801, 0.5) == (1600, 900)

    def test_never_zero(self):
        assert working_size(5000, 1, 0.01) == (50, 1)


class TestApplyAll:
    def test_neutral_gray(self, gray_buf):
        out = apply_all(gray_buf, GlitchParameters())
        assert (out.width, out.height) == (4, 4)
        assert np.all(out.pixels == np.array([128, 128, 128, 255], dtype=np.uint8))

    def test_brightness_saturates(self, gray_buf):
        out = apply_all(gray_buf, GlitchParameters(brightness_offset=0.5))
        assert np.all(out.pixels == 255)

    def test_desaturate(self):
        px = np.array([[[255, 0, 0, 255], [0, 0, 0, 255]]], dtype=np.uint8)
        out = apply_all(PixelBuffer(px), GlitchParameters(saturation=0.0)).pixels
        np.testing.assert_array_equal(out[0, 0], [85, 85, 85, 255])
        np.testing.assert_array_equal(out[0, 1], [0, 0, 0, 255])

    def test_neutral_returns_copy(self, noisy_buf):
        out = apply_all(noisy_buf, GlitchParameters())
        assert out is not noisy_buf
        assert not np.shares_memory(out.pixels, noisy_buf.pixels)
        np.testing.assert_array_equal(out.pixels, noisy_buf.pixels)

    def test_source_not_mutated(self, noisy_buf, full_params):
        before = noisy_buf.pixels.copy()
        apply_all(noisy_buf, replace(full_params, block_jitter_size=8, noise_amount=0.3))
        np.testing.assert_array_equal(noisy_buf.pixels, before)

    def test_deterministic_without_random_stages(self, noisy_buf, full_params):
        r1 = apply_all(noisy_buf, full_params)
        r2 = apply_all(noisy_buf, full_params)
        np.testing.assert_array_equal(r1.pixels, r2.pixels)
        assert not np.array_equal(r1.pixels, noisy_buf.pixels)

    def test_seeded(self, noisy_buf, full_params):
        p = replace(full_params, block_jitter_size=8, noise_amount=0.3, seed=42)
        r1 = apply_all(noisy_buf, p)
        r2 = apply_all(noisy_buf, p)
        np.testing.assert_array_equal(r1.pixels, r2.pixels)
        r3 = apply_all(noisy_buf, replace(p, seed=43))
        assert not np.array_equal(r1.pixels, r3.pixels)

    def test_restores_resolution(self, noisy_buf, full_params):
        out = apply_all(noisy_buf, full_params, max_width=20)
        assert (out.width, out.height) == (48, 32)

    def test_restores_size_near_unit_scale(self):
        # 10000 / 10001 truncates the height from 2 to 1
        assert working_size(10001, 2, working_scale(10001, 10000)) == (10000, 1)
        buf = PixelBuffer.filled(10001, 2, (10, 20, 30, 255))
        out = apply_all(buf, GlitchParameters(), max_width=10000)
        assert (out.width, out.height) == (10001, 2)
        np.testing.assert_array_equal(out.pixels, buf.pixels)

    def test_downscaled_neutral_flat(self):
        buf = PixelBuffer.filled(40, 30, (60, 120, 180, 255))
        out = apply_all(buf, GlitchParameters(), max_width=20)
        np.testing.assert_array_equal(out.pixels, buf.pixels)

    def test_boost_mode(self, noisy_buf, full_params):
        plain = apply_all(noisy_buf, full_params)
        boosted = apply_all(noisy_buf, replace(full_params, boost_mode=True))
        assert boosted.pixels.shape == plain.pixels.shape
        assert not np.array_equal(plain.pixels, boosted.pixels)

    def test_out_of_range_params(self, noisy_buf):
        p = GlitchParameters(noise_amount=float("nan"), brightness_offset=4.0,
                             hue_degrees=float("inf"), seed=1)
        out = apply_all(noisy_buf, p)
        # Brightness clamps to +0.5, the hue to +180
        assert out.pixels.shape == noisy_buf.pixels.shape
        assert np.all(out.pixels[:, :, 2] >= noisy_buf.pixels[:, :, 2])

    def test_empty_buffer(self):
        with pytest.raises(InvalidInput):
            apply_all(PixelBuffer(np.zeros((0, 0, 4), dtype=np.uint8)), GlitchParameters())

    def test_wrong_shape(self):
        with pytest.raises(InvalidInput):
            apply_all(PixelBuffer(np.zeros((4, 4), dtype=np.uint8)), GlitchParameters())

    def test_not_a_buffer(self):
        with pytest.raises(InvalidInput):
            apply_all(np.zeros((4, 4, 4), dtype=np.uint8), GlitchParameters())

    def test_bad_max_width(self, gray_buf):
        with pytest.raises(ValueError):
            apply_all(gray_buf, GlitchParameters(), max_width=0)


class TestRecord:
    def test_frame_count(self, noisy_buf):
        frames = list(record(noisy_buf, GlitchParameters(noise_amount=0.3), 3, seed=5))
        assert len(frames) == 3
        assert not np.array_equal(frames[0].pixels, frames[1].pixels)

    def test_seeded_repeats(self, noisy_buf):
        p = GlitchParameters(block_jitter_size=6, noise_amount=0.2)
        a = list(record(noisy_buf, p, 2, seed=9))
        b = list(record(noisy_buf, p, 2, seed=9))
        for fa, fb in zip(a, b):
            np.testing.assert_array_equal(fa.pixels, fb.pixels)

    def test_zero_frames(self, noisy_buf):
        with pytest.raises(ValueError):
            list(record(noisy_buf, GlitchParameters(), 0))
