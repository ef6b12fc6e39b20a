"""Tests for presets module."""

import numpy as np
import pytest

from glitchtrip.core import AttractorPoint, GlitchParameters
from glitchtrip.presets import (
    PRESETS, VHS, SPAMYETI, DEFAULT_ATTRACTORS,
    available_presets, get_preset, random_preset,
)


class TestPresets:
    def test_builtins(self):
        assert list(PRESETS) == ["VHS", "MOSH", "PINK", "SPAMYETI"]

    def test_vhs_values(self):
        p = VHS.to_params()
        assert isinstance(p, GlitchParameters)
        assert p.rgb_shift_pixels == 4.0
        assert p.block_jitter_size == 6
        assert p.hue_degrees == -4.0
        assert p.attractors == (AttractorPoint(0.25, 0.35), AttractorPoint(0.7, 0.55))
        assert p.boost_mode is False

    def test_to_params_switches(self):
        p = VHS.to_params(boost_mode=True, seed=11)
        assert p.boost_mode is True
        assert p.seed == 11

    def test_lookup_case_insensitive(self):
        assert get_preset("mosh").name == "MOSH"

    def test_unknown(self):
        with pytest.raises(KeyError, match="Unknown preset"):
            get_preset("nope")

    def test_boost_only(self):
        assert SPAMYETI.boost_only
        assert SPAMYETI not in available_presets()
        assert SPAMYETI in available_presets(boost_mode=True)

    def test_builtins_within_ranges(self):
        for preset in PRESETS.values():
            p = preset.to_params()
            assert p.clamped() == p


class TestRandomPreset:
    def test_seeded(self):
        a = random_preset(np.random.default_rng(42))
        b = random_preset(np.random.default_rng(42))
        assert a == b

    def test_ranges(self):
        rng = np.random.default_rng(0)
        for _ in range(50):
            p = random_preset(rng)
            assert 0.0 <= p.rgb_shift_pixels < 20.0
            assert 0 <= p.block_jitter_size < 30
            assert 0.6 <= p.saturation < 1.8
            assert -90.0 <= p.hue_degrees < 90.0
            assert -0.2 <= p.brightness_offset < 0.2
            assert len(p.attractors) == 2
            for a in p.attractors:
                assert 0.1 <= a.x < 0.9 and 0.1 <= a.y < 0.9

    def test_default_attractors(self):
        assert DEFAULT_ATTRACTORS == (AttractorPoint(0.3, 0.3), AttractorPoint(0.7, 0.6))
