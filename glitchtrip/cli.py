"""Unified CLI entry point for glitchtrip."""

import argparse
import os
import sys
from dataclasses import replace

import numpy as np

from glitchtrip.core import (
    GlitchParameters, AttractorPoint, FORMATS,
    load_image, save_image, format_for_path, output_name,
)

MAX_RECORD_FRAMES = 240

# CLI flag dest -> GlitchParameters field
EFFECT_FLAGS = {
    "rgb_shift": "rgb_shift_pixels",
    "aberration": "aberration_strength",
    "jitter": "block_jitter_size",
    "noise": "noise_amount",
    "scanlines": "scanline_strength",
    "wave_amp": "wave_amplitude",
    "wave_freq": "wave_frequency",
    "sort": "pixel_sort_amount",
    "crush": "contrast_crush",
    "saturation": "saturation",
    "hue": "hue_degrees",
    "brightness": "brightness_offset",
}


def _add_seed_arg(parser):
    parser.add_argument("-seed", "--seed", type=int, default=None,
                        help="Random seed for reproducible jitter and grain")


def _add_output_arg(parser):
    parser.add_argument("-o", "--output", required=True,
                        help="Output file path")


def _add_effect_args(p):
    """Add look-selection and per-effect override arguments."""
    p.add_argument("--preset", type=str, default=None,
                   help="Built-in preset name, or 'random'")
    p.add_argument("--params", type=str, default=None,
                   help="Parameters JSON file (see 'preset -o')")
    p.add_argument("--rgb-shift", type=float, default=None, help="Channel offset in pixels")
    p.add_argument("--aberration", type=float, default=None, help="Ghost strength 0-1")
    p.add_argument("--jitter", type=int, default=None, help="Block jitter tile size (0 = off)")
    p.add_argument("--noise", type=float, default=None, help="Grain amount 0-1")
    p.add_argument("--scanlines", type=float, default=None, help="Scanline strength 0-1")
    p.add_argument("--wave-amp", type=float, default=None, help="Wave amplitude in pixels")
    p.add_argument("--wave-freq", type=float, default=None, help="Wave frequency")
    p.add_argument("--sort", type=float, default=None, help="Pixel sort amount 0-1")
    p.add_argument("--crush", type=float, default=None, help="Contrast crush 0-1")
    p.add_argument("--saturation", type=float, default=None, help="Saturation multiplier")
    p.add_argument("--hue", type=float, default=None, help="Hue rotation in degrees")
    p.add_argument("--brightness", type=float, default=None, help="Brightness offset -0.5..0.5")
    p.add_argument("--attractor", type=float, nargs=2, action="append", default=None,
                   metavar=("X", "Y"), help="Normalized attractor point (repeatable)")
    p.add_argument("--boost", action="store_true", help="Enable boost mode")
    p.add_argument("--max-width", type=int, default=None, help="Working width budget")
    _add_seed_arg(p)


def _base_params(args) -> GlitchParameters:
    """Starting parameters from --params or --preset, else neutral defaults."""
    from glitchtrip.presets import get_preset, random_preset

    if args.params:
        return GlitchParameters.load(args.params)
    if args.preset is None:
        return GlitchParameters()
    if args.preset.lower() == "random":
        return random_preset(np.random.default_rng(args.seed)).to_params()

    preset = get_preset(args.preset)
    if preset.boost_only and not args.boost:
        print(f"Warning: {preset.name} is a boost-mode preset, enabling boost")
        args.boost = True
    return preset.to_params()


def resolve_params(args) -> GlitchParameters:
    """Merge preset/params file with explicit effect flags."""
    params = _base_params(args)
    overrides = {
        field: getattr(args, dest)
        for dest, field in EFFECT_FLAGS.items()
        if getattr(args, dest, None) is not None
    }
    if args.attractor:
        overrides["attractors"] = tuple(AttractorPoint(x, y) for x, y in args.attractor)
    if args.boost:
        overrides["boost_mode"] = True
    if args.seed is not None:
        overrides["seed"] = args.seed
    return replace(params, **overrides)


def _pipeline_kwargs(args) -> dict:
    kwargs = {}
    if args.max_width is not None:
        kwargs["max_width"] = args.max_width
    return kwargs


def cmd_apply(args):
    """Glitch one image."""
    from glitchtrip.pipeline import apply_all
    fmt = args.format or format_for_path(args.output)
    params = resolve_params(args)
    source = load_image(args.input)
    result = apply_all(source, params, **_pipeline_kwargs(args))
    save_image(result, args.output, fmt=fmt)
    if args.save_params:
        params.save(args.save_params)
        print(f"Parameters -> {args.save_params}")
    print(f"Glitched -> {args.output}")


def cmd_record(args):
    """Write a numbered frame sequence of repeated glitches."""
    from glitchtrip.pipeline import record
    frames = args.frames
    if frames < 1 or frames > MAX_RECORD_FRAMES:
        frames = min(MAX_RECORD_FRAMES, max(1, frames))
        print(f"Warning: frame count clamped to {frames}")

    params = resolve_params(args)
    source = load_image(args.input)
    os.makedirs(args.out_dir, exist_ok=True)
    seq = record(source, replace(params, seed=None), frames, seed=params.seed,
                 **_pipeline_kwargs(args))
    for i, frame in enumerate(seq, start=1):
        name = output_name(args.format, stem=f"glitchtrip_anim_{i:04d}")
        save_image(frame, os.path.join(args.out_dir, name), fmt=args.format)
    print(f"Recorded {frames} frames -> {args.out_dir}")


def cmd_presets(args):
    """List presets."""
    from glitchtrip.presets import available_presets
    for preset in available_presets(args.boost):
        params = preset.to_params()
        print(f"{preset.name}: rgb={params.rgb_shift_pixels:g} jitter={params.block_jitter_size} "
              f"noise={params.noise_amount:g} scan={params.scanline_strength:g} "
              f"wave={params.wave_amplitude:g}/{params.wave_frequency:g} "
              f"sort={params.pixel_sort_amount:g} aberr={params.aberration_strength:g} "
              f"crush={params.contrast_crush:g} sat={params.saturation:g} "
              f"hue={params.hue_degrees:g} bright={params.brightness_offset:g}")


def cmd_preset(args):
    """Export a preset as a parameters JSON file."""
    from glitchtrip.presets import get_preset, random_preset
    if args.name.lower() == "random":
        preset = random_preset(np.random.default_rng(args.seed))
    else:
        preset = get_preset(args.name)
    params = preset.to_params(boost_mode=args.boost or preset.boost_only, seed=args.seed)
    params.save(args.output)
    print(f"Preset {preset.name} -> {args.output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glitchtrip",
        description="Still-image glitcher: channel split, attractor waves, jitter, sort, film, grade",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- apply ---
    p = subparsers.add_parser("apply", help="Glitch an image")
    p.add_argument("input", help="Input image")
    _add_effect_args(p)
    p.add_argument("--format", choices=sorted(FORMATS), default=None,
                   help="Output format (default: from extension)")
    p.add_argument("--save-params", type=str, default=None,
                   help="Also write the resolved parameters to JSON")
    _add_output_arg(p)
    p.set_defaults(func=cmd_apply)

    # --- record ---
    p = subparsers.add_parser("record", help="Record a numbered frame sequence")
    p.add_argument("input", help="Input image")
    _add_effect_args(p)
    p.add_argument("--frames", type=int, default=60, help="Number of frames (1-240)")
    p.add_argument("--out-dir", required=True, help="Directory for frames")
    p.add_argument("--format", choices=sorted(FORMATS), default="png")
    p.set_defaults(func=cmd_record)

    # --- presets ---
    p = subparsers.add_parser("presets", help="List built-in presets")
    p.add_argument("--boost", action="store_true", help="Include boost-mode presets")
    p.set_defaults(func=cmd_presets)

    # --- preset ---
    p = subparsers.add_parser("preset", help="Export a preset to parameters JSON")
    p.add_argument("name", help="Preset name or 'random'")
    p.add_argument("--boost", action="store_true", help="Enable boost mode in the export")
    _add_output_arg(p)
    _add_seed_arg(p)
    p.set_defaults(func=cmd_preset)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (ValueError, KeyError) as e:
        print(f"Error: {e.args[0] if e.args else e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
