#!/usr/bin/env python3
"""
Command-line interface for the texture map pipeline.

Usage:
    # Generate a full PBR map set next to the image
    python -m texture_pipeline.cli generate brick.jpg

    # Use a material preset and make the source tileable first
    python -m texture_pipeline.cli generate brick.jpg --preset concrete --seamless

    # Several images in parallel, only normal and height maps
    python -m texture_pipeline.cli generate *.png --maps normal,height --workers 8

    # Make an image tileable and write a 2x2 preview to check the seams
    python -m texture_pipeline.cli tile brick.jpg --algorithm patchMatch --preview 2

    # List material presets
    python -m texture_pipeline.cli presets
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .config import MAP_NAMES, TILING_ALGORITHMS, MapOptions, OutputConfig, PipelineConfig
from .curves import list_curves


def _options_from_args(args: argparse.Namespace) -> MapOptions:
    """Build MapOptions from a preset plus any explicitly passed flags."""
    from .material_presets import apply_preset

    options = MapOptions()
    if args.preset:
        options = apply_preset(args.preset, options)

    overrides = {
        "intensity": args.intensity,
        "contrast": args.contrast,
        "brightness": args.brightness,
        "color_contrast": args.color_contrast,
        "saturation": args.saturation,
        "hue": args.hue,
        "delight_amount": args.delight,
        "metalness_base": args.metalness_base,
        "blur": args.blur,
        "ao_multiplier": args.ao_multiplier,
        "tiling_algorithm": args.algorithm,
        "tiling_blend": args.blend,
        "tiling_curve": args.curve,
        "tint_color": args.tint,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if args.invert:
        overrides["invert"] = True
    if args.metallic:
        overrides["is_metallic"] = True
    if args.tint:
        overrides["enable_tint"] = True

    return options.updated(**overrides)


def _parse_maps(value: str) -> tuple[str, ...]:
    names = tuple(name.strip() for name in value.split(",") if name.strip())
    unknown = [name for name in names if name not in MAP_NAMES]
    if unknown:
        raise ValueError(f"Unknown map(s): {', '.join(unknown)}. Available: {', '.join(MAP_NAMES)}")
    return names


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate map sets for one or more images."""
    from .pipeline import generate_batch, process_file

    try:
        options = _options_from_args(args)
        maps = _parse_maps(args.maps) if args.maps else MAP_NAMES
    except (KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    images = [Path(p) for p in args.images]
    missing = [p for p in images if not p.exists()]
    if missing:
        print(f"Error: file not found: {', '.join(str(p) for p in missing)}", file=sys.stderr)
        return 1

    config = PipelineConfig(
        options=options,
        output=OutputConfig(
            output_dir=Path(args.output_dir) if args.output_dir else images[0].parent,
            prefix=args.prefix or "",
            format=args.format,
            maps=maps,
        ),
        seamless=args.seamless,
        workers=args.workers,
    )

    print(f"Images: {len(images)}")
    if args.preset:
        print(f"Preset: {args.preset}")
    if args.seamless:
        print(f"Seamless: {options.tiling_algorithm} (blend {options.tiling_blend}, {options.tiling_curve})")
    print(f"Maps: {', '.join(maps)}")
    print(f"Output: {config.output.output_dir}")

    try:
        if len(images) == 1:
            paths = process_file(images[0], config)
            for name, path in paths.items():
                print(f"  {name:<10} {path}")
            return 0

        results = generate_batch(images, config, progress=not args.quiet)
        print(f"Generated {len(results)}/{len(images)} map sets")
        return 0 if len(results) == len(images) else 1

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def cmd_tile(args: argparse.Namespace) -> int:
    """Make a single image tileable."""
    from .pixel_buffer import PixelBuffer
    from .tiling import process, tile_preview

    source_path = Path(args.image)
    if not source_path.exists():
        print(f"Error: file not found: {source_path}", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else source_path.with_name(
        f"{source_path.stem}_seamless.png"
    )

    try:
        source = PixelBuffer.load(source_path)
        print(f"Tiling {source_path} ({source.width}x{source.height})")
        print(f"Algorithm: {args.algorithm}, blend {args.blend}, curve {args.curve}")

        result = process(source, args.algorithm, args.blend, args.curve)
        result.save(output_path)
        print(f"Saved to: {output_path}")

        if args.preview:
            preview_path = output_path.with_name(f"{output_path.stem}_preview{output_path.suffix}")
            tile_preview(result, args.preview).save(preview_path)
            print(f"Preview: {preview_path}")

        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


def cmd_presets(args: argparse.Namespace) -> int:
    """List material presets."""
    from .material_presets import PRESETS, list_presets

    print("Available material presets:\n")
    for name in list_presets():
        preset = PRESETS[name]
        kind = "metal" if preset.is_metallic else "dielectric"
        print(f"  {name:<10} {preset.name} ({kind})")
        print(f"             {preset.description}")
        print(f"             intensity={preset.intensity}, contrast={preset.contrast}")
        print()
    return 0


def _add_option_flags(parser: argparse.ArgumentParser) -> None:
    """Map option flags; unset flags keep the preset/default value."""
    group = parser.add_argument_group("map options")
    group.add_argument("--preset", help="Material preset (see 'presets' command)")
    group.add_argument("--intensity", type=float, help="Normal / AO strength (0-5)")
    group.add_argument("--contrast", type=float, help="Contrast for color and height (-1 to 1)")
    group.add_argument("--invert", action="store_true", help="Invert roughness")
    group.add_argument("--brightness", type=float, help="Brightness (-1 to 1)")
    group.add_argument("--color-contrast", type=float, help="Color contrast override (-1 to 1)")
    group.add_argument("--saturation", type=float, help="Saturation (-1 to 1)")
    group.add_argument("--hue", type=float, help="Hue rotation in degrees (-180 to 180)")
    group.add_argument("--delight", type=float, help="Delighting amount (0-1)")
    group.add_argument("--tint", help="Multiply tint color as #rrggbb")
    group.add_argument("--metallic", action="store_true", help="Treat the surface as metal")
    group.add_argument("--metalness-base", type=float, help="Metalness scale (0-1)")
    group.add_argument("--blur", type=float, help="Height map blur sigma in pixels (0-10)")
    group.add_argument("--ao-multiplier", type=float, help="AO energy scaling constant")


def _add_tiling_flags(parser: argparse.ArgumentParser, defaults: bool) -> None:
    group = parser.add_argument_group("tiling")
    group.add_argument("--algorithm", choices=TILING_ALGORITHMS,
                       default="crossBlend" if defaults else None,
                       help="Tiling algorithm")
    group.add_argument("--blend", type=float, default=0.15 if defaults else None,
                       help="Blend zone as a fraction of each dimension (0-0.5)")
    group.add_argument("--curve", choices=list_curves(),
                       default="smooth" if defaults else None,
                       help="Blend curve")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="PBR texture map generation and seamless tiling"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    # generate command
    generate_parser = subparsers.add_parser("generate", help="Generate PBR maps from images")
    generate_parser.add_argument("images", nargs="+", help="Source image(s)")
    generate_parser.add_argument("--output-dir", "-o", help="Output directory (default: next to the image)")
    generate_parser.add_argument("--prefix", help="File prefix (default: image name)")
    generate_parser.add_argument("--format", choices=["png", "webp"], default="png",
                                 help="Output image format")
    generate_parser.add_argument("--maps", help=f"Comma-separated subset of: {','.join(MAP_NAMES)}")
    generate_parser.add_argument("--seamless", action="store_true",
                                 help="Make the source tileable before generating maps")
    generate_parser.add_argument("--workers", type=int, default=4, help="Parallel workers")
    generate_parser.add_argument("-q", "--quiet", action="store_true", help="No progress bar")
    _add_option_flags(generate_parser)
    _add_tiling_flags(generate_parser, defaults=False)

    # tile command
    tile_parser = subparsers.add_parser("tile", help="Make an image tile seamlessly")
    tile_parser.add_argument("image", help="Source image")
    tile_parser.add_argument("--output", "-o", help="Output file path")
    tile_parser.add_argument("--preview", type=int, default=0, metavar="N",
                             help="Also write an NxN repeat preview")
    _add_tiling_flags(tile_parser, defaults=True)

    # presets command
    subparsers.add_parser("presets", help="List material presets")

    args = parser.parse_args(argv)

    if args.command == "generate":
        return cmd_generate(args)
    elif args.command == "tile":
        return cmd_tile(args)
    elif args.command == "presets":
        return cmd_presets(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
