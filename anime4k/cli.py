"""
Anime4K - Command Line Interface
================================
anime4k -i input.png [-o output.png] [-s 2 | -r 1920x1080] [-p 1]
        [-sc 0.33] [-sg 1.0] [-v v0.9|v1.0-rc2] [-d [DIR]] [--fxaa]

A directory as input processes every image in it (batch mode).
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from anime4k import __version__
from anime4k.core.errors import Anime4KError
from anime4k.core.pipeline import AlgorithmVersion
from anime4k.scaler import ScalerConfig, process_image_sequence, process_single_image

DEFAULT_DEBUG_DIR = "./debug"


def parse_resolution(text: str) -> Tuple[int, int]:
    """'1920x1080' → (1920, 1080)"""
    parts = text.lower().replace('×', 'x').split('x')
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Resolution must look like WIDTHxHEIGHT, got '{text}'")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Resolution must look like WIDTHxHEIGHT, got '{text}'")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="anime4k",
        description="Anime4K upscaler (v0.9 / v1.0-RC2) for anime-style images"
    )
    p.add_argument("-i", "--input", required=True, help="Input image file, or a directory for batch mode.")
    p.add_argument("-o", "--output", default=None,
                   help="Output image (default: <input>_anime4k.png) or output directory in batch mode.")
    p.add_argument("-s", "--scale", type=float, default=2.0, help="Scale factor (default: 2).")
    p.add_argument("-r", "--resolution", type=parse_resolution, default=None,
                   help="Target size as WIDTHxHEIGHT (overrides --scale).")
    p.add_argument("-p", "--passes", type=int, default=1, help="Number of Anime4K passes (default: 1).")
    p.add_argument("-sc", "--strength-color", type=float, default=None,
                   help="Color push strength, 0-1 (default: scale / 6).")
    p.add_argument("-sg", "--strength-gradient", type=float, default=None,
                   help="Gradient push strength, 0-1 (default: scale / 2).")
    p.add_argument("-v", "--version", default=AlgorithmVersion.V09.value,
                   help="Anime4K version: " + ", ".join(v.value for v in AlgorithmVersion) + " (default: v0.9).")
    p.add_argument("-d", "--debug", nargs="?", const=DEFAULT_DEBUG_DIR, default=None, metavar="DIR",
                   help=f"Save every phase to DIR (default: {DEFAULT_DEBUG_DIR}).")
    p.add_argument("--fxaa", action="store_true", help="Enable the experimental FXAA stage (v1.0-rc2 only).")
    p.add_argument("--workers", type=int, default=None, help="Worker threads (default: CPU count).")
    p.add_argument("--pattern", default="*", help="Glob pattern for batch mode (default: *).")
    p.add_argument("-q", "--quiet", action="store_true", help="Only print errors.")
    p.add_argument("--about", action="version", version=f"%(prog)s {__version__}")
    return p


def config_from_args(args: argparse.Namespace) -> ScalerConfig:
    config = ScalerConfig()
    config.version = AlgorithmVersion.parse(args.version)
    config.enable_fxaa = args.fxaa
    config.scale_factor = args.scale
    config.target_size = args.resolution
    config.passes = args.passes
    config.strength_color = args.strength_color
    config.strength_gradient = args.strength_gradient
    config.workers = args.workers
    config.debug_dir = args.debug
    config.verbose = not args.quiet
    config.validate()
    return config


def print_parameters(args: argparse.Namespace, config: ScalerConfig):
    print("=" * 60)
    print(f"Anime4K {__version__}")
    print("=" * 60)
    print(f"Input:             {args.input}")
    print(f"Output:            {args.output or '(default)'}")
    for key, value in config.as_dict().items():
        if value is None:
            value = "auto" if key.startswith("strength") or key == "workers" else "-"
        print(f"{key + ':':<19}{value}")
    print("=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        if config.verbose:
            print_parameters(args, config)

        start = time.perf_counter()
        if Path(args.input).is_dir():
            output_dir = args.output or str(Path(args.input).with_name(Path(args.input).name + "_anime4k"))
            process_image_sequence(args.input, output_dir, config, pattern=args.pattern)
        else:
            process_single_image(args.input, args.output, config)

        if config.verbose:
            print(f"[Scaler] Total time: {time.perf_counter() - start:.2f} s")
        return 0

    except (Anime4KError, FileNotFoundError) as e:
        print(f"[Error] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
