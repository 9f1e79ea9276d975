#!/usr/bin/env python3
"""
hookemap CLI

Command-line interface for the similarity map engine.

Usage:
    hookemap embed <similarities.txt> <reference> [options]
    hookemap animate <similarities.txt> <reference> [options]
    hookemap presets
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from . import __version__


def build_config(args):
    """Configuration from --config / --preset with command-line overrides applied."""
    from .config import get_preset, load_config, parse_transform

    if getattr(args, 'config', None):
        config = load_config(args.config)
    else:
        config = get_preset(getattr(args, 'preset', None) or "standard")

    overrides = {
        'number_of_starts': getattr(args, 'starts', None),
        'initial_iterations': getattr(args, 'initial_iterations', None),
        'final_iterations': getattr(args, 'iterations', None),
        'dimensions': getattr(args, 'dimensions', None),
        'seed': getattr(args, 'seed', None),
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    if getattr(args, 'transform', None):
        config.transform = parse_transform(args.transform)
    if getattr(args, 'exclude_reference', False):
        config.include_reference = False
    if getattr(args, 'no_missing_fill', False):
        config.set_missing_to_min = False

    config.validate()
    return config


def _load(args, config):
    from .data.ingest import load_embedding

    print(f"Loading similarities: {args.data}")
    embedding = load_embedding(args.data, args.reference, config)
    print(f"  Entities: {len(embedding)}")
    print(f"  Similarity range: {embedding.min_similarity} - {embedding.max_similarity}")
    print(f"  Transform: {config.transform.value}")
    return embedding


def cmd_embed(args):
    """Compute a layout in one go and write it out."""
    from .layout.search import OptimizationSearch
    from .errors import ConfigError
    from .output.plot import EmbeddingPlotter, check_plot_dimensions
    from .output.writer import load_snapshot, save_positions, save_snapshot

    config = build_config(args)
    normalize = not args.no_normalize

    # Reject what cannot be written or oriented before running the search
    if args.svg:
        check_plot_dimensions(config.dimensions)
    if normalize and config.dimensions < 2:
        raise ConfigError(
            f"Orientation needs at least 2 dimensions, got {config.dimensions} "
            f"(use --no-normalize)"
        )

    embedding = _load(args, config)
    search = OptimizationSearch(embedding, config)

    def progress_callback(step, distortion):
        if step % 500 == 0:
            print(f"  Iteration {step}: distortion={distortion:.4f}")

    callback = progress_callback if args.verbose else None

    started = time.monotonic()
    if args.resume:
        snapshot = load_snapshot(args.resume)
        placed = embedding.apply_positions(snapshot.entities)
        print(f"\nResuming from {args.resume} ({placed} of {len(embedding)} entities placed)")
        distortion = search.relax(config.final_iterations, callback=callback)
        if normalize:
            embedding.normalize_orientation()
    else:
        print(f"\nSearching {config.number_of_starts} random starts "
              f"({config.initial_iterations} iterations each)...")
        result = search.run(normalize=normalize, callback=callback)
        if result.best_trial >= 0:
            print(f"  Best start: {result.best_trial + 1} "
                  f"(distortion {result.best_trial_error:.4f})")
        distortion = result.final_error
    elapsed = time.monotonic() - started

    print(f"\nFinal distortion: {distortion:.4f} ({elapsed:.1f}s)")

    output_path = Path(args.output) if args.output else Path(args.data).with_suffix('.positions.tsv')
    save_positions(embedding, output_path)
    print(f"Saved positions to: {output_path}")

    if args.snapshot:
        save_snapshot(embedding, args.snapshot)
        print(f"Saved snapshot to: {args.snapshot}")

    if args.svg:
        plotter = EmbeddingPlotter(embedding, size=args.size)
        plotter.save_svg(args.svg)
        print(f"Saved plot to: {args.svg}")

    return 0


def cmd_animate(args):
    """Relax the best start while capturing frames of the moving layout."""
    from .layout.search import OptimizationSearch
    from .output.plot import EmbeddingPlotter

    config = build_config(args)
    embedding = _load(args, config)
    plotter = EmbeddingPlotter(embedding, output_dir=Path(args.frames), size=args.size)
    search = OptimizationSearch(embedding, config)

    print(f"\nSearching {config.number_of_starts} random starts...")
    embedding.seed_positions(search.find_best_starting_positions())
    plotter.capture_frame("Start", 0)

    delay_ms = config.frame_delay_ms

    def frame_callback(step, distortion):
        nonlocal delay_ms
        if step % args.frame_interval == 0:
            plotter.capture_frame("Refinement", step)
        if args.pace:
            delay_ms *= config.frame_delay_decay
            time.sleep(delay_ms / 1000.0)

    print(f"Animating {config.final_iterations} iterations...")
    distortion = search.relax(config.final_iterations, callback=frame_callback)
    plotter.capture_frame("Final", config.final_iterations)

    paths = plotter.export_frames()
    print(f"\nFinal distortion: {distortion:.4f}")
    print(f"Wrote {len(paths)} frames to: {args.frames}")
    return 0


def cmd_presets(args):
    """List the configuration presets."""
    from .config import get_preset, list_presets

    for name in list_presets():
        preset = get_preset(name)
        print(f"{name:10s} starts={preset.number_of_starts} "
              f"initial={preset.initial_iterations} final={preset.final_iterations}")
    return 0


def _positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _add_run_arguments(parser):
    parser.add_argument('data', help='Similarity file: "label label similarity" per line')
    parser.add_argument('reference', help='Label of the reference entity')
    parser.add_argument('--config', help='YAML configuration file')
    parser.add_argument('--preset', help='Configuration preset (default: standard)')
    parser.add_argument('--starts', type=int, help='Number of random starts (default: 30)')
    parser.add_argument('--initial-iterations', type=int,
                        help='Iterations per random start (default: 1500)')
    parser.add_argument('--iterations', type=int, help='Refinement iterations (default: 8000)')
    parser.add_argument('--dimensions', type=int, help='Layout dimensions (default: 2)')
    parser.add_argument('--transform',
                        help='Similarity to distance transform (default: inverse_3_offset)')
    parser.add_argument('--seed', type=int, help='Random seed for reproducible layouts')
    parser.add_argument('--exclude-reference', action='store_true',
                        help='Leave the reference entity out of the layout')
    parser.add_argument('--no-missing-fill', action='store_true',
                        help='Ignore unobserved pairs instead of imputing the minimum similarity')
    parser.add_argument('--size', type=int, default=700, help='Plot size in pixels (default: 700)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')


def main(argv: Optional[list] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="hookemap - similarity maps by spring relaxation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hookemap embed wind-100nn.txt wind --svg wind.svg
  hookemap embed wind-100nn.txt wind --preset quick --seed 7 --snapshot wind.yaml
  hookemap embed wind-100nn.txt wind --resume wind.yaml --iterations 2000
  hookemap animate wind-100nn.txt wind --frames frames/ --frame-interval 20
        """,
    )

    parser.add_argument('--version', action='version', version=f'hookemap {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Embed command
    embed_parser = subparsers.add_parser('embed', help='Compute a normalized layout')
    _add_run_arguments(embed_parser)
    embed_parser.add_argument('-o', '--output', help='Positions file (default: <data>.positions.tsv)')
    embed_parser.add_argument('--svg', help='Also write an SVG plot')
    embed_parser.add_argument('--snapshot', help='Also write a YAML snapshot')
    embed_parser.add_argument('--resume', help='Start from a YAML snapshot instead of searching')
    embed_parser.add_argument('--no-normalize', action='store_true',
                              help='Skip rotation/reflection into the canonical frame')

    # Animate command
    animate_parser = subparsers.add_parser('animate', help='Capture frames of the refinement')
    _add_run_arguments(animate_parser)
    animate_parser.add_argument('--frames', default='frames', help='Frame output directory')
    animate_parser.add_argument('--frame-interval', type=_positive_int, default=10,
                                help='Capture a frame every N iterations (default: 10)')
    animate_parser.add_argument('--pace', action='store_true',
                                help='Sleep between steps with a decaying delay')

    # Presets command
    subparsers.add_parser('presets', help='List configuration presets')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    commands = {
        'embed': cmd_embed,
        'animate': cmd_animate,
        'presets': cmd_presets,
    }

    from .errors import HookemapError

    try:
        return commands[args.command](args)
    except HookemapError as e:
        print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
