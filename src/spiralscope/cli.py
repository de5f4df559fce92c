"""
CLI entry point for the spiral renderer.

Usage:
    spiralscope <analysis.json> <features.json> [options]
    python -m spiralscope <analysis.json> <features.json> [options]
"""

import argparse
import sys
import time
from pathlib import Path

from spiralscope.core.analysis import AnalysisError
from spiralscope.core.palette import ColorPalette
from spiralscope.core.track import Track
from spiralscope.io.encoder import EncoderError, encode_video
from spiralscope.io.exporter import export_png
from spiralscope.io.loader import load_analysis, load_features, load_json
from spiralscope.render.config import SceneConfig
from spiralscope.render.scene import SpiralScene
from spiralscope.render.swatches import render_swatches


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spiralscope",
        description="Render a music track as a rotating spiral timeline",
    )

    parser.add_argument("analysis", type=Path, help="Audio analysis JSON document")
    parser.add_argument("features", type=Path, help="Audio features JSON document")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output path (default: <analysis>_spiral.mp4, or .png with --snapshot)",
    )

    # Display metadata
    parser.add_argument("--title", type=str, default="", help="Track title")
    parser.add_argument("--artist", type=str, default="", help="Artist name")

    # Modes
    parser.add_argument(
        "--snapshot", type=float, default=None, metavar="PCT",
        help="Render a single PNG frame at this progress fraction (0-1)",
    )
    parser.add_argument(
        "--palette-preview", type=Path, default=None, metavar="PNG",
        help="Also write a palette swatch image",
    )

    # Resolution
    parser.add_argument("--width", type=int, default=None, help="Canvas width (default: 1200)")
    parser.add_argument("--height", type=int, default=None, help="Canvas height (default: 1200)")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (default: 60)")
    parser.add_argument(
        "-k", "--sections", type=int, default=None,
        help="Number of cached section layers (default: 10)",
    )

    # Video
    parser.add_argument("--audio", type=Path, default=None, help="Audio file to mux into the video")
    parser.add_argument("--max-duration", type=float, default=None, help="Limit output to N seconds")
    parser.add_argument(
        "-q", "--quality", type=str, default="medium",
        choices=["high", "medium", "fast"],
        help="Encoding quality (default: medium)",
    )

    parser.add_argument(
        "--config", type=Path, default=None,
        help="JSON file with scene settings (command-line flags take precedence)",
    )
    return parser


def build_config(args) -> SceneConfig:
    data = {}
    if args.config:
        data = load_json(args.config)
        if not isinstance(data, dict):
            raise AnalysisError(f"{args.config}: scene settings must be a JSON object")

    overrides = {
        "width": args.width,
        "height": args.height,
        "fps": args.fps,
        "num_sections": args.sections,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    return SceneConfig.from_dict(data)


def main(argv=None):
    args = build_parser().parse_args(argv)

    for path in (args.analysis, args.features, args.config, args.audio):
        if path is not None and not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            sys.exit(1)

    try:
        config = build_config(args)
        raw = load_analysis(args.analysis)
        features = load_features(args.features)
    except AnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.palette_preview:
        swatches = render_swatches(ColorPalette(features))
        export_png(swatches, args.palette_preview)
        print(f"Palette preview: {args.palette_preview}")

    print(f"Preparing scene: {args.analysis}")
    t0 = time.time()
    track = Track.load(raw, features, title=args.title, artist=args.artist)
    scene = SpiralScene(track, config)
    scene.buffers  # prerender now so the timing below is meaningful

    analysis = track.analysis
    print(f"  Duration: {analysis.track.duration:.1f}s")
    print(f"  Segments: {len(analysis.segments)}, Beats: {len(analysis.beats)}, Sections: {len(analysis.sections)}")
    print(f"  Prerender took {time.time() - t0:.1f}s")

    if args.snapshot is not None:
        output = args.output or args.analysis.with_name(f"{args.analysis.stem}_spiral.png")
        export_png(scene.render(args.snapshot), output)
        print(f"  Output: {output}")
        return

    output = args.output or args.analysis.with_name(f"{args.analysis.stem}_spiral.mp4")
    duration = analysis.track.duration
    if args.max_duration is not None:
        duration = min(duration, args.max_duration)
    total_frames = max(1, int(duration * config.fps))

    print(f"\nRendering {total_frames} frames at {config.width}x{config.height} @ {config.fps}fps")
    t1 = time.time()

    try:
        encode_video(
            frame_iterator=scene.render_timeline(config.fps, duration, progress_callback=_progress_bar),
            output_path=output,
            width=config.width,
            height=config.height,
            fps=config.fps,
            quality=args.quality,
            audio_path=args.audio,
            duration=duration,
        )
    except EncoderError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)

    elapsed = time.time() - t1
    file_size_mb = output.stat().st_size / 1024 / 1024

    print(f"\nDone! {file_size_mb:.1f} MB")
    print(f"  Render+encode took {elapsed:.1f}s ({total_frames / max(elapsed, 0.01):.1f} fps)")
    print(f"  Output: {output}")


if __name__ == "__main__":
    main()
