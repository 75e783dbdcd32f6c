#!/usr/bin/env python3
"""
Render the pulsing Sierpinski animation

Plays the animation in a window, or exports a fixed number of frames as
PNG images or an MP4 video.

Usage:
    python render_sierpinski.py --window
    python render_sierpinski.py --output frames/ --frames 120
    python render_sierpinski.py --output sierpinski.mp4 --frames 600
"""

import argparse
import sys
from typing import List, Optional

from sierpinski_renderer import (
    AnimationDriver,
    OpenCVWindowHost,
    RenderTimings,
    SurfaceUnavailableError,
    available_variants,
    create_surface,
    get_config,
    save_frames_as_images,
    total_frames_from_duration,
    write_video,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Render a pulsing Sierpinski triangle built from Pascal parity',
        epilog="""
Examples:
  python render_sierpinski.py --window                      # Live window
  python render_sierpinski.py --variant plain --window      # Static 128-row triangle
  python render_sierpinski.py --output out/ --frames 120    # PNG frames
  python render_sierpinski.py --output out.mp4 --fps 30     # MP4 video
  python render_sierpinski.py --output out.mp4 --duration 10 # 10 seconds of video
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--variant', choices=available_variants(), default='bordered',
                        help='Animation variant (default: bordered)')
    parser.add_argument('--backend', choices=['image', 'moderngl'], default='image',
                        help='Drawing backend (default: image)')
    parser.add_argument('--width', type=int, default=800,
                        help='Surface width (default: 800)')
    parser.add_argument('--height', type=int, default=600,
                        help='Surface height (default: 600)')
    parser.add_argument('--fps', type=float, default=60.0,
                        help='Frames per second (default: 60)')
    parser.add_argument('--frames', type=int, default=180,
                        help='Frames to export (default: 180)')
    parser.add_argument('--duration', type=float, default=None,
                        help='Seconds to export; overrides --frames')
    parser.add_argument('--output', type=str, default=None,
                        help='Output directory for PNG frames, or a .mp4 path')
    parser.add_argument('--window', action='store_true',
                        help='Play the animation in a window')
    parser.add_argument('--timing', action='store_true',
                        help='Print a per-operation timing summary')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress progress output')
    return parser


def run_window(args, config, timings: Optional[RenderTimings], verbose: bool) -> int:
    """Play the animation until the window is closed"""
    surface = create_surface(args.backend, args.width, args.height)
    host = OpenCVWindowHost(width=args.width, height=args.height, target_fps=args.fps)
    host.on_resize(surface.resize)

    driver = AnimationDriver(surface, host, config=config, timings=timings, verbose=verbose)
    try:
        driver.start()
        frames = host.run(surface)
    finally:
        driver.stop()
        surface.close()

    if verbose:
        print(f"Displayed {frames} frames")
    return frames


def run_export(args, config, timings: Optional[RenderTimings], verbose: bool) -> int:
    """Export frames to PNG files or an MP4 video"""
    if verbose:
        print(f"Rendering {args.frames} frames at {args.fps:g} FPS "
              f"({args.width}x{args.height}, {args.backend} backend)")

    if args.output.lower().endswith('.mp4'):
        count = write_video(
            config, args.frames, args.output,
            width=args.width, height=args.height, fps=args.fps,
            backend=args.backend, timings=timings, verbose=verbose
        )
    else:
        count = len(save_frames_as_images(
            config, args.frames, args.output,
            width=args.width, height=args.height, fps=args.fps,
            backend=args.backend, timings=timings, verbose=verbose
        ))

    if verbose:
        print(f"Saved {count} frames to: {args.output}")
    return count


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.width <= 0 or args.height <= 0:
        parser.error('--width and --height must be positive')
    if args.fps <= 0:
        parser.error('--fps must be positive')
    if args.duration is not None:
        if args.duration <= 0:
            parser.error('--duration must be positive')
        args.frames = max(1, total_frames_from_duration(args.duration, args.fps))
    if args.frames <= 0:
        parser.error('--frames must be positive')
    if not args.window and args.output is None:
        parser.error('either --window or --output is required')

    config = get_config(args.variant)
    timings = RenderTimings() if args.timing else None
    verbose = not args.quiet

    try:
        if args.window:
            run_window(args, config, timings, verbose)
        else:
            run_export(args, config, timings, verbose)
    except SurfaceUnavailableError as e:
        print(f"ERROR: {e}")
        return 1
    except IOError as e:
        print(f"ERROR: {e}")
        return 1

    if timings is not None:
        timings.print_summary()

    return 0


if __name__ == '__main__':
    sys.exit(main())
