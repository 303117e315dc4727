"""
CLI entry point for offline rendering.

Plays an audio file through the pipeline with a simulated playhead and
encodes the frames to video, optionally saving one frame as a PNG.

Usage:
    synscreen <audio_file> [options]
"""

import argparse
import logging
import math
import sys
import time
from pathlib import Path

from synscreen.config import SynscreenConfig, TARGET_FPS
from synscreen.errors import PaletteError
from synscreen.io.encoder import QUALITY_PRESETS, encode_video
from synscreen.io.track import PlaybackState, TrackLoader
from synscreen.pipeline import Synesthetizer


def _progress_bar(current: int, total: int, width: int = 30):
    """Report encoding progress, redrawn in place on a terminal."""
    total = max(total, 1)
    done = current >= total
    line = f"{current / total:6.1%}  tick {current}/{total}"

    if sys.stdout.isatty():
        filled = width * current // total
        sys.stdout.write(f"\r|{'=' * filled}{' ' * (width - filled)}| {line}")
        if done:
            sys.stdout.write("\n")
        sys.stdout.flush()
    elif done or current % max(1, total // 10) == 0:
        print(line, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="synscreen",
        description="Paint the notes of an audio track as colored glyphs",
    )

    parser.add_argument(
        "audio",
        type=Path,
        help="Input audio file (wav, mp3, flac)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output MP4 path (default: <audio>_synscreen.mp4)",
    )
    parser.add_argument(
        "--no-video",
        action="store_true",
        help="Skip video encoding (useful with --snapshot)",
    )

    # Rendering
    parser.add_argument(
        "--overlay",
        action="store_true",
        help="Accumulate frames into a persistent trail",
    )
    parser.add_argument(
        "-f", "--fps",
        type=float,
        default=TARGET_FPS,
        help=f"Output video frames per second (default: {TARGET_FPS:g})",
    )
    parser.add_argument(
        "--palette",
        type=Path,
        default=None,
        help="JSON file with 12 #RRGGBB colors (default: bundled palette)",
    )

    # Snapshot
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Save one frame as PNG to this path",
    )
    parser.add_argument(
        "--snapshot-at",
        type=float,
        default=0.0,
        help="Time in seconds of the saved frame (default: 0)",
    )

    # Limits
    parser.add_argument(
        "--max-duration",
        type=float,
        default=None,
        help="Limit output to N seconds",
    )

    # Quality
    parser.add_argument(
        "-q", "--quality",
        type=str,
        default="medium",
        choices=list(QUALITY_PRESETS),
        help="Encoding quality (default: medium)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        return 1

    if args.no_video and args.snapshot is None:
        print("Error: --no-video needs --snapshot", file=sys.stderr)
        return 1

    fps = args.fps if args.fps and args.fps > 0 else TARGET_FPS

    try:
        synesthetizer = Synesthetizer(SynscreenConfig(palette_path=args.palette))
    except PaletteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Loading: {args.audio}")
    loader = TrackLoader()
    loader.load_from_file(args.audio)
    track = loader.wait()
    if track is None:
        print(f"Error: Could not decode {args.audio}", file=sys.stderr)
        return 1

    samples_per_frame = synesthetizer.load_track(track)

    duration = track.duration
    if args.max_duration is not None:
        duration = min(duration, args.max_duration)
    total_frames = max(1, math.ceil(duration * fps))

    snapshot_frame = None
    if args.snapshot is not None:
        snapshot_frame = min(max(int(round(args.snapshot_at * fps)), 0), total_frames - 1)

    print(f"Track: {track.meta.name} ({track.duration:.2f}s @ {track.sample_rate} Hz)")
    print(f"Window: {samples_per_frame} samples, {fps:g} fps, {total_frames} frames")

    failures = []

    def frame_generator(n_frames: int):
        for index in range(n_frames):
            if index == snapshot_frame:
                synesthetizer.request_snapshot(args.snapshot)

            playback = PlaybackState(track=track, position=index / fps, stopped=False)
            result = synesthetizer.tick(playback, overlay_enabled=args.overlay)

            if result.snapshot_error is not None:
                failures.append(result.snapshot_error)
            elif result.snapshot_path is not None:
                print(f"\nSnapshot: {result.snapshot_path}")

            yield result.frame

    t_start = time.time()

    if args.no_video:
        for _ in frame_generator(snapshot_frame + 1):
            pass
    else:
        output_path = args.output or args.audio.with_name(f"{args.audio.stem}_synscreen.mp4")
        encode_video(
            frame_generator(total_frames),
            audio_path=args.audio,
            output_path=output_path,
            width=synesthetizer.cfg.width,
            height=synesthetizer.cfg.height,
            fps=fps,
            quality=args.quality,
            duration=duration,
            total_frames=total_frames,
            progress_callback=_progress_bar,
        )
        print(f"Output: {output_path}")

    print(f"Done in {time.time() - t_start:.1f}s")

    if failures:
        for error in failures:
            print(f"Error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
