from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from .audio import SAMPLE_RATE, write_frames
from .config import (
    DEFAULT_FRAME_SIZE,
    RenderSettings,
    build_playback_settings,
    build_render_settings,
)
from .device import open_device
from .logging_utils import configure_logging, debug_enabled, log_exception
from .progress import Spinner, render_error
from .render import render
from .speaker import DeliveryBuffer, play
from .waveforms import SHAPE_NAMES

_LOGGER = logging.getLogger("wavegen.cli")
_CONSOLE = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavegen",
        description="Render or play a periodic waveform shaped by breakpoint envelopes.",
    )
    parser.add_argument("-d", "--duration", type=float, default=10.0, help="seconds of audio")
    parser.add_argument("-s", "--shape", choices=list(SHAPE_NAMES), default="sine")
    parser.add_argument("-a", "--amplitude", type=Path, help="amplitude breakpoints file")
    parser.add_argument("-f", "--frequency", type=Path, help="frequency breakpoints file")
    parser.add_argument("-o", "--output", type=Path, help="output WAV file")
    parser.add_argument("--sample-rate", type=int, default=SAMPLE_RATE)
    parser.add_argument("--channels", type=int, choices=[1, 2], default=1)
    parser.add_argument(
        "--on-short-envelope",
        choices=["error", "hold"],
        default="error",
        help="what to do when an envelope runs out before the render ends",
    )
    parser.add_argument("--live", action="store_true", help="play through the audio device")
    parser.add_argument("--frame-size", type=int, default=DEFAULT_FRAME_SIZE)
    parser.add_argument(
        "--zero-fill", action="store_true", help="zero unused slots of short device frames"
    )
    return parser


def _render_to_file(settings: RenderSettings) -> Path:
    assert settings.output is not None
    with Spinner(f"Rendering {settings.duration:g}s of {settings.shape.value}"):
        samples = render(
            settings.duration,
            settings.shape,
            settings.amplitude_stream(),
            settings.frequency_stream(),
            settings.sample_rate,
            on_short_envelope=settings.on_short_envelope,
        )
    return write_frames(samples, settings.wave_format, settings.output)


def _play_live(settings: RenderSettings, frame_size: int, zero_fill: bool) -> int:
    playback = build_playback_settings(
        sample_rate=settings.sample_rate, frame_size=frame_size, zero_fill=zero_fill
    )
    amplitude = settings.amplitude_stream()
    frequency = settings.frequency_stream()
    with DeliveryBuffer(
        playback.sample_rate,
        playback.frame_size,
        opener=open_device,
        zero_fill=playback.zero_fill,
    ) as buffer:
        with Spinner(f"Playing {settings.duration:g}s of {settings.shape.value}"):
            return play(
                settings.duration,
                settings.shape,
                amplitude,
                frequency,
                buffer,
                on_short_envelope=settings.on_short_envelope,
            )


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.live and args.output is None:
        parser.error("-o/--output is required unless --live is given")

    try:
        settings = build_render_settings(
            duration=args.duration,
            shape=args.shape,
            amplitude_path=args.amplitude,
            frequency_path=args.frequency,
            output=args.output,
            sample_rate=args.sample_rate,
            channels=args.channels,
            on_short_envelope=args.on_short_envelope,
        )
        if args.live:
            played = _play_live(settings, args.frame_size, args.zero_fill)
            _CONSOLE.print(f"Played {played} samples (sr={settings.sample_rate})")
        if settings.output is not None:
            path = _render_to_file(settings)
            _CONSOLE.print(f"Wrote {path} (sr={settings.sample_rate})")
        return 0
    except Exception as exc:
        _LOGGER.warning("wavegen failed: %s", exc, exc_info=debug_enabled())
        log_exception("wavegen", exc)
        render_error("wavegen", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
